"""
Views for the Invitations app.
"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.groups.permissions import IsGroupAdmin, IsGroupMember, get_membership
from apps.invitations import services
from apps.invitations.models import Invitation
from apps.invitations.serializers import InvitationCreateSerializer, InvitationSerializer
from common.pagination import PageLimitPagination
from common.responses import success_response

logger = logging.getLogger(__name__)


class InvitationPagination(PageLimitPagination):
    items_key = 'invitations'


class GroupInvitationViewSet(viewsets.GenericViewSet):
    """
    Invitations of one group.

    list:   GET  /api/v1/groups/{group_id}/invitations/   (members)
    create: POST /api/v1/groups/{group_id}/invitations/   (owner/admin)
    """
    serializer_class = InvitationSerializer
    pagination_class = InvitationPagination

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsGroupAdmin()]
        return [IsAuthenticated(), IsGroupMember()]

    def get_queryset(self):
        return Invitation.objects.filter(
            group_id=self.kwargs['group_pk'],
        ).select_related('group', 'invited_by')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        services.expire_overdue(queryset)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(InvitationSerializer(page, many=True).data)

    def create(self, request, *args, **kwargs):
        serializer = InvitationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invitation = services.create_invitation(
            get_membership(request, self.kwargs['group_pk']).group,
            request.user,
            serializer.validated_data['invited_email'],
            serializer.validated_data.get('message', ''),
        )
        return success_response(
            InvitationSerializer(invitation).data,
            status=status.HTTP_201_CREATED,
            message='Invitation sent.',
        )


class InvitationViewSet(viewsets.GenericViewSet):
    """
    A single invitation, addressed by the id in the emailed link.

    retrieve: GET  /api/v1/invitations/{id}/          (public)
    accept:   POST /api/v1/invitations/{id}/accept/   (invitee)
    reject:   POST /api/v1/invitations/{id}/reject/   (invitee or anonymous)
    mine:     GET  /api/v1/invitations/mine/?status=  (caller's inbox)
    """
    serializer_class = InvitationSerializer
    pagination_class = InvitationPagination
    queryset = Invitation.objects.select_related('group', 'invited_by')

    def get_permissions(self):
        if self.action in ('retrieve', 'reject'):
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_object(self):
        invitation = self.get_queryset().filter(pk=self.kwargs['pk']).first()
        if invitation is None:
            raise NotFound('Invitation not found')
        return services.apply_lazy_expiry(invitation)

    def retrieve(self, request, *args, **kwargs):
        return success_response(InvitationSerializer(self.get_object()).data)

    @action(detail=True, methods=['post'])
    def accept(self, request, *args, **kwargs):
        invitation = self.get_object()
        joined = services.accept_invitation(invitation, request.user)
        return success_response(
            {'group_id': str(invitation.group_id), 'joined': joined},
            message='Successfully joined the group!' if joined else 'You are already a member of this group.',
        )

    @action(detail=True, methods=['post'])
    def reject(self, request, *args, **kwargs):
        invitation = self.get_object()
        user = request.user if request.user.is_authenticated else None
        services.reject_invitation(invitation, user)
        return success_response(InvitationSerializer(invitation).data, message='Invitation declined.')

    @action(detail=False, methods=['get'])
    def mine(self, request, *args, **kwargs):
        queryset = self.get_queryset().filter(invited_email__iexact=request.user.email)
        services.expire_overdue(queryset)

        status_filter = request.query_params.get('status') or Invitation.Status.PENDING
        if status_filter not in Invitation.Status.values:
            raise ValidationError({'status': [f'Unknown invitation status "{status_filter}".']})
        queryset = queryset.filter(status=status_filter)

        page = self.paginate_queryset(queryset.order_by('-created_at'))
        return self.get_paginated_response(InvitationSerializer(page, many=True).data)
