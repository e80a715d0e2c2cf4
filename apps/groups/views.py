"""
Views for the Groups app.
"""
import logging

from django.db import transaction
from rest_framework import generics, status, viewsets
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated

from apps.groups.models import Group, GroupMember
from apps.groups.permissions import IsGroupAdmin, IsGroupMember, IsGroupOwner, get_membership
from apps.groups.serializers import (
    GroupCreateSerializer,
    GroupDetailSerializer,
    GroupMemberSerializer,
    GroupSerializer,
    GroupUpdateSerializer,
)
from apps.invitations.services import send_bulk_invitations
from apps.voting.services.lifecycle import transition_status
from common.pagination import PageLimitPagination
from common.responses import success_response

logger = logging.getLogger(__name__)


class GroupPagination(PageLimitPagination):
    items_key = 'groups'


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations.

    list:   GET    /api/v1/groups/
    create: POST   /api/v1/groups/
    read:   GET    /api/v1/groups/{id}/
    update: PATCH  /api/v1/groups/{id}/
    delete: DELETE /api/v1/groups/{id}/
    """
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return Group.objects.filter(
            members__user=self.request.user,
        ).prefetch_related('members__user').distinct().order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'create':
            return GroupCreateSerializer
        if self.action == 'partial_update':
            return GroupUpdateSerializer
        if self.action == 'retrieve':
            return GroupDetailSerializer
        return GroupSerializer

    def get_permissions(self):
        if self.action == 'partial_update':
            return [IsAuthenticated(), IsGroupAdmin()]
        if self.action == 'destroy':
            return [IsAuthenticated(), IsGroupOwner()]
        return [IsAuthenticated()]

    def get_object(self):
        group = self.get_queryset().filter(pk=self.kwargs['pk']).first()
        if group is None:
            raise NotFound('Group not found')
        self.check_object_permissions(self.request, group)
        return group

    def _detail(self, group):
        group = self.get_queryset().get(pk=group.pk)
        return GroupDetailSerializer(group, context={'request': self.request}).data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = serializer.save()
        logger.info('Group %s created by user %s', group.id, request.user.id)

        if serializer.invite_emails:
            sent = send_bulk_invitations(group, request.user, serializer.invite_emails)
            logger.info('Sent %d of %d invitations for group %s', len(sent), len(serializer.invite_emails), group.id)

        return success_response(self._detail(group), status=status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        return success_response(self._detail(self.get_object()))

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        serializer = GroupSerializer(page, many=True, context={'request': request})
        return self.get_paginated_response(serializer.data)

    def partial_update(self, request, *args, **kwargs):
        group = self.get_object()
        serializer = GroupUpdateSerializer(group, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            serializer.save()
            new_status = serializer.validated_data.get('status')
            if new_status:
                transition_status(group, new_status)

        return success_response(self._detail(group))

    def destroy(self, request, *args, **kwargs):
        group = self.get_object()
        group_id = group.id
        group.delete()
        logger.info('Group %s deleted by owner %s', group_id, request.user.id)
        return success_response({'deleted': True})


class GroupMemberViewSet(viewsets.GenericViewSet):
    """
    ViewSet for managing group members.

    list:    GET    /api/v1/groups/{group_id}/members/
    destroy: DELETE /api/v1/groups/{group_id}/members/{id}/
    """
    serializer_class = GroupMemberSerializer

    def get_queryset(self):
        return GroupMember.objects.filter(
            group_id=self.kwargs['group_pk'],
        ).select_related('user')

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAuthenticated(), IsGroupAdmin()]
        return [IsAuthenticated(), IsGroupMember()]

    def list(self, request, *args, **kwargs):
        return success_response(GroupMemberSerializer(self.get_queryset(), many=True).data)

    def destroy(self, request, *args, **kwargs):
        member = self.get_queryset().filter(pk=kwargs['pk']).first()
        if member is None:
            raise NotFound('Member not found')
        if member.role == GroupMember.Role.OWNER:
            raise ValidationError('The group owner cannot be removed.')

        member.delete()
        logger.info('User %s removed from group %s by %s', member.user_id, member.group_id, request.user.id)
        return success_response({'deleted': True}, message='Member removed.')


class LeaveGroupView(generics.GenericAPIView):
    """
    Leave a group.

    DELETE /api/v1/groups/{group_id}/leave/
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, group_pk=None, *args, **kwargs):
        membership = get_membership(request, group_pk)
        if membership is None:
            raise NotFound('You are not a member of this group.')

        # Ownership cannot be transferred, so the owner has to delete the group instead
        if membership.role == GroupMember.Role.OWNER:
            raise ValidationError('The group owner cannot leave the group. Delete the group instead.')

        membership.delete()
        logger.info('User %s left group %s', request.user.id, group_pk)
        return success_response(message='Successfully left the group.')
