"""
Views for the Voting app.

    GET    /api/v1/groups/{group_id}/votes/           list raw votes
    POST   /api/v1/groups/{group_id}/votes/           cast (or replace) a vote
    GET    /api/v1/groups/{group_id}/votes/results/   ranked tally
    POST   /api/v1/groups/{group_id}/votes/close/     close voting
    PATCH  /api/v1/votes/{id}/                        change own vote
    DELETE /api/v1/votes/{id}/                        remove own vote
"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated

from apps.groups.permissions import IsGroupMember, get_membership
from apps.voting.models import Vote
from apps.voting.serializers import (
    CastVoteSerializer,
    CloseVotingSerializer,
    UpdateVoteSerializer,
    VoteSerializer,
)
from apps.voting.services import lifecycle
from common.pagination import PageLimitPagination
from common.responses import success_response

logger = logging.getLogger(__name__)


class VotePagination(PageLimitPagination):
    page_size = 50
    items_key = 'votes'


class GroupVoteViewSet(viewsets.GenericViewSet):
    """
    Votes and results of one group. Members only.
    """
    serializer_class = VoteSerializer
    pagination_class = VotePagination
    permission_classes = [IsAuthenticated, IsGroupMember]

    def get_group(self):
        return get_membership(self.request, self.kwargs['group_pk']).group

    def get_queryset(self):
        return Vote.objects.filter(
            group_id=self.kwargs['group_pk'],
        ).select_related('user').order_by('-created_at')

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        serializer = VoteSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = CastVoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vote, replaced = lifecycle.cast_vote(
            self.get_group(),
            request.user,
            **serializer.validated_data,
        )
        return success_response(
            VoteSerializer(vote).data,
            status=status.HTTP_201_CREATED,
            message='Vote replaced.' if replaced else 'Vote cast.',
        )

    @action(detail=False, methods=['get'])
    def results(self, request, *args, **kwargs):
        return success_response(lifecycle.build_results(self.get_group(), request.user))

    @action(detail=False, methods=['post'])
    def close(self, request, *args, **kwargs):
        serializer = CloseVotingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = lifecycle.close_voting(
            self.get_group(),
            request.user,
            selected_hotel_id=serializer.validated_data.get('selected_hotel_id') or None,
        )
        return success_response({
            'group_id': str(group.id),
            'group_status': group.status,
            'selected_hotel_id': group.selected_hotel_id,
            'selected_hotel_data': group.selected_hotel_data,
        })


class VoteViewSet(viewsets.GenericViewSet):
    """
    A caller's own vote. Other users' votes are reported as not found.
    """
    serializer_class = VoteSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Vote.objects.filter(user=self.request.user).select_related('group', 'user')

    def get_object(self):
        vote = self.get_queryset().filter(pk=self.kwargs['pk']).first()
        if vote is None:
            raise NotFound('Vote not found')
        return vote

    def partial_update(self, request, *args, **kwargs):
        vote = self.get_object()
        serializer = UpdateVoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lifecycle.update_vote(vote, **serializer.validated_data)
        return success_response(VoteSerializer(vote).data)

    def destroy(self, request, *args, **kwargs):
        lifecycle.remove_vote(self.get_object())
        return success_response({'deleted': True})
