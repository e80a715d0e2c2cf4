"""
Views for the Chat app.

    GET  /api/v1/groups/{group_id}/chat/   newest first, paginated
    POST /api/v1/groups/{group_id}/chat/
"""
import logging

from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated

from apps.chat.models import Message
from apps.chat.serializers import MessageCreateSerializer, MessageSerializer
from apps.groups.permissions import IsGroupMember
from common.pagination import PageLimitPagination
from common.responses import success_response

logger = logging.getLogger(__name__)


class MessagePagination(PageLimitPagination):
    page_size = 50
    items_key = 'messages'


class GroupMessageViewSet(viewsets.GenericViewSet):
    serializer_class = MessageSerializer
    pagination_class = MessagePagination
    permission_classes = [IsAuthenticated, IsGroupMember]

    def get_queryset(self):
        return Message.objects.filter(
            group_id=self.kwargs['group_pk'],
        ).select_related('user').order_by('-created_at')

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(MessageSerializer(page, many=True).data)

    def create(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = Message.objects.create(
            group_id=self.kwargs['group_pk'],
            user=request.user,
            **serializer.validated_data,
        )
        logger.debug('Message %s posted to group %s', message.id, message.group_id)
        return success_response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)
