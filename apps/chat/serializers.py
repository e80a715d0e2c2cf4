"""
Serializers for the Chat app.
"""
from rest_framework import serializers

from apps.chat.models import Message
from apps.users.serializers import UserSerializer


class MessageSerializer(serializers.ModelSerializer):
    group_id = serializers.UUIDField(read_only=True)
    user = UserSerializer(read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'group_id', 'user', 'content', 'message_type', 'metadata', 'created_at']
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=4000, trim_whitespace=True)
    message_type = serializers.ChoiceField(
        choices=Message.MessageType.choices,
        default=Message.MessageType.TEXT,
    )
    metadata = serializers.JSONField(required=False, allow_null=True, default=None)
