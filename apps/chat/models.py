"""
Models for the Chat app.
"""
from django.conf import settings
from django.db import models

from common.models import TimestampedModel


class Message(TimestampedModel):
    """
    A message in a group's chat. ``system`` messages are posted by the
    backend itself (e.g. when someone joins).
    """
    class MessageType(models.TextChoices):
        TEXT = 'text', 'Text'
        SYSTEM = 'system', 'System'
        HOTEL_SHARE = 'hotel_share', 'Hotel share'
        VOTE_UPDATE = 'vote_update', 'Vote update'

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='messages',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='messages',
    )
    content = models.TextField()
    message_type = models.CharField(
        max_length=20,
        choices=MessageType.choices,
        default=MessageType.TEXT,
    )
    metadata = models.JSONField(blank=True, null=True)

    class Meta:
        db_table = 'messages'
        ordering = ['-created_at']

    def __str__(self):
        return f'[{self.message_type}] {self.user}: {self.content[:40]}'
