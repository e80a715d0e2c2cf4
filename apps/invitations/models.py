"""
Models for the Invitations app.
"""
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimestampedModel


def default_expiry():
    return timezone.now() + timedelta(days=settings.INVITATION_EXPIRY_DAYS)


class Invitation(TimestampedModel):
    """
    An emailed offer to join a group.

    Expiry is applied lazily: a pending invitation whose ``expires_at`` has
    passed is flipped to ``expired`` the next time it is read or acted upon.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'
        EXPIRED = 'expired', 'Expired'

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='invitations',
    )
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_invitations',
    )
    invited_email = models.EmailField(db_index=True)
    invited_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='received_invitations',
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    message = models.TextField(blank=True, default='')
    expires_at = models.DateTimeField(default=default_expiry)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'invitations'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.invited_email} -> {self.group} ({self.status})'

    @property
    def is_past_expiry(self):
        return timezone.now() > self.expires_at

    def expire_if_stale(self):
        """Mark a pending, past-due invitation as expired. Returns True if it changed."""
        if self.status == self.Status.PENDING and self.is_past_expiry:
            self.status = self.Status.EXPIRED
            self.save(update_fields=['status', 'updated_at'])
            return True
        return False

    def respond(self, status, user=None):
        self.status = status
        self.responded_at = timezone.now()
        update_fields = ['status', 'responded_at', 'updated_at']
        if user is not None:
            self.invited_user = user
            update_fields.append('invited_user')
        self.save(update_fields=update_fields)
