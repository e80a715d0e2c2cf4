"""
Models for the Voting app.
"""
from django.conf import settings
from django.db import models

from common.models import TimestampedModel


class Vote(TimestampedModel):
    """
    One member's weighted opinion of one hotel for one group.

    A member holds at most one vote per hotel; re-voting replaces the row.
    ``hotel_data`` is a snapshot of the upstream hotel so results can still be
    shown if the hotel disappears from the provider.
    """
    class Weight(models.TextChoices):
        LOW = '1', 'Nice to have'
        MEDIUM = '2', 'Strong preference'
        HIGH = '3', 'Must have'

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='votes',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='votes',
    )
    hotel_id = models.CharField(max_length=64, db_index=True)
    hotel_name = models.CharField(max_length=255)
    hotel_data = models.JSONField(blank=True, null=True)
    is_upvote = models.BooleanField(default=True)
    weight = models.CharField(
        max_length=1,
        choices=Weight.choices,
        default=Weight.LOW,
    )

    class Meta:
        db_table = 'votes'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['group', 'user', 'hotel_id'],
                name='unique_vote_per_user_hotel',
            ),
        ]

    def __str__(self):
        direction = 'up' if self.is_upvote else 'down'
        return f'{self.user} {direction}x{self.weight} {self.hotel_name}'

    def as_tally_row(self):
        """Plain mapping consumed by ``apps.voting.services.tally``."""
        return {
            'id': str(self.id),
            'user_id': str(self.user_id),
            'hotel_id': self.hotel_id,
            'hotel_name': self.hotel_name,
            'hotel_data': self.hotel_data,
            'is_upvote': self.is_upvote,
            'weight': self.weight,
            'created_at': self.created_at,
            'user': self.user.to_voter(),
        }
