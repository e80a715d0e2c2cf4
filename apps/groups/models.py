"""
Models for the Groups app.
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from common.models import TimestampedModel


def default_max_members():
    return settings.DEFAULT_GROUP_MAX_MEMBERS


class Group(TimestampedModel):
    """
    A ski trip that members plan, vote on and book together.
    """
    class Status(models.TextChoices):
        PLANNING = 'planning', 'Planning'
        VOTING = 'voting', 'Voting'
        VOTING_CLOSED = 'voting_closed', 'Voting closed'
        BOOKED = 'booked', 'Booked'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    max_members = models.PositiveSmallIntegerField(default=default_max_members)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PLANNING,
        db_index=True,
    )
    selected_hotel_id = models.CharField(max_length=64, blank=True, null=True)
    selected_hotel_data = models.JSONField(
        blank=True,
        null=True,
        help_text='Snapshot of the chosen hotel, copied from the winning vote.',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_groups',
    )

    class Meta:
        db_table = 'groups'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def clean(self):
        if self.check_in_date and self.check_out_date and self.check_out_date <= self.check_in_date:
            raise ValidationError({'check_out_date': 'Check-out date must be after check-in date.'})

    @property
    def member_count(self):
        return self.members.count()

    @property
    def is_full(self):
        return self.member_count >= self.max_members

    def role_of(self, user):
        """Return the role of ``user`` in this group, or None for non-members."""
        return (
            self.members.filter(user=user)
            .values_list('role', flat=True)
            .first()
        )


class GroupMember(TimestampedModel):
    """
    Membership record linking a user to a group with a role.
    """
    class Role(models.TextChoices):
        OWNER = 'owner', 'Owner'
        ADMIN = 'admin', 'Admin'
        MEMBER = 'member', 'Member'

    MANAGER_ROLES = (Role.OWNER, Role.ADMIN)

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='members',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='group_memberships',
    )
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.MEMBER,
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_members'
        unique_together = ['group', 'user']
        ordering = ['joined_at']

    def __str__(self):
        return f'{self.user} in {self.group} ({self.role})'

    @property
    def can_manage(self):
        return self.role in self.MANAGER_ROLES
