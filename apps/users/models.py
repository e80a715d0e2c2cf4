"""
Custom User model for the Ski Trip Planner application.
"""
import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """
    Manager for email-login users.

    ``username`` is still required by ``AbstractUser`` so one is derived from
    the email prefix when the caller does not supply it.
    """
    use_in_migrations = True

    def _unique_username(self, email):
        base_username = email.split('@')[0][:30]
        username = base_username
        counter = 1
        while self.model.objects.filter(username=username).exists():
            username = f'{base_username}{counter}'
            counter += 1
        return username

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('An email address is required.')
        email = self.normalize_email(email).lower()
        extra_fields.setdefault('username', self._unique_username(email))
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Extended User model with the profile fields shown to other group members.

    Uses email as the primary login identifier instead of username.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    email = models.EmailField(
        unique=True,
        db_index=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )
    full_name = models.CharField(max_length=150, blank=True, default='')
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        default='',
        help_text='URL to the user avatar image.',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['full_name']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.display_name} ({self.email})'

    @property
    def display_name(self):
        return self.full_name.strip() or self.email.split('@')[0]

    def to_voter(self):
        """Compact representation embedded in vote and tally payloads."""
        return {
            'id': str(self.id),
            'full_name': self.full_name or None,
            'avatar_url': self.avatar_url or None,
        }
