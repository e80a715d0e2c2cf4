"""
Invitation workflow: create, accept, reject, with lazy expiry applied first.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.chat.models import Message
from apps.groups.models import GroupMember
from apps.invitations.exceptions import GroupFull, InvitationExpired, InvitationNotPending
from apps.invitations.models import Invitation
from apps.invitations.tasks import send_invitation_email

logger = logging.getLogger(__name__)
User = get_user_model()


def apply_lazy_expiry(invitation):
    if invitation.expire_if_stale():
        logger.info('Invitation %s expired on access', invitation.id)
    return invitation


def expire_overdue(queryset):
    """Bulk-expire the pending, past-due invitations in *queryset*. Returns the count."""
    now = timezone.now()
    return queryset.filter(
        status=Invitation.Status.PENDING,
        expires_at__lt=now,
    ).update(status=Invitation.Status.EXPIRED, updated_at=now)


def queue_invitation_email(invitation):
    """
    Deliver the invitation email through Celery, or inline when no broker is set.
    """
    if getattr(settings, 'CELERY_BROKER_URL', ''):
        try:
            send_invitation_email.delay(str(invitation.id))
            return
        except Exception:
            logger.exception('Could not enqueue invitation email %s; sending inline', invitation.id)
    send_invitation_email(str(invitation.id))


def create_invitation(group, inviter, email, message=''):
    """
    Invite *email* to *group* on behalf of *inviter* and email them.

    Raises ``ValidationError`` when the address already belongs to a member
    or already has a pending invitation for this group.
    """
    email = email.strip().lower()

    if group.members.filter(user__email__iexact=email).exists():
        raise ValidationError({'invited_email': ['User is already a member of this group.']})

    pending = Invitation.objects.filter(
        group=group,
        invited_email__iexact=email,
        status=Invitation.Status.PENDING,
    )
    expired = expire_overdue(pending)
    if expired:
        logger.info('Expired %d stale invitations to %s for group %s', expired, email, group.id)
    if pending.exists():
        raise ValidationError({'invited_email': ['Invitation already sent to this email.']})

    invitation = Invitation.objects.create(
        group=group,
        invited_by=inviter,
        invited_email=email,
        invited_user=User.objects.filter(email__iexact=email).first(),
        message=message or '',
    )
    logger.info('Invitation %s sent to %s for group %s', invitation.id, email, group.id)

    queue_invitation_email(invitation)
    return invitation


def send_bulk_invitations(group, inviter, emails):
    """
    Invite every address in *emails*, skipping (and logging) the ones that fail.
    """
    created = []
    for email in dict.fromkeys(e.strip().lower() for e in emails if e and e.strip()):
        if email == inviter.email.lower():
            continue
        try:
            created.append(create_invitation(group, inviter, email))
        except ValidationError as exc:
            logger.warning('Skipped invitation to %s for group %s: %s', email, group.id, exc.detail)
    return created


def _ensure_actionable(invitation):
    apply_lazy_expiry(invitation)
    if invitation.status == Invitation.Status.EXPIRED:
        raise InvitationExpired()
    if invitation.status != Invitation.Status.PENDING:
        raise InvitationNotPending()


def _ensure_recipient(invitation, user):
    if user.email.lower() != invitation.invited_email.lower():
        raise PermissionDenied('This invitation is not for your email address.')


def _post_join_message(group, user):
    try:
        Message.objects.create(
            group=group,
            user=user,
            content=f'{user.display_name} joined the group!',
            message_type=Message.MessageType.SYSTEM,
        )
    except Exception:
        logger.exception('Failed to post join message for user %s in group %s', user.id, group.id)


def accept_invitation(invitation, user):
    """
    Accept *invitation* as *user* and add them to the group.

    Returns
    -------
    bool
        True when a new membership was created, False when *user* was
        already a member (the invitation is still marked accepted).
    """
    _ensure_actionable(invitation)
    _ensure_recipient(invitation, user)

    group = invitation.group
    if GroupMember.objects.filter(group=group, user=user).exists():
        invitation.respond(Invitation.Status.ACCEPTED, user=user)
        return False

    if group.is_full:
        raise GroupFull()

    with transaction.atomic():
        GroupMember.objects.create(group=group, user=user, role=GroupMember.Role.MEMBER)
        invitation.respond(Invitation.Status.ACCEPTED, user=user)

    logger.info('Invitation %s accepted by user %s', invitation.id, user.id)
    _post_join_message(group, user)
    return True


def reject_invitation(invitation, user=None):
    """
    Decline *invitation*. Anonymous callers (following the email link) may
    reject; an authenticated caller must be the invitee.
    """
    _ensure_actionable(invitation)
    if user is not None:
        _ensure_recipient(invitation, user)

    invitation.respond(Invitation.Status.REJECTED, user=user)
    logger.info('Invitation %s rejected', invitation.id)
    return invitation
