"""
Celery tasks for invitation emails and expiry.

Without a configured broker, ``services.queue_invitation_email`` calls
``send_invitation_email`` inline instead of enqueueing it.
"""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def build_invitation_context(invitation):
    group = invitation.group
    return {
        'inviter_name': invitation.invited_by.display_name,
        'group_name': group.name,
        'group_description': group.description,
        'check_in_date': group.check_in_date,
        'check_out_date': group.check_out_date,
        'invitation_url': f'{settings.APP_BASE_URL.rstrip("/")}/invitations/{invitation.id}',
        'expires_at': invitation.expires_at,
        'personal_message': invitation.message,
    }


@shared_task(
    name='apps.invitations.tasks.send_invitation_email',
    ignore_result=True,
)
def send_invitation_email(invitation_id):
    """
    Email an invitation to its recipient.

    Delivery is best-effort: any failure is logged and reported as ``False``
    so the request that created the invitation never fails because of it.
    """
    from apps.invitations.models import Invitation

    invitation = (
        Invitation.objects.select_related('group', 'invited_by')
        .filter(pk=invitation_id)
        .first()
    )
    if invitation is None:
        logger.warning('Invitation %s vanished before its email was sent.', invitation_id)
        return False

    context = build_invitation_context(invitation)
    subject = f"You're invited to join {context['group_name']} on {settings.EMAIL_FROM_NAME}!"

    try:
        message = EmailMultiAlternatives(
            subject=subject,
            body=render_to_string('invitations/email/invitation.txt', context),
            from_email=f'{settings.EMAIL_FROM_NAME} <{settings.DEFAULT_FROM_EMAIL}>',
            to=[invitation.invited_email],
        )
        message.attach_alternative(
            render_to_string('invitations/email/invitation.html', context),
            'text/html',
        )
        message.send()
    except Exception:
        logger.exception('Failed to send invitation email to %s', invitation.invited_email)
        return False

    logger.info('Invitation email sent to %s for group %s', invitation.invited_email, invitation.group_id)
    return True


@shared_task(name='apps.invitations.tasks.expire_stale_invitations')
def expire_stale_invitations():
    """
    Mark every pending invitation past its expiry as expired.

    Idempotent; reads and actions already expire invitations lazily, this
    only keeps listings tidy for invitations nobody looks at.
    """
    from apps.invitations.models import Invitation
    from apps.invitations.services import expire_overdue

    updated = expire_overdue(Invitation.objects.all())

    if updated:
        logger.info('Expired %d stale invitations.', updated)
    return updated
