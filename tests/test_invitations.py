from datetime import timedelta
from unittest import mock

import pytest
from django.core import mail
from django.utils import timezone

from apps.chat.models import Message
from apps.groups.models import GroupMember
from apps.invitations.models import Invitation
from apps.invitations.tasks import expire_stale_invitations

pytestmark = pytest.mark.django_db


@pytest.fixture
def invitee(make_user):
    return make_user('invitee@example.com', 'Ines Invitee')


@pytest.fixture
def invitation(group, owner, invitee):
    return Invitation.objects.create(group=group, invited_by=owner, invited_email='invitee@example.com')


def expire(invitation):
    Invitation.objects.filter(pk=invitation.pk).update(expires_at=timezone.now() - timedelta(minutes=1))


def test_admin_can_invite_and_email_is_sent(client_for, group, admin_user, invitee):
    response = client_for(admin_user).post(
        f'/api/v1/groups/{group.id}/invitations/',
        {'invited_email': 'Invitee@Example.com', 'message': 'Join us!'},
        format='json',
    )

    assert response.status_code == 201
    data = response.json()['data']
    assert data['invited_email'] == 'invitee@example.com'
    assert data['invited_user_id'] == str(invitee.id)
    assert data['status'] == 'pending'
    assert len(mail.outbox) == 1
    assert 'Chamonix 2026' in mail.outbox[0].subject
    assert 'Join us!' in mail.outbox[0].body


def test_default_expiry_is_seven_days(invitation):
    remaining = invitation.expires_at - timezone.now()

    assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)


def test_member_cannot_invite(client_for, group, member):
    response = client_for(member).post(
        f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'x@example.com'}, format='json',
    )

    assert response.status_code == 403


def test_invalid_email_rejected(client_for, group, owner):
    response = client_for(owner).post(
        f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'not-an-email'}, format='json',
    )

    assert response.status_code == 400
    assert response.json()['error']['code'] == 'VALIDATION_ERROR'


def test_existing_member_cannot_be_invited(client_for, group, owner):
    response = client_for(owner).post(
        f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'member@example.com'}, format='json',
    )

    assert response.status_code == 400


def test_duplicate_pending_invitation_rejected(client_for, group, owner, invitation):
    response = client_for(owner).post(
        f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'invitee@example.com'}, format='json',
    )

    assert response.status_code == 400
    assert Invitation.objects.filter(invited_email='invitee@example.com').count() == 1


def test_expired_pending_invitation_does_not_block_new_one(client_for, group, owner, invitation):
    expire(invitation)

    response = client_for(owner).post(
        f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'invitee@example.com'}, format='json',
    )

    assert response.status_code == 201
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.EXPIRED
    pending = Invitation.objects.filter(invited_email='invitee@example.com', status=Invitation.Status.PENDING)
    assert [str(i.id) for i in pending] == [response.json()['data']['id']]


def test_email_failure_does_not_fail_invite(client_for, group, owner):
    with mock.patch('apps.invitations.tasks.EmailMultiAlternatives.send', side_effect=OSError('smtp down')):
        response = client_for(owner).post(
            f'/api/v1/groups/{group.id}/invitations/', {'invited_email': 'new@example.com'}, format='json',
        )

    assert response.status_code == 201


def test_public_detail_applies_lazy_expiry(api_client, invitation):
    expire(invitation)

    response = api_client.get(f'/api/v1/invitations/{invitation.id}/')

    assert response.status_code == 200
    assert response.json()['data']['status'] == 'expired'
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.EXPIRED


def test_accept_adds_member_and_posts_system_message(client_for, group, invitee, invitation):
    response = client_for(invitee).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 200
    assert response.json()['data']['joined'] is True
    assert GroupMember.objects.filter(group=group, user=invitee, role='member').exists()
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.ACCEPTED
    assert invitation.responded_at is not None
    message = Message.objects.get(group=group)
    assert message.message_type == Message.MessageType.SYSTEM
    assert message.content == 'Ines Invitee joined the group!'


def test_accept_expired_invitation_fails(client_for, invitee, invitation):
    expire(invitation)

    response = client_for(invitee).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 400
    assert response.json()['error']['details']['reason'] == 'invitation_expired'
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.EXPIRED


def test_accept_requires_matching_email(client_for, outsider, invitation):
    response = client_for(outsider).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 403
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.PENDING


def test_accept_requires_authentication(api_client, invitation):
    response = api_client.post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 401


def test_accept_twice_is_not_pending(client_for, invitee, invitation):
    client = client_for(invitee)
    client.post(f'/api/v1/invitations/{invitation.id}/accept/')

    response = client.post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 400
    assert response.json()['error']['details']['reason'] == 'invitation_not_pending'


def test_accept_when_group_full(client_for, group, invitee, invitation):
    group.max_members = 3
    group.save()

    response = client_for(invitee).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 400
    assert response.json()['error']['details']['reason'] == 'group_full'
    assert not GroupMember.objects.filter(user=invitee).exists()


def test_accept_when_already_member_succeeds(client_for, group, owner, member):
    invitation = Invitation.objects.create(group=group, invited_by=owner, invited_email='member@example.com')

    response = client_for(member).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 200
    assert response.json()['data']['joined'] is False
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.ACCEPTED


def test_join_message_failure_is_swallowed(client_for, group, invitee, invitation):
    with mock.patch('apps.invitations.services.Message.objects.create', side_effect=RuntimeError('boom')):
        response = client_for(invitee).post(f'/api/v1/invitations/{invitation.id}/accept/')

    assert response.status_code == 200
    assert GroupMember.objects.filter(group=group, user=invitee).exists()


def test_anonymous_reject(api_client, invitation):
    response = api_client.post(f'/api/v1/invitations/{invitation.id}/reject/')

    assert response.status_code == 200
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.REJECTED


def test_authenticated_reject_requires_matching_email(client_for, outsider, invitation):
    response = client_for(outsider).post(f'/api/v1/invitations/{invitation.id}/reject/')

    assert response.status_code == 403


def test_my_invitations_filtered_by_status(client_for, group, owner, invitee, invitation):
    other = Invitation.objects.create(group=group, invited_by=owner, invited_email='invitee@example.com')
    expire(other)

    response = client_for(invitee).get('/api/v1/invitations/mine/', {'status': 'pending'})

    data = response.json()['data']
    assert response.status_code == 200
    assert [i['id'] for i in data['invitations']] == [str(invitation.id)]
    assert data['total'] == 1


def test_my_invitations_default_to_pending(client_for, group, owner, invitee, invitation):
    declined = Invitation.objects.create(group=group, invited_by=owner, invited_email='invitee@example.com')
    declined.respond(Invitation.Status.REJECTED)

    response = client_for(invitee).get('/api/v1/invitations/mine/')

    data = response.json()['data']
    assert response.status_code == 200
    assert [i['status'] for i in data['invitations']] == ['pending']
    assert data['invitations'][0]['id'] == str(invitation.id)


def test_my_invitations_rejects_unknown_status(client_for, invitee):
    response = client_for(invitee).get('/api/v1/invitations/mine/', {'status': 'maybe'})

    assert response.status_code == 400


def test_group_invitation_list_for_members(client_for, group, member, invitation):
    response = client_for(member).get(f'/api/v1/groups/{group.id}/invitations/')

    assert response.status_code == 200
    assert response.json()['data']['total'] == 1


def test_expire_stale_invitations_task(invitation):
    expire(invitation)

    assert expire_stale_invitations() == 1
    assert expire_stale_invitations() == 0
    invitation.refresh_from_db()
    assert invitation.status == Invitation.Status.EXPIRED
