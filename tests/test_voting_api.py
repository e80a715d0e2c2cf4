import pytest

from apps.groups.models import Group
from apps.voting.models import Vote

pytestmark = pytest.mark.django_db


def votes_url(group):
    return f'/api/v1/groups/{group.id}/votes/'


def results_url(group):
    return f'/api/v1/groups/{group.id}/votes/results/'


def close_url(group):
    return f'/api/v1/groups/{group.id}/votes/close/'


def cast(client, group, hotel_id, weight='1', is_upvote=True, **extra):
    body = {
        'hotel_id': hotel_id,
        'hotel_name': f'Hotel {hotel_id}',
        'hotel_data': {'id': hotel_id, 'stars': 4},
        'is_upvote': is_upvote,
        'weight': weight,
        **extra,
    }
    return client.post(votes_url(group), body, format='json')


def test_cast_vote_returns_envelope(client_for, group, member):
    response = cast(client_for(member), group, 'hotelA', weight='2')

    assert response.status_code == 201
    body = response.json()
    assert body['success'] is True
    assert 'timestamp' in body
    assert body['data']['hotel_id'] == 'hotelA'
    assert body['data']['weight'] == '2'
    assert body['data']['user_id'] == str(member.id)


def test_recasting_replaces_previous_vote(client_for, group, member):
    client = client_for(member)
    cast(client, group, 'hotelA', weight='2')
    response = cast(client, group, 'hotelA', weight='3')

    assert response.status_code == 201
    assert response.json()['message'] == 'Vote replaced.'
    votes = Vote.objects.filter(group=group, user=member, hotel_id='hotelA')
    assert votes.count() == 1
    assert votes.get().weight == '3'


def test_invalid_weight_is_validation_error(client_for, group, member):
    response = cast(client_for(member), group, 'hotelA', weight='5')

    assert response.status_code == 400
    error = response.json()['error']
    assert error['code'] == 'VALIDATION_ERROR'
    assert 'weight' in error['details']


def test_missing_fields_are_rejected(client_for, group, member):
    response = client_for(member).post(votes_url(group), {'hotel_id': 'x'}, format='json')

    assert response.status_code == 400
    assert response.json()['error']['code'] == 'VALIDATION_ERROR'


def test_unauthenticated_request_is_401(api_client, group):
    response = api_client.get(results_url(group))

    assert response.status_code == 401
    assert response.json()['error']['code'] == 'UNAUTHORIZED'


def test_non_member_is_forbidden(client_for, group, outsider):
    response = cast(client_for(outsider), group, 'hotelA')

    assert response.status_code == 403
    assert response.json()['error']['code'] == 'FORBIDDEN'


def test_unknown_group_is_not_found(client_for, member):
    response = client_for(member).get('/api/v1/groups/00000000-0000-0000-0000-000000000000/votes/results/')

    assert response.status_code == 404
    assert response.json()['error']['code'] == 'NOT_FOUND'


def test_list_votes_is_paginated(client_for, group, member, admin_user):
    cast(client_for(member), group, 'hotelA')
    cast(client_for(admin_user), group, 'hotelB')

    response = client_for(member).get(votes_url(group), {'limit': 1})

    data = response.json()['data']
    assert response.status_code == 200
    assert len(data['votes']) == 1
    assert data['total'] == 2
    assert data['has_more'] is True


def test_vote_list_defaults_to_fifty_per_page(client_for, group, member):
    cast(client_for(member), group, 'hotelA')

    data = client_for(member).get(votes_url(group)).json()['data']

    assert data['limit'] == 50


def test_results_rank_by_weighted_score(client_for, group, owner, member, admin_user):
    cast(client_for(owner), group, 'hotelA', weight='1')
    cast(client_for(member), group, 'hotelA', weight='1')
    cast(client_for(admin_user), group, 'hotelB', weight='3')

    response = client_for(member).get(results_url(group))

    data = response.json()['data']
    assert response.status_code == 200
    assert [h['hotel_id'] for h in data['hotels']] == ['hotelB', 'hotelA']
    assert data['hotels'][1]['net_score'] == 2
    assert data['hotels'][0]['weighted_score'] == 3
    assert data['total_votes'] == 3
    assert data['total_voters'] == 3
    assert data['total_hotels'] == 2
    assert data['is_voting_open'] is True
    assert data['winner'] is None
    assert data['poll_interval_seconds'] == 15
    assert len(data['hotels'][1]['user_votes']) == 1


def test_close_picks_weighted_winner(client_for, group, owner, member):
    cast(client_for(member), group, 'hotelA', weight='1')
    cast(client_for(owner), group, 'hotelB', weight='3')

    response = client_for(owner).post(close_url(group), {}, format='json')

    assert response.status_code == 200
    data = response.json()['data']
    assert data['selected_hotel_id'] == 'hotelB'
    assert data['selected_hotel_data'] == {'id': 'hotelB', 'stars': 4}
    group.refresh_from_db()
    assert group.status == Group.Status.VOTING_CLOSED
    assert group.selected_hotel_id == 'hotelB'

    results = client_for(member).get(results_url(group)).json()['data']
    assert results['winner']['hotel_id'] == 'hotelB'
    assert results['is_voting_open'] is False


def test_close_with_manual_selection_overrides_tally(client_for, group, admin_user, member):
    cast(client_for(member), group, 'hotelA', weight='3')

    response = client_for(admin_user).post(close_url(group), {'selected_hotel_id': 'hotelZ'}, format='json')

    assert response.status_code == 200
    group.refresh_from_db()
    assert group.selected_hotel_id == 'hotelZ'
    assert group.selected_hotel_data is None
    assert group.status == Group.Status.VOTING_CLOSED

    results = client_for(member).get(results_url(group)).json()['data']
    assert results['selected_hotel_id'] == 'hotelZ'
    assert results['winner']['hotel_id'] == 'hotelA'


def test_close_without_votes_fails_and_keeps_status(client_for, group, owner):
    group.status = Group.Status.VOTING
    group.save()

    response = client_for(owner).post(close_url(group), {}, format='json')

    assert response.status_code == 400
    error = response.json()['error']
    assert error['code'] == 'VALIDATION_ERROR'
    assert error['details']['reason'] == 'no_votes'
    group.refresh_from_db()
    assert group.status == Group.Status.VOTING


def test_plain_member_cannot_close(client_for, group, member):
    cast(client_for(member), group, 'hotelA')

    response = client_for(member).post(close_url(group), {}, format='json')

    assert response.status_code == 403
    group.refresh_from_db()
    assert group.status == Group.Status.PLANNING


def test_closing_twice_is_already_closed(client_for, group, owner):
    cast(client_for(owner), group, 'hotelA')
    client_for(owner).post(close_url(group), {}, format='json')

    response = client_for(owner).post(close_url(group), {}, format='json')

    assert response.status_code == 400
    assert response.json()['error']['details']['reason'] == 'already_closed'


def test_vote_operations_fail_after_close(client_for, group, owner, member):
    client = client_for(member)
    vote_id = cast(client, group, 'hotelA').json()['data']['id']
    Group.objects.filter(pk=group.pk).update(status=Group.Status.VOTING_CLOSED)

    cast_response = cast(client, group, 'hotelB')
    patch_response = client.patch(f'/api/v1/votes/{vote_id}/', {'is_upvote': False}, format='json')
    delete_response = client.delete(f'/api/v1/votes/{vote_id}/')

    for response in (cast_response, patch_response, delete_response):
        assert response.status_code == 400
        assert response.json()['error']['details']['reason'] == 'voting_closed'
    assert Vote.objects.filter(pk=vote_id, is_upvote=True).exists()


def test_update_own_vote(client_for, group, member):
    client = client_for(member)
    vote_id = cast(client, group, 'hotelA', weight='1').json()['data']['id']

    response = client.patch(f'/api/v1/votes/{vote_id}/', {'is_upvote': False, 'weight': '3'}, format='json')

    assert response.status_code == 200
    assert response.json()['data']['is_upvote'] is False
    assert response.json()['data']['weight'] == '3'


def test_delete_own_vote(client_for, group, member):
    client = client_for(member)
    vote_id = cast(client, group, 'hotelA').json()['data']['id']

    response = client.delete(f'/api/v1/votes/{vote_id}/')

    assert response.status_code == 200
    assert response.json()['data'] == {'deleted': True}
    assert not Vote.objects.filter(pk=vote_id).exists()


def test_cannot_touch_someone_elses_vote(client_for, group, member, admin_user):
    vote_id = cast(client_for(member), group, 'hotelA').json()['data']['id']

    response = client_for(admin_user).delete(f'/api/v1/votes/{vote_id}/')

    assert response.status_code == 404
    assert Vote.objects.filter(pk=vote_id).exists()
