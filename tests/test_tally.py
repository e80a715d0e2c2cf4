from datetime import datetime, timedelta, timezone

import pytest

from apps.voting.services.tally import apply_vote, parse_weight, tally, top_hotel

T0 = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


def vote(user, hotel, up=True, weight='1', minutes=0, vote_id=None):
    return {
        'id': vote_id or f'{user}-{hotel}-{weight}-{minutes}',
        'user_id': user,
        'hotel_id': hotel,
        'hotel_name': hotel.title(),
        'hotel_data': {'id': hotel},
        'is_upvote': up,
        'weight': weight,
        'created_at': T0 + timedelta(minutes=minutes),
        'user': {'id': user, 'full_name': user.title(), 'avatar_url': None},
    }


def by_id(result):
    return {hotel['hotel_id']: hotel for hotel in result['hotels']}


def test_empty_input_yields_no_hotels_and_no_winner():
    result = tally([], group_status='voting_closed')

    assert result == {'hotels': [], 'winner': None, 'total_voters': 0}


def test_weighted_and_net_scores_differ_when_weights_vary():
    votes = [
        vote('u1', 'hotela', True, '3'),
        vote('u2', 'hotela', False, '1', minutes=1),
        vote('u3', 'hotela', True, '2', minutes=2),
    ]

    hotel = tally(votes)['hotels'][0]

    assert hotel['upvotes'] == 2
    assert hotel['downvotes'] == 1
    assert hotel['total_votes'] == 3
    assert hotel['net_score'] == 1
    assert hotel['weighted_score'] == 3 - 1 + 2
    assert hotel['upvote_percentage'] == pytest.approx(200 / 3)
    assert hotel['weighted_score'] == sum(
        tier['net_score'] * int(tier['weight']) for tier in hotel['vote_breakdown']
    )


def test_breakdown_has_one_slot_per_weight():
    votes = [vote('u1', 'hotela', True, '2'), vote('u2', 'hotela', False, '2', minutes=1)]

    breakdown = tally(votes)['hotels'][0]['vote_breakdown']

    assert [tier['weight'] for tier in breakdown] == ['1', '2', '3']
    assert breakdown[1] == {'weight': '2', 'upvotes': 1, 'downvotes': 1, 'net_score': 0, 'total_votes': 2}
    assert breakdown[0]['total_votes'] == 0
    assert breakdown[2]['total_votes'] == 0


def test_total_votes_sum_matches_input_and_voters_are_distinct():
    votes = [
        vote('u1', 'hotela', True, '1'),
        vote('u1', 'hotelb', False, '3', minutes=1),
        vote('u2', 'hotelb', True, '2', minutes=2),
        vote('u3', 'hotelc', True, '1', minutes=3),
    ]

    result = tally(votes)

    assert sum(hotel['total_votes'] for hotel in result['hotels']) == len(votes)
    assert result['total_voters'] == 3


def test_equal_weighted_scores_rank_by_earliest_vote():
    votes = [
        vote('u3', 'hotelb', True, '2', minutes=0),
        vote('u1', 'hotela', True, '3', minutes=5),
        vote('u2', 'hotela', True, '1', minutes=6),
        vote('u4', 'hotelb', True, '2', minutes=7),
    ]

    result = tally(votes)
    hotels = by_id(result)

    assert hotels['hotela']['upvotes'] == 2
    assert hotels['hotela']['weighted_score'] == 4
    assert hotels['hotelb']['upvotes'] == 2
    assert hotels['hotelb']['weighted_score'] == 4
    assert [h['hotel_id'] for h in result['hotels']] == ['hotelb', 'hotela']


def test_full_tie_falls_back_to_hotel_id():
    votes = [vote('u1', 'zulu', True, '1'), vote('u2', 'alpha', True, '1')]

    assert [h['hotel_id'] for h in tally(votes)['hotels']] == ['alpha', 'zulu']


def test_ranking_ignores_input_order():
    votes = [
        vote('u1', 'hotela', True, '1', minutes=0),
        vote('u2', 'hotelb', True, '3', minutes=1),
        vote('u3', 'hotelc', False, '2', minutes=2),
    ]

    forward = [h['hotel_id'] for h in tally(votes)['hotels']]
    backward = [h['hotel_id'] for h in tally(list(reversed(votes)))['hotels']]

    assert forward == backward == ['hotelb', 'hotela', 'hotelc']


def test_winner_only_reported_when_voting_closed():
    votes = [vote('u1', 'hotela', True, '1'), vote('u2', 'hotelb', True, '3', minutes=1)]

    assert tally(votes, group_status='voting')['winner'] is None
    assert tally(votes, group_status='planning')['winner'] is None
    assert tally(votes, group_status='voting_closed')['winner']['hotel_id'] == 'hotelb'


def test_voters_are_split_by_direction_with_weight():
    votes = [vote('u1', 'hotela', True, '3'), vote('u2', 'hotela', False, '1', minutes=1)]

    voters = tally(votes)['hotels'][0]['voters']

    assert voters['upvoters'] == [{'id': 'u1', 'full_name': 'U1', 'avatar_url': None, 'weight': '3'}]
    assert voters['downvoters'] == [{'id': 'u2', 'full_name': 'U2', 'avatar_url': None, 'weight': '1'}]


def test_user_votes_only_lists_current_user():
    votes = [
        vote('u1', 'hotela', True, '2', vote_id='v1'),
        vote('u2', 'hotela', True, '1', minutes=1, vote_id='v2'),
    ]

    hotel = tally(votes, current_user_id='u1')['hotels'][0]

    assert [v['id'] for v in hotel['user_votes']] == ['v1']
    assert hotel['user_votes'][0]['weight'] == '2'


def test_first_voted_at_and_latest_snapshot():
    older = vote('u1', 'hotela', True, '1', minutes=0)
    newer = vote('u2', 'hotela', True, '1', minutes=10)
    newer['hotel_data'] = {'id': 'hotela', 'rating': 9.1}

    hotel = tally([newer, older])['hotels'][0]

    assert hotel['first_voted_at'] == T0
    assert hotel['hotel_data'] == {'id': 'hotela', 'rating': 9.1}


def test_invalid_weight_is_rejected():
    with pytest.raises(ValueError):
        tally([vote('u1', 'hotela', True, '4')])


@pytest.mark.parametrize('raw, expected', [(1, '1'), ('2', '2'), (' 3 ', '3')])
def test_parse_weight_normalises(raw, expected):
    assert parse_weight(raw) == expected


def test_top_hotel_picks_highest_weighted_score():
    votes = [vote('u1', 'hotela', True, '1'), vote('u2', 'hotelb', True, '3', minutes=1)]

    assert top_hotel(votes)['hotel_id'] == 'hotelb'
    assert top_hotel([]) is None


def test_apply_vote_replaces_same_user_and_hotel():
    first = vote('u1', 'hotela', True, '2', vote_id='v1')
    other = vote('u2', 'hotela', True, '1', vote_id='v2')
    votes = [first, other]

    updated = apply_vote(votes, vote('u1', 'hotela', True, '3', minutes=5, vote_id='v3'))

    assert [v['id'] for v in updated] == ['v2', 'v3']
    assert votes == [first, other]
    hotel = tally(updated)['hotels'][0]
    assert hotel['total_votes'] == 2
    assert hotel['weighted_score'] == 4
