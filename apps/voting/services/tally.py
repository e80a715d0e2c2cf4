"""
Weighted hotel-vote tally.

Turns the raw vote rows of one group into ranked per-hotel summaries. The
module is deliberately free of Django imports: it works on plain mappings so
the same code produces the authoritative server tally and any optimistic
preview (see :func:`apply_vote`).

A vote mapping carries::

    {
        'id': ..., 'user_id': ..., 'hotel_id': 'lp1a2b3c', 'hotel_name': '...',
        'hotel_data': {...} | None, 'is_upvote': True, 'weight': '1' | '2' | '3',
        'created_at': datetime | str,
        'user': {'id': ..., 'full_name': ..., 'avatar_url': ...},  # optional
    }
"""
from collections import OrderedDict

WEIGHTS = ('1', '2', '3')
VOTING_CLOSED = 'voting_closed'


def parse_weight(value):
    """
    Normalise a vote weight to its canonical string form.

    Raises
    ------
    ValueError
        If *value* is not one of 1, 2 or 3.
    """
    weight = str(value).strip()
    if weight not in WEIGHTS:
        raise ValueError(f'Vote weight must be one of {", ".join(WEIGHTS)}; got {value!r}.')
    return weight


def _empty_summary(vote):
    return {
        'hotel_id': vote['hotel_id'],
        'hotel_name': vote.get('hotel_name', ''),
        'hotel_data': vote.get('hotel_data'),
        'upvotes': 0,
        'downvotes': 0,
        'net_score': 0,
        'weighted_score': 0,
        'total_votes': 0,
        'upvote_percentage': 0.0,
        'vote_breakdown': [
            {
                'weight': weight,
                'upvotes': 0,
                'downvotes': 0,
                'net_score': 0,
                'total_votes': 0,
            }
            for weight in WEIGHTS
        ],
        'voters': {
            'upvoters': [],
            'downvoters': [],
        },
        'user_votes': [],
        'first_voted_at': None,
        '_latest_at': None,
    }


def _voter(vote, weight):
    user = vote.get('user') or {}
    return {
        'id': user.get('id', vote['user_id']),
        'full_name': user.get('full_name'),
        'avatar_url': user.get('avatar_url'),
        'weight': weight,
    }


def _finalise(summary):
    for tier in summary['vote_breakdown']:
        tier['net_score'] = tier['upvotes'] - tier['downvotes']
        tier['total_votes'] = tier['upvotes'] + tier['downvotes']

    summary['total_votes'] = summary['upvotes'] + summary['downvotes']
    summary['net_score'] = summary['upvotes'] - summary['downvotes']
    summary['weighted_score'] = sum(
        tier['net_score'] * int(tier['weight']) for tier in summary['vote_breakdown']
    )
    summary['upvote_percentage'] = (
        summary['upvotes'] / summary['total_votes'] * 100 if summary['total_votes'] else 0.0
    )
    del summary['_latest_at']
    return summary


def ranking_key(summary):
    """
    Sort key for hotel summaries.

    Highest ``weighted_score`` first. Ties go to the hotel that received its
    first vote earliest, then to the lexically smaller ``hotel_id`` so the
    order never depends on row order.
    """
    first = summary['first_voted_at']
    return (-summary['weighted_score'], first is None, first or '', str(summary['hotel_id']))


def tally(votes, group_status=None, current_user_id=None):
    """
    Aggregate *votes* into ranked hotel summaries.

    Algorithm
    ---------
    1. Group votes by ``hotel_id`` keeping a fixed three-slot breakdown per
       hotel, one slot per weight tier.
    2. Count each vote as an up- or downvote on the hotel and on its tier,
       and record the voter. Voter lists are not de-duplicated.
    3. Derive ``total_votes``, the unweighted ``net_score``,
       ``upvote_percentage`` and ``weighted_score``, the sum over tiers of
       ``(tier upvotes - tier downvotes) * tier weight``.
    4. Sort by :func:`ranking_key`.
    5. Report the first hotel as ``winner`` only when *group_status* is
       ``voting_closed``.

    Parameters
    ----------
    votes : iterable of dict
        Vote mappings as described in the module docstring.
    group_status : str | None
        Current ``Group.status``; controls whether a winner is reported.
    current_user_id : str | None
        When given, each summary's ``user_votes`` lists this user's votes.

    Returns
    -------
    dict
        ``{'hotels': [...], 'winner': dict | None, 'total_voters': int}``

    Raises
    ------
    ValueError
        If a vote carries a weight outside 1-3.
    """
    summaries = OrderedDict()
    voter_ids = set()
    current_user_id = str(current_user_id) if current_user_id is not None else None

    for vote in votes:
        weight = parse_weight(vote['weight'])
        hotel_id = vote['hotel_id']
        summary = summaries.get(hotel_id)
        if summary is None:
            summary = summaries[hotel_id] = _empty_summary(vote)

        user_id = str(vote['user_id'])
        voter_ids.add(user_id)

        tier = summary['vote_breakdown'][WEIGHTS.index(weight)]
        if vote['is_upvote']:
            summary['upvotes'] += 1
            tier['upvotes'] += 1
            summary['voters']['upvoters'].append(_voter(vote, weight))
        else:
            summary['downvotes'] += 1
            tier['downvotes'] += 1
            summary['voters']['downvoters'].append(_voter(vote, weight))

        if current_user_id is not None and user_id == current_user_id:
            summary['user_votes'].append({
                'id': vote.get('id'),
                'is_upvote': vote['is_upvote'],
                'weight': weight,
                'created_at': vote.get('created_at'),
            })

        created_at = vote.get('created_at')
        if created_at is not None:
            if summary['first_voted_at'] is None or created_at < summary['first_voted_at']:
                summary['first_voted_at'] = created_at
            # The newest vote carries the freshest hotel snapshot
            if summary['_latest_at'] is None or created_at >= summary['_latest_at']:
                summary['_latest_at'] = created_at
                summary['hotel_name'] = vote.get('hotel_name', summary['hotel_name'])
                if vote.get('hotel_data') is not None:
                    summary['hotel_data'] = vote['hotel_data']

    hotels = sorted((_finalise(s) for s in summaries.values()), key=ranking_key)
    winner = hotels[0] if hotels and group_status == VOTING_CLOSED else None

    return {
        'hotels': hotels,
        'winner': winner,
        'total_voters': len(voter_ids),
    }


def top_hotel(votes):
    """Return the leading hotel summary for *votes*, or None when there are none."""
    hotels = tally(votes)['hotels']
    return hotels[0] if hotels else None


def apply_vote(votes, new_vote):
    """
    Return *votes* as they would be after casting *new_vote*.

    A user holds at most one vote per hotel, so any existing vote by the same
    user for the same hotel is dropped before *new_vote* is appended. The
    input list is not modified.
    """
    user_id = str(new_vote['user_id'])
    hotel_id = new_vote['hotel_id']
    kept = [
        vote for vote in votes
        if not (str(vote['user_id']) == user_id and vote['hotel_id'] == hotel_id)
    ]
    kept.append(new_vote)
    return kept
