"""
Voting lifecycle for a group.

Decides when votes may be cast, changed or removed, closes voting (picking
the winner through the tally engine unless an owner/admin names one), and
guards every other ``Group.status`` change.

Happy path: planning, voting, voting_closed, booked, completed. Any state
before completed may also move to cancelled.
"""
import logging

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import PermissionDenied

from apps.groups.models import Group, GroupMember
from apps.voting.exceptions import (
    AlreadyClosed,
    InvalidStatusTransition,
    NoVotes,
    VotingClosed,
)
from apps.voting.models import Vote
from apps.voting.services.tally import parse_weight, tally, top_hotel

logger = logging.getLogger(__name__)

Status = Group.Status

VOTING_OPEN_STATUSES = frozenset({Status.PLANNING, Status.VOTING})

# voting_closed is only reachable through close_voting().
ALLOWED_TRANSITIONS = {
    Status.PLANNING: {Status.VOTING, Status.CANCELLED},
    Status.VOTING: {Status.CANCELLED},
    Status.VOTING_CLOSED: {Status.BOOKED, Status.CANCELLED},
    Status.BOOKED: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}


def is_voting_open(group):
    return group.status in VOTING_OPEN_STATUSES


def ensure_voting_open(group):
    if not is_voting_open(group):
        raise VotingClosed()


@transaction.atomic
def cast_vote(group, user, *, hotel_id, hotel_name, is_upvote, weight, hotel_data=None):
    """
    Record *user*'s vote on a hotel, replacing any earlier vote they hold for it.

    Returns
    -------
    tuple
        ``(vote, replaced)`` where *replaced* tells whether an older vote for
        the same hotel was deleted.
    """
    ensure_voting_open(group)
    weight = parse_weight(weight)

    replaced, _ = Vote.objects.filter(group=group, user=user, hotel_id=hotel_id).delete()
    vote = Vote.objects.create(
        group=group,
        user=user,
        hotel_id=hotel_id,
        hotel_name=hotel_name,
        hotel_data=hotel_data,
        is_upvote=is_upvote,
        weight=weight,
    )
    logger.info(
        'Vote %s by user %s on hotel %s in group %s (%s, weight %s)',
        'replaced' if replaced else 'cast',
        user.id,
        hotel_id,
        group.id,
        'up' if is_upvote else 'down',
        weight,
    )
    return vote, bool(replaced)


def update_vote(vote, *, is_upvote, weight=None):
    ensure_voting_open(vote.group)

    vote.is_upvote = is_upvote
    update_fields = ['is_upvote', 'updated_at']
    if weight is not None:
        vote.weight = parse_weight(weight)
        update_fields.append('weight')
    vote.save(update_fields=update_fields)

    logger.info('Vote %s updated (%s, weight %s)', vote.id, 'up' if is_upvote else 'down', vote.weight)
    return vote


def remove_vote(vote):
    ensure_voting_open(vote.group)
    vote_id = vote.id
    vote.delete()
    logger.info('Vote %s removed', vote_id)


def close_voting(group, user, selected_hotel_id=None):
    """
    Close voting for *group* and record the chosen hotel.

    Only the owner or an admin may close. A *selected_hotel_id* from the
    caller is taken as-is; its snapshot is copied from the newest vote for
    that hotel when one exists. Without it the tally leader wins, and an
    empty ballot cannot be closed.

    Raises
    ------
    PermissionDenied
        The caller is not the owner or an admin.
    AlreadyClosed
        The group is past the voting phase.
    NoVotes
        No hotel was named and nobody has voted.
    """
    role = group.role_of(user)
    if role not in GroupMember.MANAGER_ROLES:
        raise PermissionDenied('Only group owners and admins can close voting.')
    if not is_voting_open(group):
        raise AlreadyClosed()

    votes = group.votes.select_related('user')
    manual = bool(selected_hotel_id)

    if manual:
        snapshot_vote = votes.filter(hotel_id=selected_hotel_id).order_by('-created_at').first()
        selected_hotel_data = snapshot_vote.hotel_data if snapshot_vote else None
    else:
        leader = top_hotel(vote.as_tally_row() for vote in votes)
        if leader is None:
            raise NoVotes()
        selected_hotel_id = leader['hotel_id']
        selected_hotel_data = leader['hotel_data']

    with transaction.atomic():
        group.status = Status.VOTING_CLOSED
        group.selected_hotel_id = selected_hotel_id
        group.selected_hotel_data = selected_hotel_data
        group.save(update_fields=['status', 'selected_hotel_id', 'selected_hotel_data', 'updated_at'])

    logger.info(
        'Voting closed for group %s by user %s: hotel %s (%s)',
        group.id,
        user.id,
        selected_hotel_id,
        'manual' if manual else 'tally',
    )
    return group


def transition_status(group, new_status):
    """
    Move *group* to *new_status* if the lifecycle allows it.

    Raises ``InvalidStatusTransition`` otherwise, including any attempt to
    enter ``voting_closed`` here or to reopen voting.
    """
    current = group.status
    if new_status == current:
        return group
    if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition(
            f'Cannot change group status from "{current}" to "{new_status}".'
        )

    group.status = new_status
    group.save(update_fields=['status', 'updated_at'])
    logger.info('Group %s status %s -> %s', group.id, current, new_status)
    return group


def build_results(group, user):
    """
    Full results payload for *group* as seen by *user*.

    ``winner`` is always the tally leader. After a manual close it can differ
    from ``selected_hotel_id``, which names the hotel actually chosen.
    """
    votes = list(group.votes.select_related('user'))
    result = tally(
        (vote.as_tally_row() for vote in votes),
        group_status=group.status,
        current_user_id=user.id,
    )
    return {
        'group_id': str(group.id),
        'group_name': group.name,
        'group_status': group.status,
        'total_hotels': len(result['hotels']),
        'total_votes': len(votes),
        'total_voters': result['total_voters'],
        'hotels': result['hotels'],
        'winner': result['winner'],
        'is_voting_open': is_voting_open(group),
        'selected_hotel_id': group.selected_hotel_id,
        'poll_interval_seconds': settings.VOTING_RESULTS_POLL_SECONDS,
    }
