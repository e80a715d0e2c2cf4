"""
Voting lifecycle errors.

All of them are client errors reported with code ``VALIDATION_ERROR``; the
specific condition is exposed as ``error.details.reason``.
"""
from common.exceptions import DomainError


class VotingClosed(DomainError):
    default_detail = 'Voting is closed for this group.'
    reason = 'voting_closed'


class AlreadyClosed(DomainError):
    default_detail = 'Voting has already been closed for this group.'
    reason = 'already_closed'


class NoVotes(DomainError):
    default_detail = 'Cannot close voting before any votes have been cast.'
    reason = 'no_votes'


class InvalidStatusTransition(DomainError):
    default_detail = 'This status change is not allowed.'
    reason = 'invalid_status_transition'
