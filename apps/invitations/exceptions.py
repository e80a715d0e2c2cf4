"""
Invitation errors, reported with code ``VALIDATION_ERROR``.
"""
from common.exceptions import DomainError


class InvitationNotPending(DomainError):
    default_detail = 'Invitation is no longer valid.'
    reason = 'invitation_not_pending'


class InvitationExpired(DomainError):
    default_detail = 'Invitation has expired.'
    reason = 'invitation_expired'


class GroupFull(DomainError):
    default_detail = 'Group is already at maximum capacity.'
    reason = 'group_full'
