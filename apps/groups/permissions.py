"""
Custom permissions for the Groups app.

Nested routes carry the group id as ``group_pk``. A group that does not exist
is reported as 404 before any role check so callers can tell "no such group"
from "not allowed".
"""
from rest_framework.exceptions import NotFound
from rest_framework.permissions import BasePermission

from apps.groups.models import Group, GroupMember


def get_membership(request, group_pk):
    """
    Return the caller's ``GroupMember`` row for ``group_pk`` (or None).

    Raises ``NotFound`` when the group itself does not exist. The lookup is
    memoised on the request since several permissions may ask for it.
    """
    cache = getattr(request, '_group_memberships', None)
    if cache is None:
        cache = request._group_memberships = {}
    key = str(group_pk)
    if key not in cache:
        if not Group.objects.filter(pk=group_pk).exists():
            raise NotFound('Group not found')
        cache[key] = (
            GroupMember.objects.filter(group_id=group_pk, user=request.user)
            .select_related('group')
            .first()
        )
    return cache[key]


def _group_of(obj):
    return obj if isinstance(obj, Group) else getattr(obj, 'group', None)


class IsGroupMember(BasePermission):
    """
    Allows access only to group members (any role).
    """
    message = 'You must be a group member to perform this action.'

    def has_permission(self, request, view):
        group_pk = view.kwargs.get('group_pk')
        if group_pk is None:
            return True  # Let object permission handle it
        return get_membership(request, group_pk) is not None

    def has_object_permission(self, request, view, obj):
        group = _group_of(obj)
        if group is None:
            return False
        return get_membership(request, group.pk) is not None


class IsGroupAdmin(BasePermission):
    """
    Allows access only to the group owner or an admin.
    """
    message = 'Only the group owner or an admin can perform this action.'

    def has_permission(self, request, view):
        group_pk = view.kwargs.get('group_pk')
        if group_pk is None:
            return True
        membership = get_membership(request, group_pk)
        return membership is not None and membership.can_manage

    def has_object_permission(self, request, view, obj):
        group = _group_of(obj)
        if group is None:
            return False
        membership = get_membership(request, group.pk)
        return membership is not None and membership.can_manage


class IsGroupOwner(BasePermission):
    """
    Allows access only to the group owner.
    """
    message = 'Only the group owner can perform this action.'

    def has_object_permission(self, request, view, obj):
        group = _group_of(obj)
        if group is None:
            return False
        membership = get_membership(request, group.pk)
        return membership is not None and membership.role == GroupMember.Role.OWNER
