"""
Custom Permissions for NewsWire API

This module adapts the ownership rules in ``ownership.py`` to Django REST
Framework permission classes.
"""

from rest_framework import permissions

from .ownership import ActingUser, can_mutate, is_admin, user_role


def _actor(request):
    """ActingUser for the request, built once and cached on it."""
    actor = getattr(request, '_newswire_actor', None)
    if actor is None:
        actor = ActingUser.from_user(request.user)
        request._newswire_actor = actor
    return actor


class IsAdmin(permissions.BasePermission):
    """
    Permission class to check if user has the Admin role.
    """

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        """Check if user is an administrator."""
        return (
            request.user and
            request.user.is_authenticated and
            is_admin(_actor(request))
        )


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Permission class that allows:
    - Anyone to read
    - Administrators to write
    """

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        """Check permissions based on request method."""
        if request.method in permissions.SAFE_METHODS:
            return True

        return (
            request.user and
            request.user.is_authenticated and
            is_admin(_actor(request))
        )


class IsContributor(permissions.BasePermission):
    """
    Permission class for writing articles.

    Users holding the Admin or User role may submit articles.
    """

    message = 'You need a contributor account to submit articles.'

    def has_permission(self, request, view):
        """Check if user may submit articles."""
        if not (request.user and request.user.is_authenticated):
            return False
        actor = _actor(request)
        return actor.is_admin or user_role() in actor.roles


class CanMutateContent(permissions.BasePermission):
    """
    Permission class for changing user-authored content.

    - Administrators can modify any record
    - Other users can only modify records they authored
    """

    message = "You don't have permission to modify this content."

    def has_object_permission(self, request, view, obj):
        """Check if user can modify this record."""
        if request.method in permissions.SAFE_METHODS:
            return True

        if not (request.user and request.user.is_authenticated):
            return False

        return can_mutate(_actor(request), obj)
