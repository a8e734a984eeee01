"""
Ownership Rules for User-Authored Content

Administrators may change anything; everyone else may change only the
records they authored. The acting user is always passed in explicitly.
"""

import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import PermissionDenied

logger = logging.getLogger(__name__)


def admin_role():
    return getattr(settings, 'NEWSWIRE_ADMIN_ROLE', 'Admin')


def user_role():
    return getattr(settings, 'NEWSWIRE_USER_ROLE', 'User')


@dataclass(frozen=True)
class ActingUser:
    """
    Identity of the user performing a request.

    Attributes:
        id: User primary key as a string ("" for anonymous users)
        roles: Role names held by the user
    """

    id: str
    roles: frozenset = field(default_factory=frozenset)

    @property
    def is_admin(self):
        return admin_role() in self.roles

    @classmethod
    def from_user(cls, user):
        """
        Build an ActingUser from a Django user.

        Group names become roles; superusers always hold the admin role.
        """
        if user is None or not user.is_authenticated:
            return cls(id='', roles=frozenset())

        roles = set(user.groups.values_list('name', flat=True))
        if user.is_superuser:
            roles.add(admin_role())
        return cls(id=str(user.pk), roles=frozenset(roles))


def is_admin(actor):
    """Coarse role check for admin-only records (categories, users, ...)."""
    return actor.is_admin


def can_mutate(actor, record):
    """
    Decide whether actor may edit or delete record.

    Args:
        actor: ActingUser performing the change
        record: Any object with an ``author_id`` attribute

    Returns:
        True for administrators, otherwise True only when the record's
        author id equals the actor's id. A missing author never matches.
    """
    if actor.is_admin:
        return True

    author_id = getattr(record, 'author_id', None)
    if author_id is None or author_id == '':
        return False

    return str(author_id) == actor.id


def ensure_can_mutate(actor, record, message="You don't have permission to modify this content."):
    """Raise PermissionDenied unless can_mutate(actor, record)."""
    if not can_mutate(actor, record):
        logger.warning(
            f"Unauthorized change attempt on {record.__class__.__name__} "
            f"{getattr(record, 'pk', None)} by user '{actor.id}'"
        )
        raise PermissionDenied(message)
