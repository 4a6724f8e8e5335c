from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .conf import moderation_settings

ROLE_MODERATOR = 'moderator'
ROLE_ADMIN = 'admin'


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller of a moderation operation.

    Core functions receive a Principal explicitly instead of reading the
    request, so they can be called from views, the admin, commands and tests.
    """
    id: str
    email: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_moderator(self) -> bool:
        return bool(self.roles & {ROLE_MODERATOR, ROLE_ADMIN})

    @classmethod
    def from_user(cls, user) -> 'Principal':
        """Build a Principal from a Django user."""
        roles = set()
        if getattr(user, 'is_superuser', False):
            roles.add(ROLE_ADMIN)
        if user_is_moderator(user):
            roles.add(ROLE_MODERATOR)
        return cls(
            id=str(user.pk),
            email=getattr(user, 'email', None) or None,
            roles=frozenset(roles),
        )


def user_is_moderator(user) -> bool:
    """
    Check whether a Django user may moderate content.

    Staff, superusers, holders of ``django_moderation.can_moderate`` and
    members of any group in ``MODERATOR_GROUPS`` are moderators.
    """
    if not user or not user.is_authenticated:
        return False

    if user.is_staff or user.is_superuser:
        return True

    if user.has_perm('django_moderation.can_moderate'):
        return True

    groups = moderation_settings.MODERATOR_GROUPS or []
    if groups and user.groups.filter(name__in=groups).exists():
        return True

    return False
