from dataclasses import dataclass
from enum import Enum
from typing import Set

from tourney.utils.errors import AuthorizationError


class Role(str, Enum):
    PLAYER = "player"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class Permission(str, Enum):
    # Events
    JOIN_EVENT = "join_event"
    CREATE_EVENT = "create_event"
    MANAGE_OWN_EVENT = "manage_own_event"
    MANAGE_ANY_EVENT = "manage_any_event"
    VIEW_ALL_EVENTS = "view_all_events"  # drafts included

    # Dashboard
    VIEW_DASHBOARD = "view_dashboard"

    # Tickets
    VIEW_ANY_TICKETS = "view_any_tickets"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[Role, Set[Permission]] = {
    Role.PLAYER: {
        Permission.JOIN_EVENT,
    },
    Role.ORGANIZER: {
        Permission.JOIN_EVENT,
        # Organizer-specific
        Permission.CREATE_EVENT,
        Permission.MANAGE_OWN_EVENT,
        Permission.VIEW_DASHBOARD,
    },
    Role.ADMIN: {
        # All permissions
        Permission.JOIN_EVENT,
        Permission.CREATE_EVENT,
        Permission.MANAGE_OWN_EVENT,
        Permission.MANAGE_ANY_EVENT,
        Permission.VIEW_ALL_EVENTS,
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ANY_TICKETS,
    },
}


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as asserted by the bearer token."""

    user_id: str
    role: Role

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)


def has_permission(role: Role, permission: Permission) -> bool:
    """Check if a role has a specific permission"""
    return permission in ROLE_PERMISSIONS.get(role, set())


def require_permission(identity: Identity, permission: Permission) -> None:
    """Raise AuthorizationError unless the identity holds the permission."""
    if not identity.can(permission):
        raise AuthorizationError(
            "Insufficient permissions",
            {"required": permission.value, "role": identity.role.value},
        )


def can_manage_event(identity: Identity, organizer_id: str) -> bool:
    """Owners with MANAGE_OWN_EVENT, or anyone with MANAGE_ANY_EVENT."""
    if identity.can(Permission.MANAGE_ANY_EVENT):
        return True
    return identity.user_id == organizer_id and identity.can(
        Permission.MANAGE_OWN_EVENT
    )


def can_view_draft(identity: Identity | None, organizer_id: str) -> bool:
    """Drafts are visible to their managers and to VIEW_ALL_EVENTS holders."""
    if identity is None:
        return False
    if identity.can(Permission.VIEW_ALL_EVENTS):
        return True
    return can_manage_event(identity, organizer_id)
