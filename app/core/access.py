"""
Access policy: which roles may reach which routes, and what each role may do.

Roles are not nested. Every privileged route lists the roles it admits, and
every role lists its capabilities, so the whole authorization surface lives in
the two tables below.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    ORGANIZER = "organizer"
    ATTENDEE = "attendee"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the role named by value, or None if it names no role"""
        try:
            return cls(str(value).lower())
        except ValueError:
            return None

class Capability(str, Enum):
    CREATE_EVENT = "create-event"
    EDIT_EVENT = "edit-event"
    DELETE_EVENT = "delete-event"
    CREATE_VENUE = "create-venue"
    EDIT_VENUE = "edit-venue"
    DELETE_VENUE = "delete-venue"
    MANAGE_ATTENDANCE = "manage-attendance"
    VIEW_ALL_FEEDBACK = "view-all-feedback"
    ACCESS_ADMIN = "access-admin"
    REGISTER_FOR_EVENT = "register-for-event"
    MARK_ATTENDANCE = "mark-attendance"
    SUBMIT_FEEDBACK = "submit-feedback"

# "/" matches exactly; the rest match as prefixes
PUBLIC_ROUTES: Tuple[str, ...] = ("/login", "/logout", "/register", "/unauthorized", "/health")

_STAFF = frozenset({Role.ADMIN, Role.MANAGER, Role.ORGANIZER})
_VENUE_STAFF = frozenset({Role.ADMIN, Role.MANAGER})

ROUTE_ROLES: Dict[str, FrozenSet[Role]] = {
    "/events/create": _STAFF,
    "/events/edit": _STAFF,
    "/venues/create": _VENUE_STAFF,
    "/venues/edit": _VENUE_STAFF,
    "/attendance/generate": _STAFF,
    "/attendance/list": _STAFF,
    "/attendance/manage": _STAFF,
    "/feedback/manage": _STAFF,
    "/admin": frozenset({Role.ADMIN}),
}

_PARTICIPANT = frozenset({
    Capability.REGISTER_FOR_EVENT,
    Capability.MARK_ATTENDANCE,
    Capability.SUBMIT_FEEDBACK,
})

_EVENT_STAFF = _PARTICIPANT | {
    Capability.CREATE_EVENT,
    Capability.EDIT_EVENT,
    Capability.DELETE_EVENT,
    Capability.MANAGE_ATTENDANCE,
    Capability.VIEW_ALL_FEEDBACK,
}

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.MANAGER: _EVENT_STAFF | {
        Capability.CREATE_VENUE,
        Capability.EDIT_VENUE,
        Capability.DELETE_VENUE,
    },
    Role.ORGANIZER: _EVENT_STAFF,
    Role.ATTENDEE: _PARTICIPANT,
}

def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")

def is_public(path: str) -> bool:
    """Whether path can be visited without a credential"""
    return path == "/" or any(_matches(path, route) for route in PUBLIC_ROUTES)

def required_roles(path: str) -> Optional[FrozenSet[Role]]:
    """Roles admitted to path, or None when the path is not role-restricted"""
    for route, roles in ROUTE_ROLES.items():
        if _matches(path, route):
            return roles
    return None

def can_access(route: str, role: Optional[Role]) -> bool:
    """Decide whether a caller holding role may visit route.

    role is None for an unauthenticated caller, who only reaches public
    routes. Authenticated callers reach every route that is not listed in
    ROUTE_ROLES, and listed routes when their role is admitted.
    """
    if is_public(route):
        return True
    if role is None:
        return False
    roles = required_roles(route)
    return roles is None or role in roles

def capabilities(role: Optional[Role]) -> FrozenSet[Capability]:
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES[role]

def has_capability(role: Optional[Role], capability: Capability) -> bool:
    return capability in capabilities(role)
