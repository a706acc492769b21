# services/pirep-service/src/apps/core/services/roles.py
"""
Staff Roles

Closed set of capabilities a user can hold, and the pure role check used by
every privileged PIREP operation.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Optional, Union


class Role(str, Enum):
    """Assignable staff roles plus the two super-roles."""

    OWNER = 'owner'
    ADMIN = 'admin'
    PIREPS = 'pireps'
    FLEET = 'fleet'
    ROUTES = 'routes'
    EVENTS = 'events'
    USERS = 'users'
    MULTIPLIERS = 'multipliers'
    RANKS = 'ranks'


SUPER_ROLES: FrozenSet[Role] = frozenset({Role.OWNER, Role.ADMIN})

# Roles that may review, edit and transfer any PIREP.
PIREP_STAFF: FrozenSet[Role] = frozenset({Role.PIREPS})

RolesInput = Optional[Union[str, Iterable[Union[str, Role]]]]


def parse_roles(raw: RolesInput) -> FrozenSet[Role]:
    """
    Normalise a roles field into a set of Role members.

    Accepts '[pireps, fleet]' strings, a single role name, or an iterable of
    names / Role members. Unknown names are dropped.
    """
    if not raw:
        return frozenset()

    if isinstance(raw, str):
        trimmed = raw.strip()
        if trimmed.startswith('[') and trimmed.endswith(']'):
            names = [r.strip() for r in trimmed[1:-1].split(',')]
        else:
            names = [r.strip() for r in trimmed.split(',')]
    else:
        names = [r.value if isinstance(r, Role) else str(r).strip() for r in raw]

    roles = set()
    for name in names:
        try:
            roles.add(Role(name.lower()))
        except ValueError:
            continue
    return frozenset(roles)


def has_required_role(actor_roles: Iterable[Role], required: Iterable[Role]) -> bool:
    """
    True when the actor holds any required role.

    Owner and admin satisfy every requirement.
    """
    held = frozenset(actor_roles)
    if held & SUPER_ROLES:
        return True
    return bool(held & frozenset(required))


def is_pirep_staff(actor_roles: Iterable[Role]) -> bool:
    return has_required_role(actor_roles, PIREP_STAFF)
