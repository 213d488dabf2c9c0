"""User roles and per-operation permissions.

Roles are flat: there is no hierarchy between inspectors and engineers, so
each operation lists the roles allowed to perform it.

Permission Matrix:
┌──────────────────────────────┬───────┬───────────┬──────────┬────────┐
│ Action                       │ admin │ inspector │ engineer │ client │
├──────────────────────────────┼───────┼───────────┼──────────┼────────┤
│ View doors / certificates    │   ✓   │     ✓     │    ✓     │   ✓    │
│ Create / edit doors          │   ✓   │     ✓     │          │        │
│ Start / complete inspections │   ✓   │     ✓     │          │        │
│ Certify / reject / review    │   ✓   │           │    ✓     │        │
│ Delete inspections / certs   │   ✓   │           │          │        │
│ Delete doors                 │   ✓   │           │          │        │
│ Manage points, users, serial │   ✓   │           │          │        │
│ Manage own signature         │   ✓   │     ✓     │    ✓     │   ✓    │
└──────────────────────────────┴───────┴───────────┴──────────┴────────┘
"""

from enum import Enum
from typing import FrozenSet


class UserRole(str, Enum):
    """User roles.

    Values are stored as TEXT in the database and must match exactly.
    """
    ADMIN = "admin"
    INSPECTOR = "inspector"
    ENGINEER = "engineer"
    CLIENT = "client"


ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)

VIEW_DOORS = ALL_ROLES
CREATE_DOOR = frozenset({UserRole.ADMIN, UserRole.INSPECTOR})
INSPECT = frozenset({UserRole.ADMIN, UserRole.INSPECTOR})
CERTIFY = frozenset({UserRole.ADMIN, UserRole.ENGINEER})
ADMIN_ONLY = frozenset({UserRole.ADMIN})


def has_permission(user_role: str, allowed: FrozenSet[UserRole]) -> bool:
    """Check whether a stored role string is in an allowed set.

    Examples:
        >>> has_permission("inspector", INSPECT)
        True
        >>> has_permission("client", CERTIFY)
        False
    """
    try:
        return UserRole(user_role) in allowed
    except ValueError:
        return False
