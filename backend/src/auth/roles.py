"""Staff roles for the registry back office.

Role Groups:
- STAFF_ROLES: may read applications, change status and verify documents
- ADMIN_ROLES: may additionally record registry decisions

┌────────────────────────────┬───────┬─────────────┬────────────────┬───────┐
│ Action                     │ admin │ super_admin │ member_manager │ staff │
├────────────────────────────┼───────┼─────────────┼────────────────┼───────┤
│ View applications          │   ✓   │      ✓      │       ✓        │   ✓   │
│ Change application status  │   ✓   │      ✓      │       ✓        │   ✓   │
│ Verify documents           │   ✓   │      ✓      │       ✓        │   ✓   │
│ Record registry decision   │   ✓   │      ✓      │                │       │
│ View naming series         │   ✓   │      ✓      │       ✓        │   ✓   │
└────────────────────────────┴───────┴─────────────┴────────────────┴───────┘
"""

from enum import Enum
from typing import FrozenSet, Iterable


class StaffRole(str, Enum):
    """Staff roles carried in the ``role`` claim of staff tokens."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MEMBER_MANAGER = "member_manager"
    STAFF = "staff"


STAFF_ROLES: FrozenSet[StaffRole] = frozenset(StaffRole)
ADMIN_ROLES: FrozenSet[StaffRole] = frozenset({StaffRole.ADMIN, StaffRole.SUPER_ADMIN})


def has_any_role(role: str, allowed_roles: Iterable[StaffRole]) -> bool:
    """Check a raw role claim against a set of allowed roles.

    Examples:
        >>> has_any_role("admin", ADMIN_ROLES)
        True
        >>> has_any_role("staff", ADMIN_ROLES)
        False
        >>> has_any_role("applicant", STAFF_ROLES)
        False
    """
    try:
        return StaffRole(role) in set(allowed_roles)
    except ValueError:
        return False
