# carbon_api/core/roles.py

import enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class OrganizationRole(str, enum.Enum):
    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "superAdmin"


class UserRole(str, enum.Enum):
    # site-level role of the user account
    USER = "user"
    ADMIN = "admin"  # site admin


SITE_ADMIN_ROLE = UserRole.ADMIN

# guest < user < admin < superAdmin
ORGANIZATION_ROLE_ORDER: Mapping[str, int] = MappingProxyType(
    {
        OrganizationRole.GUEST.value: 0,
        OrganizationRole.USER.value: 1,
        OrganizationRole.ADMIN.value: 2,
        OrganizationRole.SUPER_ADMIN.value: 3,
    }
)

_NO_ROLE_RANK = -1
_UNSATISFIABLE_RANK = 99

RoleLike = Optional[Union[OrganizationRole, str]]


def _role_value(role: RoleLike) -> Optional[str]:
    if role is None:
        return None
    if isinstance(role, OrganizationRole):
        return role.value
    if isinstance(role, str):
        return role
    return None


def parse_organization_role(role: RoleLike) -> Optional[OrganizationRole]:
    """Returns the enum member for a known role value, otherwise None."""
    value = _role_value(role)
    if value is None or value not in ORGANIZATION_ROLE_ORDER:
        return None
    return OrganizationRole(value)


def is_role_at_least(role: RoleLike, want_role: RoleLike) -> bool:
    """
    True if `role` has at least the privilege level of `want_role`.
    Higher levels have all the privileges of lower levels.

    Unknown/absent `role` never satisfies anything; an unknown/absent `want_role`
    cannot be satisfied by any role. Never raises.
    """
    have = _role_value(role)
    want = _role_value(want_role)
    have_idx = ORGANIZATION_ROLE_ORDER.get(have, _NO_ROLE_RANK) if have else _NO_ROLE_RANK
    want_idx = ORGANIZATION_ROLE_ORDER.get(want, _UNSATISFIABLE_RANK) if want else _UNSATISFIABLE_RANK
    return have_idx >= want_idx


def is_role_at_most(role: RoleLike, at_most: RoleLike) -> bool:
    """The complement check (<=) to is_role_at_least (>=)."""
    return is_role_at_least(at_most, role)


def is_site_admin(user_role: Optional[Union[UserRole, str]]) -> bool:
    value = user_role.value if isinstance(user_role, UserRole) else user_role
    return value == SITE_ADMIN_ROLE.value
