from __future__ import annotations

from typing import Optional

from carbon_api.core.account_type import OrganizationAccountType, account_type_to_str, is_account_type
from carbon_api.core.errors import ForbiddenError
from carbon_api.core.ids import is_object_ids_equals
from carbon_api.core.roles import OrganizationRole, RoleLike, is_role_at_least
from carbon_api.schemas.organization import Member, Organization
from carbon_api.schemas.user import AuthenticatedUser


class OrgValidator:
    """
    Access checks over one resolved organization.

    Each check raises ForbiddenError when its requirement is not met and
    returns the validator otherwise, so checks chain:

        OrgValidator(org).check_type(OrganizationAccountType.PREMIUM).check_member(user, OrganizationRole.USER)
    """

    def __init__(self, org: Organization):
        self.org = org

    def check_type(self, required_type: OrganizationAccountType) -> "OrgValidator":
        if not is_account_type(self.org.account_type, required_type):
            raise ForbiddenError(f"Organization Account must be of type {account_type_to_str(required_type)}.")
        return self

    def find_member(self, user_id) -> Optional[Member]:
        for member in self.org.members:
            if is_object_ids_equals(member.user.id, user_id):
                return member
        return None

    def check_member(self, user: AuthenticatedUser, min_role: RoleLike) -> "OrgValidator":
        membership = self.find_member(user.id)
        if membership is None or not is_role_at_least(membership.role, min_role):
            role = min_role.value if isinstance(min_role, OrganizationRole) else min_role
            raise ForbiddenError(f"User must be at least {role} in the organization.")
        return self
