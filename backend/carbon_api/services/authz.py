# carbon_api/services/authz.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.auth.org_validator import OrgValidator
from carbon_api.core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from carbon_api.core.roles import OrganizationRole, is_site_admin
from carbon_api.crud.organization_account import get_organization_with_members
from carbon_api.schemas.organization import Organization
from carbon_api.schemas.user import AuthenticatedUser


class AuthzService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_organization_with_members(self, org_id: uuid.UUID) -> Organization:
        org = await get_organization_with_members(self.db, org_id)
        if org is None:
            raise NotFoundError("Organization not found")
        return org

    @staticmethod
    def check_site_role_admin(actor: Optional[AuthenticatedUser]) -> None:
        """Only a site admin (user role exactly `admin`) passes."""
        if actor is None:
            raise UnauthenticatedError()
        if not is_site_admin(actor.role):
            raise ForbiddenError()

    @staticmethod
    def check_site_role_admin_or_org_role(
        actor: Optional[AuthenticatedUser],
        org: Organization,
        min_org_role: OrganizationRole,
    ) -> None:
        """A site admin passes; anyone else must be a member with at least `min_org_role`."""
        if actor is None:
            raise UnauthenticatedError()
        if is_site_admin(actor.role):
            return
        OrgValidator(org).check_member(actor, min_org_role)
