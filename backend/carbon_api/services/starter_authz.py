# carbon_api/services/starter_authz.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.auth.org_validator import OrgValidator
from carbon_api.core.account_type import OrganizationAccountType
from carbon_api.core.errors import ForbiddenError, UnauthenticatedError
from carbon_api.core.roles import OrganizationRole
from carbon_api.crud.organization_account import get_organization_with_members
from carbon_api.schemas.organization import Organization
from carbon_api.schemas.user import AuthenticatedUser

logger = logging.getLogger(__name__)


class StarterAuthzService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_user_is_admin_on_starter_org(
        self,
        actor: Optional[AuthenticatedUser],
        org_id: uuid.UUID,
    ) -> tuple[AuthenticatedUser, Organization]:
        if actor is None:
            raise UnauthenticatedError()

        org = await get_organization_with_members(self.db, org_id)
        if org is None:
            # Missing and not-allowed look the same to the caller.
            logger.debug("Starter authz: organization %s not found", org_id)
            raise ForbiddenError(f"Organization {org_id} not allowed.")

        OrgValidator(org).check_type(OrganizationAccountType.STARTER).check_member(actor, OrganizationRole.ADMIN)
        return actor, org
