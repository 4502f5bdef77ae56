# carbon_api/services/user.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.auth.org_validator import OrgValidator
from carbon_api.core.errors import BadRequestError, ForbiddenError, NotFoundError
from carbon_api.core.ids import normalize_email, utcnow
from carbon_api.core.roles import is_role_at_most, is_site_admin, parse_organization_role
from carbon_api.crud import organization_account as org_crud
from carbon_api.crud import user as user_crud
from carbon_api.models.user import User
from carbon_api.schemas.organization import Organization
from carbon_api.schemas.user import (
    AuthenticatedUser,
    InvitedUser,
    InviteResult,
    InviteUserRequest,
    MyUserOut,
    OrganizationSnapshot,
)

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user(self, user_id: uuid.UUID) -> User:
        user = await user_crud.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def fetch_my_user(self, user_id: uuid.UUID) -> MyUserOut:
        """The user plus a snapshot of each organization they belong to, with their own role there."""
        user = await self._get_user(user_id)
        snapshots = [
            OrganizationSnapshot(
                id=org.id,
                account_type=org.account_type,
                name=org.name,
                vat=org.vat,
                role=membership.role,
            )
            for org, membership in await org_crud.list_memberships_for_user(self.db, user.id)
        ]
        return MyUserOut(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            first_time=user.first_time,
            terms_accepted_at=user.terms_accepted_at,
            bcc_terms_accepted_at=user.bcc_terms_accepted_at,
            organization_accounts=snapshots,
        )

    async def update_terms(self, user_id: uuid.UUID, terms: Optional[bool]) -> User:
        if not terms:
            raise BadRequestError("Expected terms to be set")
        user = await self._get_user(user_id)
        now = utcnow()
        user.terms_accepted_at = now
        user.last_updated = now
        user.first_time = False
        await self.db.commit()
        return user

    async def update_bcc_terms(self, user_id: uuid.UUID, bcc_terms: Optional[bool]) -> User:
        if not bcc_terms:
            raise BadRequestError("Expected Bcc terms to be set")
        user = await self._get_user(user_id)
        now = utcnow()
        user.bcc_terms_accepted_at = now
        user.last_updated = now
        user.first_time = False
        await self.db.commit()
        return user

    async def invite_user_to_organization(
        self,
        user_data: InviteUserRequest,
        org: Organization,
        invited_by: AuthenticatedUser,
    ) -> InviteResult:
        """
        Adds a user (existing, or created locally) to `org` with the requested role.

        A non-site-admin can only grant a role at most equal to their own role
        in the organization.
        """
        if not user_data.name or not user_data.email or not user_data.role:
            raise BadRequestError('Properties "name", "email" and "role" must be specified')

        role = parse_organization_role(user_data.role)
        if role is None:
            raise BadRequestError(f"Unknown organization role: {user_data.role}")

        if not is_site_admin(invited_by.role):
            inviter = OrgValidator(org).find_member(invited_by.id)
            inviter_role = inviter.role if inviter is not None else None
            if not is_role_at_most(role, inviter_role):
                raise ForbiddenError(
                    "A user can only invite another user to the organization with the same or lower role. "
                    f"The requester had role {inviter_role} and invited the new user to have role {role.value}."
                )

        email = normalize_email(user_data.email)
        if any(normalize_email(m.user.email) == email for m in org.members):
            raise BadRequestError("User with specified email is already organization member")

        user = await user_crud.get_user_by_email(self.db, email)
        if user is None:
            logger.info("Inviting non-local user %s to organization %s", email, org.id)
            user = await user_crud.create_user(self.db, email=email, name=user_data.name)

        await org_crud.add_membership(self.db, org.id, user.id, role.value)
        await self.db.commit()
        logger.info("User %s added to organization %s as %s by %s", user.id, org.id, role.value, invited_by.id)

        return InviteResult(
            role=role.value,
            user=InvitedUser(id=user.id, role=user.role, name=user.name, email=user.email),
        )

    async def delete_user_by_id(self, user_id: uuid.UUID) -> None:
        user = await user_crud.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        await user_crud.delete_user(self.db, user)
        await self.db.commit()

    async def delete_user_by_email(self, email: str) -> None:
        user = await user_crud.get_user_by_email(self.db, email)
        if user is None:
            raise NotFoundError(f"User {email} not found.")
        await user_crud.delete_user(self.db, user)
        await self.db.commit()
