# carbon_api/services/organization_account.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.clients.normative_server import NormativeServerClient
from carbon_api.core.account_type import OrganizationAccountType, account_type_to_str
from carbon_api.core.errors import BadRequestError, ForbiddenError, NotFoundError
from carbon_api.core.ids import is_object_ids_equals, normalize_country, utcnow
from carbon_api.core.modules import add_default_modules, first_impact_model, has_module, starter_modules
from carbon_api.core.roles import OrganizationRole, is_site_admin, parse_organization_role
from carbon_api.crud import organization_account as org_crud
from carbon_api.crud.starter_entry import delete_entries
from carbon_api.models.organization_account import OrganizationAccount
from carbon_api.schemas.organization import (
    Organization,
    OrganizationAccountCreationRequest,
    OrganizationAccountData,
    OrganizationAccountUpdate,
)

logger = logging.getLogger(__name__)

# Columns that an update may not clear.
NON_NULLABLE_UPDATE_FIELDS = ("name", "account_type", "modules")


def _country(value: Optional[str]) -> Optional[str]:
    try:
        return normalize_country(value)
    except ValueError as exc:
        raise BadRequestError(str(exc)) from exc


# Roles that can be assigned through a role update; superAdmin is never handed out here.
ASSIGNABLE_ROLES = frozenset({OrganizationRole.ADMIN.value, OrganizationRole.GUEST.value, OrganizationRole.USER.value})


def parse_creation_request(request: OrganizationAccountCreationRequest) -> OrganizationAccountData:
    if not (request.name or "").strip():
        logger.error("Received empty name in organization account creation request: %s", request.model_dump())
        raise BadRequestError("The organization name cannot be null or empty.")

    if not (request.vat or "").strip():
        logger.error("Received empty VAT in organization account creation request: %s", request.model_dump())
        raise BadRequestError("The organization VAT cannot be null or empty.")

    data: dict[str, Any] = {"name": request.name, "vat": request.vat}
    if request.sector:
        data["nace"] = request.sector
    if request.country:
        data["country"] = _country(request.country)
    if request.currency:
        data["currency"] = request.currency
    return OrganizationAccountData(**data)


class OrganizationAccountService:
    def __init__(self, db: AsyncSession, normative_server: Optional[NormativeServerClient] = None):
        self.db = db
        self.normative_server = normative_server

    # -----------------------------
    # Membership queries
    # -----------------------------
    async def has_member(self, org: Organization, user_id: uuid.UUID) -> bool:
        """Direct members, plus members of any ancestor organization."""
        if any(is_object_ids_equals(m.user.id, user_id) for m in org.members):
            return True
        return await self.has_indirect_member(org.id, user_id)

    async def has_indirect_member(self, org_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        seen: set[uuid.UUID] = {org_id}
        frontier = await org_crud.list_parent_ids(self.db, org_id)
        while frontier:
            parent_id = frontier.pop()
            if parent_id in seen:
                continue
            seen.add(parent_id)
            if await org_crud.get_membership(self.db, parent_id, user_id) is not None:
                return True
            frontier.extend(await org_crud.list_parent_ids(self.db, parent_id))
        return False

    @staticmethod
    def has_admin_member(org: Organization, user_id: uuid.UUID) -> bool:
        return any(
            is_object_ids_equals(m.user.id, user_id)
            and m.role in (OrganizationRole.ADMIN.value, OrganizationRole.SUPER_ADMIN.value)
            for m in org.members
        )

    # -----------------------------
    # Reads
    # -----------------------------
    async def get_organization_accounts_for_user(
        self, user_id: uuid.UUID, account_type: Optional[OrganizationAccountType] = None
    ) -> list[Organization]:
        return await org_crud.list_organizations_for_user(self.db, user_id, account_type_to_str(account_type))

    async def get_organization_account_by_id(self, org_id: uuid.UUID, site_role: Optional[str]) -> Organization:
        """Site admins see every member; everyone else does not see superAdmin members."""
        logger.debug("Getting organization account for org %s and role %s.", org_id, site_role)
        org = await org_crud.get_organization_with_members(self.db, org_id)
        if org is None:
            raise NotFoundError("OrganizationAccount not found")
        if not is_site_admin(site_role):
            org.members = [m for m in org.members if m.role != OrganizationRole.SUPER_ADMIN.value]
        return org

    async def _get_row(self, org_id: uuid.UUID) -> OrganizationAccount:
        org = await org_crud.get_organization_row(self.db, org_id)
        if org is None:
            raise NotFoundError("OrganizationAccount not found")
        return org

    async def _reload(self, org_id: uuid.UUID) -> Organization:
        org = await org_crud.get_organization_with_members(self.db, org_id)
        if org is None:
            raise NotFoundError("OrganizationAccount not found")
        return org

    # -----------------------------
    # Create / update / delete
    # -----------------------------
    async def create_starter_organization_account(
        self, data: OrganizationAccountData, admin_user_id: uuid.UUID
    ) -> Organization:
        """
        Type, modules and members are not taken from `data`: the account is
        always starter, with the starter modules and `admin_user_id` as its only ADMIN.
        """
        org = OrganizationAccount(
            name=data.name,
            vat=data.vat,
            nace=data.nace,
            currency=data.currency,
            country=_country(data.country),
            account_type=OrganizationAccountType.STARTER.value,
            modules=starter_modules(),
        )
        self.db.add(org)
        await self.db.flush()
        await org_crud.add_membership(self.db, org.id, admin_user_id, OrganizationRole.ADMIN.value)
        await self.db.commit()
        logger.info("Created starter organization account %s with admin %s", org.id, admin_user_id)
        return await self._reload(org.id)

    async def create_org_account(self, data: OrganizationAccountData) -> Organization:
        modules = [m.model_dump() for m in (data.modules or [])]
        org = OrganizationAccount(
            name=data.name,
            vat=data.vat,
            nace=data.nace,
            currency=data.currency,
            country=_country(data.country),
            account_type=data.account_type or OrganizationAccountType.PREMIUM.value,
            modules=add_default_modules(modules),
        )
        self.db.add(org)
        await self.db.flush()
        for child_id in data.children:
            await org_crud.add_child(self.db, org.id, child_id)
        await self.db.commit()
        logger.info("Created organization account %s", org.id)
        return await self._reload(org.id)

    async def update_organization_account_by_id(
        self, org_id: uuid.UUID, changes: Optional[OrganizationAccountUpdate]
    ) -> Organization:
        if changes is None:
            raise BadRequestError("Body not found")
        org = await self._get_row(org_id)

        data = changes.model_dump(exclude_unset=True)
        cleared = [key for key in NON_NULLABLE_UPDATE_FIELDS if key in data and data[key] is None]
        if cleared:
            raise BadRequestError(f"Fields cannot be null: {', '.join(cleared)}")
        if "country" in data:
            data["country"] = _country(data["country"])
        if "modules" in data and data["modules"] is not None:
            data["modules"] = [dict(m) for m in data["modules"]]
        for key, value in data.items():
            setattr(org, key, value)
        org.last_updated = utcnow()

        await self.db.commit()
        return await self._reload(org.id)

    async def delete_org_account(self, auth_token: str, org_id: uuid.UUID) -> None:
        """
        Deletes the organization's remote data sources and reports, its starter
        entries, its links to parent organizations and then the organization.
        """
        org = await self._get_row(org_id)

        if self.normative_server is not None:
            await self.normative_server.delete_org_data_sources(auth_token, org_id)
            await self.normative_server.delete_org_reports(auth_token, org_id)

        deleted_entries = await delete_entries(self.db, org_id)
        await org_crud.delete_organization(self.db, org)
        await self.db.commit()
        logger.info("Deleted organization account %s (%d starter entries)", org_id, deleted_entries)

    # -----------------------------
    # Members
    # -----------------------------
    async def update_users_organization_role(
        self, org: Organization, user_id: uuid.UUID, role: Optional[str]
    ) -> Organization:
        if not role:
            raise BadRequestError("Role must be provided")
        parsed = parse_organization_role(role)
        if parsed is None or parsed.value not in ASSIGNABLE_ROLES:
            raise ForbiddenError(f"Role not allowed: {getattr(role, 'value', role)}")

        membership = await org_crud.get_membership(self.db, org.id, user_id)
        if membership is None:
            raise NotFoundError(f"User {user_id} is not a member in organization {org.name}.")

        logger.info("Changing role of user %s in organization %s to %s", user_id, org.id, parsed.value)
        membership.role = parsed.value
        row = await self._get_row(org.id)
        row.last_updated = utcnow()
        await self.db.commit()
        return await self._reload(org.id)

    async def remove_user_from_organization(self, org: Organization, user_id: uuid.UUID) -> Organization:
        removed = await org_crud.delete_membership(self.db, org.id, user_id)
        await self.db.commit()
        logger.info("Removed %d membership(s) of user %s from organization %s", removed, user_id, org.id)
        return await self._reload(org.id)

    # -----------------------------
    # Modules
    # -----------------------------
    async def has_organization_module(self, org_id: uuid.UUID, module, submodule=None) -> bool:
        org = await org_crud.get_organization_row(self.db, org_id)
        if org is None:
            return False
        return has_module(org.modules, module, submodule)

    async def get_org_impact_calculation_model(self, org_id: uuid.UUID) -> str:
        org = await self._get_row(org_id)
        model = first_impact_model(org.modules)
        if model is None:
            raise BadRequestError("No impact model defined for this organization")
        return model
