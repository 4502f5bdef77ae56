# tests/helpers.py
from __future__ import annotations

import uuid
from typing import Any, Optional

from carbon_api.core.errors import UpstreamServiceError
from carbon_api.models.calculated_impact import CalculatedImpact
from carbon_api.models.organization_account import OrganizationAccount
from carbon_api.models.organization_membership import OrganizationMembership
from carbon_api.models.user import User
from carbon_api.schemas.data_source import DataSource, Report, ReportTemplate
from carbon_api.schemas.organization import Member, MemberUser, Organization
from carbon_api.schemas.user import AuthenticatedUser

AUTH_TOKEN = "Bearer test-token"


class FakeNormativeServer:
    """In-memory stand-in for NormativeServerClient. Records every call."""

    def __init__(self):
        self.data_sources: dict[str, DataSource] = {}
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.uploads: list[dict[str, Any]] = []
        self.deleted_data_sources: list[str] = []
        self.deleted_reports: list[str] = []
        self.posted_reports: list[dict[str, Any]] = []
        self.report_templates: list[ReportTemplate] = [
            ReportTemplate(_id="tmpl-other", header="Other"),
            ReportTemplate(_id="tmpl-starter", header="Starter"),
        ]
        self.reports: dict[str, Report] = {}
        self.template_lookups = 0
        self.fail_uploads_of: set[str] = set()
        self.fail_status_lookup = False
        self.fail_deletes = False
        self._counter = 0

    def add_data_source(self, status: str, data_source_type: str = "fuel", ds_id: Optional[str] = None) -> str:
        self._counter += 1
        ds_id = ds_id or f"ds-{self._counter}"
        self.data_sources[ds_id] = DataSource(_id=ds_id, dataSourceType=data_source_type, status=status)
        return ds_id

    async def get_data_source(self, auth_token: str, data_source_id) -> DataSource:
        if self.fail_status_lookup:
            raise UpstreamServiceError("lookup failed")
        return self.data_sources[str(data_source_id)]

    async def get_data_sources(self, auth_token: str, organization_id) -> list[DataSource]:
        return list(self.data_sources.values())

    async def create_data_source(self, auth_token, organization_id, name, data_source_type, data) -> str:
        if data_source_type in self.fail_uploads_of:
            raise UpstreamServiceError("upload failed")
        ds_id = self.add_data_source("processing", data_source_type)
        self.uploads.append(
            {
                "organization_id": organization_id,
                "name": name,
                "data_source_type": data_source_type,
                "data": data,
                "id": ds_id,
            }
        )
        return ds_id

    async def add_rows(self, auth_token, data_source_id, rows) -> dict[str, Any]:
        self.rows[str(data_source_id)] = rows
        return {"insertCount": len(rows)}

    async def delete_data_source(self, auth_token, data_source: DataSource) -> None:
        if self.fail_deletes:
            raise UpstreamServiceError("delete failed")
        self.deleted_data_sources.append(data_source.id)
        self.data_sources.pop(data_source.id, None)

    async def delete_org_data_sources(self, auth_token, organization_id) -> None:
        for ds in list(self.data_sources.values()):
            await self.delete_data_source(auth_token, ds)

    async def post_report(self, auth_token, organization_id, report) -> Report:
        self.posted_reports.append(report)
        return Report(_id=f"report-{len(self.posted_reports)}", **report)

    async def get_report_templates(self, auth_token) -> list[ReportTemplate]:
        self.template_lookups += 1
        return list(self.report_templates)

    async def get_reports(self, auth_token, organization_id) -> list[Report]:
        return list(self.reports.values())

    async def delete_report(self, auth_token, report_id) -> None:
        if self.fail_deletes:
            raise UpstreamServiceError("delete failed")
        self.deleted_reports.append(str(report_id))

    async def delete_org_reports(self, auth_token, organization_id) -> None:
        for report_id in list(self.reports):
            await self.delete_report(auth_token, report_id)
        self.reports.clear()


# ---------------------------------------------------------
# DB rows
# ---------------------------------------------------------
async def create_user(db, email: str, role: str = "user", name: Optional[str] = None) -> User:
    user = User(email=email.lower().strip(), name=name or email.split("@")[0], role=role, is_active=True)
    db.add(user)
    await db.flush()
    return user


async def create_org(
    db,
    account_type: str = "starter",
    country: Optional[str] = "SE",
    name: Optional[str] = None,
    modules: Optional[list] = None,
) -> OrganizationAccount:
    org = OrganizationAccount(
        name=name or f"Test Org {uuid.uuid4().hex[:8]}",
        vat="SE0000000000",
        account_type=account_type,
        country=country,
        modules=modules or [],
    )
    db.add(org)
    await db.flush()
    return org


async def add_member(db, org_id: uuid.UUID, user_id: uuid.UUID, role: str) -> OrganizationMembership:
    m = OrganizationMembership(organization_id=org_id, user_id=user_id, role=role)
    db.add(m)
    await db.flush()
    return m


async def add_impact(
    db,
    org_id: uuid.UUID,
    data_source_id: str,
    scope: Optional[str],
    category: Optional[str],
    value: Optional[float],
) -> CalculatedImpact:
    row = CalculatedImpact(
        organization_id=org_id,
        data_source_id=data_source_id,
        ghg_scope=scope,
        category=category,
        impact_value=value,
    )
    db.add(row)
    await db.flush()
    return row


# ---------------------------------------------------------
# In-memory domain objects
# ---------------------------------------------------------
def actor(role: str = "user", user_id: Optional[uuid.UUID] = None, email: Optional[str] = None) -> AuthenticatedUser:
    user_id = user_id or uuid.uuid4()
    return AuthenticatedUser(id=user_id, email=email or f"{user_id.hex[:8]}@example.com", role=role)


def member(user: AuthenticatedUser, role: str) -> Member:
    return Member(user=MemberUser(id=user.id, email=user.email, name=user.name, role=user.role), role=role)


def organization(account_type: str = "starter", members: Optional[list[Member]] = None) -> Organization:
    return Organization(id=uuid.uuid4(), name="Acme", account_type=account_type, members=members or [])
