# carbon_api/crud/organization_account.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.models.organization_account import OrganizationAccount, OrganizationAccountChild
from carbon_api.models.organization_membership import OrganizationMembership
from carbon_api.models.user import User
from carbon_api.schemas.organization import Member, MemberUser, Organization, OrganizationModule


def _to_member(membership: OrganizationMembership, user: User) -> Member:
    return Member(
        user=MemberUser(id=user.id, email=user.email, name=user.name, role=user.role),
        role=membership.role,
    )


def to_organization(
    org: OrganizationAccount,
    members: list[Member],
    children: Optional[list[uuid.UUID]] = None,
    has_parent: bool = False,
) -> Organization:
    return Organization(
        id=org.id,
        name=org.name,
        vat=org.vat,
        account_type=org.account_type,
        nace=org.nace,
        currency=org.currency,
        country=org.country,
        modules=[OrganizationModule.model_validate(m) for m in (org.modules or [])],
        members=members,
        children=children or [],
        has_parent=has_parent,
        created_at=org.created_at,
        last_updated=org.last_updated,
    )


async def get_organization_row(db: AsyncSession, org_id: uuid.UUID) -> Optional[OrganizationAccount]:
    return await db.get(OrganizationAccount, org_id)


async def list_members(db: AsyncSession, org_id: uuid.UUID) -> list[Member]:
    stmt = (
        select(OrganizationMembership, User)
        .join(User, User.id == OrganizationMembership.user_id)
        .where(OrganizationMembership.organization_id == org_id)
        .order_by(OrganizationMembership.created_at, OrganizationMembership.id)
    )
    rows = (await db.execute(stmt)).all()
    return [_to_member(membership, user) for membership, user in rows]


async def list_child_ids(db: AsyncSession, org_id: uuid.UUID) -> list[uuid.UUID]:
    stmt = select(OrganizationAccountChild.child_id).where(OrganizationAccountChild.parent_id == org_id)
    return list((await db.execute(stmt)).scalars().all())


async def list_parent_ids(db: AsyncSession, org_id: uuid.UUID) -> list[uuid.UUID]:
    stmt = select(OrganizationAccountChild.parent_id).where(OrganizationAccountChild.child_id == org_id)
    return list((await db.execute(stmt)).scalars().all())


async def get_organization_with_members(db: AsyncSession, org_id: uuid.UUID) -> Optional[Organization]:
    """
    Fetch the organization, then its memberships joined to their users.
    Returns None if the organization does not exist.
    """
    org = await get_organization_row(db, org_id)
    if org is None:
        return None
    members = await list_members(db, org.id)
    children = await list_child_ids(db, org.id)
    parents = await list_parent_ids(db, org.id)
    return to_organization(org, members, children=children, has_parent=bool(parents))


async def list_organizations_for_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    account_type: Optional[str] = None,
) -> list[Organization]:
    stmt = (
        select(OrganizationAccount)
        .join(OrganizationMembership, OrganizationMembership.organization_id == OrganizationAccount.id)
        .where(OrganizationMembership.user_id == user_id)
        .order_by(OrganizationAccount.created_at, OrganizationAccount.id)
    )
    if account_type:
        stmt = stmt.where(OrganizationAccount.account_type == account_type)

    orgs = (await db.execute(stmt)).scalars().all()
    result: list[Organization] = []
    for org in orgs:
        result.append(to_organization(org, await list_members(db, org.id)))
    return result


async def list_memberships_for_user(
    db: AsyncSession, user_id: uuid.UUID
) -> list[tuple[OrganizationAccount, OrganizationMembership]]:
    stmt = (
        select(OrganizationAccount, OrganizationMembership)
        .join(OrganizationMembership, OrganizationMembership.organization_id == OrganizationAccount.id)
        .where(OrganizationMembership.user_id == user_id)
        .order_by(OrganizationAccount.created_at, OrganizationAccount.id)
    )
    return [(org, membership) for org, membership in (await db.execute(stmt)).all()]


async def get_membership(
    db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[OrganizationMembership]:
    stmt = select(OrganizationMembership).where(
        OrganizationMembership.organization_id == org_id,
        OrganizationMembership.user_id == user_id,
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def add_membership(
    db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID, role: str
) -> OrganizationMembership:
    membership = OrganizationMembership(organization_id=org_id, user_id=user_id, role=role)
    db.add(membership)
    await db.flush()
    return membership


async def delete_membership(db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID) -> int:
    stmt = delete(OrganizationMembership).where(
        OrganizationMembership.organization_id == org_id,
        OrganizationMembership.user_id == user_id,
    )
    res = await db.execute(stmt)
    return int(res.rowcount or 0)


async def add_child(db: AsyncSession, parent_id: uuid.UUID, child_id: uuid.UUID) -> OrganizationAccountChild:
    link = OrganizationAccountChild(parent_id=parent_id, child_id=child_id)
    db.add(link)
    await db.flush()
    return link


async def delete_organization(db: AsyncSession, org: OrganizationAccount) -> None:
    """Removes the organization with its memberships and hierarchy links (parents and children)."""
    await db.execute(delete(OrganizationMembership).where(OrganizationMembership.organization_id == org.id))
    await db.execute(
        delete(OrganizationAccountChild).where(
            (OrganizationAccountChild.child_id == org.id) | (OrganizationAccountChild.parent_id == org.id)
        )
    )
    await db.delete(org)
    await db.flush()
