# tests/test_user_service.py
from __future__ import annotations

import uuid

import pytest

from carbon_api.core.errors import BadRequestError, ForbiddenError, NotFoundError
from carbon_api.crud.organization_account import get_membership
from carbon_api.crud.user import get_user, get_user_by_email
from carbon_api.schemas.user import InviteUserRequest
from carbon_api.services.authz import AuthzService
from carbon_api.services.user import UserService

from helpers import actor, add_member, create_org, create_user


async def _org_with_member(db, role: str, email: str = "inviter@example.com", site_role: str = "user"):
    org_row = await create_org(db)
    inviter = await create_user(db, email, role=site_role)
    await add_member(db, org_row.id, inviter.id, role)
    org = await AuthzService(db).load_organization_with_members(org_row.id)
    return org, actor(role=site_role, user_id=inviter.id, email=inviter.email)


# ---------------------------------------------------------
# Invitations
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_user_cannot_invite_admin(db):
    org, inviter = await _org_with_member(db, "user")

    with pytest.raises(ForbiddenError) as exc:
        await UserService(db).invite_user_to_organization(
            InviteUserRequest(name="New", email="new@example.com", role="admin"), org, inviter
        )
    assert "same or lower role" in exc.value.detail
    assert await get_user_by_email(db, "new@example.com") is None


@pytest.mark.asyncio
async def test_site_admin_can_invite_any_role(db):
    org_row = await create_org(db)
    org = await AuthzService(db).load_organization_with_members(org_row.id)
    site_admin = actor(role="admin")

    result = await UserService(db).invite_user_to_organization(
        InviteUserRequest(name="Boss", email="boss@example.com", role="superAdmin"), org, site_admin
    )

    assert result.role == "superAdmin"
    membership = await get_membership(db, org.id, result.user.id)
    assert membership.role == "superAdmin"


@pytest.mark.asyncio
async def test_user_can_invite_same_or_lower_role(db):
    org, inviter = await _org_with_member(db, "user")
    service = UserService(db)

    as_user = await service.invite_user_to_organization(
        InviteUserRequest(name="Peer", email="Peer@Example.com", role="user"), org, inviter
    )
    as_guest = await service.invite_user_to_organization(
        InviteUserRequest(name="Visitor", email="visitor@example.com", role="guest"), org, inviter
    )

    assert as_user.role == "user"
    assert as_user.user.email == "peer@example.com"
    assert as_user.user.name == "Peer"
    assert as_user.user.role == "user"
    assert as_guest.role == "guest"
    assert (await get_membership(db, org.id, as_guest.user.id)).role == "guest"


@pytest.mark.asyncio
async def test_non_member_cannot_invite(db):
    org_row = await create_org(db)
    org = await AuthzService(db).load_organization_with_members(org_row.id)

    with pytest.raises(ForbiddenError):
        await UserService(db).invite_user_to_organization(
            InviteUserRequest(name="X", email="x@example.com", role="guest"), org, actor()
        )


@pytest.mark.asyncio
async def test_invite_reuses_existing_user(db):
    org, inviter = await _org_with_member(db, "admin")
    existing = await create_user(db, "known@example.com", name="Known")

    result = await UserService(db).invite_user_to_organization(
        InviteUserRequest(name="Other Name", email="known@example.com", role="admin"), org, inviter
    )

    assert result.user.id == existing.id
    assert result.user.name == "Known"


@pytest.mark.asyncio
async def test_invite_existing_member(db):
    org, inviter = await _org_with_member(db, "admin")

    with pytest.raises(BadRequestError):
        await UserService(db).invite_user_to_organization(
            InviteUserRequest(name="Me", email="INVITER@example.com", role="user"), org, inviter
        )


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "role": "user"},
        {"name": "A", "role": "user"},
        {"name": "A", "email": "a@example.com"},
        {"name": "A", "email": "a@example.com", "role": "owner"},
    ],
)
@pytest.mark.asyncio
async def test_invite_requires_name_email_and_known_role(db, payload):
    org, inviter = await _org_with_member(db, "admin")
    with pytest.raises(BadRequestError):
        await UserService(db).invite_user_to_organization(InviteUserRequest(**payload), org, inviter)


# ---------------------------------------------------------
# Own user
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_fetch_my_user(db):
    user = await create_user(db, "me@example.com", name="Me")
    starter = await create_org(db, account_type="starter", name="Starter Co")
    premium = await create_org(db, account_type="premium", name="Premium Co")
    await add_member(db, starter.id, user.id, "admin")
    await add_member(db, premium.id, user.id, "guest")

    me = await UserService(db).fetch_my_user(user.id)

    assert me.email == "me@example.com"
    assert me.first_time is True
    assert me.terms_accepted_at is None
    snapshots = {o.name: (o.account_type, o.role, o.vat) for o in me.organization_accounts}
    assert snapshots == {
        "Starter Co": ("starter", "admin", "SE0000000000"),
        "Premium Co": ("premium", "guest", "SE0000000000"),
    }


@pytest.mark.asyncio
async def test_fetch_missing_user(db):
    with pytest.raises(NotFoundError):
        await UserService(db).fetch_my_user(uuid.uuid4())


@pytest.mark.asyncio
async def test_accept_terms(db):
    user = await create_user(db, "terms@example.com")
    service = UserService(db)

    with pytest.raises(BadRequestError):
        await service.update_terms(user.id, None)
    with pytest.raises(BadRequestError):
        await service.update_bcc_terms(user.id, False)

    updated = await service.update_terms(user.id, True)
    assert updated.terms_accepted_at is not None
    assert updated.bcc_terms_accepted_at is None
    assert updated.first_time is False

    updated = await service.update_bcc_terms(user.id, True)
    assert updated.bcc_terms_accepted_at is not None


# ---------------------------------------------------------
# Delete
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_delete_user_by_id_removes_memberships(db):
    org = await create_org(db)
    user = await create_user(db, "leaving@example.com")
    await add_member(db, org.id, user.id, "user")

    await UserService(db).delete_user_by_id(user.id)

    assert await get_user(db, user.id) is None
    assert await get_membership(db, org.id, user.id) is None


@pytest.mark.asyncio
async def test_delete_user_by_email(db):
    user = await create_user(db, "byemail@example.com")
    await UserService(db).delete_user_by_email("ByEmail@example.com")
    assert await get_user(db, user.id) is None


@pytest.mark.asyncio
async def test_delete_missing_user(db):
    service = UserService(db)
    with pytest.raises(NotFoundError):
        await service.delete_user_by_id(uuid.uuid4())
    with pytest.raises(NotFoundError):
        await service.delete_user_by_email("nobody@example.com")
