# tests/test_app.py
from __future__ import annotations

import uuid

import pytest
from fastapi import Depends

from carbon_api.api.deps.auth import get_authorization_header, get_current_actor
from carbon_api.core.errors import (
    DataTransformError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamServiceError,
)
from carbon_api.core.security import create_access_token
from carbon_api.schemas.user import AuthenticatedUser

from helpers import create_user


@pytest.fixture()
def protected_app(app):
    @app.get("/_test/me")
    async def me(current: AuthenticatedUser = Depends(get_current_actor)):
        return {"id": str(current.id), "email": current.email, "role": current.role}

    @app.get("/_test/forwarded")
    async def forwarded(authorization: str = Depends(get_authorization_header)):
        return {"authorization": authorization}

    return app


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "carbon-api"}


@pytest.mark.parametrize(
    "error,status",
    [
        (NotFoundError("Organization not found"), 404),
        (ForbiddenError("User must be at least admin in the organization."), 403),
        (UpstreamServiceError("Error uploading the starter data sources."), 502),
    ],
)
@pytest.mark.asyncio
async def test_service_errors_are_mapped(app, client, error, status):
    @app.get("/_test/boom")
    async def boom():
        raise error

    resp = await client.get("/_test/boom")

    assert resp.status_code == status
    assert resp.json() == {"detail": error.detail}


@pytest.mark.asyncio
async def test_unauthenticated_sets_challenge_header(app, client):
    @app.get("/_test/anon")
    async def anon():
        raise UnauthenticatedError()

    resp = await client.get("/_test/anon")

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert resp.json() == {"detail": "User not authenticated"}


@pytest.mark.asyncio
async def test_data_transform_error_body(app, client):
    @app.get("/_test/transform")
    async def transform():
        raise DataTransformError("FUEL", {"timePeriod": {}}, {"costCenter": "vehicles"}, ["cost: required"])

    resp = await client.get("/_test/transform")

    assert resp.status_code == 422
    assert resp.json() == {
        "detail": {"error": "DATA_TRANSFORM_ERROR", "schema": "FUEL", "validation_errors": ["cost: required"]}
    }


# ---------------------------------------------------------
# Authentication dependency
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_current_actor_from_token(protected_app, client, db):
    user = await create_user(db, "actor@example.com", role="admin")
    await db.commit()
    token = create_access_token(str(user.id), role=user.role)

    resp = await client.get("/_test/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json() == {"id": str(user.id), "email": "actor@example.com", "role": "admin"}


@pytest.mark.asyncio
async def test_missing_credentials(protected_app, client):
    resp = await client.get("/_test/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token(protected_app, client):
    resp = await client.get("/_test/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_unknown_user(protected_app, client):
    token = create_access_token(str(uuid.uuid4()))
    resp = await client.get("/_test/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_inactive_user(protected_app, client, db):
    user = await create_user(db, "inactive@example.com")
    user.is_active = False
    await db.commit()
    token = create_access_token(str(user.id))

    resp = await client.get("/_test/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "User inactive"


@pytest.mark.asyncio
async def test_non_uuid_subject(protected_app, client):
    token = create_access_token("not-a-uuid")
    resp = await client.get("/_test/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token subject"


@pytest.mark.asyncio
async def test_authorization_header_is_forwarded(protected_app, client):
    resp = await client.get("/_test/forwarded", headers={"Authorization": "Bearer abc"})
    assert resp.json() == {"authorization": "Bearer abc"}

    resp = await client.get("/_test/forwarded")
    assert resp.status_code == 401
