from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.core.errors import UnauthenticatedError
from carbon_api.core.security import bearer_scheme, decode_access_token
from carbon_api.crud.user import get_user
from carbon_api.db.session import get_db
from carbon_api.schemas.user import AuthenticatedUser


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """
    Dependency for protected endpoints: bearer token -> user row -> AuthenticatedUser.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    claims = decode_access_token(credentials.credentials)

    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except ValueError:
        raise UnauthenticatedError("Invalid token subject")

    user = await get_user(db, user_id)
    if user is None:
        raise UnauthenticatedError("User not found")
    if not user.is_active:
        raise UnauthenticatedError("User inactive")

    return AuthenticatedUser.model_validate(user)


async def get_authorization_header(authorization: Optional[str] = Header(default=None)) -> str:
    """The raw Authorization header, forwarded as-is to the normative server."""
    if not authorization:
        raise UnauthenticatedError()
    return authorization
