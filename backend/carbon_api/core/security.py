from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi.security import HTTPBearer
from jose import JWTError, jwt

from carbon_api.core.config import settings
from carbon_api.core.errors import UnauthenticatedError

# A missing header must reach get_current_actor, which raises UnauthenticatedError.
bearer_scheme = HTTPBearer(auto_error=False)

_QUOTES = ('"', "'")
_BEARER_PREFIX = "bearer "


def _normalize_token(token: Optional[str]) -> str:
    """Strips whitespace, one pair of surrounding quotes and a pasted 'Bearer ' prefix."""
    t = (token or "").strip()
    if len(t) >= 2 and t[0] in _QUOTES and t[-1] == t[0]:
        t = t[1:-1].strip()
    if t.lower().startswith(_BEARER_PREFIX):
        t = t[len(_BEARER_PREFIX):].strip()
    return t


def create_access_token(subject: str, role: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expire_dt = now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # Use numeric timestamps for maximum compatibility
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "exp": int(expire_dt.timestamp()),
        "iat": int(now.timestamp()),
    }
    if role:
        to_encode["role"] = str(getattr(role, "value", role))

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: Optional[str]) -> dict[str, Any]:
    """Returns the verified claims; any failure raises UnauthenticatedError."""
    token = _normalize_token(token)
    if not token:
        raise UnauthenticatedError("Invalid token")

    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_sub": True, "require_exp": True},
        )
    except JWTError:
        # Includes expired signature, bad format, bad signature, wrong algorithm, etc.
        raise UnauthenticatedError("Invalid token")

    if not claims.get("sub"):
        raise UnauthenticatedError("Invalid token")
    return claims
