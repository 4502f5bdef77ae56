# carbon_api/core/ids.py
from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

IdLike = Union[str, uuid.UUID, None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_country(value: Optional[str]) -> Optional[str]:
    """Upper-cased ISO-3166-1 alpha-2 code; blank becomes None."""
    if value is None:
        return None
    v = value.strip()
    if not v:
        return None
    v = v.upper()
    if not re.fullmatch(r"[A-Z]{2}", v):
        raise ValueError("country must be a 2-letter ISO code (e.g., SE).")
    return v


def parse_id(value: IdLike) -> uuid.UUID | None:
    """Returns the UUID for a UUID or a well-formed UUID string, otherwise None."""
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return uuid.UUID(value.strip())
        except ValueError:
            return None
    return None


def is_object_ids_equals(value: IdLike, other: IdLike) -> bool:
    """
    Compares identifiers given as `str` or `UUID`, in any combination.

    Strings that parse as UUIDs are compared as UUIDs, so case and
    surrounding whitespace do not matter. Two non-UUID strings (remote
    data source or report ids) compare by exact value. A UUID never equals
    a non-UUID string. Returns False (never raises) when either side is
    empty or of another type.
    """
    if not isinstance(value, (str, uuid.UUID)) or not isinstance(other, (str, uuid.UUID)):
        return False
    left = parse_id(value)
    right = parse_id(other)
    if left is None and right is None:
        return isinstance(value, str) and bool(value) and value == other
    return left is not None and left == right
