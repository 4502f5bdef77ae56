from __future__ import annotations

import enum
from typing import Optional


class OrganizationAccountType(str, enum.Enum):
    STARTER = "starter"
    PREMIUM = "premium"


def account_type_to_str(account_type) -> Optional[str]:
    """
    Supports Enum-like objects (account_type.value) or plain strings.
    Returns None if empty.
    """
    if account_type is None:
        return None
    v = getattr(account_type, "value", None)
    if isinstance(v, str) and v:
        return v
    s = str(account_type)
    return s if s else None


def is_account_type(account_type, required: OrganizationAccountType) -> bool:
    """Exact match only; account types are not ordered."""
    return account_type_to_str(account_type) == required.value
