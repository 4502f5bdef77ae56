# ============================
# FILE: carbon_api/core/modules.py
# Canonical organization module sets
# ============================
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Optional


class OrganizationModules(str, enum.Enum):
    STARTER = "STARTER"
    DATA_SOURCES = "DATA SOURCES"
    SUPPLIERS = "SUPPLIERS"
    TRANSACTIONS = "TRANSACTIONS"
    ANALYTICS = "ANALYTICS"
    IMPACT_MODEL = "IMPACT MODEL"
    REPORTING = "REPORTING"


class ImpactCalculationModels(str, enum.Enum):
    V1_UNSPSC = "v1-unspsc"
    V1_5_UNSPSC_SCOPE12 = "v1.5-unspsc-scope1&2"
    V1_6 = "v1.6"
    V2_NORMID = "v2-normid"


class AnalyticsModules(str, enum.Enum):
    POWER_BI = "POWER BI"
    CUMULIO = "CUMUL.IO"


@dataclass(frozen=True)
class ModuleGrant:
    name: str
    submodules: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"name": self.name, "submodules": list(self.submodules)}


DEFAULT_STARTER_MODULES: tuple[ModuleGrant, ...] = (
    ModuleGrant(OrganizationModules.STARTER.value),
    ModuleGrant(OrganizationModules.DATA_SOURCES.value, ("EDIT SOURCE",)),
    ModuleGrant(OrganizationModules.IMPACT_MODEL.value, (ImpactCalculationModels.V2_NORMID.value,)),
    ModuleGrant(OrganizationModules.REPORTING.value),
)

DEFAULT_MODULES: tuple[ModuleGrant, ...] = (
    ModuleGrant(OrganizationModules.DATA_SOURCES.value, ("EDIT SOURCE",)),
    ModuleGrant(OrganizationModules.SUPPLIERS.value),
    ModuleGrant(OrganizationModules.TRANSACTIONS.value),
    ModuleGrant(OrganizationModules.ANALYTICS.value, (AnalyticsModules.POWER_BI.value,)),
    ModuleGrant(OrganizationModules.IMPACT_MODEL.value, (ImpactCalculationModels.V1_6.value,)),
)


def _module_name(value) -> str:
    v = getattr(value, "value", value)
    return str(v or "")


def starter_modules() -> list[dict]:
    return [m.to_dict() for m in DEFAULT_STARTER_MODULES]


def add_default_modules(modules: Optional[Iterable[dict]]) -> list[dict]:
    """
    Appends each default module whose name is not already present.
    Existing entries (and their submodules) are kept as given.
    """
    result = [dict(m) for m in (modules or [])]
    present = {_module_name(m.get("name")) for m in result}
    for default in DEFAULT_MODULES:
        if default.name not in present:
            result.append(default.to_dict())
    return result


def has_module(modules: Optional[Iterable[dict]], module, submodule=None) -> bool:
    name = _module_name(module)
    wanted_sub = _module_name(submodule) if submodule is not None else None
    for m in modules or []:
        if _module_name(m.get("name")) != name:
            continue
        if wanted_sub is None:
            return True
        if wanted_sub in [_module_name(s) for s in (m.get("submodules") or [])]:
            return True
    return False


def first_impact_model(modules: Optional[Iterable[dict]]) -> Optional[str]:
    """
    Returns the first IMPACT MODEL submodule, or None if the organization has none.
    Only one impact model is expected per organization.
    """
    for m in modules or []:
        if _module_name(m.get("name")) == OrganizationModules.IMPACT_MODEL.value:
            subs = m.get("submodules") or []
            return _module_name(subs[0]) if subs else None
    return None
