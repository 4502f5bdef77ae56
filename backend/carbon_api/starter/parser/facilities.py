from __future__ import annotations

from typing import Any, Optional

from carbon_api.schemas.starter import FacilitiesUsage


def parse_facilities_usage(facilities: Optional[FacilitiesUsage]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if facilities is not None and facilities.size is not None:
        data["area"] = facilities.size.value
        data["areaUnit"] = facilities.size.unit
    return data
