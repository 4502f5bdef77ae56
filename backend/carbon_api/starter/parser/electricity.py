from __future__ import annotations

from typing import Any, Optional

from carbon_api.schemas.starter import ElectricityUsage, EntrySubmissionData, YesNoUnknown
from carbon_api.starter.parser.data_validator import DataValidator
from carbon_api.starter.parser.facilities import parse_facilities_usage

ELECTRICITY_DEFAULTS = {
    "name": "ELECTRICITY",
    "electricitySupplier": "Unknown Electricity Supplier",
    "address": "Unknown Address",
}

_validator = DataValidator(ELECTRICITY_DEFAULTS["name"])


def parse_electricity_usage(electricity: ElectricityUsage) -> dict[str, Any]:
    data: dict[str, Any] = {}

    if electricity.spend is not None:
        data["cost"] = electricity.spend.value
        data["costUnit"] = electricity.spend.unit

    if electricity.energy is not None:
        data["energy"] = electricity.energy.value
        data["energyUnit"] = electricity.energy.unit

    if electricity.has_renewable == YesNoUnknown.YES:
        data["renewable"] = 100
        data["ghg"] = 0
        data["ghgUnit"] = "kg"
    elif electricity.has_renewable == YesNoUnknown.NO:
        data["renewable"] = 0

    return data


def parse_electricity_data(org_country: str, data: EntrySubmissionData) -> Optional[list[dict[str, Any]]]:
    electricity = data.electricity
    has_usage = electricity is not None and (electricity.spend is not None or electricity.energy is not None)
    has_area = data.facilities is not None and data.facilities.size is not None
    if not has_usage and not has_area:
        return None

    row: dict[str, Any] = {
        "startDate": data.time_period.start_date,
        "endDate": data.time_period.end_date,
        "country": org_country,
        "address": ELECTRICITY_DEFAULTS["address"],
        "supplier": ELECTRICITY_DEFAULTS["electricitySupplier"],
    }
    if electricity is not None:
        row.update(parse_electricity_usage(electricity))

    # Area is a fallback; it is only sent when neither cost nor energy is.
    if not row.get("cost") and not row.get("energy"):
        row.update(parse_facilities_usage(data.facilities))

    _validator.validate(data, row)
    return [row]
