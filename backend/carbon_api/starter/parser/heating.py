from __future__ import annotations

import logging
from typing import Any, Optional

from carbon_api.schemas.starter import EntrySubmissionData, HeatingType, HeatingUsage
from carbon_api.starter.parser.data_validator import DataValidator
from carbon_api.starter.parser.facilities import parse_facilities_usage

logger = logging.getLogger(__name__)

# Supplier and address are required downstream but never collected in the wizard.
HEATING_DEFAULTS = {
    "supplier": "Unknown Heating Supplier",
    "address": "Unknown Address",
}

HEATING_SCHEMA_NAME = "HEATING"

ACTIVITY_NAME_FROM_HEATING_TYPE = {
    HeatingType.DISTRICT: "district",
    HeatingType.NATURAL_GAS: "onsite",
}

_validator = DataValidator(HEATING_SCHEMA_NAME)


def _parse_heating_usage(heating: HeatingUsage) -> dict[str, Any]:
    data: dict[str, Any] = {}
    activity_name = ACTIVITY_NAME_FROM_HEATING_TYPE.get(heating.type) if heating.type else None
    if activity_name:
        data["activityName"] = activity_name
    if heating.spend is not None:
        data["cost"] = heating.spend.value
        data["costUnit"] = heating.spend.unit
    if heating.energy is not None:
        data["energy"] = heating.energy.value
        data["energyUnit"] = heating.energy.unit
    return data


def parse_heating_data(org_country: str, data: EntrySubmissionData) -> Optional[list[dict[str, Any]]]:
    """
    One heating row from cost, energy or facilities area (any combination).

    Electric heating is left to the electricity parser and natural gas with
    spend/energy to the fuel parser. Raises DataTransformError if the row is invalid.
    """
    heating = data.heating
    facilities = data.facilities
    has_usage = heating is not None and (heating.spend is not None or heating.energy is not None)
    has_area = facilities is not None and facilities.size is not None

    if not has_usage and not has_area:
        return None

    if heating is not None and heating.type == HeatingType.ELECTRICITY:
        logger.info("Heating type was given as %s. Leaving for the electricity parser.", heating.type.value)
        return None

    if heating is not None and heating.type == HeatingType.NATURAL_GAS and has_usage:
        logger.info(
            "Heating type was given as %s and energy or spend data was provided. Leaving for the fuel parser.",
            heating.type.value,
        )
        return None

    if heating is not None and heating.type == HeatingType.NONE:
        if has_usage:
            logger.error("Received non-zero heating spend with heating type NONE.")
            logger.debug("Invalid starter data - %s", heating.model_dump(mode="json", by_alias=True))
        return None

    row: dict[str, Any] = {
        "startDate": data.time_period.start_date,
        "endDate": data.time_period.end_date,
        "country": org_country,
        **HEATING_DEFAULTS,
    }
    if heating is not None:
        row.update(_parse_heating_usage(heating))
    row.update(parse_facilities_usage(facilities))

    _validator.validate(data, row)
    return [row]
