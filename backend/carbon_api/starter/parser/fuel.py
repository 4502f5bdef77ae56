from __future__ import annotations

import logging
from typing import Any, Optional

from carbon_api.schemas.starter import EntrySubmissionData, HeatingType, ValueWithUnit
from carbon_api.starter.parser.data_validator import DataValidator

logger = logging.getLogger(__name__)

PETROL_FUEL_DEFAULTS = {
    "fuelType": "PETROL",
    "normId": "01020204010200",
}

NATURAL_GAS_FUEL_DEFAULTS = {
    "fuelType": "NATURAL GAS",
    "normId": "01020201050000",
}

FUEL_SCHEMA_NAME = "FUEL"

_validator = DataValidator(FUEL_SCHEMA_NAME)


def _base_row(data: EntrySubmissionData, cost_center: str, defaults: dict[str, str]) -> dict[str, Any]:
    return {
        "startDate": data.time_period.start_date,
        "endDate": data.time_period.end_date,
        "costCenter": cost_center,
        **defaults,
    }


def _put(row: dict[str, Any], key: str, quantity: Optional[ValueWithUnit]) -> None:
    if quantity is not None:
        row[key] = quantity.value
        row[f"{key}Unit"] = quantity.unit


def _vehicles_row(data: EntrySubmissionData) -> dict[str, Any]:
    row = _base_row(data, "vehicles", PETROL_FUEL_DEFAULTS)
    _put(row, "cost", data.fuel.spend)
    _put(row, "volume", data.fuel.volume)
    _validator.validate(data, row)
    return row


def _machinery_row(data: EntrySubmissionData) -> dict[str, Any]:
    row = _base_row(data, "machinery", PETROL_FUEL_DEFAULTS)
    _put(row, "cost", data.machinery.spend)
    _put(row, "volume", data.machinery.volume)
    _validator.validate(data, row)
    return row


def _natural_gas_heating_row(data: EntrySubmissionData) -> Optional[dict[str, Any]]:
    """
    Natural gas used for heating is a fuel when spend or energy is known.
    Area-only natural gas heating, and every other heating type, belong to the heating parser.
    """
    heating = data.heating
    if heating is None or heating.type != HeatingType.NATURAL_GAS:
        return None
    if heating.spend is None and heating.energy is None:
        logger.info("Heating type was set to %s but no spend or energy values were given.", heating.type.value)
        return None

    row = _base_row(data, "Heating by NATURAL_GAS", NATURAL_GAS_FUEL_DEFAULTS)
    _put(row, "cost", heating.spend)
    _put(row, "energy", heating.energy)
    _validator.validate(data, row)
    return row


def parse_fuel_data(data: EntrySubmissionData) -> Optional[list[dict[str, Any]]]:
    """
    Fuel data source rows: vehicles, machinery and natural-gas heating.
    Returns None when the submission has no fuel usage.
    Raises DataTransformError if a produced row is invalid.
    """
    rows: list[dict[str, Any]] = []
    if data.fuel is not None and (data.fuel.spend is not None or data.fuel.volume is not None):
        rows.append(_vehicles_row(data))
    if data.machinery is not None and (data.machinery.spend is not None or data.machinery.volume is not None):
        rows.append(_machinery_row(data))

    gas_row = _natural_gas_heating_row(data)
    if gas_row is not None:
        rows.append(gas_row)

    if not rows:
        logger.warning("Unable to parse any fuel usage from provided starter data.")
        return None
    return rows
