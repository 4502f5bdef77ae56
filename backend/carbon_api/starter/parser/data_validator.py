"""Row schemas for the data sources the starter parsers produce."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from carbon_api.core.errors import DataTransformError

logger = logging.getLogger(__name__)


def _check_unit(row: BaseModel, value_field: str, unit_field: str) -> None:
    if getattr(row, value_field) is not None and not getattr(row, unit_field):
        raise ValueError(f"{unit_field} is required when {value_field} is given")


class _Row(BaseModel):
    model_config = ConfigDict(extra="forbid")

    startDate: str = Field(min_length=1)
    endDate: str = Field(min_length=1)


class FuelRow(_Row):
    costCenter: str = Field(min_length=1)
    fuelType: str = Field(min_length=1)
    normId: str = Field(min_length=1)
    cost: Optional[float] = None
    costUnit: Optional[str] = None
    volume: Optional[float] = None
    volumeUnit: Optional[str] = None
    energy: Optional[float] = None
    energyUnit: Optional[str] = None

    @model_validator(mode="after")
    def check_quantities(self) -> "FuelRow":
        if self.cost is None and self.volume is None and self.energy is None:
            raise ValueError("one of cost, volume or energy is required")
        _check_unit(self, "cost", "costUnit")
        _check_unit(self, "volume", "volumeUnit")
        _check_unit(self, "energy", "energyUnit")
        return self


class HeatingRow(_Row):
    country: str = Field(pattern=r"^[A-Z]{2}$")
    supplier: str = Field(min_length=1)
    address: str = Field(min_length=1)
    activityName: Optional[str] = None
    cost: Optional[float] = None
    costUnit: Optional[str] = None
    energy: Optional[float] = None
    energyUnit: Optional[str] = None
    area: Optional[float] = None
    areaUnit: Optional[str] = None

    @model_validator(mode="after")
    def check_quantities(self) -> "HeatingRow":
        if self.cost is None and self.energy is None and self.area is None:
            raise ValueError("one of cost, energy or area is required")
        _check_unit(self, "cost", "costUnit")
        _check_unit(self, "energy", "energyUnit")
        _check_unit(self, "area", "areaUnit")
        return self


class ElectricityRow(_Row):
    country: str = Field(pattern=r"^[A-Z]{2}$")
    supplier: str = Field(min_length=1)
    address: str = Field(min_length=1)
    cost: Optional[float] = None
    costUnit: Optional[str] = None
    energy: Optional[float] = None
    energyUnit: Optional[str] = None
    area: Optional[float] = None
    areaUnit: Optional[str] = None
    renewable: Optional[float] = Field(default=None, ge=0, le=100)
    ghg: Optional[float] = None
    ghgUnit: Optional[str] = None

    @model_validator(mode="after")
    def check_quantities(self) -> "ElectricityRow":
        if self.cost is None and self.energy is None and self.area is None:
            raise ValueError("one of cost, energy or area is required")
        _check_unit(self, "cost", "costUnit")
        _check_unit(self, "energy", "energyUnit")
        _check_unit(self, "area", "areaUnit")
        _check_unit(self, "ghg", "ghgUnit")
        return self


class TransactionRow(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cost: float
    currency: str = Field(min_length=1)
    date: str = Field(min_length=1)
    description: Optional[str] = None
    normId: Optional[str] = None
    vat: str = Field(min_length=1)


ROW_SCHEMAS: Mapping[str, Type[BaseModel]] = {
    "FUEL": FuelRow,
    "HEATING": HeatingRow,
    "ELECTRICITY": ElectricityRow,
    "TRANSACTION": TransactionRow,
}


def _error_message(err: Mapping[str, Any]) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", "")
    return f"{loc}: {msg}" if loc else msg


class DataValidator:
    """Validates parsed rows against one named row schema."""

    def __init__(self, schema_name: str):
        if schema_name not in ROW_SCHEMAS:
            raise ValueError(f"Unknown row schema {schema_name!r}. Allowed: {sorted(ROW_SCHEMAS)}")
        self.schema_name = schema_name
        self.schema = ROW_SCHEMAS[schema_name]

    def validate(self, initial_data: Any, parsed_data: dict[str, Any]) -> None:
        try:
            self.schema.model_validate(parsed_data)
        except ValidationError as exc:
            errors = [_error_message(e) for e in exc.errors()]
            logger.debug("Invalid %s row %s: %s", self.schema_name, parsed_data, errors)
            if isinstance(initial_data, BaseModel):
                initial_data = initial_data.model_dump(mode="json", by_alias=True, exclude_none=True)
            raise DataTransformError(self.schema_name, initial_data, parsed_data, errors) from exc
