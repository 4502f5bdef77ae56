from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_ALPHA2_RE = re.compile(r"^[A-Z]{2}$")


def parse_iso_datetime(value: str) -> datetime:
    """
    Accepts an ISO-8601 date ("2022-01-31") or date-time ("2022-01-31T00:00:00.000Z").
    Naive values are taken as UTC.
    """
    v = value.strip()
    if v.endswith("Z") or v.endswith("z"):
        v = v[:-1] + "+00:00"
    dt = datetime.fromisoformat(v)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class YesNoUnknown(str, enum.Enum):
    YES = "YES"
    NO = "NO"
    UNKNOWN = "UNKNOWN"


class HeatingType(str, enum.Enum):
    DISTRICT = "DISTRICT"
    NATURAL_GAS = "NATURAL GAS"
    ELECTRICITY = "ELECTRICITY"
    NONE = "NONE"
    UNKNOWN = "UNKNOWN"


class _SubmissionModel(BaseModel):
    # The wizard client sends camelCase keys.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValueWithUnit(_SubmissionModel):
    value: float
    unit: str


class TimePeriod(_SubmissionModel):
    start_date: str
    end_date: str

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_iso_date(cls, v: str) -> str:
        try:
            parse_iso_datetime(v)
        except ValueError:
            raise ValueError("Must be an ISO-8601 date string (YYYY-MM-DD).")
        return v

    @property
    def start(self) -> datetime:
        return parse_iso_datetime(self.start_date)

    @property
    def end(self) -> datetime:
        return parse_iso_datetime(self.end_date)


class ElectricityUsage(_SubmissionModel):
    has_renewable: Optional[YesNoUnknown] = None
    has_spend: Optional[YesNoUnknown] = None
    spend: Optional[ValueWithUnit] = None
    energy: Optional[ValueWithUnit] = None


class FacilitiesUsage(_SubmissionModel):
    has_facilities: Optional[YesNoUnknown] = None
    size: Optional[ValueWithUnit] = None


class FuelUsage(_SubmissionModel):
    # Owns or keeps long-term leases on vehicles
    has_vehicles: Optional[YesNoUnknown] = None
    has_distance: Optional[YesNoUnknown] = None
    distance: Optional[ValueWithUnit] = None
    has_spend: Optional[YesNoUnknown] = None
    spend: Optional[ValueWithUnit] = None
    volume: Optional[ValueWithUnit] = None


class MachineryUsage(_SubmissionModel):
    has_machinery: Optional[YesNoUnknown] = None
    has_spend: Optional[YesNoUnknown] = None
    spend: Optional[ValueWithUnit] = None
    # litres; petrol is assumed
    has_volume: Optional[YesNoUnknown] = None
    volume: Optional[ValueWithUnit] = None


class HeatingUsage(_SubmissionModel):
    has_spend: Optional[YesNoUnknown] = None
    spend: Optional[ValueWithUnit] = None
    energy: Optional[ValueWithUnit] = None
    type: Optional[HeatingType] = None


class ExpenseUsage(_SubmissionModel):
    # The question shown to the user; kept for tracing where the number came from.
    description: Optional[str] = None
    norm_id: Optional[str] = None
    spend: ValueWithUnit


class EntrySubmissionData(_SubmissionModel):
    """A starter wizard submission. Only the time period is required."""

    time_period: TimePeriod

    number_of_employees: Optional[int] = None
    country_of_registration: Optional[str] = None
    spend: Optional[ValueWithUnit] = None
    revenue: Optional[ValueWithUnit] = None

    electricity: Optional[ElectricityUsage] = None
    facilities: Optional[FacilitiesUsage] = None
    fuel: Optional[FuelUsage] = None
    heating: Optional[HeatingUsage] = None
    machinery: Optional[MachineryUsage] = None
    expenses: Optional[List[ExpenseUsage]] = None

    @field_validator("country_of_registration")
    @classmethod
    def validate_country(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        if not _ALPHA2_RE.match(v):
            raise ValueError("Must be an ISO 3166-1 alpha-2 country code (e.g., SE).")
        return v

    def to_client_state(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NormativeDataRefs(BaseModel):
    """Ids of what a submission created on the normative server."""

    data_sources: List[str] = Field(default_factory=list)
    report_id: Optional[str] = None
