from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CO2_KG = "co2 kg"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmissionRecord(BaseModel):
    """One calculated impact, reduced to what aggregation needs. Every field may be missing."""

    scope: Optional[str] = None
    category: Optional[str] = None
    value: Optional[float] = None


class EmissionValue(_CamelModel):
    value: float
    unit: str = CO2_KG


class EmissionsByCategory(_CamelModel):
    category: str
    emission: EmissionValue


class EmissionsByScope(_CamelModel):
    scope: str
    emission: EmissionValue
    category_breakdown: List[EmissionsByCategory] = Field(default_factory=list)


class EmissionCalculation(_CamelModel):
    total_emissions: EmissionValue
    emissions_by_scope: List[EmissionsByScope] = Field(default_factory=list)


class StarterImpactResponse(_CamelModel):
    starter_entry_id: str
    calculation_complete: bool
    emission_calculation: EmissionCalculation
