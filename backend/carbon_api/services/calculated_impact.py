# carbon_api/services/calculated_impact.py
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.clients.normative_server import NormativeServerClient
from carbon_api.crud.calculated_impact import list_emission_records
from carbon_api.schemas.data_source import TERMINAL_DATA_SOURCE_STATUSES
from carbon_api.schemas.impact import (
    CO2_KG,
    EmissionCalculation,
    EmissionRecord,
    EmissionsByCategory,
    EmissionsByScope,
    EmissionValue,
)

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "unknown"


def _sum_emissions(records: Iterable[EmissionRecord]) -> float:
    total = 0.0
    for r in records:
        total += r.value if r.value is not None else 0.0
    return total


def _group_by(records: Iterable[EmissionRecord], key) -> dict[str, list[EmissionRecord]]:
    groups: dict[str, list[EmissionRecord]] = {}
    for r in records:
        groups.setdefault(key(r), []).append(r)
    return groups


def _scope_of(record: EmissionRecord) -> str:
    return record.scope if record.scope is not None else UNKNOWN_GROUP


def _category_of(record: EmissionRecord) -> str:
    return record.category if record.category is not None else UNKNOWN_GROUP


def aggregate_impacts(records: Sequence[EmissionRecord]) -> EmissionCalculation:
    """
    Two-level breakdown: scope, then category within each scope.

    Missing scope/category group under "unknown"; a missing value counts as 0.
    The total is the sum of the scope totals. Group order is not significant.
    """
    by_scope: list[EmissionsByScope] = []
    for scope, scope_records in _group_by(records, _scope_of).items():
        categories = [
            EmissionsByCategory(
                category=category,
                emission=EmissionValue(value=_sum_emissions(category_records), unit=CO2_KG),
            )
            for category, category_records in _group_by(scope_records, _category_of).items()
        ]
        by_scope.append(
            EmissionsByScope(
                scope=scope,
                emission=EmissionValue(value=_sum_emissions(scope_records), unit=CO2_KG),
                category_breakdown=categories,
            )
        )

    total = 0.0
    for s in by_scope:
        total += s.emission.value

    return EmissionCalculation(
        total_emissions=EmissionValue(value=total, unit=CO2_KG),
        emissions_by_scope=by_scope,
    )


def is_terminal_status(status) -> bool:
    return status in TERMINAL_DATA_SOURCE_STATUSES


class CalculatedImpactService:
    def __init__(self, db: AsyncSession, normative_server: NormativeServerClient):
        self.db = db
        self.normative_server = normative_server

    async def get_impact_for_data_sources(
        self,
        organization_id: uuid.UUID,
        data_source_ids: Sequence[str],
    ) -> EmissionCalculation:
        logger.info("Fetching calculated impacts for %d dataSources from the database.", len(data_source_ids))
        logger.debug("dataSources: %s", list(data_source_ids))
        records = await list_emission_records(self.db, organization_id, data_source_ids)
        logger.info("Found %d calculated impacts.", len(records))
        return aggregate_impacts(records)

    async def is_calculation_complete_for_data_sources(
        self,
        auth_token: str,
        data_source_ids: Sequence[str],
    ) -> bool:
        """
        True iff every data source has finished processing ("succeeded" or "failed").
        An empty list is complete. A failed lookup propagates and cancels the rest.
        """
        lookups = [
            asyncio.ensure_future(self.normative_server.get_data_source(auth_token, ds_id)) for ds_id in data_source_ids
        ]
        try:
            data_sources = await asyncio.gather(*lookups)
        except Exception:
            for lookup in lookups:
                lookup.cancel()
            await asyncio.gather(*lookups, return_exceptions=True)
            raise
        complete = True
        for ds in data_sources:
            logger.info("DataSource %s has status %s", ds.id, ds.status)
            complete = complete and is_terminal_status(ds.status)
        return complete
