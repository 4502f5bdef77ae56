# carbon_api/crud/calculated_impact.py
from __future__ import annotations

import uuid
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.models.calculated_impact import CalculatedImpact
from carbon_api.schemas.impact import EmissionRecord


def _to_emission_record(row: CalculatedImpact) -> EmissionRecord:
    return EmissionRecord(scope=row.ghg_scope, category=row.category, value=row.impact_value)


async def list_emission_records(
    db: AsyncSession,
    organization_id: uuid.UUID,
    data_source_ids: Iterable[str],
) -> list[EmissionRecord]:
    """
    Impacts of the given data sources. Filtering on the organization as well
    keeps the lookup on the (organization_id) index.
    """
    ids = [str(x) for x in data_source_ids]
    if not ids:
        return []
    stmt = (
        select(CalculatedImpact)
        .where(CalculatedImpact.organization_id == organization_id)
        .where(CalculatedImpact.data_source_id.in_(ids))
    )
    rows = (await db.execute(stmt)).scalars().all()
    return [_to_emission_record(r) for r in rows]
