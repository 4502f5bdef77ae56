# carbon_api/crud/starter_entry.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.models.starter_entry import StarterEntry


async def list_entries(db: AsyncSession, organization_id: uuid.UUID) -> list[StarterEntry]:
    stmt = (
        select(StarterEntry)
        .where(StarterEntry.organization_id == organization_id)
        .order_by(StarterEntry.created_at, StarterEntry.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_entry(db: AsyncSession, entry_id: uuid.UUID) -> Optional[StarterEntry]:
    return await db.get(StarterEntry, entry_id)


async def delete_entries(db: AsyncSession, organization_id: uuid.UUID) -> int:
    res = await db.execute(delete(StarterEntry).where(StarterEntry.organization_id == organization_id))
    return int(res.rowcount or 0)
