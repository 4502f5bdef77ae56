# carbon_api/services/entry.py
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.clients.normative_server import NormativeServerClient
from carbon_api.core.errors import BadRequestError, NotFoundError, UpstreamServiceError
from carbon_api.core.ids import is_object_ids_equals, utcnow
from carbon_api.crud.starter_entry import delete_entries, get_entry, list_entries
from carbon_api.models.starter_entry import StarterEntry
from carbon_api.schemas.impact import StarterImpactResponse
from carbon_api.schemas.starter import EntrySubmissionData, NormativeDataRefs
from carbon_api.services.calculated_impact import CalculatedImpactService

logger = logging.getLogger(__name__)


class EntryService:
    def __init__(self, db: AsyncSession, normative_server: NormativeServerClient):
        self.db = db
        self.normative_server = normative_server

    async def get_starter_entries(self, organization_id: uuid.UUID) -> list[StarterEntry]:
        return await list_entries(self.db, organization_id)

    async def get_starter_entry(self, organization_id: uuid.UUID, entry_id: uuid.UUID) -> StarterEntry:
        logger.debug("Fetching the starter entry %s for organization %s", entry_id, organization_id)
        entry = await get_entry(self.db, entry_id)
        if entry is None:
            raise NotFoundError(f"No entry found with id {entry_id}")
        if not is_object_ids_equals(entry.organization_id, organization_id):
            raise BadRequestError("The requested starter entry does not belong to the organization in the request!")
        return entry

    async def create_starter_entry(
        self,
        user_id: uuid.UUID,
        organization_id: uuid.UUID,
        data: EntrySubmissionData,
        refs: NormativeDataRefs,
    ) -> StarterEntry:
        now = utcnow()
        entry = StarterEntry(
            organization_id=organization_id,
            created_by=user_id,
            created_at=now,
            last_updated_by=user_id,
            last_updated_at=now,
            covered_start=data.time_period.start,
            covered_end=data.time_period.end,
            report_id=refs.report_id,
            data_sources=[str(x) for x in refs.data_sources],
            raw_client_state=data.to_client_state(),
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        logger.info("Created starter entry %s for organization %s", entry.id, organization_id)
        return entry

    async def update_starter_entry(
        self,
        auth_token: str,
        user_id: uuid.UUID,
        organization_id: uuid.UUID,
        entry_id: uuid.UUID,
        data: Optional[EntrySubmissionData],
        refs: NormativeDataRefs,
    ) -> StarterEntry:
        """
        Replaces the entry's submission and references. The data sources and
        report it pointed to before are deleted afterwards, best effort.
        """
        logger.info(
            "User %s requests update of starter entry %s for organization %s", user_id, entry_id, organization_id
        )

        entry = await get_entry(self.db, entry_id)
        if entry is None:
            raise NotFoundError("Attempted to update an entry that doesn't exist.")
        if not is_object_ids_equals(entry.organization_id, organization_id):
            raise BadRequestError("Cannot change the organization associated with a starter entry.")
        if data is None or data.time_period is None:
            raise BadRequestError("Updates to an entry must always specify a time period.")

        old_data_sources = list(entry.data_sources or [])
        old_report_id = entry.report_id

        entry.last_updated_by = user_id
        entry.last_updated_at = utcnow()
        entry.covered_start = data.time_period.start
        entry.covered_end = data.time_period.end
        entry.report_id = refs.report_id
        entry.data_sources = [str(x) for x in refs.data_sources]
        entry.raw_client_state = data.to_client_state()
        await self.db.commit()
        await self.db.refresh(entry)
        logger.info("Successfully updated the starter entry %s.", entry.id)

        await self._cleanup_old_references(auth_token, entry.organization_id, old_data_sources, old_report_id)
        return entry

    async def _cleanup_old_references(
        self,
        auth_token: str,
        organization_id: uuid.UUID,
        data_source_ids: list[str],
        report_id: Optional[str],
    ) -> None:
        # Failures here never fail the update.
        try:
            existing = await self.normative_server.get_data_sources(auth_token, organization_id)
            deletions = []
            for ds_id in data_source_ids:
                ds = next((x for x in existing if is_object_ids_equals(x.id, ds_id)), None)
                if ds is None:
                    continue  # already gone
                deletions.append(self.normative_server.delete_data_source(auth_token, ds))
            if report_id:
                deletions.append(self.normative_server.delete_report(auth_token, report_id))
            await asyncio.gather(*deletions)
        except UpstreamServiceError as exc:
            logger.error(
                "Failed to delete at least one of the old dataSources (%s) or the old report %s: %s",
                data_source_ids,
                report_id,
                exc,
            )

    async def delete_starter_entries(self, organization_id: uuid.UUID) -> int:
        deleted = await delete_entries(self.db, organization_id)
        await self.db.commit()
        logger.info("Deleted %d starter entries for organization %s", deleted, organization_id)
        return deleted

    async def get_starter_entry_impact(
        self,
        auth_token: str,
        organization_id: uuid.UUID,
        entry_id: uuid.UUID,
    ) -> StarterImpactResponse:
        entry = await self.get_starter_entry(organization_id, entry_id)
        data_sources = list(entry.data_sources or [])
        impacts = CalculatedImpactService(self.db, self.normative_server)

        calculation = await impacts.get_impact_for_data_sources(organization_id, data_sources)
        complete = await impacts.is_calculation_complete_for_data_sources(auth_token, data_sources)

        return StarterImpactResponse(
            starter_entry_id=str(entry.id),
            calculation_complete=complete,
            emission_calculation=calculation,
        )
