# carbon_api/services/starter.py
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, time, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.clients.normative_server import NormativeServerClient
from carbon_api.core.errors import BadRequestError, NotFoundError, UpstreamServiceError
from carbon_api.core.ids import utcnow
from carbon_api.crud.organization_account import get_organization_row
from carbon_api.schemas.starter import EntrySubmissionData, NormativeDataRefs, TimePeriod
from carbon_api.starter.parser.electricity import parse_electricity_data
from carbon_api.starter.parser.expenses import format_iso_utc, parse_expenses_data
from carbon_api.starter.parser.fuel import parse_fuel_data
from carbon_api.starter.parser.heating import parse_heating_data

logger = logging.getLogger(__name__)

STARTER_REPORT_TEMPLATE_HEADER_NAME = "Starter"

# Process-wide; the template id never changes while the normative server is up.
_report_template_id: Optional[str] = None


def reset_report_template_cache() -> None:
    global _report_template_id
    _report_template_id = None


def starter_report_name(time_period: TimePeriod, submitted_at: datetime) -> str:
    start = time_period.start.strftime("%Y-%m-%d")
    end = time_period.end.strftime("%Y-%m-%d")
    return f"Starter {start} to {end} (submitted at {format_iso_utc(submitted_at)})"


class StarterService:
    """Turns a starter wizard submission into data sources on the normative server."""

    def __init__(self, db: AsyncSession, normative_server: NormativeServerClient):
        self.db = db
        self.normative_server = normative_server

    async def submit_starter_data(
        self,
        auth_token: str,
        organization_id: uuid.UUID,
        data: EntrySubmissionData,
    ) -> NormativeDataRefs:
        """
        Parses the submission and uploads one data source per non-empty result.
        Raises DataTransformError before anything is uploaded if a parser produces an invalid row.
        """
        org = await get_organization_row(self.db, organization_id)
        if org is None:
            raise NotFoundError(f"Organization {organization_id} was not found.")
        if not org.country:
            raise BadRequestError(f"Organization {organization_id} does not have a country recorded.")

        sources: list[tuple[str, list[dict[str, Any]]]] = []
        for data_source_type, rows in (
            ("fuel", parse_fuel_data(data)),
            ("heating", parse_heating_data(org.country, data)),
            ("electricity", parse_electricity_data(org.country, data)),
            ("transaction", parse_expenses_data(data)),
        ):
            if rows:
                sources.append((data_source_type, rows))

        try:
            data_source_ids = await asyncio.gather(
                *(
                    self._process_data_source(auth_token, organization_id, data_source_type, rows)
                    for data_source_type, rows in sources
                )
            )
        except UpstreamServiceError as exc:
            logger.error("Error uploading the dataSources for organization %s: %s", organization_id, exc)
            raise UpstreamServiceError("Error uploading the starter data sources.") from exc

        # Reports are not created on submission.
        return NormativeDataRefs(data_sources=list(data_source_ids), report_id=None)

    async def _process_data_source(
        self,
        auth_token: str,
        organization_id: uuid.UUID,
        data_source_type: str,
        rows: list[dict[str, Any]],
    ) -> str:
        logger.info("Uploading new dataSource of type %s for organization %s", data_source_type, organization_id)
        data_source_id = await self.normative_server.create_data_source(
            auth_token,
            organization_id,
            name=f"{data_source_type}Data.json",
            data_source_type=data_source_type,
            data=rows,
        )
        logger.info("dataSource created with ID %s. Adding rows..", data_source_id)
        result = await self.normative_server.add_rows(auth_token, data_source_id, rows)
        logger.info("%s rows added.", result.get("insertCount"))
        return data_source_id

    async def find_starter_report_template(self, auth_token: str) -> str:
        global _report_template_id
        if _report_template_id is not None:
            return _report_template_id

        logger.debug("Retrieving Starter report template ID by lookup on normative server.")
        templates = await self.normative_server.get_report_templates(auth_token)
        logger.debug("Normative server returned %d report template records", len(templates))
        for template in templates:
            if template.header == STARTER_REPORT_TEMPLATE_HEADER_NAME:
                logger.debug("Starter template record has ID %s", template.id)
                _report_template_id = template.id
                return template.id

        raise UpstreamServiceError(f"could not find the '{STARTER_REPORT_TEMPLATE_HEADER_NAME}' report template")

    async def post_new_starter_report(
        self,
        auth_token: str,
        organization_id: uuid.UUID,
        time_period: TimePeriod,
        data_source_ids: Sequence[str],
    ) -> str:
        template_id = await self.find_starter_report_template(auth_token)
        start = datetime.combine(time_period.start.date(), time.min, tzinfo=timezone.utc)
        end = datetime.combine(time_period.end.date(), time.max, tzinfo=timezone.utc)
        report = {
            "name": starter_report_name(time_period, utcnow()),
            "reportSection": template_id,
            "dataSources": [str(x) for x in data_source_ids],
            "startDate": format_iso_utc(start),
            "endDate": format_iso_utc(end),
        }
        created = await self.normative_server.post_report(auth_token, organization_id, report)
        if not created.id:
            raise UpstreamServiceError(f"error when creating report for org {organization_id}")
        return created.id
