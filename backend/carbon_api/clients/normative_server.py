"""Client for the normative server, which owns data sources, reports and report templates.

Every call forwards the caller's Authorization header; the normative server
does its own authorization on top of ours.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from carbon_api.core.config import settings
from carbon_api.core.errors import UpstreamServiceError
from carbon_api.schemas.data_source import DataSource, Report, ReportTemplate

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class NormativeServerClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Scheme included (https://), path excluded (/api/...).
        self.base_url = (base_url or settings.NORMATIVE_SERVER_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.NORMATIVE_SERVER_TIMEOUT_SECONDS
        self._transport = transport

    # -----------------------------
    # URLs
    # -----------------------------
    def org_data_sources_url(self, organization_id) -> str:
        return f"{self.base_url}/api/organizationAccounts/{organization_id}/dataSources"

    def data_source_url(self, data_source_id, is_transaction: bool = False) -> str:
        if is_transaction:
            return f"{self.base_url}/api/transactionSources/{data_source_id}"
        return f"{self.base_url}/api/dataSources/{data_source_id}"

    def rows_url(self, data_source_id) -> str:
        return f"{self.base_url}/api/dataSources/{data_source_id}/rows"

    def org_reports_url(self, organization_id) -> str:
        return f"{self.base_url}/api/organizationAccounts/{organization_id}/reports"

    def report_url(self, report_id) -> str:
        return f"{self.base_url}/api/reports/{report_id}"

    def report_templates_url(self) -> str:
        return f"{self.base_url}/api/reportTemplates"

    # -----------------------------
    # Transport
    # -----------------------------
    async def _request(self, method: str, url: str, auth_token: str, **kwargs) -> httpx.Response:
        headers = {"Authorization": auth_token, **kwargs.pop("headers", {})}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Normative server request %s %s failed: %s", method, url, exc)
            raise UpstreamServiceError(f"Normative server request failed: {method} {url}") from exc

        if resp.status_code >= 400:
            logger.error("Normative server returned %s for %s %s: %s", resp.status_code, method, url, resp.text)
            raise UpstreamServiceError(
                {"error": "NORMATIVE_SERVER_ERROR", "status_code": resp.status_code, "url": url}
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamServiceError("Normative server returned a non-JSON response") from exc

    @staticmethod
    def _model(model: type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.error("Unexpected %s from normative server: %s", model.__name__, exc)
            raise UpstreamServiceError(f"Normative server returned an invalid {model.__name__}") from exc

    def _models(self, model: type[ModelT], payload: Any) -> list[ModelT]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise UpstreamServiceError(f"Normative server returned an invalid {model.__name__} list")
        return [self._model(model, x) for x in payload]

    # -----------------------------
    # Data sources
    # -----------------------------
    async def get_data_source(self, auth_token: str, data_source_id) -> DataSource:
        url = self.data_source_url(data_source_id)
        logger.debug("Fetching dataSource from %s", url)
        resp = await self._request("GET", url, auth_token)
        return self._model(DataSource, self._json(resp))

    async def get_data_sources(self, auth_token: str, organization_id) -> list[DataSource]:
        url = self.org_data_sources_url(organization_id)
        logger.debug("Fetching all dataSources from %s", url)
        resp = await self._request("GET", url, auth_token)
        return self._models(DataSource, self._json(resp))

    async def create_data_source(
        self,
        auth_token: str,
        organization_id,
        name: str,
        data_source_type: str,
        data: Any,
    ) -> str:
        """Uploads `data` as a JSON file; returns the id of the created data source."""
        payload = json.dumps(data).encode("utf-8")
        resp = await self._request(
            "POST",
            self.org_data_sources_url(organization_id),
            auth_token,
            data={"dataSourceType": data_source_type, "name": name, "fileType": "json"},
            files={"file": (f"{name}.json", payload, "application/json")},
        )
        body = self._json(resp) or {}
        ds_id = body.get("_id") if isinstance(body, dict) else None
        if not ds_id:
            raise UpstreamServiceError(
                f"error when uploading data source of type {data_source_type} for org {organization_id}"
            )
        return str(ds_id)

    async def add_rows(self, auth_token: str, data_source_id, rows: list[dict[str, Any]]) -> dict[str, Any]:
        resp = await self._request(
            "PUT",
            self.rows_url(data_source_id),
            auth_token,
            content=json.dumps(rows).encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        body = self._json(resp) if resp.content else {}
        return body if isinstance(body, dict) else {}

    async def delete_data_source(self, auth_token: str, data_source: DataSource) -> None:
        if not data_source.id:
            logger.error("Missing dataSource id; cannot delete data source %s", data_source)
            return
        logger.debug("Deleting dataSource %s", data_source.id)
        await self._request(
            "DELETE",
            self.data_source_url(data_source.id, is_transaction=data_source.is_transaction_source),
            auth_token,
        )

    async def delete_org_data_sources(self, auth_token: str, organization_id) -> None:
        """Deletes every data source of the organization; individual failures are logged and skipped."""
        data_sources = await self.get_data_sources(auth_token, organization_id)
        results = await asyncio.gather(
            *(self.delete_data_source(auth_token, ds) for ds in data_sources),
            return_exceptions=True,
        )
        for ds, result in zip(data_sources, results):
            if isinstance(result, Exception):
                logger.error("Error deleting dataSource %s of organization %s: %s", ds.id, organization_id, result)

    # -----------------------------
    # Reports
    # -----------------------------
    async def post_report(self, auth_token: str, organization_id, report: dict[str, Any]) -> Report:
        resp = await self._request(
            "POST",
            self.org_reports_url(organization_id),
            auth_token,
            content=json.dumps(report, default=str).encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        return self._model(Report, self._json(resp))

    async def get_report_templates(self, auth_token: str) -> list[ReportTemplate]:
        resp = await self._request("GET", self.report_templates_url(), auth_token)
        return self._models(ReportTemplate, self._json(resp))

    async def get_reports(self, auth_token: str, organization_id) -> list[Report]:
        url = self.org_reports_url(organization_id)
        logger.debug("Fetching all reports from %s", url)
        resp = await self._request("GET", url, auth_token)
        return self._models(Report, self._json(resp))

    async def delete_report(self, auth_token: str, report_id) -> None:
        logger.debug("Deleting report %s", report_id)
        await self._request("DELETE", self.report_url(report_id), auth_token)

    async def delete_org_reports(self, auth_token: str, organization_id) -> None:
        reports = await self.get_reports(auth_token, organization_id)
        for report in reports:
            if not report.id:
                logger.error("Missing report id; cannot delete report %s", report)
                continue
            try:
                await self.delete_report(auth_token, report.id)
            except UpstreamServiceError as exc:
                logger.error("Error deleting report %s: %s", report.id, exc)
