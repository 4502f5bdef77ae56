# backend/carbon_api/core/errors.py
from __future__ import annotations

import json
from typing import Any, Sequence


class ServiceError(Exception):
    """Base for errors raised by services; the HTTP layer maps subclasses to status codes."""

    status_code: int = 500
    default_detail: str = "Internal error"

    def __init__(self, detail: Any = None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(self.detail if isinstance(self.detail, str) else json.dumps(self.detail, default=str))


class UnauthenticatedError(ServiceError):
    status_code = 401
    default_detail = "User not authenticated"


class AuthorizationError(ServiceError):
    status_code = 403
    default_detail = "Forbidden"


class ForbiddenError(AuthorizationError):
    pass


class NotFoundError(ServiceError):
    status_code = 404
    default_detail = "Not found"


class BadRequestError(ServiceError):
    status_code = 400
    default_detail = "Bad request"


class ConflictError(ServiceError):
    status_code = 409
    default_detail = "Conflict"


class UpstreamServiceError(ServiceError):
    """An external service (normative server) failed or returned an unusable response."""

    status_code = 502
    default_detail = "Upstream service error"


class DataTransformError(ServiceError):
    """A starter parser produced a data-source row that does not satisfy its row schema."""

    status_code = 422

    def __init__(
        self,
        schema_name: str,
        initial_data: Any,
        parsed_data: dict[str, Any],
        validation_errors: Sequence[str],
    ):
        self.schema_name = schema_name
        self.initial_data = initial_data
        self.parsed_data = parsed_data
        self.validation_errors = list(validation_errors)
        super().__init__(
            "\n".join(
                [
                    f"Unable to parse valid {schema_name} data from the provided data.",
                    f"Validation Errors: {json.dumps(self.validation_errors)}",
                    f"Data provided: {json.dumps(initial_data, default=str)}",
                    f"Parsed data (invalid): {json.dumps(parsed_data, default=str)}",
                ]
            )
        )
