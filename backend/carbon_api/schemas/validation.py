from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class FieldError(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel, Generic[ModelT]):
    value: Optional[ModelT] = None
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def validation_messages(exc: ValidationError) -> list[FieldError]:
    return [FieldError(field=_field_path(err.get("loc", ())), message=err.get("msg", "")) for err in exc.errors()]


def validate_payload(model: Type[ModelT], payload: Any) -> ValidationResult[ModelT]:
    """
    Validates an untrusted payload at the boundary.
    Returns the model or the list of field errors; never raises for bad input.
    """
    try:
        return ValidationResult[model](value=model.model_validate(payload))
    except ValidationError as exc:
        return ValidationResult[model](errors=validation_messages(exc))
