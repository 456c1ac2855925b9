# softflow/validation.py
from __future__ import annotations

from typing import Any, TypeVar

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ApiValidationError(ValueError):
    """400-level input problem, carrying per-field errors."""

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


def field_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to [{field, message}] (JSON-safe)."""
    out = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
        out.append({"field": loc or "body", "message": err.get("msg", "Invalid value")})
    return out


def parse_body(schema: type[SchemaT], message: str, data: dict | None = None) -> SchemaT:
    """
    Validate the JSON request body (or ``data``) against ``schema``.

    Raises ApiValidationError, rendered as 400 by the app error handler.
    """
    payload = data if data is not None else request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ApiValidationError(message, [{"field": "body", "message": "Expected a JSON object"}])
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ApiValidationError(message, field_errors(exc)) from exc


def changes_from(model: BaseModel) -> dict[str, Any]:
    """Only the fields the client actually sent (partial updates)."""
    return model.model_dump(exclude_unset=True)
