"""Command Schema — validates a structured command before it reaches the query layer.

Invariants:
    - command is one of select, insert, update, delete
    - table matches ^[A-Za-z0-9_]+(\\.)*[A-Za-z0-9_]+$
    - where, when present, is a list of lists; values a mapping; columns a list of strings
    - insert and update require non-empty values
    - validate_command raises jsdb ValidationError naming the offending field

Design Decisions:
    - Pydantic model over hand-written checks: field-level errors for free
    - where entries are only shape-checked here; arity and joins belong to the query builder
    - Unknown request keys are ignored, a request may carry transport parameters
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from jsdb.core.domain_types import Command
from jsdb.core.errors import ValidationError

TABLE_NAME_PATTERN = r"^[A-Za-z0-9_]+(\.)*[A-Za-z0-9_]+$"

_FIELD_MESSAGES = {
    "command": "Bad command",
    "table": "Bad table name, valid: characters, numbers, _ and .",
    "where": "Invalid 'where' syntax",
    "values": "Invalid 'values' syntax",
    "columns": "Invalid 'columns' syntax",
}


class QueryCommand(BaseModel):
    """A parsed request: command, table, and optional where/values/columns."""
    command: Command
    table: str = Field(pattern=TABLE_NAME_PATTERN)
    where: list[list[Any]] | None = None
    values: dict[str, Any] | None = Field(None, validate_default=True)
    columns: list[str] | None = None

    @field_validator("values")
    @classmethod
    def require_values_for_writes(
        cls, v: dict[str, Any] | None, info: ValidationInfo,
    ) -> dict[str, Any] | None:
        if info.data.get("command") in (Command.INSERT, Command.UPDATE) and not v:
            raise ValueError("Values required")
        return v

    @property
    def has_where(self) -> bool:
        return bool(self.where)


def validate_command(request: dict) -> QueryCommand:
    """Validate a raw request mapping; first failing field wins."""
    if not isinstance(request, dict):
        raise ValidationError("Request must be an object", "request")
    try:
        return QueryCommand.model_validate(request)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(loc) for loc in error["loc"]) or "request"
        root = field.split(".")[0]
        message = _FIELD_MESSAGES.get(root, "Invalid request")
        if root == "values" and "Values required" in error["msg"]:
            message = "Values required"
        raise ValidationError(message, field) from e
