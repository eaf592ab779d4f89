"""Pydantic schemas for dimension remappings and field values."""
from typing import Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Dimension(BaseModel):
    """How a field's stored values are remapped for display.

    ``internal`` dimensions label values from the field's own FieldValues;
    ``external`` dimensions delegate to ``human_readable_field_id``.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    field_id: int
    name: str
    type: Literal["internal", "external"]
    human_readable_field_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_target(self):
        if self.type == "external" and self.human_readable_field_id is None:
            raise ValueError("external dimensions need a human_readable_field_id")
        if self.type == "internal" and self.human_readable_field_id is not None:
            raise ValueError("internal dimensions cannot reference another field")
        return self


class FieldValues(BaseModel):
    """Distinct values observed for a field, plus optional labels aligned by position."""
    model_config = ConfigDict(frozen=True)

    field_id: int
    values: list[Any] = Field(default_factory=list)
    human_readable_values: list[str] = Field(default_factory=list)


class DimensionRequest(BaseModel):
    name: str
    type: Literal["internal", "external"]
    human_readable_field_id: Optional[int] = None
    human_readable_values: Optional[list[str]] = None
