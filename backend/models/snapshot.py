"""Immutable inputs for metadata assembly.

The repository builds a TableSnapshot per request; the core reads nothing else.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field as PydanticField

from models.connection import Database
from models.dimension import Dimension, FieldValues
from models.table import Field, Table


class TableSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    database: Database
    table: Table
    fields: tuple[Field, ...] = ()
    dimensions: dict[int, Dimension] = PydanticField(default_factory=dict)        # field_id → dimension
    field_values: dict[int, FieldValues] = PydanticField(default_factory=dict)    # field_id → values
    # Fields and tables of the same database referenced by FKs, external dimensions or incoming FKs
    related_fields: dict[int, Field] = PydanticField(default_factory=dict)
    related_tables: dict[int, Table] = PydanticField(default_factory=dict)


class TargetState(str, Enum):
    RESOLVED = "resolved"
    PENDING_SYNC = "pending_sync"
    PERMISSION_DENIED = "permission_denied"


class TargetResolution(BaseModel):
    """Outcome of following a field's ``fk_target_field_id``."""
    model_config = ConfigDict(frozen=True)

    state: TargetState
    field: Optional[Field] = None
