"""Pydantic schemas for tables, fields and saved questions (cards)."""
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field as PydanticField

from models.fingerprint import Fingerprint

VisibilityType = Literal["normal", "details-only", "sensitive", "retired"]
TableVisibility = Literal["hidden", "technical", "cruft"]

# Saved questions live in a pseudo-database so the client can treat them as tables
VIRTUAL_DATABASE_ID = -1337
VIRTUAL_SCHEMA = "Everything else"
VIRTUAL_TABLE_PREFIX = "card__"


class Field(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    table_id: int
    name: str
    display_name: str
    description: Optional[str] = None
    base_type: str
    special_type: Optional[str] = None
    visibility_type: VisibilityType = "normal"
    fk_target_field_id: Optional[int] = None
    position: int = 0
    active: bool = True
    preview_display: bool = True
    parent_id: Optional[int] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    fingerprint: Optional[Fingerprint] = None
    fingerprint_version: int = 0
    last_analyzed: Optional[datetime] = None


class Table(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    db_id: int
    name: str
    schema_name: Optional[str] = PydanticField(None, alias="schema")
    display_name: str
    description: Optional[str] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    entity_type: Optional[str] = None
    entity_name: Optional[str] = None
    visibility_type: Optional[TableVisibility] = None
    active: bool = True
    show_in_getting_started: bool = False
    rows: Optional[int] = None


class ResultColumn(BaseModel):
    """One column of a saved question's result set."""
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    base_type: str


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    database_id: int
    description: Optional[str] = None
    result_metadata: list[ResultColumn] = PydanticField(default_factory=list)

    @property
    def virtual_table_id(self) -> str:
        return f"{VIRTUAL_TABLE_PREFIX}{self.id}"


def parse_virtual_table_id(table_id: str) -> Optional[int]:
    """Return the card id for ``card__<id>`` identifiers, None for anything else."""
    if not table_id.startswith(VIRTUAL_TABLE_PREFIX):
        return None
    suffix = table_id[len(VIRTUAL_TABLE_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


class ReflectedColumn(BaseModel):
    """A column as seen by the schema inspector, before it becomes a Field."""
    name: str
    database_type: str
    base_type: str
    is_nullable: bool = True
    is_primary_key: bool = False
    foreign_key_ref: Optional[tuple[str, str]] = None   # (referred_table, referred_column)


class ReflectedTable(BaseModel):
    name: str
    schema_name: Optional[str] = None
    columns: list[ReflectedColumn]
    row_count: Optional[int] = None
