"""Pydantic schemas for the table/field metadata responses."""
from datetime import datetime
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field as PydanticField

from models.connection import Database
from models.fingerprint import Fingerprint


class DimensionOption(BaseModel):
    name: str
    mbql: Optional[list[Any]] = None
    type: str


class DimensionDescriptor(BaseModel):
    id: int
    name: str
    type: str
    field_id: int
    human_readable_field_id: Optional[int] = None


class FieldDetails(BaseModel):
    id: int
    table_id: int
    name: str
    display_name: str
    description: Optional[str] = None
    base_type: str
    special_type: Optional[str] = None
    visibility_type: str = "normal"
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


class FieldMetadata(FieldDetails):
    target: Optional[FieldDetails] = None
    dimensions: Union[DimensionDescriptor, list[DimensionDescriptor]] = PydanticField(default_factory=list)
    values: list[list[Any]] = PydanticField(default_factory=list)
    dimension_options: list[str] = PydanticField(default_factory=list)
    default_dimension_option: Optional[str] = None


class TableSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    db_id: int
    name: str
    display_name: str
    schema_name: Optional[str] = PydanticField(None, alias="schema")
    rows: Optional[int] = None
    entity_type: Optional[str] = None
    visibility_type: Optional[str] = None
    active: bool = True


class TableDetails(TableSummary):
    description: Optional[str] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    entity_name: Optional[str] = None
    show_in_getting_started: bool = False
    pk_field: Optional[int] = None
    db: Optional[Database] = None


class TableQueryMetadata(TableDetails):
    fields: list[FieldMetadata] = PydanticField(default_factory=list)
    dimension_options: dict[str, DimensionOption] = PydanticField(default_factory=dict)


class VirtualField(BaseModel):
    name: str
    display_name: str
    base_type: str
    table_id: str
    id: list[Any]
    special_type: Optional[str] = None


class VirtualTableMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    db_id: int
    display_name: str
    schema_name: str = PydanticField(alias="schema")
    description: Optional[str] = None
    fields: list[VirtualField] = PydanticField(default_factory=list)


class FkField(FieldDetails):
    table: TableDetails


class FkRelationship(BaseModel):
    origin_id: int
    destination_id: int
    relationship: str = "Mt1"
    origin: FkField
    destination: FkField
