"""
Metadata Assembler — builds the ``query_metadata`` payload for a table.

Pure functions over a TableSnapshot: no I/O, no shared state, so callers may
run them concurrently. Every ordering in the output is explicit (fields by
position, option indexes numerically) so identical snapshots serialise to
identical bytes.
"""
import logging
from typing import AbstractSet, Iterable, Optional

from core.binning import dimension_options_for_response, select_dimension_options
from core.dimensions import dimension_descriptor, field_values_for_response, resolve_target
from core.types import isa
from models.connection import Database
from models.metadata import (
    FieldDetails,
    FieldMetadata,
    FkField,
    FkRelationship,
    TableDetails,
    TableQueryMetadata,
    TableSummary,
    VirtualField,
    VirtualTableMetadata,
)
from models.snapshot import TableSnapshot, TargetState
from models.table import Card, Field, Table, VIRTUAL_DATABASE_ID, VIRTUAL_SCHEMA

logger = logging.getLogger(__name__)


def field_sort_key(field: Field) -> tuple:
    return (field.position, field.name, field.id)


def visible_fields(fields: Iterable[Field], include_sensitive_fields: bool = False) -> list[Field]:
    """Active fields in position order; retired always dropped, sensitive unless asked for."""
    result = [
        f for f in fields
        if f.active
        and f.visibility_type != "retired"
        and (include_sensitive_fields or f.visibility_type != "sensitive")
    ]
    return sorted(result, key=field_sort_key)


def pk_field_id(fields: Iterable[Field]) -> Optional[int]:
    for f in sorted(fields, key=field_sort_key):
        if f.active and isa(f.special_type, "type/PK"):
            return f.id
    return None


def table_summary(table: Table) -> TableSummary:
    return TableSummary(**table.model_dump())


def table_details(table: Table, database: Optional[Database], fields: Iterable[Field] = ()) -> TableDetails:
    return TableDetails(**table.model_dump(), pk_field=pk_field_id(fields), db=database)


def field_details(field: Field) -> FieldDetails:
    return FieldDetails(**field.model_dump())


def field_metadata(
    field: Field,
    snapshot: TableSnapshot,
    readable_table_ids: Optional[AbstractSet[int]] = None,
) -> FieldMetadata:
    dimension = snapshot.dimensions.get(field.id)
    default_option, options = select_dimension_options(field, snapshot.database)

    target = None
    resolution = resolve_target(field, snapshot.related_fields, readable_table_ids)
    if resolution is not None:
        if resolution.state is TargetState.RESOLVED:
            target = field_details(resolution.field)
        else:
            logger.debug("Target of field %d suppressed: %s", field.id, resolution.state.value)

    return FieldMetadata(
        **field.model_dump(),
        target=target,
        dimensions=dimension_descriptor(field, dimension),
        values=field_values_for_response(field, dimension, snapshot.field_values),
        dimension_options=options,
        default_dimension_option=default_option,
    )


def table_query_metadata(
    snapshot: TableSnapshot,
    include_sensitive_fields: bool = False,
    readable_table_ids: Optional[AbstractSet[int]] = None,
) -> TableQueryMetadata:
    fields = visible_fields(snapshot.fields, include_sensitive_fields)
    details = table_details(snapshot.table, snapshot.database, snapshot.fields)
    return TableQueryMetadata(
        **details.model_dump(),
        fields=[field_metadata(f, snapshot, readable_table_ids) for f in fields],
        dimension_options=dimension_options_for_response(),
    )


def virtual_table_metadata(card: Card) -> VirtualTableMetadata:
    """Metadata for the ``card__<id>`` table backed by a saved question's results."""
    table_id = card.virtual_table_id
    return VirtualTableMetadata(
        id=table_id,
        db_id=VIRTUAL_DATABASE_ID,
        display_name=card.name,
        schema=VIRTUAL_SCHEMA,
        description=card.description,
        fields=[
            VirtualField(
                name=col.name,
                display_name=col.display_name,
                base_type=col.base_type,
                table_id=table_id,
                id=["field-literal", col.name, col.base_type],
                special_type=None,
            )
            for col in card.result_metadata
        ],
    )


def table_fks(snapshot: TableSnapshot) -> list[FkRelationship]:
    """Foreign keys elsewhere in the database that point at this table's fields."""
    own_fields = {f.id: f for f in snapshot.fields}
    destination_table = table_details(snapshot.table, None, snapshot.fields)
    relationships = []
    for origin in sorted(snapshot.related_fields.values(), key=lambda f: f.id):
        if origin.fk_target_field_id not in own_fields or not origin.active:
            continue
        origin_table = snapshot.related_tables.get(origin.table_id)
        if origin_table is None:
            logger.warning("FK origin field %d references unknown table %d", origin.id, origin.table_id)
            continue
        destination = own_fields[origin.fk_target_field_id]
        relationships.append(FkRelationship(
            origin_id=origin.id,
            destination_id=destination.id,
            relationship="Mt1",
            origin=FkField(**origin.model_dump(), table=table_details(origin_table, snapshot.database)),
            destination=FkField(**destination.model_dump(), table=destination_table),
        ))
    return relationships
