"""
Dimension Resolver — ``values``, ``dimensions`` and ``target`` for a field.

Value shapes differ on purpose:
  internal remap  → [[ordinal, label], ...]   ordinals dense, 0-based, ordered by raw value
  no remap        → [[raw_value], ...]        ordered by raw value
  external remap  → []                        labels come from the target field at query time
"""
import logging
from typing import AbstractSet, Any, Mapping, Optional, Union

from config import settings
from core.exceptions import InvalidFieldState
from core.fingerprint_store import distinct_values_of
from core.types import isa
from models.dimension import Dimension, FieldValues
from models.metadata import DimensionDescriptor
from models.snapshot import TargetResolution, TargetState
from models.table import Field

logger = logging.getLogger(__name__)


def _sort_key(value: Any) -> tuple:
    # Numbers, then strings, then anything else by repr; nulls last
    if value is None:
        return (3, "")
    if isinstance(value, (bool, int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def qualifies_for_values(field: Field) -> bool:
    """Only low-cardinality discrete fields get their values enumerated."""
    if field.visibility_type == "sensitive":
        return False
    return any(isa(field.special_type, t) for t in settings.list_values_special_types)


def field_values_for_response(
    field: Field,
    dimension: Optional[Dimension],
    field_values: Mapping[int, FieldValues],
) -> list[list[Any]]:
    if not qualifies_for_values(field):
        return []
    if dimension is not None and dimension.type == "external":
        return []

    fv = distinct_values_of(field, field_values)
    if fv is None:
        return []

    if dimension is None:
        return [[v] for v in sorted(fv.values, key=_sort_key)]

    labels = fv.human_readable_values or [str(v) for v in fv.values]
    remapped = sorted(zip(fv.values, labels), key=lambda pair: _sort_key(pair[0]))
    return [[ordinal, label] for ordinal, (_, label) in enumerate(remapped)]


def dimension_descriptor(
    field: Field, dimension: Optional[Dimension]
) -> Union[DimensionDescriptor, list]:
    if dimension is None:
        return []
    if dimension.field_id != field.id:
        raise InvalidFieldState(field.id, f"dimension {dimension.id} belongs to field {dimension.field_id}")
    return DimensionDescriptor(
        id=dimension.id,
        name=dimension.name,
        type=dimension.type,
        field_id=dimension.field_id,
        human_readable_field_id=dimension.human_readable_field_id,
    )


def resolve_target(
    field: Field,
    related_fields: Mapping[int, Field],
    readable_table_ids: Optional[AbstractSet[int]] = None,
) -> Optional[TargetResolution]:
    """Follow ``fk_target_field_id``; None when the field is not a foreign key.

    ``readable_table_ids`` is the permission layer's answer for the caller
    (None means unrestricted).
    """
    if field.fk_target_field_id is None:
        return None
    target = related_fields.get(field.fk_target_field_id)
    if target is None:
        return TargetResolution(state=TargetState.PENDING_SYNC)
    if readable_table_ids is not None and target.table_id not in readable_table_ids:
        return TargetResolution(state=TargetState.PERMISSION_DENIED)
    return TargetResolution(state=TargetState.RESOLVED, field=target)
