"""
Fingerprint Store — read access to the statistics computed by sync.
A missing fingerprint is a normal state (never synced, or not fingerprintable);
a fingerprint of the wrong variant is not.
"""
import logging
from typing import Mapping, Optional

from core.exceptions import InvalidFieldState
from core.types import data_class
from models.dimension import FieldValues
from models.fingerprint import Fingerprint, NumberFingerprint
from models.table import Field

logger = logging.getLogger(__name__)

# Bump whenever the fingerprint shape changes; older fingerprints are recomputed on next sync
CURRENT_FINGERPRINT_VERSION = 1


def validate_fingerprint(field: Field) -> None:
    fp = field.fingerprint
    if fp is None:
        return
    expected = data_class(field.base_type)
    if fp.kind != expected:
        raise InvalidFieldState(
            field.id, f"{fp.kind} fingerprint on a {field.base_type} field (expected {expected})"
        )


def fingerprint_of(field: Field) -> Optional[Fingerprint]:
    validate_fingerprint(field)
    return field.fingerprint


def number_fingerprint_of(field: Field) -> Optional[NumberFingerprint]:
    fp = fingerprint_of(field)
    return fp if isinstance(fp, NumberFingerprint) else None


def needs_fingerprint(field: Field) -> bool:
    return field.fingerprint is None or field.fingerprint_version < CURRENT_FINGERPRINT_VERSION


def _value_key(value) -> tuple:
    # 1 and 1.0 are the same value; True is not 1
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str) or value is None:
        return (type(value).__name__, value)
    return ("other", repr(value))


def distinct_values_of(field: Field, field_values: Mapping[int, FieldValues]) -> Optional[FieldValues]:
    """Distinct-value list for ``field``, checked for duplicates and label alignment."""
    fv = field_values.get(field.id)
    if fv is None:
        return None
    seen = set()
    for v in fv.values:
        key = _value_key(v)
        if key in seen:
            raise InvalidFieldState(field.id, f"duplicate value {v!r} in field values")
        seen.add(key)
    if fv.human_readable_values and len(fv.human_readable_values) != len(fv.values):
        raise InvalidFieldState(
            field.id,
            f"{len(fv.human_readable_values)} labels for {len(fv.values)} values",
        )
    return fv
