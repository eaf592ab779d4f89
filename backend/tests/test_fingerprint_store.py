import pytest

from core.exceptions import InvalidFieldState
from core.fingerprint_store import (
    CURRENT_FINGERPRINT_VERSION,
    distinct_values_of,
    fingerprint_of,
    needs_fingerprint,
    number_fingerprint_of,
)
from models.dimension import FieldValues
from models.fingerprint import NumberFingerprint, TextFingerprint
from models.table import Field


def _field(**kw):
    attrs = dict(id=1, table_id=1, name="PRICE", display_name="Price", base_type="type/Integer")
    attrs.update(kw)
    return Field(**attrs)


def test_missing_fingerprint_is_not_an_error():
    field = _field()
    assert fingerprint_of(field) is None
    assert number_fingerprint_of(field) is None
    assert needs_fingerprint(field)


def test_stale_fingerprint_needs_recompute():
    fp = NumberFingerprint(min=1, max=4)
    assert needs_fingerprint(_field(fingerprint=fp, fingerprint_version=CURRENT_FINGERPRINT_VERSION - 1))
    assert not needs_fingerprint(_field(fingerprint=fp, fingerprint_version=CURRENT_FINGERPRINT_VERSION))


def test_mismatched_variant_fails_fast():
    field = _field(fingerprint=TextFingerprint(average_length=3.0))
    with pytest.raises(InvalidFieldState) as exc:
        fingerprint_of(field)
    assert exc.value.field_id == 1


def test_distinct_values_checks():
    field = _field()
    assert distinct_values_of(field, {}) is None
    fv = FieldValues(field_id=1, values=[1, 2, 3])
    assert distinct_values_of(field, {1: fv}) is fv

    with pytest.raises(InvalidFieldState, match="duplicate"):
        distinct_values_of(field, {1: FieldValues(field_id=1, values=[1, 2, 2])})
    with pytest.raises(InvalidFieldState, match="labels"):
        distinct_values_of(field, {1: FieldValues(field_id=1, values=[1, 2], human_readable_values=["a"])})


def test_equal_numbers_of_different_types_are_duplicates():
    field = _field()
    with pytest.raises(InvalidFieldState, match="duplicate"):
        distinct_values_of(field, {1: FieldValues(field_id=1, values=[1, 1.0, 2])})
    fv = FieldValues(field_id=1, values=[True, 1, "1"])
    assert distinct_values_of(field, {1: fv}) is fv
