import pytest
from sqlalchemy import types as sqltypes

from core.type_classifier import base_type_for, infer_special_type
from core.types import data_class, isa, is_temporal, known_type
from models.fingerprint import DateTimeFingerprint, NumberFingerprint, TextFingerprint
from models.table import Field


def _field(name, base_type, special_type=None):
    return Field(id=1, table_id=1, name=name, display_name=name, base_type=base_type, special_type=special_type)


def test_isa_walks_the_hierarchy():
    assert isa("type/BigInteger", "type/Number")
    assert isa("type/Latitude", "type/Coordinate")
    assert isa("type/Latitude", "type/Number")
    assert isa("type/Enum", "type/Category")
    assert isa("type/Name", "type/Category")
    assert isa("type/UNIXTimestampSeconds", "type/DateTime")
    assert not isa("type/PK", "type/Category")
    assert not isa(None, "type/Category")
    assert known_type("type/Quantity")
    assert not known_type("type/Nope")


def test_data_class():
    assert data_class("type/BigInteger") == "type/Number"
    assert data_class("type/Date") == "type/DateTime"
    assert data_class("type/UUID") == "type/Text"
    assert data_class("type/Boolean") == "type/Boolean"
    assert data_class("type/Dictionary") == "general"
    assert is_temporal("type/Integer", "type/UNIXTimestampSeconds")


@pytest.mark.parametrize("sql_type, expected", [
    (sqltypes.BigInteger(), "type/BigInteger"),
    (sqltypes.INTEGER(), "type/Integer"),
    (sqltypes.REAL(), "type/Float"),
    (sqltypes.Numeric(10, 2), "type/Decimal"),
    (sqltypes.TIMESTAMP(), "type/DateTime"),
    (sqltypes.Date(), "type/Date"),
    (sqltypes.Boolean(), "type/Boolean"),
    (sqltypes.Text(), "type/Text"),
    ("VARCHAR(255)", "type/Text"),
    ("DOUBLE PRECISION", "type/Float"),
    ("GEOMETRY", "type/*"),
])
def test_base_type_for(sql_type, expected):
    assert base_type_for(sql_type) == expected


def test_manual_special_type_is_never_overwritten():
    field = _field("latitude", "type/Float", special_type="type/Category")
    assert infer_special_type(field, NumberFingerprint(distinct_count=2)) == "type/Category"


def test_name_patterns():
    assert infer_special_type(_field("LATITUDE", "type/Float"), None) == "type/Latitude"
    assert infer_special_type(_field("lng", "type/Float"), None) == "type/Longitude"
    assert infer_special_type(_field("NAME", "type/Text"), None) == "type/Name"
    assert infer_special_type(_field("id", "type/Integer"), None) == "type/PK"
    # Pattern only applies to matching base types
    assert infer_special_type(_field("id", "type/Text"), None) is None


def test_text_fingerprint_percentages():
    fp = TextFingerprint(distinct_count=500, percent_email=1.0)
    assert infer_special_type(_field("contact", "type/Text"), fp) == "type/Email"
    fp = TextFingerprint(distinct_count=500, percent_json=0.99)
    assert infer_special_type(_field("payload", "type/Text"), fp) == "type/SerializedJSON"


def test_low_cardinality_becomes_category():
    assert infer_special_type(_field("price", "type/Integer"), NumberFingerprint(distinct_count=4)) == "type/Category"
    assert infer_special_type(_field("price", "type/Integer"), NumberFingerprint(distinct_count=400)) is None
    assert infer_special_type(_field("ratio", "type/Float"), NumberFingerprint(distinct_count=4)) is None
    assert infer_special_type(_field("seen_at", "type/DateTime"), DateTimeFingerprint(distinct_count=2)) is None
