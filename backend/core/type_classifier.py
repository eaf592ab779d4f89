"""
Type Classifier — base types from reflected SQL types, special types from
names and fingerprints. Runs only during sync; metadata reads use whatever
special type is already stored.
"""
import logging
import re
from typing import Optional

from sqlalchemy import types as sqltypes

from config import settings
from core.types import isa
from models.fingerprint import Fingerprint, DateTimeFingerprint, NumberFingerprint, TextFingerprint
from models.table import Field

logger = logging.getLogger(__name__)

# Checked in order; most specific SQLAlchemy classes first
_SQLALCHEMY_BASE_TYPES = [
    (sqltypes.Boolean,    "type/Boolean"),
    (sqltypes.BigInteger, "type/BigInteger"),
    (sqltypes.Integer,    "type/Integer"),
    (sqltypes.Float,      "type/Float"),
    (sqltypes.Numeric,    "type/Decimal"),
    (sqltypes.DateTime,   "type/DateTime"),
    (sqltypes.Date,       "type/Date"),
    (sqltypes.Time,       "type/Time"),
    (sqltypes.Uuid,       "type/UUID"),
    (sqltypes.JSON,       "type/Dictionary"),
    (sqltypes.String,     "type/Text"),
]

# Fallback for type strings (e.g. from views or unknown dialect types)
_TYPE_NAME_HINTS = [
    ("BOOL",      "type/Boolean"),
    ("BIGINT",    "type/BigInteger"),
    ("INT",       "type/Integer"),
    ("FLOAT",     "type/Float"),
    ("DOUBLE",    "type/Float"),
    ("REAL",      "type/Float"),
    ("NUMER",     "type/Decimal"),
    ("DECIM",     "type/Decimal"),
    ("TIMESTAMP", "type/DateTime"),
    ("DATETIME",  "type/DateTime"),
    ("DATE",      "type/Date"),
    ("TIME",      "type/Time"),
    ("UUID",      "type/UUID"),
    ("JSON",      "type/Dictionary"),
    ("CHAR",      "type/Text"),
    ("TEXT",      "type/Text"),
    ("CLOB",      "type/Text"),
]

_NAME_PATTERNS = [
    (re.compile(r"^id$", re.I),                       "type/Integer", "type/PK"),
    (re.compile(r"^(lat|latitude)$", re.I),           "type/Number",  "type/Latitude"),
    (re.compile(r"^(lon|lng|long|longitude)$", re.I), "type/Number",  "type/Longitude"),
    (re.compile(r"^(.*_)?name$", re.I),               "type/Text",    "type/Name"),
    (re.compile(r"^(.*_)?e?mail$", re.I),             "type/Text",    "type/Email"),
    (re.compile(r"^(.*_)?(url|link)$", re.I),         "type/Text",    "type/URL"),
    (re.compile(r"^city$", re.I),                     "type/Text",    "type/City"),
    (re.compile(r"^state$", re.I),                    "type/Text",    "type/State"),
    (re.compile(r"^country$", re.I),                  "type/Text",    "type/Country"),
    (re.compile(r"^(zip|zip_?code|postal_?code)$", re.I), "type/*",   "type/ZipCode"),
    (re.compile(r"^(quantity|qty|count)$", re.I),     "type/Integer", "type/Quantity"),
    (re.compile(r"^(created|created_at|creation_date)$", re.I), "type/DateTime", "type/CreationTimestamp"),
]

TEXT_PERCENT_THRESHOLD = 0.95


def base_type_for(sql_type) -> str:
    """Map a SQLAlchemy type (instance or type string) to a base type."""
    if isinstance(sql_type, sqltypes.TypeEngine):
        for cls, base_type in _SQLALCHEMY_BASE_TYPES:
            if isinstance(sql_type, cls):
                return base_type
        sql_type = str(sql_type)
    name = str(sql_type).upper().split("(")[0].strip()
    for hint, base_type in _TYPE_NAME_HINTS:
        if hint in name:
            return base_type
    return "type/*"


def _from_name(field: Field) -> Optional[str]:
    for pattern, required_base, special_type in _NAME_PATTERNS:
        if pattern.match(field.name) and isa(field.base_type, required_base):
            return special_type
    return None


def _from_text_fingerprint(fp: TextFingerprint) -> Optional[str]:
    if (fp.percent_email or 0) >= TEXT_PERCENT_THRESHOLD:
        return "type/Email"
    if (fp.percent_url or 0) >= TEXT_PERCENT_THRESHOLD:
        return "type/URL"
    if (fp.percent_json or 0) >= TEXT_PERCENT_THRESHOLD:
        return "type/SerializedJSON"
    return None


def _is_low_cardinality(field: Field, fp: Optional[Fingerprint]) -> bool:
    if fp is None or fp.distinct_count is None or isinstance(fp, DateTimeFingerprint):
        return False
    if isinstance(fp, NumberFingerprint) and isa(field.base_type, "type/Float"):
        return False
    return fp.distinct_count < settings.CATEGORY_CARDINALITY_THRESHOLD


def infer_special_type(field: Field, fingerprint: Optional[Fingerprint]) -> Optional[str]:
    """Special type for ``field``; an already-set special type always wins."""
    if field.special_type is not None:
        return field.special_type

    special_type = _from_name(field)
    if special_type is None and isinstance(fingerprint, TextFingerprint):
        special_type = _from_text_fingerprint(fingerprint)
    if special_type is None and _is_low_cardinality(field, fingerprint):
        special_type = "type/Category"

    if special_type is not None:
        logger.debug("Classified field %s (%s) as %s", field.name, field.base_type, special_type)
    return special_type
