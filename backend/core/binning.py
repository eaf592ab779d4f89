"""
Binning Strategy Selector — dimension options for temporal and numeric fields.

Every option lives in one registry keyed by a stable integer index. Clients
reference options by that index (as a string), so the registry order and the
index lists below are part of the wire contract: index lists are sorted
numerically and only then converted to strings.
"""
import logging
from typing import Optional

from core.fingerprint_store import fingerprint_of, number_fingerprint_of
from core.types import isa, is_temporal
from models.connection import Database
from models.metadata import DimensionOption
from models.table import Field

logger = logging.getLogger(__name__)

DATETIME = "type/DateTime"
NUMBER = "type/Number"
COORDINATE = "type/Coordinate"

_DATETIME_UNITS = [
    ("Minute",          "minute"),
    ("Minute of Hour",  "minute-of-hour"),
    ("Hour",            "hour"),
    ("Hour of Day",     "hour-of-day"),
    ("Day",             "day"),
    ("Day of Week",     "day-of-week"),
    ("Day of Month",    "day-of-month"),
    ("Day of Year",     "day-of-year"),
    ("Week",            "week"),
    ("Week of Year",    "week-of-year"),
    ("Month",           "month"),
    ("Month of Year",   "month-of-year"),
    ("Quarter",         "quarter"),
    ("Quarter of Year", "quarter-of-year"),
    ("Year",            "year"),
]

AUTO_BIN = ("Auto bin", ("default", None))
DONT_BIN = "Don't bin"

_NUMERIC_STRATEGIES = [
    AUTO_BIN,
    ("10 bins",  ("num-bins", 10)),
    ("50 bins",  ("num-bins", 50)),
    ("100 bins", ("num-bins", 100)),
]

_COORDINATE_STRATEGIES = [
    AUTO_BIN,
    ("Bin every 0.1 degrees", ("bin-width", 0.1)),
    ("Bin every 1 degree",    ("bin-width", 1.0)),
    ("Bin every 10 degrees",  ("bin-width", 10.0)),
    ("Bin every 20 degrees",  ("bin-width", 20.0)),
    ("Bin every 50 degrees",  ("bin-width", 50.0)),
]


def _build_registry() -> dict[int, DimensionOption]:
    options: list[DimensionOption] = []
    for name, unit in _DATETIME_UNITS:
        options.append(DimensionOption(name=name, mbql=["datetime-field", None, unit], type=DATETIME))
    for dim_type, strategies in ((NUMBER, _NUMERIC_STRATEGIES), (COORDINATE, _COORDINATE_STRATEGIES)):
        for name, (strategy, param) in strategies:
            options.append(DimensionOption(name=name, mbql=["binning-strategy", None, strategy, param], type=dim_type))
        options.append(DimensionOption(name=DONT_BIN, mbql=None, type=dim_type))
    return dict(enumerate(options))


DIMENSION_OPTIONS: dict[int, DimensionOption] = _build_registry()


def dimension_options_for_response() -> dict[str, DimensionOption]:
    """The full registry keyed by string index, in numeric index order."""
    return {str(idx): DIMENSION_OPTIONS[idx] for idx in sorted(DIMENSION_OPTIONS)}


def _index_seq(dim_type: str) -> list[str]:
    return [str(idx) for idx in sorted(k for k, v in DIMENSION_OPTIONS.items() if v.type == dim_type)]


def _default_index(dim_type: str, name: str) -> str:
    for idx in sorted(DIMENSION_OPTIONS):
        option = DIMENSION_OPTIONS[idx]
        if option.type == dim_type and option.name == name:
            return str(idx)
    raise LookupError(f"No {dim_type} option named {name!r}")


DATETIME_DIMENSION_INDEXES = _index_seq(DATETIME)
NUMERIC_DIMENSION_INDEXES = _index_seq(NUMBER)
COORDINATE_DIMENSION_INDEXES = _index_seq(COORDINATE)

DATE_DEFAULT_INDEX = _default_index(DATETIME, "Day")
NUMERIC_DEFAULT_INDEX = _default_index(NUMBER, AUTO_BIN[0])
COORDINATE_DEFAULT_INDEX = _default_index(COORDINATE, AUTO_BIN[0])


def strategy_of(index: str) -> Optional[str]:
    """Binning strategy name behind an option index; None for "Don't bin" and datetime units."""
    mbql = DIMENSION_OPTIONS[int(index)].mbql
    if not mbql or mbql[0] != "binning-strategy":
        return None
    return mbql[2]


def supports_binning(database: Optional[Database]) -> bool:
    return database is not None and database.supports_binning


def select_dimension_options(field: Field, database: Optional[Database]) -> tuple[Optional[str], list[str]]:
    """Return ``(default_dimension_option, dimension_options)`` for one field."""
    if fingerprint_of(field) is None:
        return None, []

    if is_temporal(field.base_type, field.special_type):
        return DATE_DEFAULT_INDEX, list(DATETIME_DIMENSION_INDEXES)

    fp = number_fingerprint_of(field)
    if fp is None or not fp.has_bounds or not supports_binning(database):
        return None, []

    if isa(field.special_type, COORDINATE):
        return COORDINATE_DEFAULT_INDEX, list(COORDINATE_DIMENSION_INDEXES)

    if isa(field.base_type, NUMBER) and (field.special_type is None or isa(field.special_type, NUMBER)):
        return NUMERIC_DEFAULT_INDEX, list(NUMERIC_DIMENSION_INDEXES)

    return None, []
