"""
Fingerprinter — SQL pushdown statistics per field, and distinct-value lists.
Runs during sync only; the metadata core reads the results through the
fingerprint store.
"""
import json
import logging
import re
from datetime import datetime
from typing import Any, Optional
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.db_connector import quote_table
from core.types import data_class
from models.fingerprint import (
    BooleanFingerprint,
    DateTimeFingerprint,
    Fingerprint,
    GeneralFingerprint,
    NumberFingerprint,
    TextFingerprint,
)

logger = logging.getLogger(__name__)

TEXT_SAMPLE_ROWS = 10_000

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[a-zA-Z]{2,}$")
URL_RE = re.compile(r"^(https?|ftp)://[^\s/$.?#].[^\s]*$", re.I)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.debug("Unparseable temporal value %r", value)
        return None


def _is_json(value: str) -> bool:
    stripped = value.strip()
    if not stripped or stripped[0] not in "{[":
        return False
    try:
        json.loads(stripped)
    except ValueError:
        return False
    return True


def _global_stats(conn, qt: str, cq: str) -> tuple[Optional[int], Optional[float]]:
    """Returns (distinct_count, nil_percent)."""
    row = conn.execute(text(
        f"SELECT COUNT(DISTINCT {cq}), COUNT(*) - COUNT({cq}), COUNT(*) FROM {qt}"
    )).one()
    distinct, nulls, total = int(row[0] or 0), int(row[1] or 0), int(row[2] or 0)
    return distinct, (round(nulls / total, 4) if total else None)


def _number_stats(conn, qt: str, cq: str) -> dict:
    row = conn.execute(text(
        f"SELECT MIN({cq}), MAX({cq}), AVG(CAST({cq} AS FLOAT)) FROM {qt} WHERE {cq} IS NOT NULL"
    )).one()
    stats = {
        "min": float(row[0]) if row[0] is not None else None,
        "max": float(row[1]) if row[1] is not None else None,
        "avg": round(float(row[2]), 4) if row[2] is not None else None,
        "sd": None,
    }
    if stats["avg"] is not None:
        # SQLite has no STDDEV; population variance by hand
        var = conn.execute(text(
            f"SELECT AVG((CAST({cq} AS FLOAT) - :mean) * (CAST({cq} AS FLOAT) - :mean)) "
            f"FROM {qt} WHERE {cq} IS NOT NULL"
        ), {"mean": stats["avg"]}).scalar()
        if var is not None:
            stats["sd"] = round(float(var) ** 0.5, 4)
    return stats


def _text_stats(conn, qt: str, cq: str) -> dict:
    rows = conn.execute(text(
        f"SELECT {cq} FROM {qt} WHERE {cq} IS NOT NULL LIMIT {TEXT_SAMPLE_ROWS}"
    )).fetchall()
    values = [str(r[0]) for r in rows]
    if not values:
        return {}
    n = len(values)
    return {
        "average_length": round(sum(len(v) for v in values) / n, 4),
        "percent_json": round(sum(1 for v in values if _is_json(v)) / n, 4),
        "percent_url": round(sum(1 for v in values if URL_RE.match(v)) / n, 4),
        "percent_email": round(sum(1 for v in values if EMAIL_RE.match(v)) / n, 4),
    }


def _datetime_stats(conn, qt: str, cq: str) -> dict:
    row = conn.execute(text(f"SELECT MIN({cq}), MAX({cq}) FROM {qt} WHERE {cq} IS NOT NULL")).one()
    return {"earliest": _to_datetime(row[0]), "latest": _to_datetime(row[1])}


def _boolean_stats(conn, qt: str, cq: str) -> dict:
    pct = conn.execute(text(
        f"SELECT AVG(CASE WHEN {cq} THEN 1.0 ELSE 0.0 END) FROM {qt} WHERE {cq} IS NOT NULL"
    )).scalar()
    return {"percent_true": round(float(pct), 4) if pct is not None else None}


_VARIANTS = {
    "type/Number":   (NumberFingerprint, _number_stats),
    "type/Text":     (TextFingerprint, _text_stats),
    "type/DateTime": (DateTimeFingerprint, _datetime_stats),
    "type/Boolean":  (BooleanFingerprint, _boolean_stats),
}


def fingerprint_column(conn, table: str, col_name: str, base_type: str, schema: Optional[str]) -> Fingerprint:
    """Compute the fingerprint variant matching ``base_type`` for one column."""
    qt = quote_table(table, schema)
    cq = f'"{col_name}"'
    distinct_count, nil_percent = _global_stats(conn, qt, cq)

    cls = data_class(base_type)
    if cls not in _VARIANTS:
        return GeneralFingerprint(distinct_count=distinct_count, nil_percent=nil_percent)

    variant, stats_fn = _VARIANTS[cls]
    try:
        stats = stats_fn(conn, qt, cq)
    except SQLAlchemyError as e:
        logger.warning("Type stats skipped for %s.%s: %s", table, col_name, e)
        stats = {}
    return variant(distinct_count=distinct_count, nil_percent=nil_percent, **stats)


def distinct_values(conn, table: str, col_name: str, schema: Optional[str], limit: int) -> Optional[list]:
    """Up to ``limit`` distinct non-null values, or None when the column has more."""
    qt = quote_table(table, schema)
    cq = f'"{col_name}"'
    rows = conn.execute(text(
        f"SELECT DISTINCT {cq} FROM {qt} WHERE {cq} IS NOT NULL ORDER BY {cq} LIMIT {limit + 1}"
    )).fetchall()
    if len(rows) > limit:
        return None
    return [r[0] for r in rows]
