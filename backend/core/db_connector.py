"""
Database connector — SQLAlchemy engine factory and schema reflection.
Supports SQLite and PostgreSQL. Extracts tables, columns, types, PK/FK constraints.
"""
import logging
from typing import Optional
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from core.type_classifier import base_type_for
from models.connection import ConnectionRequest
from models.table import ReflectedColumn, ReflectedTable

logger = logging.getLogger(__name__)


def create_engine_from_request(req: ConnectionRequest) -> Engine:
    """Build and test a SQLAlchemy engine from a ConnectionRequest."""
    url = req.get_sqlalchemy_url()
    engine = create_engine(url, pool_pre_ping=True)
    # Validate the connection immediately
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        engine.dispose()
        raise ValueError(f"Could not connect to database: {e}") from e
    return engine


def get_default_schema(engine_name: str) -> Optional[str]:
    if engine_name == "postgresql":
        return "public"
    return None   # SQLite has no schema concept


def quote_table(table: str, schema: Optional[str]) -> str:
    """Qualify a table name with schema if present."""
    return f'"{schema}"."{table}"' if schema else f'"{table}"'


def get_row_count(conn, table_name: str, schema: Optional[str] = None) -> Optional[int]:
    """Fetch row count for a single table using a pushdown COUNT query."""
    try:
        return int(conn.execute(text(f"SELECT COUNT(*) FROM {quote_table(table_name, schema)}")).scalar() or 0)
    except SQLAlchemyError as e:
        logger.warning("COUNT failed for %s: %s", table_name, e)
        return None


def reflect_schema(engine: Engine, schema: Optional[str], only: Optional[list[str]] = None) -> list[ReflectedTable]:
    """
    Reflect tables from the target database.
    Returns ReflectedTable objects with typed columns, PKs and FK references.
    """
    insp = inspect(engine)
    table_names = insp.get_table_names(schema=schema)
    if only is not None:
        table_names = [t for t in table_names if t in only]
    logger.info("Discovered %d tables in %s", len(table_names), engine.url.render_as_string(hide_password=True))

    tables: list[ReflectedTable] = []
    with engine.connect() as conn:
        for table_name in table_names:
            pk_cols = set(insp.get_pk_constraint(table_name, schema=schema).get("constrained_columns") or [])
            fk_map: dict[str, tuple[str, str]] = {}
            for fk in insp.get_foreign_keys(table_name, schema=schema):
                for lc, rc in zip(fk["constrained_columns"], fk["referred_columns"]):
                    fk_map[lc] = (fk["referred_table"], rc)

            columns = []
            for col in insp.get_columns(table_name, schema=schema):
                columns.append(ReflectedColumn(
                    name=col["name"],
                    database_type=str(col["type"]).upper(),
                    base_type=base_type_for(col["type"]),
                    is_nullable=col.get("nullable", True),
                    is_primary_key=col["name"] in pk_cols,
                    foreign_key_ref=fk_map.get(col["name"]),
                ))
            tables.append(ReflectedTable(
                name=table_name,
                schema_name=schema,
                columns=columns,
                row_count=get_row_count(conn, table_name, schema),
            ))
    return tables
