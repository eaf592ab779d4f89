"""
Sync — reflect a connected database into the repository.

Per table: upsert the Table and its Fields (preserving ids and user edits),
link foreign keys, fingerprint stale fields, classify special types and
collect distinct values for list-type fields.
"""
import logging
import re
import time
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from core.db_connector import create_engine_from_request, get_default_schema, reflect_schema
from core.dimensions import qualifies_for_values
from core.fingerprint_store import CURRENT_FINGERPRINT_VERSION, needs_fingerprint
from core.fingerprinter import distinct_values, fingerprint_column
from core.repository import MetadataRepository
from core.type_classifier import infer_special_type
from models.connection import SyncResponse
from models.table import Field, ReflectedColumn, ReflectedTable, Table

logger = logging.getLogger(__name__)


def display_name_for(name: str) -> str:
    """``last_login`` → ``Last Login``; ``category_id`` → ``Category ID``."""
    words = [w for w in re.split(r"[_\-\s]+", name) if w]
    return " ".join("ID" if w.lower() == "id" else w.capitalize() for w in words) or name


def _upsert_table(repo: MetadataRepository, db_id: int, rt: ReflectedTable) -> tuple[Table, bool]:
    """Returns (table, rows_changed)."""
    existing = repo.find_table(db_id, rt.schema_name, rt.name)
    if existing is None:
        table = repo.create_table(
            db_id=db_id,
            name=rt.name,
            schema_name=rt.schema_name,
            display_name=display_name_for(rt.name),
            rows=rt.row_count,
        )
        return table, True
    rows_changed = existing.rows != rt.row_count
    return repo.update_table(existing.id, rows=rt.row_count, active=True), rows_changed


def _upsert_field(repo: MetadataRepository, table: Table, col: ReflectedColumn, position: int) -> Field:
    constraint_type = "type/PK" if col.is_primary_key else "type/FK" if col.foreign_key_ref else None
    existing = repo.find_field(table.id, col.name)
    if existing is None:
        return repo.create_field(
            table_id=table.id,
            name=col.name,
            display_name=display_name_for(col.name),
            base_type=col.base_type,
            special_type=constraint_type,
            position=position,
        )

    changes: dict = {"position": position, "active": True}
    if existing.base_type != col.base_type:
        logger.info("Base type of %s.%s changed %s → %s", table.name, col.name, existing.base_type, col.base_type)
        changes.update(base_type=col.base_type, fingerprint=None, fingerprint_version=0)
    if existing.special_type is None and constraint_type is not None:
        changes["special_type"] = constraint_type
    return repo.update_field(existing.id, **changes)


def _link_foreign_keys(repo: MetadataRepository, db_id: int, rt: ReflectedTable, table: Table) -> None:
    for col in rt.columns:
        if col.foreign_key_ref is None:
            continue
        field = repo.find_field(table.id, col.name)
        if field is None or field.fk_target_field_id is not None:
            continue
        ref_table, ref_col = col.foreign_key_ref
        target_table = repo.find_table(db_id, rt.schema_name, ref_table)
        target = repo.find_field(target_table.id, ref_col) if target_table else None
        if target is None:
            logger.debug("FK target %s.%s of %s.%s not synced yet", ref_table, ref_col, table.name, col.name)
            continue
        repo.update_field(field.id, fk_target_field_id=target.id)


def _analyze_field(repo: MetadataRepository, conn, table: Table, field: Field, refresh: bool) -> bool:
    """Fingerprint, classify and collect values for one field. Returns True if fingerprinted."""
    fingerprinted = False
    if refresh or needs_fingerprint(field):
        try:
            fp = fingerprint_column(conn, table.name, field.name, field.base_type, table.schema_name)
        except SQLAlchemyError as e:
            logger.warning("Skipping fingerprint for %s.%s: %s", table.name, field.name, e)
        else:
            field = repo.update_field(
                field.id,
                fingerprint=fp,
                fingerprint_version=CURRENT_FINGERPRINT_VERSION,
                last_analyzed=datetime.now(timezone.utc),
            )
            fingerprinted = True

    special_type = infer_special_type(field, field.fingerprint)
    if special_type != field.special_type:
        field = repo.update_field(field.id, special_type=special_type)

    if qualifies_for_values(field):
        try:
            values = distinct_values(conn, table.name, field.name, table.schema_name,
                                     settings.FIELD_VALUES_MAX_DISTINCT)
        except SQLAlchemyError as e:
            logger.warning("Field values skipped for %s.%s: %s", table.name, field.name, e)
        else:
            if values is not None:
                repo.set_field_values(field.id, values)
    return fingerprinted


def _sync(repo: MetadataRepository, db_id: int, only: Optional[list[str]] = None) -> SyncResponse:
    req = repo.get_connection(db_id)
    t0 = time.time()
    engine = create_engine_from_request(req)
    try:
        schema = get_default_schema(req.engine)
        reflected = reflect_schema(engine, schema, only=only)

        synced: list[tuple[ReflectedTable, Table, bool]] = []
        for rt in reflected:
            table, rows_changed = _upsert_table(repo, db_id, rt)
            seen = set()
            for position, col in enumerate(rt.columns):
                _upsert_field(repo, table, col, position)
                seen.add(col.name)
            for f in repo.table_fields(table.id):
                if f.name not in seen and f.active:
                    logger.info("Field %s.%s no longer exists; marking inactive", table.name, f.name)
                    repo.update_field(f.id, active=False)
            synced.append((rt, table, rows_changed))

        if only is None:
            names = {rt.name for rt in reflected}
            for t in repo.list_tables(db_id):
                if t.name not in names and t.active:
                    logger.info("Table %s no longer exists; marking inactive", t.name)
                    repo.update_table(t.id, active=False)

        for rt, table, _ in synced:
            _link_foreign_keys(repo, db_id, rt, table)

        fields_synced = fingerprinted = 0
        with engine.connect() as conn:
            for _, table, rows_changed in synced:
                for field in repo.table_fields(table.id):
                    if not field.active:
                        continue
                    fields_synced += 1
                    if _analyze_field(repo, conn, table, field, refresh=rows_changed):
                        fingerprinted += 1
    finally:
        engine.dispose()

    logger.info("Synced database %d: %d tables, %d fields (%d fingerprinted)",
                db_id, len(synced), fields_synced, fingerprinted)
    return SyncResponse(
        database_id=db_id,
        tables_synced=len(synced),
        fields_synced=fields_synced,
        fields_fingerprinted=fingerprinted,
        duration_seconds=round(time.time() - t0, 2),
        tables=[t.name for _, t, _ in synced],
    )


def sync_database(repo: MetadataRepository, db_id: int) -> SyncResponse:
    return _sync(repo, db_id)


def sync_table(repo: MetadataRepository, table_id: int) -> SyncResponse:
    table = repo.get_table(table_id)
    return _sync(repo, table.db_id, only=[table.name])
