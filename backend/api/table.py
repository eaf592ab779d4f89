"""/api/table — table listing, detail, update, FKs and query metadata."""
import logging
from typing import Optional, Literal
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, ValidationError, model_validator
from sqlalchemy.exc import SQLAlchemyError

from api.deps import check_table_readable, get_readable_table_ids, get_repository
from core.exceptions import InvalidFieldState, NotFoundError
from core.metadata import table_details, table_fks, table_query_metadata, table_summary, virtual_table_metadata
from core.repository import MetadataRepository
from core.sync import sync_table
from models.metadata import FkRelationship, TableDetails, TableSummary
from models.table import parse_virtual_table_id

router = APIRouter()
logger = logging.getLogger(__name__)


class TableUpdate(BaseModel):
    display_name: Optional[str] = None
    description: Optional[str] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    entity_type: Optional[str] = None
    visibility_type: Optional[Literal["hidden", "technical", "cruft"]] = None
    show_in_getting_started: Optional[bool] = None

    @model_validator(mode="after")
    def _no_null_required(self):
        nulled = [k for k in ("display_name", "show_in_getting_started")
                  if k in self.model_fields_set and getattr(self, k) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


def _physical_id(table_id: str) -> int:
    if not table_id.isdigit():
        raise HTTPException(404, detail=f"Table {table_id!r} not found.")
    return int(table_id)


def _resync(repo: MetadataRepository, table_id: int) -> None:
    try:
        sync_table(repo, table_id)
    except (ValueError, SQLAlchemyError, NotFoundError) as e:
        logger.warning("Re-sync of table %d failed: %s", table_id, e)


@router.get("/table", response_model=list[TableSummary])
def list_tables(
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    return [
        table_summary(t) for t in repo.list_tables()
        if t.active and (readable is None or t.id in readable)
    ]


@router.get("/table/{table_id}", response_model=TableDetails)
def get_table(
    table_id: str,
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    tid = _physical_id(table_id)
    try:
        table = repo.get_table(tid)
        check_table_readable(tid, readable)
        return table_details(table, repo.get_database(table.db_id), repo.table_fields(tid))
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))


@router.put("/table/{table_id}", response_model=TableDetails)
def update_table(
    table_id: int,
    body: TableUpdate,
    background_tasks: BackgroundTasks,
    repo: MetadataRepository = Depends(get_repository),
):
    try:
        original = repo.get_table(table_id)
        changes = body.model_dump(exclude_unset=True)
        table = repo.update_table(table_id, **changes)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(400, detail=str(e))

    # A table that becomes visible again may have drifted while hidden
    if "visibility_type" in changes and original.visibility_type is not None and table.visibility_type is None:
        logger.info("Table %d un-hidden; scheduling re-sync", table_id)
        background_tasks.add_task(_resync, repo, table_id)

    return table_details(table, repo.get_database(table.db_id), repo.table_fields(table_id))


@router.get("/table/{table_id}/query_metadata", response_model=None)
def query_metadata(
    table_id: str,
    include_sensitive_fields: bool = False,
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    """
    Table metadata for the query builder: ordered fields with their dimensions,
    values and binning options. ``card__<id>`` returns the saved question's
    virtual table instead.
    """
    card_id = parse_virtual_table_id(table_id)
    try:
        if card_id is not None:
            return virtual_table_metadata(repo.get_card(card_id))
        tid = _physical_id(table_id)
        snapshot = repo.snapshot(tid)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))

    check_table_readable(tid, readable)
    try:
        return table_query_metadata(snapshot, include_sensitive_fields, readable)
    except InvalidFieldState as e:
        logger.exception("Refusing to build metadata for table %d", tid)
        raise HTTPException(500, detail=str(e))


@router.get("/table/{table_id}/fks", response_model=list[FkRelationship])
def table_foreign_keys(
    table_id: str,
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    if parse_virtual_table_id(table_id) is not None:
        return []
    tid = _physical_id(table_id)
    try:
        snapshot = repo.snapshot(tid)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    check_table_readable(tid, readable)
    return [r for r in table_fks(snapshot) if readable is None or r.origin.table.id in readable]
