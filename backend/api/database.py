"""/api/database — register connected databases and run the sync pass."""
import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from api.deps import get_repository
from core.exceptions import NotFoundError
from core.repository import MetadataRepository
from core.sync import sync_database
from models.connection import ConnectionRequest, Database, SyncResponse

router = APIRouter()
logger = logging.getLogger(__name__)


class DatabaseCreated(BaseModel):
    database: Database
    sync: SyncResponse


def _run_sync(repo: MetadataRepository, db_id: int) -> SyncResponse:
    try:
        return sync_database(repo, db_id)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        logger.exception("Sync failed")
        raise HTTPException(status_code=500, detail=f"Sync error: {e}")


@router.post("/database", response_model=DatabaseCreated, status_code=201)
def create_database(req: ConnectionRequest, repo: MetadataRepository = Depends(get_repository)):
    """
    1. Register the connection
    2. Reflect schema, fingerprint and classify fields
    3. Return the database and a sync summary
    """
    db = repo.add_database(req)
    try:
        result = _run_sync(repo, db.id)
    except HTTPException:
        repo.delete_database(db.id)
        raise
    return DatabaseCreated(database=db, sync=result)


@router.get("/database", response_model=list[Database])
def list_databases(repo: MetadataRepository = Depends(get_repository)):
    return repo.list_databases()


@router.get("/database/{db_id}", response_model=Database)
def get_database(db_id: int, repo: MetadataRepository = Depends(get_repository)):
    try:
        return repo.get_database(db_id)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))


@router.post("/database/{db_id}/sync", response_model=SyncResponse)
def sync(db_id: int, repo: MetadataRepository = Depends(get_repository)):
    return _run_sync(repo, db_id)


@router.delete("/database/{db_id}")
def delete_database(db_id: int, repo: MetadataRepository = Depends(get_repository)):
    try:
        repo.delete_database(db_id)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    return {"message": f"Database {db_id} removed successfully."}
