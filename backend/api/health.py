"""GET /api/health — liveness plus a summary of what has been synced."""
import logging
from fastapi import APIRouter, Depends

from api.deps import get_repository
from core.repository import MetadataRepository

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(repo: MetadataRepository = Depends(get_repository)):
    databases = repo.list_databases()
    return {
        "status": "ok",
        "databases": len(databases),
        "tables": len(repo.list_tables()),
    }
