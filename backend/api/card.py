"""/api/card — saved questions, exposed to the query builder as virtual tables."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps import get_repository
from core.exceptions import NotFoundError
from core.repository import MetadataRepository
from core.types import known_type
from models.table import Card, ResultColumn

router = APIRouter()
logger = logging.getLogger(__name__)


class CardRequest(BaseModel):
    name: str
    database_id: int
    description: Optional[str] = None
    result_metadata: list[ResultColumn] = Field(default_factory=list)


@router.post("/card", response_model=Card, status_code=201)
def create_card(req: CardRequest, repo: MetadataRepository = Depends(get_repository)):
    unknown = [c.base_type for c in req.result_metadata if not known_type(c.base_type)]
    if unknown:
        raise HTTPException(400, detail=f"Unknown base types: {', '.join(unknown)}")
    try:
        card = repo.add_card(req.name, req.database_id, req.result_metadata, req.description)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    logger.info("Saved card %d (%s) with %d result columns", card.id, card.name, len(card.result_metadata))
    return card


@router.get("/card/{card_id}", response_model=Card)
def get_card(card_id: int, repo: MetadataRepository = Depends(get_repository)):
    try:
        return repo.get_card(card_id)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
