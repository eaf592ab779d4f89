"""/api/field — field detail and edits, field values, dimension remappings."""
import logging
from typing import Optional, Literal
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError, model_validator

from api.deps import check_table_readable, get_readable_table_ids, get_repository
from core.exceptions import NotFoundError
from core.metadata import field_details
from core.repository import MetadataRepository
from core.types import known_type
from models.dimension import Dimension, DimensionRequest
from models.metadata import FieldDetails

router = APIRouter()
logger = logging.getLogger(__name__)


class FieldUpdate(BaseModel):
    display_name: Optional[str] = None
    description: Optional[str] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    special_type: Optional[str] = None
    visibility_type: Optional[Literal["normal", "details-only", "sensitive", "retired"]] = None
    fk_target_field_id: Optional[int] = None

    @model_validator(mode="after")
    def _no_null_required(self):
        nulled = [k for k in ("display_name", "visibility_type")
                  if k in self.model_fields_set and getattr(self, k) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


def _get_field(repo: MetadataRepository, field_id: int, readable: Optional[frozenset[int]]):
    try:
        field = repo.get_field(field_id)
    except NotFoundError as e:
        raise HTTPException(404, detail=str(e))
    check_table_readable(field.table_id, readable)
    return field


@router.get("/field/{field_id}", response_model=FieldDetails)
def get_field(
    field_id: int,
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    return field_details(_get_field(repo, field_id, readable))


@router.put("/field/{field_id}", response_model=FieldDetails)
def update_field(
    field_id: int,
    body: FieldUpdate,
    repo: MetadataRepository = Depends(get_repository),
):
    _get_field(repo, field_id, None)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("special_type") is not None and not known_type(changes["special_type"]):
        raise HTTPException(400, detail=f"Unknown special type {changes['special_type']!r}")
    if changes.get("fk_target_field_id") is not None:
        try:
            repo.get_field(changes["fk_target_field_id"])
        except NotFoundError as e:
            raise HTTPException(400, detail=str(e))
    logger.info("Updating field %d: %s", field_id, sorted(changes))
    try:
        field = repo.update_field(field_id, **changes)
    except ValidationError as e:
        raise HTTPException(400, detail=str(e))
    return field_details(field)


@router.get("/field/{field_id}/values")
def get_field_values(
    field_id: int,
    readable: Optional[frozenset[int]] = Depends(get_readable_table_ids),
    repo: MetadataRepository = Depends(get_repository),
):
    field = _get_field(repo, field_id, readable)
    fv = repo.get_field_values(field_id)
    if fv is None or field.visibility_type == "sensitive":
        return {"field_id": field_id, "values": [], "human_readable_values": []}
    return fv


@router.post("/field/{field_id}/dimension", response_model=Dimension)
def create_dimension(
    field_id: int,
    body: DimensionRequest,
    repo: MetadataRepository = Depends(get_repository),
):
    """Create or replace the field's single dimension."""
    _get_field(repo, field_id, None)
    if body.type == "external" and body.human_readable_field_id is None:
        raise HTTPException(400, detail="External dimensions need a human_readable_field_id.")
    if body.type == "internal" and body.human_readable_field_id is not None:
        raise HTTPException(400, detail="Internal dimensions cannot reference another field.")

    if body.type == "internal" and body.human_readable_values is not None:
        fv = repo.get_field_values(field_id)
        if fv is None:
            raise HTTPException(400, detail=f"Field {field_id} has no values to remap.")
        if len(body.human_readable_values) != len(fv.values):
            raise HTTPException(
                400,
                detail=f"Expected {len(fv.values)} human-readable values, got {len(body.human_readable_values)}.",
            )
        repo.set_field_values(field_id, fv.values, body.human_readable_values)

    try:
        return repo.set_dimension(field_id, body.name, body.type, body.human_readable_field_id)
    except NotFoundError as e:
        raise HTTPException(400, detail=str(e))


@router.delete("/field/{field_id}/dimension")
def delete_dimension(field_id: int, repo: MetadataRepository = Depends(get_repository)):
    _get_field(repo, field_id, None)
    repo.delete_dimension(field_id)
    fv = repo.get_field_values(field_id)
    if fv is not None and fv.human_readable_values:
        repo.set_field_values(field_id, fv.values, [])
    return {"message": f"Dimension for field {field_id} removed."}
