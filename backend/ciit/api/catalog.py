"""Catalog API: topics, barriers, concepts and concept edits."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, UploadFile, status
from pydantic import BaseModel

from ciit.api.errors import ApiError, raise_for_result
from ciit.application.catalog_app_service import CatalogAppService
from ciit.container import get_catalog_app_service
from ciit.core.config import MAX_IMAGE_BYTES
from ciit.domain.catalog.models import barrier_to_dict, concept_to_dict, topic_to_dict

router = APIRouter(prefix="/api", tags=["catalog"])


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class ConceptTopicsBody(BaseModel):
    topics: List[str]


# ------------------------------------------------------------------
# Read endpoints
# ------------------------------------------------------------------
@router.get("/topics")
def list_topics(svc: CatalogAppService = Depends(get_catalog_app_service)):
    return [topic_to_dict(t) for t in svc.list_topics()]


@router.get("/barriers")
def list_barriers(svc: CatalogAppService = Depends(get_catalog_app_service)):
    return [barrier_to_dict(b) for b in svc.list_barriers()]


@router.get("/concepts")
def list_concepts(svc: CatalogAppService = Depends(get_catalog_app_service)):
    return [concept_to_dict(c) for c in svc.list_concepts()]


# ------------------------------------------------------------------
# Concept edits
# ------------------------------------------------------------------
@router.post("/concepts", status_code=status.HTTP_201_CREATED)
def create_concept(
    body: Dict[str, Any] = Body(...),
    svc: CatalogAppService = Depends(get_catalog_app_service),
):
    result = svc.create_concept(body)
    raise_for_result(result)
    return {"concept": concept_to_dict(result.value)}


@router.patch("/concepts/{concept_id}/topics")
def update_concept_topics(
    concept_id: str,
    body: ConceptTopicsBody,
    svc: CatalogAppService = Depends(get_catalog_app_service),
):
    result = svc.replace_concept_topics(concept_id, body.topics)
    raise_for_result(result)
    return {"success": True, "concept": concept_to_dict(result.value)}


@router.put("/concepts/{concept_id}")
def replace_concept(
    concept_id: str,
    body: Dict[str, Any] = Body(...),
    svc: CatalogAppService = Depends(get_catalog_app_service),
):
    result = svc.replace_concept(concept_id, body)
    raise_for_result(result)
    return {"success": True, "concept": concept_to_dict(result.value)}


@router.post("/concepts/{concept_id}/image")
async def upload_concept_image(
    concept_id: str,
    image: Optional[UploadFile] = File(None),
    svc: CatalogAppService = Depends(get_catalog_app_service),
):
    if image is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "No image file provided")
    # one byte past the limit is enough to reject; the rest is never buffered
    payload = await image.read(MAX_IMAGE_BYTES + 1)
    result = svc.set_concept_image(
        concept_id,
        payload,
        content_type=image.content_type or "",
        original_filename=image.filename or "",
    )
    raise_for_result(result)
    filename, concept = result.value
    return {"success": True, "image": filename, "concept": concept_to_dict(concept)}
