"""Application service: catalog reads and the concept write paths."""
from __future__ import annotations
import logging
from typing import List, Tuple

from ciit.domain.catalog.models import Barrier, Concept, Topic, concept_from_dict
from ciit.domain.catalog.rules import (
    image_filename,
    slugify_concept_id,
    validate_concept_content,
    validate_image_upload,
    validate_record_id,
)
from ciit.domain.common.result import CONFLICT, Result
from ciit.persistence.interfaces.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)


class CatalogAppService:
    """
    The three concept update paths (topics, full replace, image) each read
    the backing file fresh and write it back. They are not coordinated with
    each other: the last write wins.
    """

    def __init__(self, repo: CatalogRepository):
        self._repo = repo

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def list_topics(self) -> List[Topic]:
        return self._repo.list_topics()

    def list_barriers(self) -> List[Barrier]:
        return self._repo.list_barriers()

    def list_concepts(self) -> List[Concept]:
        return self._repo.list_concepts()

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------
    def replace_concept_topics(self, concept_id: str, topic_ids: List[str]) -> Result[Concept]:
        check = validate_record_id(concept_id, "Concept")
        if not check.is_success:
            return Result.not_found("Concept not found")
        doc = self._repo.load_concept_document(concept_id)
        if doc is None:
            return Result.not_found("Concept not found")
        doc["topics"] = list(topic_ids)
        self._repo.save_concept_document(concept_id, doc)
        return Result.ok(concept_from_dict(doc))

    def replace_concept(self, concept_id: str, data: dict) -> Result[Concept]:
        check = validate_record_id(concept_id, "Concept")
        if not check.is_success:
            return Result.not_found("Concept not found")
        if self._repo.load_concept_document(concept_id) is None:
            return Result.not_found("Concept not found")
        doc = dict(data)
        if doc.get("id") not in (None, concept_id):
            logger.info("Ignoring payload id %r for concept %s", doc.get("id"), concept_id)
        doc["id"] = concept_id
        self._repo.save_concept_document(concept_id, doc)
        return Result.ok(concept_from_dict(doc))

    def set_concept_image(
        self,
        concept_id: str,
        payload: bytes,
        content_type: str,
        original_filename: str = "",
    ) -> Result[Tuple[str, Concept]]:
        check = validate_record_id(concept_id, "Concept")
        if not check.is_success:
            return Result.not_found("Concept not found")
        doc = self._repo.load_concept_document(concept_id)
        if doc is None:
            return Result.not_found("Concept not found")

        validation = validate_image_upload(content_type, len(payload))
        if not validation.is_success:
            return Result.fail(validation.error)

        filename = image_filename(concept_id, original_filename, content_type)
        self._repo.save_image(filename, payload)
        doc["image"] = filename
        self._repo.save_concept_document(concept_id, doc)
        return Result.ok((filename, concept_from_dict(doc)))

    # ------------------------------------------------------------------
    # CREATE
    # ------------------------------------------------------------------
    def create_concept(self, data: dict) -> Result[Concept]:
        validation = validate_concept_content(data)
        if not validation.is_success:
            return Result.fail(validation.error)

        concept_id = data.get("id") or slugify_concept_id(data["name"])
        check = validate_record_id(concept_id, "Concept")
        if not check.is_success:
            return Result.fail(check.error)
        if self._repo.load_concept_document(concept_id) is not None:
            return Result.fail(f"Concept '{concept_id}' already exists.", code=CONFLICT)

        doc = {**data, "id": concept_id, "image": data.get("image") or ""}
        self._repo.save_concept_document(concept_id, doc)
        logger.info("Created concept %s", concept_id)
        return Result.ok(concept_from_dict(doc))
