"""YAML-file implementation of CatalogRepository with an in-memory cache."""
from __future__ import annotations
import logging
import os
import threading
from typing import List, Optional

import yaml

from ciit.domain.catalog.models import (
    Barrier,
    Concept,
    Topic,
    barrier_from_dict,
    concept_from_dict,
    topic_from_dict,
)
from ciit.persistence.files import read_yaml, write_bytes, write_yaml
from ciit.persistence.interfaces.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

TOPICS = "topics"
BARRIERS = "barriers"
CONCEPTS = "concepts"
COLLECTIONS = (TOPICS, BARRIERS, CONCEPTS)


def _load_list_file(path: str, key: str) -> List[dict]:
    """``{key: [...]}`` file -> list of mappings; missing or broken files give []."""
    if not os.path.exists(path):
        logger.warning("Catalog file %s not found, no %s loaded", path, key)
        return []
    try:
        data = read_yaml(path) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Error loading %s from %s: %s", key, path, e)
        return []
    items = data.get(key) if isinstance(data, dict) else None
    return [item for item in (items or []) if isinstance(item, dict)]


class YamlCatalogRepository(CatalogRepository):
    """
    Topics and barriers live in one file each (``{topics: [...]}``,
    ``{barriers: [...]}``); concepts are one ``<id>.yaml`` per record.
    Reads are served from a cache that ``reload`` rebuilds.
    """

    def __init__(
        self,
        concepts_dir: str,
        topics_file: str,
        barriers_file: str,
        images_dir: str,
        autoload: bool = True,
    ):
        self.concepts_dir = concepts_dir
        self.topics_file = topics_file
        self.barriers_file = barriers_file
        self.images_dir = images_dir
        self._lock = threading.RLock()
        self._topics: List[Topic] = []
        self._barriers: List[Barrier] = []
        self._concepts: List[Concept] = []
        if autoload:
            self.reload()

    # ------------------------------------------------------------------
    # Cache loading
    # ------------------------------------------------------------------
    def reload(self, collection: Optional[str] = None) -> None:
        targets = COLLECTIONS if collection is None else (collection,)
        for target in targets:
            if target == TOPICS:
                topics = [topic_from_dict(d) for d in _load_list_file(self.topics_file, TOPICS)]
                with self._lock:
                    self._topics = topics
                logger.info("Loaded %d topics", len(topics))
            elif target == BARRIERS:
                barriers = [barrier_from_dict(d) for d in _load_list_file(self.barriers_file, BARRIERS)]
                with self._lock:
                    self._barriers = barriers
                logger.info("Loaded %d barriers", len(barriers))
            elif target == CONCEPTS:
                concepts = self._load_concepts()
                with self._lock:
                    self._concepts = concepts
                logger.info("Loaded %d concepts", len(concepts))
            else:
                raise ValueError(f"Unknown catalog collection '{target}'")

    def _load_concepts(self) -> List[Concept]:
        if not os.path.isdir(self.concepts_dir):
            logger.warning("Concepts directory %s not found", self.concepts_dir)
            return []
        concepts: List[Concept] = []
        for name in sorted(os.listdir(self.concepts_dir)):
            if not name.endswith(".yaml"):
                continue
            path = os.path.join(self.concepts_dir, name)
            try:
                doc = read_yaml(path)
            except (OSError, yaml.YAMLError) as e:
                logger.error("Error loading concept %s: %s", name, e)
                continue
            if not isinstance(doc, dict):
                logger.error("Error loading concept %s: not a mapping", name)
                continue
            concepts.append(concept_from_dict(doc))
        return concepts

    def _concept_path(self, concept_id: str) -> str:
        return os.path.join(self.concepts_dir, f"{concept_id}.yaml")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_topics(self) -> List[Topic]:
        with self._lock:
            return list(self._topics)

    def list_barriers(self) -> List[Barrier]:
        with self._lock:
            return list(self._barriers)

    def list_concepts(self) -> List[Concept]:
        with self._lock:
            return list(self._concepts)

    def load_concept_document(self, concept_id: str) -> Optional[dict]:
        path = self._concept_path(concept_id)
        if not os.path.exists(path):
            return None
        doc = read_yaml(path)
        return doc if isinstance(doc, dict) else {}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def save_concept_document(self, concept_id: str, document: dict) -> None:
        write_yaml(self._concept_path(concept_id), document)
        logger.info("Saved concept %s", concept_id)
        # The watcher will see this write too; reloading twice is harmless.
        self.reload(CONCEPTS)

    def save_image(self, filename: str, payload: bytes) -> None:
        write_bytes(os.path.join(self.images_dir, filename), payload)
        logger.info("Stored concept image %s (%d bytes)", filename, len(payload))
