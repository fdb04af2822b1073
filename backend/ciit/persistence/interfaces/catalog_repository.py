"""Abstract repository interface for the interview catalog."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional

from ciit.domain.catalog.models import Barrier, Concept, Topic


class CatalogRepository(ABC):

    @abstractmethod
    def list_topics(self) -> List[Topic]:
        """Return the cached topics in file order."""
        ...

    @abstractmethod
    def list_barriers(self) -> List[Barrier]:
        """Return the cached barriers in file order."""
        ...

    @abstractmethod
    def list_concepts(self) -> List[Concept]:
        """Return the cached concepts in file enumeration order."""
        ...

    @abstractmethod
    def load_concept_document(self, concept_id: str) -> Optional[dict]:
        """Read the concept's backing record fresh from storage, or None if it has none."""
        ...

    @abstractmethod
    def save_concept_document(self, concept_id: str, document: dict) -> None:
        """Write (create or replace) the backing record for ``concept_id``."""
        ...

    @abstractmethod
    def save_image(self, filename: str, payload: bytes) -> None:
        """Store an uploaded concept image under ``filename``."""
        ...

    @abstractmethod
    def reload(self, collection: Optional[str] = None) -> None:
        """Refresh the cache: ``"topics"``, ``"barriers"``, ``"concepts"`` or everything."""
        ...
