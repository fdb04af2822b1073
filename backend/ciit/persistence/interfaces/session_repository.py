"""Abstract repository interface for interview session documents."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional


class SessionRepository(ABC):

    @abstractmethod
    def list_all(self) -> List[dict]:
        """Return every stored session in storage enumeration order."""
        ...

    @abstractmethod
    def get_by_id(self, session_id: str) -> Optional[dict]:
        """Return the stored document, or None."""
        ...

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def save(self, session_id: str, document: dict) -> None:
        """Unconditional overwrite; creates the record if needed."""
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Delete the record. Returns True if deleted."""
        ...
