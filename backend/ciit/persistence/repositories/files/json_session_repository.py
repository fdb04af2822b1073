"""JSON-file implementation of SessionRepository: one ``<id>.json`` per session."""
from __future__ import annotations
import json
import logging
import os
from typing import List, Optional

from ciit.persistence.files import read_json, write_json
from ciit.persistence.interfaces.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class JsonSessionRepository(SessionRepository):

    def __init__(self, sessions_dir: str):
        self.sessions_dir = sessions_dir
        os.makedirs(sessions_dir, exist_ok=True)

    def _path(self, session_id: str) -> str:
        return os.path.join(self.sessions_dir, f"{session_id}.json")

    def list_all(self) -> List[dict]:
        sessions: List[dict] = []
        for name in sorted(os.listdir(self.sessions_dir)):
            if not name.endswith(".json"):
                continue
            try:
                doc = read_json(os.path.join(self.sessions_dir, name))
            except (OSError, json.JSONDecodeError) as e:
                logger.error("Skipping unreadable session file %s: %s", name, e)
                continue
            if isinstance(doc, dict):
                sessions.append(doc)
        return sessions

    def get_by_id(self, session_id: str) -> Optional[dict]:
        path = self._path(session_id)
        if not os.path.exists(path):
            return None
        return read_json(path)

    def exists(self, session_id: str) -> bool:
        return os.path.exists(self._path(session_id))

    def save(self, session_id: str, document: dict) -> None:
        write_json(self._path(session_id), document)
        logger.debug("Saved session %s", session_id)

    def delete(self, session_id: str) -> bool:
        path = self._path(session_id)
        if not os.path.exists(path):
            return False
        os.remove(path)
        logger.info("Deleted session %s", session_id)
        return True
