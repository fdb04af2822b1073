"""Local durable cache for the in-progress session (crash recovery)."""
from __future__ import annotations
import json
import logging
import os
from typing import Optional

from ciit.core.config import CLIENT_CACHE_DIR, SESSION_CACHE_KEY
from ciit.persistence.files import read_json, write_json

logger = logging.getLogger(__name__)


class LocalSessionCache:
    """One JSON file named after a fixed key. Failures are logged, never raised."""

    def __init__(self, directory: str = CLIENT_CACHE_DIR, key: str = SESSION_CACHE_KEY):
        self.path = os.path.join(directory, f"{key}.json")

    def load(self) -> Optional[dict]:
        if not os.path.exists(self.path):
            return None
        try:
            doc = read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to parse saved session %s: %s", self.path, e)
            return None
        if not isinstance(doc, dict):
            logger.error("Failed to parse saved session %s: not an object", self.path)
            return None
        return doc

    def save(self, document: dict) -> bool:
        try:
            write_json(self.path, document)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not mirror session to local cache: %s", e)
            return False
        return True

    def clear(self) -> None:
        try:
            if os.path.exists(self.path):
                os.remove(self.path)
        except OSError as e:
            logger.warning("Could not clear local session cache: %s", e)
