"""Application service: session CRUD plus summary/export projections."""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ciit.domain.common.result import Result
from ciit.domain.catalog.rules import validate_record_id
from ciit.domain.feedback.aggregator import (
    COMPLETED,
    IN_PROGRESS,
    SESSION_STATUSES,
    SessionSummary,
    export_session,
    summarize,
)
from ciit.domain.session.models import session_from_dict
from ciit.domain.session.service import new_session_id, now_iso, parse_timestamp
from ciit.persistence.interfaces.catalog_repository import CatalogRepository
from ciit.persistence.interfaces.session_repository import SessionRepository

logger = logging.getLogger(__name__)

_EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


def _start_key(doc: dict) -> datetime:
    return parse_timestamp(doc.get("startTime")) or _EPOCH_MIN


def _doc_status(doc: dict) -> str:
    return COMPLETED if doc.get("endTime") else IN_PROGRESS


class SessionAppService:
    def __init__(self, repo: SessionRepository, catalog: Optional[CatalogRepository] = None):
        self._repo = repo
        self._catalog = catalog

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def list_sessions(self, status: Optional[str] = None) -> Result[List[dict]]:
        """Newest first by startTime; equal start times keep enumeration order."""
        if status is not None and status not in SESSION_STATUSES:
            return Result.fail(f"'{status}' is not a valid status. Must be one of {list(SESSION_STATUSES)}.")
        sessions = sorted(self._repo.list_all(), key=_start_key, reverse=True)
        if status is not None:
            sessions = [s for s in sessions if _doc_status(s) == status]
        return Result.ok(sessions)

    def get_session(self, session_id: str) -> Result[dict]:
        if not validate_record_id(session_id, "Session").is_success:
            return Result.not_found("Session not found")
        doc = self._repo.get_by_id(session_id)
        if doc is None:
            return Result.not_found("Session not found")
        return Result.ok(doc)

    # ------------------------------------------------------------------
    # CREATE / UPDATE
    # ------------------------------------------------------------------
    def create_session(self, data: dict) -> Result[dict]:
        doc = dict(data)
        if not doc.get("id"):
            session_id = new_session_id()
            while self._repo.exists(session_id):
                session_id = new_session_id([session_id])
            doc["id"] = session_id
        if not doc.get("startTime"):
            doc["startTime"] = now_iso()

        check = validate_record_id(doc["id"], "Session")
        if not check.is_success:
            return Result.fail(check.error)

        self._repo.save(doc["id"], doc)
        logger.info("Created session %s", doc["id"])
        return Result.ok(doc)

    def put_session(self, session_id: str, data: dict) -> Result[dict]:
        """Unconditional overwrite; the stored id is always ``session_id``."""
        check = validate_record_id(session_id, "Session")
        if not check.is_success:
            return Result.fail(check.error)
        doc = {**data, "id": session_id}
        if not self._repo.exists(session_id):
            logger.warning("PUT created session %s, which did not exist before", session_id)
        self._repo.save(session_id, doc)
        return Result.ok(doc)

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------
    def delete_session(self, session_id: str) -> Result[bool]:
        if not validate_record_id(session_id, "Session").is_success:
            return Result.not_found("Session not found")
        if not self._repo.delete(session_id):
            return Result.not_found("Session not found")
        return Result.ok(True)

    # ------------------------------------------------------------------
    # PROJECTIONS
    # ------------------------------------------------------------------
    def summarize_session(self, session_id: str) -> Result[SessionSummary]:
        result = self.get_session(session_id)
        if not result.is_success:
            return Result.not_found(result.error)
        concepts = self._catalog.list_concepts() if self._catalog else []
        return Result.ok(summarize(session_from_dict(result.value), concepts))

    def export_session(self, session_id: str) -> Result[Tuple[str, str]]:
        result = self.get_session(session_id)
        if not result.is_success:
            return Result.not_found(result.error)
        return Result.ok(export_session(session_from_dict(result.value)))
