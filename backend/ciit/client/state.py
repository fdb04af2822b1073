"""Holds one in-progress interview and keeps it durable.

Two writers keep the session safe:

* every mutation mirrors the whole session to the local cache right away
  (survives a crash of the interviewing process);
* a reconciliation pass, run every ``autosave_interval`` seconds, overwrites
  the server copy whenever the session differs from what was last stored
  there (survives losing the machine, lets the dashboard see progress).

Neither tier detects conflicts: two managers working on the same session id
overwrite each other, last write wins.
"""
from __future__ import annotations
import json
import logging
import threading
from typing import Iterable, Optional, Protocol, Tuple, Union

from ciit.client.api_client import ApiClientError
from ciit.client.cache import LocalSessionCache
from ciit.core.config import AUTOSAVE_INTERVAL
from ciit.domain.feedback.aggregator import export_session
from ciit.domain.session.models import (
    ConceptFeedback,
    Idea,
    Session,
    feedback_from_dict,
    session_from_dict,
    session_to_dict,
)
from ciit.domain.session.service import SessionDomainService

logger = logging.getLogger(__name__)


class SessionRemote(Protocol):
    def create_session(self, data: dict) -> dict: ...

    def put_session(self, session_id: str, data: dict) -> dict: ...


def _snapshot(session: Session) -> str:
    return json.dumps(session_to_dict(session), sort_keys=True)


class SessionStateManager:

    def __init__(
        self,
        remote: SessionRemote,
        cache: Optional[LocalSessionCache] = None,
        autosave_interval: float = AUTOSAVE_INTERVAL,
    ):
        self._remote = remote
        self._cache = cache if cache is not None else LocalSessionCache()
        self._domain = SessionDomainService()
        self.autosave_interval = autosave_interval
        self._lock = threading.RLock()
        # held for the whole of every server PUT so they land in call order
        self._send_lock = threading.Lock()
        self._session: Optional[Session] = None
        self._last_synced = ""
        self.is_loading = False
        self.is_saving = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._restore()

    @property
    def session(self) -> Optional[Session]:
        with self._lock:
            return self._session

    def _restore(self) -> None:
        doc = self._cache.load()
        if doc is None:
            return
        try:
            self._session = session_from_dict(doc)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to parse saved session: %s", e)
            return
        logger.info("Restored session %s from local cache", self._session.id)

    def _set(self, session: Session) -> Session:
        self._session = session
        self._cache.save(session_to_dict(session))
        return session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create(self, data: Optional[dict] = None) -> Optional[Session]:
        """Start a new interview and store it on the server. Returns None if the server refuses."""
        draft = self._domain.new_session(data)
        self.is_loading = True
        try:
            created = self._remote.create_session(session_to_dict(draft))
        except ApiClientError as e:
            logger.error("Failed to create session: %s", e)
            return None
        finally:
            self.is_loading = False
        session = session_from_dict(created)
        with self._lock:
            self._set(session)
            self._last_synced = _snapshot(session)
        logger.info("Started session %s", session.id)
        return session

    def end(self) -> Optional[Session]:
        """Stamp the end time, store on the server now, and drop the local copy.

        Waits for a reconciliation PUT already in flight, so the ended copy is
        the last one the server receives.
        """
        with self._send_lock:
            with self._lock:
                if self._session is None:
                    return None
                ended = self._set(self._domain.end(self._session))
            if self._save_remote(ended):
                with self._lock:
                    if self._session is ended:
                        self._last_synced = _snapshot(ended)
            self._cache.clear()
        return ended

    def clear(self) -> None:
        """Abandon the current session without saving anything further.

        A PUT already in flight is waited for; no PUT starts afterwards.
        """
        with self._send_lock:
            with self._lock:
                self._session = None
                self._last_synced = ""
                self._cache.clear()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def update(self, fields: Optional[dict] = None, **kwargs) -> Optional[Session]:
        """Shallow-merge fields (wire keys or attribute names). No-op without a session."""
        changes = {**(fields or {}), **kwargs}
        with self._lock:
            if self._session is None:
                return None
            return self._set(self._domain.merge(self._session, changes))

    def set_topics(self, topics: Iterable[str], custom_topics: Iterable[str] = ()) -> Optional[Session]:
        return self.update(selected_topics=list(topics), custom_topics=list(custom_topics))

    def set_barriers(self, barriers: Iterable[str], custom_barriers: Iterable[str] = ()) -> Optional[Session]:
        return self.update(selected_barriers=list(barriers), custom_barriers=list(custom_barriers))

    def set_investment_status(self, has_invested: bool) -> Optional[Session]:
        return self.update(has_invested_in_climate=has_invested)

    def set_notes(self, notes: str) -> Optional[Session]:
        return self.update(notes=notes)

    def set_concept_feedback(
        self,
        concept_id: str,
        feedback: Union[ConceptFeedback, dict],
    ) -> Optional[Session]:
        if isinstance(feedback, dict):
            feedback = feedback_from_dict(feedback)
        with self._lock:
            if self._session is None:
                return None
            return self._set(self._domain.set_concept_feedback(self._session, concept_id, feedback))

    def add_idea(
        self,
        title: str,
        description: str = "",
        related_concept_id: Optional[str] = None,
    ) -> Optional[Idea]:
        with self._lock:
            if self._session is None:
                return None
            session = self._set(
                self._domain.add_idea(self._session, title, description, related_concept_id)
            )
            return session.new_ideas[-1]

    # ------------------------------------------------------------------
    # Reconciliation with the server
    # ------------------------------------------------------------------
    def sync(self) -> bool:
        """One reconciliation pass. Returns True if the server copy was overwritten."""
        with self._send_lock:
            with self._lock:
                session = self._session
                if session is None:
                    return False
                snapshot = _snapshot(session)
                if snapshot == self._last_synced:
                    return False
            if not self._save_remote(session):
                return False
            with self._lock:
                # a newer session may have replaced this one during the PUT
                if self._session is not None and self._session.id == session.id:
                    self._last_synced = snapshot
        return True

    def _save_remote(self, session: Session) -> bool:
        self.is_saving = True
        try:
            self._remote.put_session(session.id, session_to_dict(session))
        except ApiClientError as e:
            logger.error("Failed to save session %s to server: %s", session.id, e)
            return False
        finally:
            self.is_saving = False
        logger.debug("Saved session %s to server", session.id)
        return True

    def start_autosave(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._autosave_loop, name="session-autosave", daemon=True)
        self._thread.start()

    def stop_autosave(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.autosave_interval + 1)
            self._thread = None

    def _autosave_loop(self) -> None:
        while not self._stop.wait(self.autosave_interval):
            try:
                self.sync()
            except Exception:
                logger.exception("Session autosave failed")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self) -> Optional[Tuple[str, str]]:
        """``(filename, json_text)`` for a download, or None without a session."""
        with self._lock:
            if self._session is None:
                return None
            return export_session(self._session)
