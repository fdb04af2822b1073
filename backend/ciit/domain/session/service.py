"""Domain service: pure operations on an interview Session. No I/O."""
from __future__ import annotations
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from ciit.domain.session.models import (
    ConceptFeedback,
    Idea,
    Session,
    update_session_fields,
)


def now_iso() -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return int(time.time() * 1000)


def new_session_id(taken: Iterable[str] = ()) -> str:
    return _time_id("session", set(taken))


def new_idea_id(taken: Iterable[str] = ()) -> str:
    return _time_id("idea", set(taken))


def _time_id(prefix: str, taken: set) -> str:
    millis = epoch_millis()
    candidate = f"{prefix}-{millis}"
    while candidate in taken:
        millis += 1
        candidate = f"{prefix}-{millis}"
    return candidate


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` accepted); naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SessionDomainService:
    """
    Pure session operations. Every method returns a new Session value;
    callers own persistence.
    """

    def new_session(self, data: Optional[dict] = None) -> Session:
        """Fresh interview with generated id/start time and empty collections."""
        data = data or {}
        return Session(
            id=new_session_id(),
            start_time=now_iso(),
            participant_id=data.get("participantId") or data.get("participant_id") or "",
            participant_name=data.get("participantName", data.get("participant_name")),
            participant_role=data.get("participantRole") or data.get("participant_role") or "",
            organization_type=data.get("organizationType") or data.get("organization_type") or "",
            referral_source=data.get("referralSource", data.get("referral_source")),
            consent_given=bool(data.get("consentGiven", data.get("consent_given", False))),
        )

    def merge(self, session: Session, fields: dict) -> Session:
        """Shallow merge; the id never changes."""
        changes = update_session_fields(session, fields)
        changes.pop("id", None)
        return replace(session, **changes)

    def set_concept_feedback(self, session: Session, concept_id: str, feedback: ConceptFeedback) -> Session:
        if not feedback.timestamp:
            feedback = replace(feedback, timestamp=now_iso())
        return replace(session, concept_feedback={**session.concept_feedback, concept_id: feedback})

    def add_idea(
        self,
        session: Session,
        title: str,
        description: str = "",
        related_concept_id: Optional[str] = None,
    ) -> Session:
        idea = Idea(
            id=new_idea_id(i.id for i in session.new_ideas),
            title=title,
            description=description,
            related_concept_id=related_concept_id,
            timestamp=now_iso(),
        )
        return replace(session, new_ideas=[*session.new_ideas, idea])

    def end(self, session: Session) -> Session:
        """Stamp the end time once; an already-ended session keeps its first end time."""
        if session.end_time:
            return session
        return replace(session, end_time=now_iso())
