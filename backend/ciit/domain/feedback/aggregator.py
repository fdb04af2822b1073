"""Read-side projections over a Session and the catalog. Nothing here mutates."""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ciit.domain.catalog.models import BarrierSolution, Concept, concept_to_dict
from ciit.domain.session.models import ConceptFeedback, Session, feedback_to_dict, session_to_dict

COMPLETED = "completed"
IN_PROGRESS = "in-progress"
SESSION_STATUSES = (COMPLETED, IN_PROGRESS)


@dataclass
class ReviewedConcept:
    concept: Concept
    feedback: ConceptFeedback


@dataclass
class SessionSummary:
    session_id: str
    status: str
    reviewed_count: int  # raw conceptFeedback entries, dangling ids included
    topic_count: int
    barrier_count: int
    idea_count: int
    reviewed: List[ReviewedConcept] = field(default_factory=list)


def session_status(session: Session) -> str:
    return COMPLETED if session.end_time else IN_PROGRESS


def summarize(session: Session, concepts: Iterable[Concept]) -> SessionSummary:
    """
    Counts plus the reviewed concepts resolved against the current catalog.
    Feedback for a concept id the catalog no longer has is left out of
    ``reviewed`` but still counted in ``reviewed_count``.
    """
    by_id = {c.id: c for c in concepts}
    reviewed = [
        ReviewedConcept(concept=by_id[cid], feedback=fb)
        for cid, fb in session.concept_feedback.items()
        if cid in by_id
    ]
    return SessionSummary(
        session_id=session.id,
        status=session_status(session),
        reviewed_count=len(session.concept_feedback),
        topic_count=len(session.selected_topics) + len(session.custom_topics),
        barrier_count=len(session.selected_barriers or []) + len(session.custom_barriers or []),
        idea_count=len(session.new_ideas),
        reviewed=reviewed,
    )


def summary_to_dict(summary: SessionSummary) -> dict:
    return {
        "sessionId": summary.session_id,
        "status": summary.status,
        "reviewedCount": summary.reviewed_count,
        "topicCount": summary.topic_count,
        "barrierCount": summary.barrier_count,
        "ideaCount": summary.idea_count,
        "reviewed": [
            {"concept": concept_to_dict(r.concept), "feedback": feedback_to_dict(r.feedback)}
            for r in summary.reviewed
        ],
    }


def export_session(session: Session) -> Tuple[str, str]:
    """Download snapshot: ``(filename, indented JSON)``."""
    stem = session.participant_id or session.id
    return f"session-{stem}.json", json.dumps(session_to_dict(session), indent=2, ensure_ascii=False)


def filter_concepts(
    concepts: Sequence[Concept],
    session: Optional[Session] = None,
    topic_ids: Optional[Sequence[str]] = None,
    reviewed: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[Concept]:
    """Concept browser filter; catalog order is kept."""
    result = list(concepts)
    if search:
        needle = search.strip().lower()
        result = [
            c for c in result
            if needle in c.name.lower() or needle in c.tagline.lower() or needle in c.category.lower()
        ]
    if topic_ids:
        wanted = set(topic_ids)
        result = [c for c in result if wanted.intersection(c.topics)]
    if reviewed is not None:
        feedback = session.concept_feedback if session else {}
        result = [c for c in result if (c.id in feedback) == reviewed]
    return result


def barrier_solutions_for(concept: Concept, barrier_ids: Iterable[str]) -> List[BarrierSolution]:
    selected = set(barrier_ids)
    return [s for s in (concept.barrier_solutions or []) if s.barrier_id in selected]
