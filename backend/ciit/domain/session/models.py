"""Session domain models: pure Python, no file or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ConceptFeedback:
    rating: int = 0  # 1..5, 0 = not rated
    notes: str = ""
    modifications: str = ""
    timestamp: str = ""


@dataclass
class Idea:
    id: str
    title: str
    description: str = ""
    timestamp: str = ""
    related_concept_id: Optional[str] = None


@dataclass
class Session:
    id: str
    start_time: str
    participant_id: str = ""
    participant_role: str = ""
    organization_type: str = ""
    consent_given: bool = False
    participant_name: Optional[str] = None
    referral_source: Optional[str] = None
    end_time: Optional[str] = None  # set = completed
    has_invested_in_climate: Optional[bool] = None  # True -> topics flow, False -> barriers flow
    selected_topics: List[str] = field(default_factory=list)
    custom_topics: List[str] = field(default_factory=list)
    selected_barriers: Optional[List[str]] = None
    custom_barriers: Optional[List[str]] = None
    concept_feedback: Dict[str, ConceptFeedback] = field(default_factory=dict)
    new_ideas: List[Idea] = field(default_factory=list)
    notes: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return bool(self.end_time)


# ------------------------------------------------------------------
# Document <-> model conversion (camelCase wire keys)
# ------------------------------------------------------------------
# attribute name -> wire key, for the scalar/list fields
FIELD_KEYS: Dict[str, str] = {
    "id": "id",
    "participant_id": "participantId",
    "participant_name": "participantName",
    "participant_role": "participantRole",
    "organization_type": "organizationType",
    "referral_source": "referralSource",
    "consent_given": "consentGiven",
    "start_time": "startTime",
    "end_time": "endTime",
    "has_invested_in_climate": "hasInvestedInClimate",
    "selected_topics": "selectedTopics",
    "custom_topics": "customTopics",
    "selected_barriers": "selectedBarriers",
    "custom_barriers": "customBarriers",
    "notes": "notes",
}
_STRUCTURED_KEYS = {"conceptFeedback": "concept_feedback", "newIdeas": "new_ideas"}
_OPTIONAL_ATTRS = {
    "participant_name", "referral_source", "end_time", "has_invested_in_climate",
    "selected_barriers", "custom_barriers",
}
_KNOWN_KEYS = set(FIELD_KEYS.values()) | set(_STRUCTURED_KEYS)
_ATTRS = set(FIELD_KEYS) | set(_STRUCTURED_KEYS.values())


def feedback_from_dict(doc: dict) -> ConceptFeedback:
    try:
        rating = int(doc.get("rating") or 0)
    except (TypeError, ValueError):
        rating = 0
    return ConceptFeedback(
        rating=rating,
        notes=doc.get("notes") or "",
        modifications=doc.get("modifications") or "",
        timestamp=doc.get("timestamp") or "",
    )


def feedback_to_dict(feedback: ConceptFeedback) -> dict:
    return {
        "rating": feedback.rating,
        "notes": feedback.notes,
        "modifications": feedback.modifications,
        "timestamp": feedback.timestamp,
    }


def idea_from_dict(doc: dict) -> Idea:
    return Idea(
        id=doc.get("id") or "",
        title=doc.get("title") or "",
        description=doc.get("description") or "",
        timestamp=doc.get("timestamp") or "",
        related_concept_id=doc.get("relatedConceptId"),
    )


def idea_to_dict(idea: Idea) -> dict:
    doc = {
        "id": idea.id,
        "title": idea.title,
        "description": idea.description,
        "timestamp": idea.timestamp,
    }
    if idea.related_concept_id is not None:
        doc["relatedConceptId"] = idea.related_concept_id
    return doc


def session_from_dict(doc: dict) -> Session:
    kwargs: Dict[str, Any] = {}
    for attr, key in FIELD_KEYS.items():
        if key in doc and doc[key] is not None:
            kwargs[attr] = doc[key]
    kwargs.setdefault("id", "")
    kwargs.setdefault("start_time", "")
    for attr in ("selected_topics", "custom_topics", "selected_barriers", "custom_barriers"):
        if attr in kwargs:
            value = kwargs[attr]
            kwargs[attr] = list(value) if isinstance(value, (list, tuple)) else []
    if "consent_given" in kwargs:
        kwargs["consent_given"] = bool(kwargs["consent_given"])
    # stored documents are not validated; nested entries that are not objects are skipped
    feedback = doc.get("conceptFeedback")
    if not isinstance(feedback, dict):
        feedback = {}
    ideas = doc.get("newIdeas")
    if not isinstance(ideas, list):
        ideas = []
    return Session(
        concept_feedback={
            cid: feedback_from_dict(fb) for cid, fb in feedback.items() if isinstance(fb, dict)
        },
        new_ideas=[idea_from_dict(i) for i in ideas if isinstance(i, dict)],
        extra={k: v for k, v in doc.items() if k not in _KNOWN_KEYS},
        **kwargs,
    )


def session_to_dict(session: Session) -> dict:
    """Serialize to the wire document; unset optional fields are omitted."""
    doc: Dict[str, Any] = {}
    for attr, key in FIELD_KEYS.items():
        value = getattr(session, attr)
        if attr in _OPTIONAL_ATTRS and value is None:
            continue
        doc[key] = list(value) if isinstance(value, list) else value
    doc["conceptFeedback"] = {
        cid: feedback_to_dict(fb) for cid, fb in session.concept_feedback.items()
    }
    doc["newIdeas"] = [idea_to_dict(i) for i in session.new_ideas]
    doc.update(session.extra)
    return doc


def update_session_fields(session: Session, fields: dict) -> Dict[str, Any]:
    """Translate a partial update (attribute names or wire keys) into dataclass kwargs."""
    by_key = {key: attr for attr, key in FIELD_KEYS.items()}
    by_key.update(_STRUCTURED_KEYS)
    changes: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for name, value in fields.items():
        attr = name if name in _ATTRS else by_key.get(name)
        if attr is None:
            extra[name] = value
        elif attr == "concept_feedback":
            changes[attr] = {
                cid: fb if isinstance(fb, ConceptFeedback) else feedback_from_dict(fb)
                for cid, fb in value.items()
            }
        elif attr == "new_ideas":
            changes[attr] = [i if isinstance(i, Idea) else idea_from_dict(i) for i in value]
        else:
            changes[attr] = value
    if extra:
        changes["extra"] = {**session.extra, **extra}
    return changes
