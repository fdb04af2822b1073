"""Catalog domain models: pure Python, no file or HTTP dependencies.

On disk and on the wire the catalog uses camelCase keys; the helpers at the
bottom of this module convert between those documents and the dataclasses.
Keys this model does not know about are carried in ``extra`` so a record
round-trips unchanged.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Topic:
    id: str
    name: str
    description: str = ""
    color: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Barrier:
    id: str
    name: str
    short_description: str = ""
    description: str = ""
    color: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConceptDetail:
    title: str
    description: str = ""


@dataclass
class BarrierSolution:
    barrier_id: str
    explanation: str = ""


@dataclass
class Concept:
    id: str
    name: str
    tagline: str = ""
    category: str = ""
    layer: str = ""
    image: str = ""
    topics: List[str] = field(default_factory=list)  # ordered, duplicates allowed
    details: List[ConceptDetail] = field(default_factory=list)
    barrier_solutions: Optional[List[BarrierSolution]] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Catalog:
    topics: List[Topic] = field(default_factory=list)
    barriers: List[Barrier] = field(default_factory=list)
    concepts: List[Concept] = field(default_factory=list)

    def concept_index(self) -> Dict[str, Concept]:
        return {c.id: c for c in self.concepts}


# ------------------------------------------------------------------
# Document <-> model conversion
# ------------------------------------------------------------------
_TOPIC_KEYS = {"id", "name", "description", "color"}
_BARRIER_KEYS = {"id", "name", "shortDescription", "description", "color"}
_CONCEPT_KEYS = {
    "id", "name", "tagline", "category", "layer", "image",
    "topics", "details", "barrierSolutions",
}


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _extra(doc: dict, known: set) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in known}


def topic_from_dict(doc: dict) -> Topic:
    return Topic(
        id=_str(doc.get("id")),
        name=_str(doc.get("name")),
        description=_str(doc.get("description")),
        color=_str(doc.get("color")),
        extra=_extra(doc, _TOPIC_KEYS),
    )


def topic_to_dict(topic: Topic) -> dict:
    return {
        "id": topic.id,
        "name": topic.name,
        "description": topic.description,
        "color": topic.color,
        **topic.extra,
    }


def barrier_from_dict(doc: dict) -> Barrier:
    return Barrier(
        id=_str(doc.get("id")),
        name=_str(doc.get("name")),
        short_description=_str(doc.get("shortDescription")),
        description=_str(doc.get("description")),
        color=_str(doc.get("color")),
        extra=_extra(doc, _BARRIER_KEYS),
    )


def barrier_to_dict(barrier: Barrier) -> dict:
    return {
        "id": barrier.id,
        "name": barrier.name,
        "shortDescription": barrier.short_description,
        "description": barrier.description,
        "color": barrier.color,
        **barrier.extra,
    }


def concept_from_dict(doc: dict) -> Concept:
    solutions = doc.get("barrierSolutions")
    return Concept(
        id=_str(doc.get("id")),
        name=_str(doc.get("name")),
        tagline=_str(doc.get("tagline")),
        category=_str(doc.get("category")),
        layer=_str(doc.get("layer")),
        image=_str(doc.get("image")),
        topics=[_str(t) for t in (doc.get("topics") or [])],
        details=[
            ConceptDetail(title=_str(d.get("title")), description=_str(d.get("description")))
            for d in (doc.get("details") or []) if isinstance(d, dict)
        ],
        barrier_solutions=None if solutions is None else [
            BarrierSolution(barrier_id=_str(s.get("barrierId")), explanation=_str(s.get("explanation")))
            for s in solutions if isinstance(s, dict)
        ],
        extra=_extra(doc, _CONCEPT_KEYS),
    )


def concept_to_dict(concept: Concept) -> dict:
    doc = {
        "id": concept.id,
        "name": concept.name,
        "tagline": concept.tagline,
        "category": concept.category,
        "layer": concept.layer,
        "image": concept.image,
        "topics": list(concept.topics),
        "details": [{"title": d.title, "description": d.description} for d in concept.details],
    }
    if concept.barrier_solutions is not None:
        doc["barrierSolutions"] = [
            {"barrierId": s.barrier_id, "explanation": s.explanation}
            for s in concept.barrier_solutions
        ]
    doc.update(concept.extra)
    return doc
