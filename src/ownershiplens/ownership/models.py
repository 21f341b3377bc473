"""Data model for ownership edges, entities and inference outputs."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class RelationshipKind(str, Enum):
    SUBSIDIARY = "subsidiary"
    AFFILIATE = "affiliate"
    UNSPECIFIED = "unspecified"


class InferenceKind(str, Enum):
    TRANSITIVE = "transitive"
    SIBLING = "sibling"


@dataclass
class Entity:
    """A canonical organization identity (one graph node)."""

    name: str
    aliases: set[str] = field(default_factory=set)
    country: str | None = None


@dataclass(frozen=True)
class OwnershipEdge:
    """Directed ownership edge: *child* is owned or controlled by *parent*."""

    child: str
    parent: str
    kind: RelationshipKind = RelationshipKind.UNSPECIFIED
    confidence: float = 1.0
    evidence: tuple[str, ...] = ()
    child_country: str | None = None
    parent_country: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "child": self.child,
            "parent": self.parent,
            "kind": self.kind.value,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OwnershipEdge:
        """Build an edge from its ``to_dict`` form; unknown kinds become unspecified."""
        try:
            kind = RelationshipKind(data.get("kind") or "unspecified")
        except ValueError:
            kind = RelationshipKind.UNSPECIFIED
        evidence = data.get("evidence") or ()
        if isinstance(evidence, str):
            evidence = (evidence,)
        return cls(
            child=str(data.get("child") or ""),
            parent=str(data.get("parent") or ""),
            kind=kind,
            confidence=_as_confidence(data.get("confidence")),
            evidence=tuple(str(e) for e in evidence),
            child_country=data.get("child_country"),
            parent_country=data.get("parent_country"),
        )


@dataclass(frozen=True)
class InferredRelationship:
    """A derived relationship plus the chain of names that evidences it."""

    entity: str
    related_entity: str
    kind: InferenceKind
    confidence: float
    inference_chain: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity,
            "related_entity": self.related_entity,
            "kind": self.kind.value,
            "confidence": self.confidence,
            "inference_chain": list(self.inference_chain),
        }


@dataclass(frozen=True)
class GraphStatistics:
    total_nodes: int
    nodes_with_parents: int
    nodes_with_children: int
    max_depth: int
    unique_parent_companies: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_nodes": self.total_nodes,
            "nodes_with_parents": self.nodes_with_parents,
            "nodes_with_children": self.nodes_with_children,
            "max_depth": self.max_depth,
            "unique_parent_companies": self.unique_parent_companies,
        }


# ---------------------------------------------------------------------------
# Record mapping (discovered-ownership store shape -> edges)
# ---------------------------------------------------------------------------

def _as_name_list(value: Any, *, field_name: str, entity_name: str) -> list[str]:
    """Accept a list of names or a JSON-encoded list; anything else yields []."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning(
                "unparseable_name_list", field=field_name, entity_name=entity_name
            )
            return []
    if not isinstance(value, list):
        logger.warning("unparseable_name_list", field=field_name, entity_name=entity_name)
        return []
    return [str(v) for v in value if isinstance(v, str) and v.strip()]


def _as_confidence(value: Any) -> float:
    if value is None:
        return 1.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def edges_from_records(records: Iterable[Mapping[str, Any]]) -> list[OwnershipEdge]:
    """Convert discovered-ownership records into :class:`OwnershipEdge` objects.

    Each record may contain:
      - ``entity_name`` (required)
      - ``parent_company``
      - ``subsidiaries`` / ``affiliates`` (lists or JSON-encoded lists)
      - ``confidence`` (defaults to 1.0)
      - ``evidence_points`` / ``sources`` (lists or JSON-encoded lists)
      - ``country``

    Records without an ``entity_name`` are skipped.  Confidence values
    are passed through unchecked; :func:`build_graph` rejects bad ones.
    """
    edges: list[OwnershipEdge] = []
    skipped = 0

    for rec in records:
        entity_name = rec.get("entity_name")
        if not isinstance(entity_name, str) or not entity_name.strip():
            skipped += 1
            continue

        confidence = _as_confidence(rec.get("confidence"))
        evidence = tuple(
            _as_name_list(rec.get("evidence_points"), field_name="evidence_points",
                          entity_name=entity_name)
            + _as_name_list(rec.get("sources"), field_name="sources",
                            entity_name=entity_name)
        )
        country = rec.get("country") or None
        parent = rec.get("parent_company") or None

        if isinstance(parent, str) and parent.strip():
            edges.append(OwnershipEdge(
                child=entity_name,
                parent=parent,
                kind=RelationshipKind.SUBSIDIARY,
                confidence=confidence,
                evidence=evidence,
                child_country=country,
            ))

            for affiliate in _as_name_list(
                rec.get("affiliates"), field_name="affiliates", entity_name=entity_name
            ):
                edges.append(OwnershipEdge(
                    child=affiliate,
                    parent=parent,
                    kind=RelationshipKind.AFFILIATE,
                    confidence=confidence,
                    evidence=evidence,
                ))

        for subsidiary in _as_name_list(
            rec.get("subsidiaries"), field_name="subsidiaries", entity_name=entity_name
        ):
            edges.append(OwnershipEdge(
                child=subsidiary,
                parent=entity_name,
                kind=RelationshipKind.SUBSIDIARY,
                confidence=confidence,
                evidence=evidence,
                parent_country=country,
            ))

    if skipped:
        logger.warning("ownership_records_skipped", skipped=skipped)
    return edges
