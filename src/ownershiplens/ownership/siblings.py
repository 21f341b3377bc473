"""Sibling inference: children that share a direct parent are affiliates."""

from __future__ import annotations

import structlog

from ownershiplens.config import get_settings
from ownershiplens.ownership.graph import OwnershipGraph
from ownershiplens.ownership.models import InferenceKind, InferredRelationship

logger = structlog.get_logger(__name__)


def _resolve_discount(discount: float | None) -> float:
    if discount is None:
        discount = get_settings().sibling_confidence_discount
    if not 0.0 <= discount <= 1.0:
        msg = f"sibling discount must be within [0, 1], got {discount!r}"
        raise ValueError(msg)
    return discount


def _sibling_confidence(
    graph: OwnershipGraph, a: str, b: str, parent: str, discount: float
) -> float:
    conf_a = graph.edge(a, parent).confidence
    conf_b = graph.edge(b, parent).confidence
    return (conf_a + conf_b) / 2 * discount


def _relationship(
    graph: OwnershipGraph, a: str, parent: str, b: str, confidence: float
) -> InferredRelationship:
    chain = (graph.display_name(a), graph.display_name(parent), graph.display_name(b))
    return InferredRelationship(
        entity=chain[0],
        related_entity=chain[2],
        kind=InferenceKind.SIBLING,
        confidence=confidence,
        inference_chain=chain,
    )


def infer_siblings(
    graph: OwnershipGraph,
    discount: float | None = None,
) -> list[InferredRelationship]:
    """Emit one sibling relationship per unordered pair of children sharing a parent.

    The pair is ordered by node key.  When two children share several
    parents, the pair is emitted once via the parent giving the highest
    confidence (first such parent on ties).

    Confidence is the mean of the two children's edge confidences to the
    shared parent, multiplied by *discount* (configuration default 0.9).
    """
    discount = _resolve_discount(discount)
    best: dict[tuple[str, str], tuple[float, str]] = {}

    for parent in graph.node_keys():
        children = sorted(graph.children_of(parent))
        if len(children) < 2:
            continue
        for i, a in enumerate(children):
            for b in children[i + 1:]:
                confidence = _sibling_confidence(graph, a, b, parent, discount)
                current = best.get((a, b))
                if current is None or confidence > current[0]:
                    best[(a, b)] = (confidence, parent)

    inferred = [
        _relationship(graph, a, parent, b, confidence)
        for (a, b), (confidence, parent) in best.items()
    ]
    logger.info("sibling_inference_complete", inferred=len(inferred))
    return inferred


def siblings_of(
    graph: OwnershipGraph,
    key: str,
    discount: float | None = None,
) -> list[InferredRelationship]:
    """Sibling relationships of one node, framed from that node.

    Each sibling appears once, via its best shared parent.
    """
    discount = _resolve_discount(discount)
    best: dict[str, tuple[float, str]] = {}

    for parent in graph.parents_of(key):
        for other in graph.children_of(parent):
            if other == key:
                continue
            confidence = _sibling_confidence(graph, key, other, parent, discount)
            current = best.get(other)
            if current is None or confidence > current[0]:
                best[other] = (confidence, parent)

    return [
        _relationship(graph, key, parent, other, confidence)
        for other, (confidence, parent) in best.items()
    ]
