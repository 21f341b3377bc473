"""Transitive ownership inference: A -> B -> C implies A is indirectly owned by C.

Each start node is walked along parent edges best-first on compounded
confidence (the product of edge confidences along the chain), so the
first chain settled for an ancestor is its highest-confidence one.

Under a depth cap a node may also be settled again at a strictly
shallower depth with lower confidence, since that chain leaves room to
reach ancestors the stronger, deeper chain cannot.  A chain is only
extended to nodes not already on it, which keeps every walk finite on
cyclic data.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field

import structlog

from ownershiplens.ownership.graph import OwnershipGraph
from ownershiplens.ownership.models import InferenceKind, InferredRelationship

logger = structlog.get_logger(__name__)


@dataclass
class AncestorWalk:
    """Everything one walk from *start* settled.

    ``paths`` maps each reached ancestor key to ``(confidence, path)``
    where *path* is the highest-confidence key sequence from *start* to
    that ancestor.  ``max_depth`` is the longest chain the walk reached,
    which can exceed the length of any best-confidence path.
    """

    start: str
    paths: dict[str, tuple[float, tuple[str, ...]]] = field(default_factory=dict)
    max_depth: int = 0
    roots: set[str] = field(default_factory=set)


def _check_depth(max_depth: int | None) -> None:
    if max_depth is not None and max_depth < 1:
        msg = f"max_depth must be a positive integer or None, got {max_depth!r}"
        raise ValueError(msg)


def walk_from(
    graph: OwnershipGraph,
    start: str,
    max_depth: int | None = None,
) -> AncestorWalk:
    """Walk parent edges from node key *start*.

    Parameters
    ----------
    graph:
        The ownership graph (read only).
    start:
        Node key to walk from.
    max_depth:
        Maximum chain length in edges; ``None`` means unbounded.  Every
        ancestor reachable within the cap is reported.
    """
    _check_depth(max_depth)
    walk = AncestorWalk(start=start)
    tie = itertools.count()

    # Shallowest depth each node has been settled at so far
    settled: dict[str, int] = {start: 0}

    # (-confidence, depth, tiebreak, node, path)
    heap: list[tuple[float, int, int, str, tuple[str, ...]]] = []

    def push_parents(node: str, confidence: float, path: tuple[str, ...]) -> None:
        depth = len(path)
        if max_depth is not None and depth > max_depth:
            return
        for parent in graph.parents_of(node):
            if parent in path:
                continue
            edge = graph.edge(node, parent)
            heapq.heappush(
                heap,
                (-(confidence * edge.confidence), depth, next(tie), parent, (*path, parent)),
            )

    push_parents(start, 1.0, (start,))

    while heap:
        neg_conf, depth, _, node, path = heapq.heappop(heap)
        walk.max_depth = max(walk.max_depth, depth)

        previous = settled.get(node)
        if previous is not None and (max_depth is None or previous <= depth):
            continue
        settled[node] = depth

        if node not in walk.paths:
            walk.paths[node] = (-neg_conf, path)
            if not graph.parents_of(node):
                walk.roots.add(node)

        push_parents(node, -neg_conf, path)

    return walk


def walk_ancestors(
    graph: OwnershipGraph,
    max_depth: int | None = None,
) -> list[AncestorWalk]:
    """Walk from every node that has at least one parent, in insertion order."""
    _check_depth(max_depth)
    return [
        walk_from(graph, key, max_depth)
        for key in graph.node_keys()
        if graph.parents_of(key)
    ]


def infer_transitive(
    graph: OwnershipGraph,
    max_depth: int | None = None,
    walks: list[AncestorWalk] | None = None,
) -> list[InferredRelationship]:
    """Derive multi-hop ownership relationships.

    Only chains of two or more edges are emitted, and never for a pair
    that already has a direct edge.  Each (entity, ancestor) pair appears
    once, carrying its highest-confidence chain.

    Parameters
    ----------
    graph:
        The ownership graph.
    max_depth:
        Maximum chain length in edges (``None`` = unbounded).  Ignored
        when *walks* is supplied.
    walks:
        Pre-computed result of :func:`walk_ancestors`, so statistics and
        inference can share one traversal.

    Returns
    -------
    list[InferredRelationship]
    """
    if walks is None:
        walks = walk_ancestors(graph, max_depth)

    inferred: list[InferredRelationship] = []
    for walk in walks:
        for ancestor, (confidence, path) in walk.paths.items():
            if len(path) < 3 or graph.edge(walk.start, ancestor) is not None:
                continue
            chain = tuple(graph.display_name(key) for key in path)
            inferred.append(InferredRelationship(
                entity=chain[0],
                related_entity=chain[-1],
                kind=InferenceKind.TRANSITIVE,
                confidence=confidence,
                inference_chain=chain,
            ))

    logger.info("transitive_inference_complete", inferred=len(inferred), walks=len(walks))
    return inferred
