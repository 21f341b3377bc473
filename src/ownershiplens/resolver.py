"""Entity resolver: map a query name onto the ownership graph.

Resolution order:
  1. Match the query against every node name (direct hits).
  2. For each direct hit, walk its ancestors (parent / transitive hits).
  3. For each direct hit, collect its siblings (sibling hits).

Each finding records the strategy that matched the query and the chain
responsible, so downstream scoring can rank direct hits above inferred
ones and both above pattern-only matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ownershiplens.config import get_settings
from ownershiplens.entity_resolution.matcher import MatchResult, MatchType, NameMatcher
from ownershiplens.entity_resolution.normalizer import normalize_name
from ownershiplens.ownership.graph import OwnershipGraph
from ownershiplens.ownership.siblings import siblings_of
from ownershiplens.ownership.transitive import walk_from

logger = structlog.get_logger(__name__)


class Relation(str, Enum):
    DIRECT = "direct"
    PARENT = "parent"
    TRANSITIVE = "transitive"
    SIBLING = "sibling"

    @property
    def priority(self) -> int:
        return list(Relation).index(self)


@dataclass(frozen=True)
class ResolvedEntity:
    """One graph node the query resolves to, and how."""

    name: str
    relation: Relation
    match_type: MatchType
    matched_name: str
    match_confidence: float
    confidence: float
    inference_chain: tuple[str, ...]
    evidence: tuple[str, ...] = ()
    country: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "relation": self.relation.value,
            "match_type": self.match_type.value,
            "matched_name": self.matched_name,
            "match_confidence": self.match_confidence,
            "confidence": self.confidence,
            "inference_chain": list(self.inference_chain),
            "evidence": list(self.evidence),
            "country": self.country,
        }


@dataclass(frozen=True)
class ResolutionResult:
    query: str
    normalized_query: str
    entities: tuple[ResolvedEntity, ...] = field(default_factory=tuple)

    @property
    def matched(self) -> bool:
        return bool(self.entities)

    @property
    def best(self) -> ResolvedEntity | None:
        return self.entities[0] if self.entities else None

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "normalized_query": self.normalized_query,
            "matched": self.matched,
            "entities": [e.to_dict() for e in self.entities],
        }


# ---------------------------------------------------------------------------
# Finding builders
# ---------------------------------------------------------------------------

def _direct_finding(graph: OwnershipGraph, key: str, match: MatchResult) -> ResolvedEntity:
    entity = graph.node(key)
    return ResolvedEntity(
        name=entity.name,
        relation=Relation.DIRECT,
        match_type=match.match_type,
        matched_name=entity.name,
        match_confidence=match.confidence,
        confidence=match.confidence,
        inference_chain=(entity.name,),
        evidence=match.evidence,
        country=entity.country,
    )


def _ancestor_findings(
    graph: OwnershipGraph,
    key: str,
    match: MatchResult,
    max_depth: int | None,
) -> list[ResolvedEntity]:
    findings: list[ResolvedEntity] = []
    walk = walk_from(graph, key, max_depth)
    matched_name = graph.display_name(key)

    for ancestor, (confidence, path) in walk.paths.items():
        # A direct edge is reported as such even when a longer chain scores higher
        edge = graph.edge(key, ancestor)
        if edge is not None:
            relation = Relation.PARENT
            confidence = edge.confidence
            path = (key, ancestor)
            evidence = (f"Direct ownership edge ({edge.kind.value})", *edge.evidence)
        else:
            relation = Relation.TRANSITIVE
            evidence = (f"Inferred through {len(path) - 1} ownership hops",)
        chain = tuple(graph.display_name(k) for k in path)
        findings.append(ResolvedEntity(
            name=chain[-1],
            relation=relation,
            match_type=match.match_type,
            matched_name=matched_name,
            match_confidence=match.confidence,
            confidence=match.confidence * confidence,
            inference_chain=chain,
            evidence=(*match.evidence, *evidence),
            country=graph.node(path[-1]).country,
        ))
    return findings


def _sibling_findings(
    graph: OwnershipGraph,
    key: str,
    match: MatchResult,
    discount: float | None,
) -> list[ResolvedEntity]:
    matched_name = graph.display_name(key)
    return [
        ResolvedEntity(
            name=rel.related_entity,
            relation=Relation.SIBLING,
            match_type=match.match_type,
            matched_name=matched_name,
            match_confidence=match.confidence,
            confidence=match.confidence * rel.confidence,
            inference_chain=rel.inference_chain,
            evidence=(*match.evidence, f"Shares parent {rel.inference_chain[1]}"),
            country=graph.entity(rel.related_entity).country,
        )
        for rel in siblings_of(graph, key, discount)
    ]


def _rank_key(item: tuple[int, ResolvedEntity]) -> tuple:
    order, finding = item
    return (
        -finding.confidence,
        finding.relation.priority,
        finding.match_type.priority,
        order,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_entity(
    query: str,
    graph: OwnershipGraph,
    *,
    matcher: NameMatcher | None = None,
    max_depth: int | None = None,
    max_candidates: int | None = None,
    include_siblings: bool = True,
    sibling_discount: float | None = None,
) -> ResolutionResult:
    """Resolve *query* against the nodes of *graph*.

    Parameters
    ----------
    query:
        Candidate name (e.g. a supplier).
    graph:
        Ownership graph built from discovered edges.
    matcher:
        Name matcher; built from settings when omitted.
    max_depth:
        Cap on ancestor chain length in edges (``None`` = settings value).
    max_candidates:
        Cap on the number of node names compared (``None`` = settings value).
    include_siblings:
        Also surface entities sharing a direct parent with a direct hit.
    sibling_discount:
        Sibling confidence discount (``None`` = settings value).

    Returns
    -------
    ResolutionResult
        Deduplicated findings (best per node), ranked by confidence, then
        relation (direct > parent > transitive > sibling), then match
        strategy, then discovery order.  Empty when nothing matches.
    """
    settings = get_settings()
    if matcher is None:
        matcher = NameMatcher.from_settings(settings)
    if max_depth is None:
        max_depth = settings.max_inference_depth
    if max_candidates is None:
        max_candidates = settings.max_candidates

    normalized = normalize_name(query)
    if not normalized:
        logger.info("resolution_skipped_empty_query", query=query)
        return ResolutionResult(query=query, normalized_query=normalized)

    candidates = graph.names()
    if max_candidates is not None and len(candidates) > max_candidates:
        logger.warning(
            "resolution_candidates_truncated",
            total=len(candidates),
            max_candidates=max_candidates,
        )
        candidates = candidates[:max_candidates]

    hits = matcher.batch_match(query, candidates)

    findings: list[ResolvedEntity] = []
    for name, match in hits:
        key = graph.key_for(name)
        findings.append(_direct_finding(graph, key, match))
        findings.extend(_ancestor_findings(graph, key, match, max_depth))
        if include_siblings:
            findings.extend(_sibling_findings(graph, key, match, sibling_discount))

    ranked = sorted(enumerate(findings), key=_rank_key)
    seen: set[str] = set()
    entities: list[ResolvedEntity] = []
    for _, finding in ranked:
        node = graph.key_for(finding.name)
        if node in seen:
            continue
        seen.add(node)
        entities.append(finding)

    logger.info(
        "entity_resolved",
        query=query,
        direct_hits=len(hits),
        entities=len(entities),
    )
    return ResolutionResult(
        query=query,
        normalized_query=normalized,
        entities=tuple(entities),
    )
