"""Restricted-list screening on top of entity resolution.

A finding counts only when it lands on a restricted name.  Tiers:

- ``critical``: the query itself is a restricted entity (exact, fuzzy or
  transliteration hit)
- ``high``: a direct or transitive ancestor is restricted
- ``medium``: a sibling shares a parent with a restricted entity
- ``low``: the only link is a pattern match
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from ownershiplens.entity_resolution.matcher import MatchType, NameMatcher
from ownershiplens.entity_resolution.normalizer import normalize_name
from ownershiplens.ownership.graph import OwnershipGraph
from ownershiplens.resolver import Relation, ResolvedEntity, resolve_entity

logger = structlog.get_logger(__name__)

TIERS: tuple[str, ...] = ("clear", "low", "medium", "high", "critical")

_RELATION_TIERS: dict[Relation, str] = {
    Relation.DIRECT: "critical",
    Relation.PARENT: "high",
    Relation.TRANSITIVE: "high",
    Relation.SIBLING: "medium",
}


def severity_tier(finding: ResolvedEntity) -> str:
    """Map a restricted-entity finding to a severity tier."""
    if finding.match_type is MatchType.PATTERN:
        return "low"
    return _RELATION_TIERS[finding.relation]


@dataclass(frozen=True)
class ScreeningHit:
    finding: ResolvedEntity
    tier: str

    def to_dict(self) -> dict:
        return {**self.finding.to_dict(), "tier": self.tier}


@dataclass(frozen=True)
class ScreeningReport:
    query: str
    tier: str
    hits: tuple[ScreeningHit, ...] = field(default_factory=tuple)

    @property
    def restricted(self) -> bool:
        return self.tier != "clear"

    def summary(self) -> str:
        if not self.hits:
            return f"{self.query}: clear (no evidence of restriction)"
        top = self.hits[0].finding
        return (
            f"{self.query}: {self.tier.upper()} via {top.relation.value} link to "
            f"{top.name} ({top.confidence * 100:.0f}% confidence, "
            f"{top.match_type.value} match)"
        )

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "tier": self.tier,
            "restricted": self.restricted,
            "hits": [h.to_dict() for h in self.hits],
            "summary": self.summary(),
        }


def screen_name(
    query: str,
    graph: OwnershipGraph,
    restricted: Iterable[str],
    *,
    matcher: NameMatcher | None = None,
    max_depth: int | None = None,
    max_candidates: int | None = None,
) -> ScreeningReport:
    """Screen *query* against the restricted names reachable through *graph*.

    Restricted names are compared by normalized key.  Hits are ordered
    worst tier first, then by confidence.
    """
    restricted = [name for name in restricted if normalize_name(name)]
    restricted_keys = {graph.key_for(name) for name in restricted}
    if matcher is None:
        matcher = NameMatcher.from_settings()

    result = resolve_entity(
        query,
        graph,
        matcher=matcher,
        max_depth=max_depth,
        max_candidates=max_candidates,
    )

    hits = [
        ScreeningHit(finding=finding, tier=severity_tier(finding))
        for finding in result.entities
        if graph.key_for(finding.name) in restricted_keys
    ]

    # Listed names with no ownership data can still be hit directly
    off_graph = [name for name in restricted if name not in graph]
    for name, match in matcher.batch_match(query, off_graph):
        finding = ResolvedEntity(
            name=name,
            relation=Relation.DIRECT,
            match_type=match.match_type,
            matched_name=name,
            match_confidence=match.confidence,
            confidence=match.confidence,
            inference_chain=(name,),
            evidence=match.evidence,
        )
        hits.append(ScreeningHit(finding=finding, tier=severity_tier(finding)))

    hits.sort(key=lambda h: (-TIERS.index(h.tier), -h.finding.confidence))
    tier = hits[0].tier if hits else "clear"
    logger.info("name_screened", query=query, tier=tier, hits=len(hits))
    return ScreeningReport(query=query, tier=tier, hits=tuple(hits))
