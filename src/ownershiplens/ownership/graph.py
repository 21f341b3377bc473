"""In-memory ownership graph built from discovered (child -> parent) edges.

Nodes are keyed by normalized name; the first raw spelling seen becomes
the node's display name and later spellings become aliases.  Forward
(child -> parents) and reverse (parent -> children) adjacency are kept in
step with the edge set on every insertion.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator

import structlog

from ownershiplens.entity_resolution.matcher import MatchType, NameMatcher
from ownershiplens.entity_resolution.normalizer import normalize_name
from ownershiplens.ownership.models import Entity, OwnershipEdge

logger = structlog.get_logger(__name__)

# Strategies trusted to fold a variant spelling into an existing node
_VARIANT_MATCH_TYPES = frozenset({MatchType.EXACT, MatchType.FUZZY})


class OwnershipGraph:
    """Directed graph of ownership edges with O(1) lookups in both directions."""

    def __init__(self, matcher: NameMatcher | None = None) -> None:
        self._matcher = matcher
        self._entities: dict[str, Entity] = {}
        self._edges: dict[tuple[str, str], OwnershipEdge] = {}
        self._parents: dict[str, list[str]] = {}
        self._children: dict[str, list[str]] = {}
        self._aliases: dict[str, str] = {}
        self.rejected: list[tuple[OwnershipEdge, str]] = []

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.key_for(name) in self._entities

    def key_for(self, name: str) -> str:
        """Return the node key for *name*, following folded variant spellings."""
        key = normalize_name(name)
        return self._aliases.get(key, key)

    def entity(self, name: str) -> Entity | None:
        return self._entities.get(self.key_for(name))

    def node(self, key: str) -> Entity:
        return self._entities[key]

    def display_name(self, key: str) -> str:
        return self._entities[key].name

    def node_keys(self) -> list[str]:
        """Node keys in insertion order."""
        return list(self._entities)

    def names(self) -> list[str]:
        """Display names in insertion order."""
        return [e.name for e in self._entities.values()]

    def parents_of(self, key: str) -> list[str]:
        return list(self._parents.get(key, ()))

    def children_of(self, key: str) -> list[str]:
        return list(self._children.get(key, ()))

    def edge(self, child_key: str, parent_key: str) -> OwnershipEdge | None:
        return self._edges.get((child_key, parent_key))

    def edges(self) -> Iterator[OwnershipEdge]:
        return iter(self._edges.values())

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _reject(self, edge: OwnershipEdge, reason: str) -> bool:
        self.rejected.append((edge, reason))
        logger.warning(
            "graph_edge_rejected",
            child=edge.child,
            parent=edge.parent,
            reason=reason,
        )
        return False

    def _resolve_key(self, raw: str) -> str:
        key = normalize_name(raw)
        if key in self._entities or key in self._aliases:
            return self._aliases.get(key, key)
        if self._matcher is None:
            return key

        for existing in self._entities:
            result = self._matcher.match(raw, self._entities[existing].name)
            if result.matched and result.match_type in _VARIANT_MATCH_TYPES:
                self._aliases[key] = existing
                logger.debug(
                    "graph_variant_folded",
                    name=raw,
                    into=self._entities[existing].name,
                    similarity=result.similarity,
                )
                return existing
        return key

    def _ensure_node(self, key: str, raw: str, country: str | None) -> None:
        entity = self._entities.get(key)
        if entity is None:
            self._entities[key] = Entity(name=raw.strip(), country=country)
            return
        if raw.strip() != entity.name:
            entity.aliases.add(raw.strip())
        if entity.country is None and country:
            entity.country = country

    def add_edge(self, edge: OwnershipEdge) -> bool:
        """Insert *edge*, returning ``False`` when it is malformed and dropped.

        A repeated (child, parent) pair keeps the higher confidence and
        merges evidence from both instances.
        """
        if not normalize_name(edge.child) or not normalize_name(edge.parent):
            return self._reject(edge, "empty_name")

        confidence = edge.confidence
        if (
            isinstance(confidence, bool)
            or not isinstance(confidence, (int, float))
            or math.isnan(confidence)
            or not 0.0 <= confidence <= 1.0
        ):
            return self._reject(edge, "invalid_confidence")

        child_key = self._resolve_key(edge.child)
        parent_key = self._resolve_key(edge.parent)
        if child_key == parent_key:
            return self._reject(edge, "self_loop")

        self._ensure_node(child_key, edge.child, edge.child_country)
        self._ensure_node(parent_key, edge.parent, edge.parent_country)

        pair = (child_key, parent_key)
        existing = self._edges.get(pair)
        if existing is None:
            self._edges[pair] = edge
            self._parents.setdefault(child_key, []).append(parent_key)
            self._children.setdefault(parent_key, []).append(child_key)
            return True

        keep, other = (edge, existing) if edge.confidence > existing.confidence else (existing, edge)
        merged = tuple(dict.fromkeys((*keep.evidence, *other.evidence)))
        self._edges[pair] = OwnershipEdge(
            child=existing.child,
            parent=existing.parent,
            kind=keep.kind,
            confidence=keep.confidence,
            evidence=merged,
            child_country=existing.child_country or edge.child_country,
            parent_country=existing.parent_country or edge.parent_country,
        )
        return True


def build_graph(
    edges: Iterable[OwnershipEdge],
    *,
    matcher: NameMatcher | None = None,
) -> OwnershipGraph:
    """Build an :class:`OwnershipGraph` from a snapshot of discovered edges.

    Parameters
    ----------
    edges:
        Direct ownership edges.  Malformed ones are dropped and listed in
        ``graph.rejected``.
    matcher:
        When given, a name not seen before is compared against existing
        nodes and folded into the first exact/fuzzy match, so variant
        spellings collapse into one node.

    Returns
    -------
    OwnershipGraph
    """
    graph = OwnershipGraph(matcher=matcher)
    for edge in edges:
        graph.add_edge(edge)

    logger.info(
        "ownership_graph_built",
        nodes=len(graph),
        edges=graph.edge_count,
        rejected=len(graph.rejected),
    )
    return graph
