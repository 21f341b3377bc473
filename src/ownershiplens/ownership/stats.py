"""Graph statistics and coverage measurement for inference runs.

Statistics reuse the ancestor walks of the transitive pass, so depth
and ultimate-parent counts agree with what inference actually reached.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ownershiplens.ownership.graph import OwnershipGraph
from ownershiplens.ownership.models import GraphStatistics, InferredRelationship
from ownershiplens.ownership.transitive import AncestorWalk, walk_ancestors


def compute_stats(
    graph: OwnershipGraph,
    walks: list[AncestorWalk] | None = None,
    max_depth: int | None = None,
) -> GraphStatistics:
    """Compute aggregate coverage metrics for *graph*.

    ``max_depth`` of the result is the longest parent chain any walk
    reached, not just the length of best-confidence chains;
    ``unique_parent_companies`` counts the distinct root nodes (no parent
    of their own) reached as a terminal ancestor by at least one walk.
    """
    if walks is None:
        walks = walk_ancestors(graph, max_depth)

    keys = graph.node_keys()
    roots: set[str] = set()
    deepest = 0
    for walk in walks:
        roots.update(walk.roots)
        deepest = max(deepest, walk.max_depth)

    return GraphStatistics(
        total_nodes=len(keys),
        nodes_with_parents=sum(1 for k in keys if graph.parents_of(k)),
        nodes_with_children=sum(1 for k in keys if graph.children_of(k)),
        max_depth=deepest,
        unique_parent_companies=len(roots),
    )


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CoverageSummary:
    """How far inference extends the directly discovered ownership data."""

    baseline_entities: int
    inferred_entities: int
    total_entities: int
    multiplier: float
    coverage_percent: float | None = None

    def to_dict(self) -> dict:
        return {
            "baseline_entities": self.baseline_entities,
            "inferred_entities": self.inferred_entities,
            "total_entities": self.total_entities,
            "multiplier": self.multiplier,
            "coverage_percent": self.coverage_percent,
        }


def summarize_coverage(
    graph: OwnershipGraph,
    relationships: Iterable[InferredRelationship],
    universe_size: int | None = None,
) -> CoverageSummary:
    """Compare entities with known ownership before and after inference.

    Parameters
    ----------
    graph:
        The graph inference ran on.  Entities with a direct parent edge
        form the baseline.
    relationships:
        Transitive and sibling relationships produced by inference.
    universe_size:
        Size of the screened list (e.g. the restricted-entity list).  When
        given, ``coverage_percent`` is reported against it.
    """
    baseline = {k for k in graph.node_keys() if graph.parents_of(k)}
    known = set(baseline)
    for rel in relationships:
        known.add(graph.key_for(rel.entity))
        known.add(graph.key_for(rel.related_entity))

    multiplier = len(known) / len(baseline) if baseline else 0.0
    coverage = (
        len(known) / universe_size * 100
        if universe_size
        else None
    )
    return CoverageSummary(
        baseline_entities=len(baseline),
        inferred_entities=len(known) - len(baseline),
        total_entities=len(known),
        multiplier=multiplier,
        coverage_percent=coverage,
    )


def format_statistics(
    stats: GraphStatistics,
    coverage: CoverageSummary | None = None,
) -> str:
    """Format graph statistics (and optionally coverage) as a text report."""
    lines = [
        "Ownership Inference Report",
        "=" * 40,
        "",
        f"Entities in graph:        {stats.total_nodes}",
        f"Entities with parents:    {stats.nodes_with_parents}",
        f"Entities with children:   {stats.nodes_with_children}",
        f"Maximum ownership depth:  {stats.max_depth}",
        f"Unique ultimate parents:  {stats.unique_parent_companies}",
    ]

    if coverage is not None:
        lines += [
            "",
            f"Direct discoveries:       {coverage.baseline_entities}",
            f"With inference:           {coverage.total_entities}",
            f"Coverage multiplier:      {coverage.multiplier:.2f}x",
        ]
        if coverage.coverage_percent is not None:
            lines.append(f"Coverage of list:         {coverage.coverage_percent:.1f}%")

    return "\n".join(lines)
