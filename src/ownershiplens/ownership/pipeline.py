"""Inference pipeline orchestrator.

Builds the graph once, walks ancestors once, then runs the transitive,
sibling and statistics passes concurrently over the same read-only
graph.  Each pass returns its own fresh collection.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from ownershiplens.config import Settings, get_settings
from ownershiplens.entity_resolution.matcher import NameMatcher
from ownershiplens.ownership.graph import OwnershipGraph, build_graph
from ownershiplens.ownership.models import (
    GraphStatistics,
    InferredRelationship,
    OwnershipEdge,
)
from ownershiplens.ownership.siblings import infer_siblings
from ownershiplens.ownership.stats import CoverageSummary, compute_stats, summarize_coverage
from ownershiplens.ownership.transitive import infer_transitive, walk_ancestors

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InferenceResult:
    graph: OwnershipGraph
    transitive: list[InferredRelationship]
    siblings: list[InferredRelationship]
    stats: GraphStatistics
    coverage: CoverageSummary

    @property
    def relationships(self) -> list[InferredRelationship]:
        return [*self.transitive, *self.siblings]

    def to_dict(self) -> dict:
        return {
            "transitive": [r.to_dict() for r in self.transitive],
            "siblings": [r.to_dict() for r in self.siblings],
            "stats": self.stats.to_dict(),
            "coverage": self.coverage.to_dict(),
            "rejected_edges": [
                {**edge.to_dict(), "reason": reason}
                for edge, reason in self.graph.rejected
            ],
        }


def run_inference_pipeline(
    edges: Iterable[OwnershipEdge],
    *,
    settings: Settings | None = None,
    max_depth: int | None = None,
    max_workers: int | None = None,
    merge_variants: bool = False,
    universe_size: int | None = None,
) -> InferenceResult:
    """Run graph construction and all inference passes.

    Args:
        edges: Snapshot of discovered ownership edges.
        settings: Application settings (thresholds, depth cap, workers).
        max_depth: Overrides ``settings.max_inference_depth``.
        max_workers: Overrides ``settings.max_workers``.
        merge_variants: Fold fuzzy variant spellings into one node while
            building the graph.
        universe_size: Size of the screened list, for coverage percent.

    Returns:
        InferenceResult with relationships, statistics and coverage.
    """
    if settings is None:
        settings = get_settings()
    if max_depth is None:
        max_depth = settings.max_inference_depth
    if max_workers is None:
        max_workers = settings.max_workers

    matcher = NameMatcher.from_settings(settings) if merge_variants else None
    graph = build_graph(edges, matcher=matcher)
    walks = walk_ancestors(graph, max_depth)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        transitive_future = executor.submit(infer_transitive, graph, max_depth, walks)
        siblings_future = executor.submit(
            infer_siblings, graph, settings.sibling_confidence_discount
        )
        stats_future = executor.submit(compute_stats, graph, walks)

        transitive = transitive_future.result()
        siblings = siblings_future.result()
        stats = stats_future.result()

    coverage = summarize_coverage(graph, [*transitive, *siblings], universe_size)

    logger.info(
        "inference_pipeline_complete",
        nodes=stats.total_nodes,
        transitive=len(transitive),
        siblings=len(siblings),
        max_depth=stats.max_depth,
        multiplier=round(coverage.multiplier, 2),
    )
    return InferenceResult(
        graph=graph,
        transitive=transitive,
        siblings=siblings,
        stats=stats,
        coverage=coverage,
    )
