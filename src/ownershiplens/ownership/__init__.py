"""Ownership graph and inference engines: transitive, sibling, statistics."""

from ownershiplens.ownership.graph import OwnershipGraph, build_graph
from ownershiplens.ownership.models import (
    Entity,
    GraphStatistics,
    InferenceKind,
    InferredRelationship,
    OwnershipEdge,
    RelationshipKind,
    edges_from_records,
)
from ownershiplens.ownership.pipeline import InferenceResult, run_inference_pipeline
from ownershiplens.ownership.siblings import infer_siblings, siblings_of
from ownershiplens.ownership.stats import (
    CoverageSummary,
    compute_stats,
    format_statistics,
    summarize_coverage,
)
from ownershiplens.ownership.transitive import (
    AncestorWalk,
    infer_transitive,
    walk_ancestors,
    walk_from,
)

__all__ = [
    # models
    "Entity",
    "GraphStatistics",
    "InferenceKind",
    "InferredRelationship",
    "OwnershipEdge",
    "RelationshipKind",
    "edges_from_records",
    # graph
    "OwnershipGraph",
    "build_graph",
    # transitive
    "AncestorWalk",
    "infer_transitive",
    "walk_ancestors",
    "walk_from",
    # siblings
    "infer_siblings",
    "siblings_of",
    # stats
    "CoverageSummary",
    "compute_stats",
    "format_statistics",
    "summarize_coverage",
    # pipeline
    "InferenceResult",
    "run_inference_pipeline",
]
