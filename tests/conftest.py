"""Shared pytest fixtures for the ownershiplens test suite."""

from __future__ import annotations

import pytest

from ownershiplens.entity_resolution.matcher import NameMatcher
from ownershiplens.ownership.graph import OwnershipGraph, build_graph
from ownershiplens.ownership.models import OwnershipEdge, RelationshipKind


@pytest.fixture()
def matcher() -> NameMatcher:
    """A matcher with the default thresholds, independent of environment."""
    return NameMatcher()


@pytest.fixture()
def huawei_edges() -> list[OwnershipEdge]:
    return [
        OwnershipEdge(
            child="Huawei Device Co., Ltd.",
            parent="Huawei Technologies Co., Ltd.",
            kind=RelationshipKind.SUBSIDIARY,
            confidence=0.95,
            evidence=("Annual report 2023",),
            child_country="CN",
            parent_country="CN",
        ),
    ]


@pytest.fixture()
def huawei_graph(huawei_edges) -> OwnershipGraph:
    return build_graph(huawei_edges)


@pytest.fixture()
def group_graph() -> OwnershipGraph:
    """Three-level group with two subsidiaries under one holding.

    Sub One -> Mid Holdings (0.9) -> Top Group (0.8)
    Sub Two -> Mid Holdings (0.5)
    """
    return build_graph([
        OwnershipEdge("Sub One", "Mid Holdings", confidence=0.9),
        OwnershipEdge("Mid Holdings", "Top Group", confidence=0.8),
        OwnershipEdge("Sub Two", "Mid Holdings", confidence=0.5),
    ])

