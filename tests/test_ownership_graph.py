"""Tests for ownership graph construction and record mapping."""

from __future__ import annotations

import math

import pytest

from ownershiplens.entity_resolution.matcher import NameMatcher
from ownershiplens.ownership.graph import build_graph
from ownershiplens.ownership.models import (
    OwnershipEdge,
    RelationshipKind,
    edges_from_records,
)

# =========================================================================
# build_graph
# =========================================================================


class TestBuildGraph:
    def test_adjacency_both_directions(self, huawei_graph):
        device = huawei_graph.key_for("Huawei Device Co., Ltd.")
        parent = huawei_graph.key_for("Huawei Technologies Co., Ltd.")
        assert huawei_graph.parents_of(device) == [parent]
        assert huawei_graph.children_of(parent) == [device]
        assert huawei_graph.parents_of(parent) == []
        assert huawei_graph.children_of(device) == []

    def test_nodes_keyed_by_normalized_name(self, huawei_graph):
        assert huawei_graph.node_keys() == ["huawei device", "huawei technologies"]
        assert huawei_graph.names() == [
            "Huawei Device Co., Ltd.",
            "Huawei Technologies Co., Ltd.",
        ]
        assert "HUAWEI DEVICE LIMITED" in huawei_graph
        assert "Huawei Cloud" not in huawei_graph

    def test_country_recorded(self, huawei_graph):
        assert huawei_graph.entity("Huawei Device Co., Ltd.").country == "CN"

    def test_duplicate_pair_keeps_highest_confidence(self):
        graph = build_graph([
            OwnershipEdge("Acme Ltd", "Parent Co", confidence=0.6, evidence=("a",)),
            OwnershipEdge("ACME Limited", "Parent", confidence=0.9, evidence=("b", "a")),
        ])
        assert graph.edge_count == 1
        edge = graph.edge("acme", "parent")
        assert edge.confidence == 0.9
        assert edge.evidence == ("b", "a")
        assert graph.parents_of("acme") == ["parent"]

    def test_variant_spellings_become_aliases(self):
        graph = build_graph([
            OwnershipEdge("Acme Ltd", "Parent Co"),
            OwnershipEdge("ACME LIMITED", "Other Parent"),
        ])
        entity = graph.entity("acme")
        assert entity.name == "Acme Ltd"
        assert entity.aliases == {"ACME LIMITED"}
        assert graph.parents_of("acme") == ["parent", "other parent"]

    @pytest.mark.parametrize(
        "edge, reason",
        [
            (OwnershipEdge("Acme Ltd", "ACME Limited"), "self_loop"),
            (OwnershipEdge("", "Parent"), "empty_name"),
            (OwnershipEdge("Ltd.", "Parent"), "empty_name"),
            (OwnershipEdge("Child", "Parent", confidence=1.5), "invalid_confidence"),
            (OwnershipEdge("Child", "Parent", confidence=-0.1), "invalid_confidence"),
            (OwnershipEdge("Child", "Parent", confidence=math.nan), "invalid_confidence"),
        ],
    )
    def test_malformed_edges_dropped(self, edge, reason):
        graph = build_graph([edge, OwnershipEdge("Good Child", "Good Parent")])
        assert graph.rejected == [(edge, reason)]
        assert graph.edge_count == 1
        assert len(graph) == 2

    def test_fuzzy_variants_folded_with_matcher(self):
        edges = [
            OwnershipEdge("Hikvision Digital Technology", "CETC"),
            OwnershipEdge("Hikvison Digital Technology", "China Electronics Technology Group"),
        ]
        assert len(build_graph(edges)) == 4

        graph = build_graph(edges, matcher=NameMatcher())
        assert len(graph) == 3
        key = graph.key_for("Hikvison Digital Technology")
        assert key == "hikvision digital technology"
        assert len(graph.parents_of(key)) == 2
        assert "Hikvison Digital Technology" in graph.entity(key).aliases

    def test_empty_input(self):
        graph = build_graph([])
        assert len(graph) == 0
        assert graph.edge_count == 0


# =========================================================================
# Record mapping
# =========================================================================


class TestEdgesFromRecords:
    def test_parent_and_subsidiaries(self):
        edges = edges_from_records([
            {
                "entity_name": "Huawei Device Co., Ltd.",
                "parent_company": "Huawei Technologies Co., Ltd.",
                "subsidiaries": '["Huawei Device (Dongguan) Co., Ltd."]',
                "confidence": 0.95,
                "evidence_points": '["Annual report"]',
                "sources": ["opencorporates"],
                "country": "CN",
            },
        ])
        assert edges == [
            OwnershipEdge(
                child="Huawei Device Co., Ltd.",
                parent="Huawei Technologies Co., Ltd.",
                kind=RelationshipKind.SUBSIDIARY,
                confidence=0.95,
                evidence=("Annual report", "opencorporates"),
                child_country="CN",
            ),
            OwnershipEdge(
                child="Huawei Device (Dongguan) Co., Ltd.",
                parent="Huawei Device Co., Ltd.",
                kind=RelationshipKind.SUBSIDIARY,
                confidence=0.95,
                evidence=("Annual report", "opencorporates"),
                parent_country="CN",
            ),
        ]

    def test_affiliates_point_at_parent(self):
        edges = edges_from_records([
            {"entity_name": "A", "parent_company": "P", "affiliates": ["B"]},
        ])
        assert edges[1].child == "B"
        assert edges[1].parent == "P"
        assert edges[1].kind is RelationshipKind.AFFILIATE
        assert edges[1].confidence == 1.0

    def test_bad_records_skipped(self):
        edges = edges_from_records([
            {"entity_name": ""},
            {"parent_company": "P"},
            {"entity_name": "X", "subsidiaries": "not json"},
            {"entity_name": "Y", "subsidiaries": '{"a": 1}'},
        ])
        assert edges == []

    def test_unparseable_confidence_rejected_by_graph(self):
        edges = edges_from_records([
            {"entity_name": "A", "parent_company": "P", "confidence": "high"},
        ])
        graph = build_graph(edges)
        assert graph.rejected[0][1] == "invalid_confidence"


class TestOwnershipEdgeDict:
    def test_round_trip(self):
        edge = OwnershipEdge(
            "A", "B", kind=RelationshipKind.AFFILIATE, confidence=0.7, evidence=("x",)
        )
        assert OwnershipEdge.from_dict(edge.to_dict()) == edge

    def test_defaults(self):
        edge = OwnershipEdge.from_dict({"child": "A", "parent": "B", "kind": "bogus"})
        assert edge.kind is RelationshipKind.UNSPECIFIED
        assert edge.confidence == 1.0
        assert edge.evidence == ()
