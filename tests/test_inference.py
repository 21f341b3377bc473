"""Tests for transitive and sibling ownership inference."""

from __future__ import annotations

import pytest

from ownershiplens.ownership.graph import build_graph
from ownershiplens.ownership.models import InferenceKind, OwnershipEdge
from ownershiplens.ownership.siblings import infer_siblings, siblings_of
from ownershiplens.ownership.transitive import (
    infer_transitive,
    walk_ancestors,
    walk_from,
)


def _graph(*links: tuple[str, str, float]):
    return build_graph([OwnershipEdge(c, p, confidence=conf) for c, p, conf in links])


# =========================================================================
# Ancestor walks
# =========================================================================


class TestWalkFrom:
    def test_paths_and_roots(self, group_graph):
        walk = walk_from(group_graph, "sub one")
        assert walk.paths == {
            "mid holdings": (0.9, ("sub one", "mid holdings")),
            "top group": (pytest.approx(0.72), ("sub one", "mid holdings", "top group")),
        }
        assert walk.roots == {"top group"}
        assert walk.max_depth == 2

    def test_depth_cap(self, group_graph):
        walk = walk_from(group_graph, "sub one", max_depth=1)
        assert list(walk.paths) == ["mid holdings"]
        assert walk.roots == set()
        assert walk.max_depth == 1

    def test_node_without_parents(self, group_graph):
        walk = walk_from(group_graph, "top group")
        assert walk.paths == {}
        assert walk.max_depth == 0

    def test_shallower_route_reopens_depth_budget(self):
        # C -> B is the stronger route to B but leaves no room for D under the cap
        graph = _graph(("A", "B", 0.5), ("A", "C", 0.9), ("C", "B", 0.9), ("B", "D", 0.9))
        walk = walk_from(graph, "a", max_depth=2)
        assert walk.paths == {
            "c": (0.9, ("a", "c")),
            "b": (pytest.approx(0.81), ("a", "c", "b")),
            "d": (pytest.approx(0.45), ("a", "b", "d")),
        }
        assert walk.roots == {"d"}
        assert walk.max_depth == 2

    def test_max_depth_counts_longest_chain(self):
        graph = _graph(("A", "B", 0.5), ("B", "C", 0.5), ("C", "D", 0.5), ("A", "D", 0.9))
        walk = walk_from(graph, "a")
        assert walk.paths["d"] == (0.9, ("a", "d"))
        assert walk.max_depth == 3

    @pytest.mark.parametrize("depth", [0, -3])
    def test_invalid_depth(self, group_graph, depth):
        with pytest.raises(ValueError, match="max_depth"):
            walk_from(group_graph, "sub one", max_depth=depth)

    def test_walks_only_for_nodes_with_parents(self, group_graph):
        starts = [w.start for w in walk_ancestors(group_graph)]
        assert starts == ["sub one", "mid holdings", "sub two"]


# =========================================================================
# Transitive inference
# =========================================================================


class TestInferTransitive:
    def test_two_hop_chain(self):
        graph = _graph(("A", "B", 0.9), ("B", "C", 0.9))
        [rel] = infer_transitive(graph)
        assert rel.entity == "A"
        assert rel.related_entity == "C"
        assert rel.kind is InferenceKind.TRANSITIVE
        assert rel.confidence == pytest.approx(0.81)
        assert rel.inference_chain == ("A", "B", "C")

    def test_long_chain_and_depth_cap(self):
        graph = _graph(("A", "B", 0.9), ("B", "C", 0.8), ("C", "D", 0.5))
        pairs = {(r.entity, r.related_entity): r.confidence for r in infer_transitive(graph)}
        assert pairs == {
            ("A", "C"): pytest.approx(0.72),
            ("A", "D"): pytest.approx(0.36),
            ("B", "D"): pytest.approx(0.4),
        }

        capped = infer_transitive(graph, max_depth=2)
        assert {(r.entity, r.related_entity) for r in capped} == {("A", "C"), ("B", "D")}

    def test_cycle_terminates_without_repeats(self):
        graph = _graph(("A", "B", 0.9), ("B", "C", 0.9), ("C", "A", 0.9))
        inferred = infer_transitive(graph)
        assert len(inferred) == 3
        for rel in inferred:
            assert len(set(rel.inference_chain)) == len(rel.inference_chain)
            assert rel.entity != rel.related_entity

    def test_diamond_keeps_strongest_chain(self):
        graph = _graph(
            ("A", "B", 0.9), ("B", "D", 0.9),
            ("A", "C", 0.5), ("C", "D", 0.9),
        )
        [rel] = [r for r in infer_transitive(graph) if r.entity == "A"]
        assert rel.related_entity == "D"
        assert rel.confidence == pytest.approx(0.81)
        assert rel.inference_chain == ("A", "B", "D")

    def test_direct_edge_not_repeated_as_transitive(self):
        graph = _graph(("A", "B", 0.9), ("B", "C", 0.9), ("A", "C", 0.5))
        assert infer_transitive(graph) == []

    def test_depth_cap_keeps_ancestors_within_reach(self):
        graph = _graph(("A", "B", 0.5), ("A", "C", 0.9), ("C", "B", 0.9), ("B", "D", 0.9))
        pairs = {
            (r.entity, r.related_entity): r.inference_chain
            for r in infer_transitive(graph, max_depth=2)
        }
        assert pairs[("A", "D")] == ("A", "B", "D")
        assert ("A", "B") not in pairs

    def test_shared_walks(self, group_graph):
        walks = walk_ancestors(group_graph, max_depth=1)
        assert infer_transitive(group_graph, walks=walks) == []
        assert len(infer_transitive(group_graph)) == 2

    def test_display_names_in_chain(self):
        graph = build_graph([
            OwnershipEdge("Huawei Device Co., Ltd.", "Huawei Investment", confidence=0.9),
            OwnershipEdge("HUAWEI INVESTMENT LTD", "Huawei Holding", confidence=0.9),
        ])
        [rel] = infer_transitive(graph)
        assert rel.inference_chain == (
            "Huawei Device Co., Ltd.",
            "Huawei Investment",
            "Huawei Holding",
        )


# =========================================================================
# Sibling inference
# =========================================================================


class TestInferSiblings:
    def test_shared_parent(self):
        graph = _graph(("X", "P", 0.8), ("Y", "P", 0.6))
        [rel] = infer_siblings(graph, discount=0.9)
        assert rel.kind is InferenceKind.SIBLING
        assert rel.inference_chain == ("X", "P", "Y")
        assert rel.confidence == pytest.approx(0.63)

    def test_pair_emitted_once_via_best_parent(self):
        graph = _graph(
            ("X", "P", 0.8), ("Y", "P", 0.6),
            ("X", "Q", 1.0), ("Y", "Q", 1.0),
        )
        [rel] = infer_siblings(graph, discount=0.9)
        assert rel.inference_chain == ("X", "Q", "Y")
        assert rel.confidence == pytest.approx(0.9)

    def test_three_children(self):
        graph = _graph(("A", "P", 1.0), ("B", "P", 1.0), ("C", "P", 1.0))
        pairs = {(r.entity, r.related_entity) for r in infer_siblings(graph, discount=1.0)}
        assert pairs == {("A", "B"), ("A", "C"), ("B", "C")}

    def test_only_child(self, huawei_graph):
        assert infer_siblings(huawei_graph, discount=0.9) == []

    @pytest.mark.parametrize("discount", [-0.1, 1.5])
    def test_invalid_discount(self, group_graph, discount):
        with pytest.raises(ValueError, match="discount"):
            infer_siblings(group_graph, discount=discount)


class TestSiblingsOf:
    def test_framed_from_node(self, group_graph):
        [rel] = siblings_of(group_graph, "sub two", discount=0.9)
        assert rel.entity == "Sub Two"
        assert rel.related_entity == "Sub One"
        assert rel.inference_chain == ("Sub Two", "Mid Holdings", "Sub One")
        assert rel.confidence == pytest.approx(0.63)

    def test_no_parents(self, group_graph):
        assert siblings_of(group_graph, "top group", discount=0.9) == []
