"""
Skill Graph Container Tests
===========================

INVARIANTS TESTED:
1. Node ids are unique; unknown ids raise UnknownNodeError
2. merge() is all-or-nothing
3. Suggested names never collide case-insensitively
4. Accept / reject keep the suggested-edge invariant
"""

import pytest

from skillgraph.contracts.base import ErrorCode, UnknownNodeError
from skillgraph.contracts.graph import Edge, EdgeKind
from skillgraph.core.graph import GraphIntegrityError, SkillGraph, suggested_edge_pairs

from ..fixtures import make_node


def make_core_graph() -> SkillGraph:
    graph = SkillGraph()
    graph.add_node(make_node("1", "React", level=80))
    graph.add_node(make_node("2", "Vue", level=40))
    graph.add_edge(Edge("1", "2", 0.7))
    return graph


def make_suggestion(node_id="s1", name="Redux", source="1"):
    node = make_node(node_id, name, level=70, suggested=True, source_node_id=source)
    edge = Edge(source, node_id, 0.5, EdgeKind.SUGGESTED)
    return node, edge


class TestNodes:

    def test_duplicate_id_rejected(self):
        graph = make_core_graph()
        with pytest.raises(GraphIntegrityError) as info:
            graph.add_node(make_node("1", "Other"))
        assert info.value.code is ErrorCode.DUPLICATE_NODE_ID

    def test_unknown_node(self):
        graph = make_core_graph()
        with pytest.raises(UnknownNodeError) as info:
            graph.node("missing")
        assert info.value.code is ErrorCode.UNKNOWN_NODE
        assert isinstance(info.value, KeyError)

    def test_insertion_order(self):
        graph = make_core_graph()
        assert [n.id for n in graph] == ["1", "2"]

    def test_neighbors(self):
        graph = make_core_graph()
        assert graph.neighbors("1") == {"2"}
        assert graph.neighbors("2") == {"1"}

    def test_has_name_case_insensitive(self):
        graph = make_core_graph()
        assert graph.has_name("react")
        assert graph.has_name("  VUE ")
        assert not graph.has_name("Angular")

    def test_edge_needs_endpoints(self):
        graph = make_core_graph()
        with pytest.raises(UnknownNodeError):
            graph.add_edge(Edge("1", "ghost", 0.5))

    def test_version_bumps(self):
        graph = make_core_graph()
        before = graph.version
        graph.touch()
        assert graph.version == before + 1


class TestMerge:

    def test_merge_adds_batch(self):
        graph = make_core_graph()
        node, edge = make_suggestion()
        graph.merge([node], [edge])
        assert "s1" in graph
        assert suggested_edge_pairs(graph) == [("s1", "1")]

    def test_duplicate_name_rejects_whole_batch(self):
        graph = make_core_graph()
        good, good_edge = make_suggestion("s1", "Redux")
        bad, bad_edge = make_suggestion("s2", "REACT")
        version = graph.version

        with pytest.raises(GraphIntegrityError) as info:
            graph.merge([good, bad], [good_edge, bad_edge])

        assert info.value.code is ErrorCode.DUPLICATE_NAME
        assert len(graph) == 2
        assert graph.version == version

    def test_names_unique_within_batch(self):
        graph = make_core_graph()
        a, a_edge = make_suggestion("s1", "Redux")
        b, b_edge = make_suggestion("s2", "redux")
        with pytest.raises(GraphIntegrityError):
            graph.merge([a, b], [a_edge, b_edge])
        assert len(graph) == 2

    def test_dangling_edge_rejects_batch(self):
        graph = make_core_graph()
        node, _ = make_suggestion()
        with pytest.raises(UnknownNodeError):
            graph.merge([node], [Edge("nowhere", "s1", 0.5, EdgeKind.SUGGESTED)])
        assert "s1" not in graph


class TestSuggestionLifecycle:

    def test_accept_promotes_node_and_edge(self):
        graph = make_core_graph()
        node, edge = make_suggestion()
        graph.merge([node], [edge])

        accepted = graph.accept_suggestion("s1")

        assert accepted.suggested is False
        assert accepted.source_node_id is None
        assert accepted.radius == pytest.approx(17.0)
        kinds = {(e.source_id, e.target_id): e.kind for e in graph.edges}
        assert kinds[("1", "s1")] is EdgeKind.CORE
        assert suggested_edge_pairs(graph) == []

    def test_reject_removes_node_and_edges(self):
        graph = make_core_graph()
        node, edge = make_suggestion()
        graph.merge([node], [edge])

        graph.reject_suggestion("s1")

        assert "s1" not in graph
        assert all(not e.touches("s1") for e in graph.edges)
        assert graph.neighbors("1") == {"2"}

    def test_core_node_is_not_a_suggestion(self):
        graph = make_core_graph()
        with pytest.raises(GraphIntegrityError) as info:
            graph.reject_suggestion("1")
        assert info.value.code is ErrorCode.NOT_A_SUGGESTION
        with pytest.raises(GraphIntegrityError):
            graph.accept_suggestion("2")
