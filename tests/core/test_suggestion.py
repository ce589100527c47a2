"""
Suggestion Generator Tests
==========================

INVARIANTS TESTED:
1. Generation never mutates the graph
2. Suggested names are unique, case-insensitively, against graph and batch
3. Each suggested node has exactly one SUGGESTED edge, to its seed
4. Any seed failure fails the whole batch with an explicit code
5. Cancelling the awaiting task propagates CancelledError
"""

import asyncio
import math

import pytest

from skillgraph.adapter.providers.catalog import CatalogProvider
from skillgraph.contracts.base import ErrorCode
from skillgraph.contracts.graph import EdgeKind
from skillgraph.core.suggestion import SuggestionConfig, SuggestionGenerator

from ..fixtures import (
    FailingProvider,
    RaisingProvider,
    StaticProvider,
    make_graph,
)


SINGLE_REACT = [{"id": "1", "name": "React", "level": 80}]


def generate(provider, graph=None, **config):
    config.setdefault("random_seed", 4)
    generator = SuggestionGenerator(provider, SuggestionConfig(**config))
    return asyncio.run(generator.generate(graph if graph is not None else make_graph()))


class TestBatchShape:

    def test_catalog_batch(self):
        graph = make_graph()
        result = generate(CatalogProvider(seed=1), graph)

        assert result.is_success
        batch = result.value
        names = [n.name.lower() for n in batch.nodes]
        assert 1 <= len(batch.nodes) <= 6
        assert len(names) == len(set(names))
        assert not set(names) & graph.names()
        assert len(batch.edges) == len(batch.nodes)
        for node, edge in zip(batch.nodes, batch.edges):
            assert node.suggested
            assert node.radius == 8.0
            assert edge.kind is EdgeKind.SUGGESTED
            assert edge.strength == 0.5
            assert (edge.source_id, edge.target_id) == (node.source_node_id, node.id)
            assert node.source_node_id in graph

    def test_one_query_per_seed(self):
        provider = StaticProvider(["Redux"])
        generate(provider)
        assert len(provider.calls) == 3

    def test_at_most_two_per_seed(self):
        graph = make_graph(SINGLE_REACT)
        result = generate(StaticProvider(["A1", "B2", "C3"]), graph)
        assert len(result.value.nodes) == 2

    def test_graph_not_mutated(self):
        graph = make_graph()
        version = graph.version
        generate(CatalogProvider(seed=2), graph)
        assert graph.version == version
        assert len(graph) == 8


class TestDeduplication:

    def test_case_insensitive_against_graph_and_batch(self):
        graph = make_graph(SINGLE_REACT)
        result = generate(StaticProvider(["react", "Redux", "REDUX"]), graph)
        assert [n.name for n in result.value.nodes] == ["Redux"]

    def test_duplicate_across_seeds_kept_once(self):
        result = generate(StaticProvider(["Redux", "GraphQL"]))
        names = sorted(n.name for n in result.value.nodes)
        assert names == ["GraphQL", "Redux"]


class TestPlacement:

    def test_exact_position_without_jitter(self):
        graph = make_graph(SINGLE_REACT)
        seed = graph.node("1")
        result = generate(StaticProvider(["Redux"]), graph, angle_jitter=0.0, level_jitter=0)

        [node] = result.value.nodes
        distance = seed.distance_from_anchor + 30.0
        assert node.id == "suggested-1-0"
        assert node.category == "Frontend"
        assert node.anchor == seed.anchor
        assert node.distance_from_anchor == pytest.approx(distance)
        assert node.x == pytest.approx(seed.anchor.x + distance * math.cos(seed.angle_from_anchor))
        assert node.y == pytest.approx(seed.anchor.y + distance * math.sin(seed.angle_from_anchor))
        assert node.level == 80
        assert node.description == "Suggested based on your skill in React"

    def test_angle_within_jitter(self):
        graph = make_graph(SINGLE_REACT)
        seed = graph.node("1")
        result = generate(StaticProvider(["Redux", "Jest"]), graph)
        for node in result.value.nodes:
            assert abs(node.angle_from_anchor - seed.angle_from_anchor) <= 0.25

    @pytest.mark.parametrize("estimate,expected", [(150, 100), (-5, 0), (42, 42)])
    def test_provider_level_clamped(self, estimate, expected):
        graph = make_graph(SINGLE_REACT)
        [node] = generate(StaticProvider(["Redux"], level=estimate), graph).value.nodes
        assert node.level == expected

    def test_level_near_seed_without_estimate(self):
        graph = make_graph(SINGLE_REACT)
        [node] = generate(StaticProvider(["Redux"]), graph).value.nodes
        assert 75 <= node.level <= 84

    def test_rationale_used_as_description(self):
        graph = make_graph(SINGLE_REACT)
        [node] = generate(StaticProvider(["Redux"], rationale="State management"), graph).value.nodes
        assert node.description == "State management"


class TestFailures:

    def test_provider_failure(self):
        graph = make_graph()
        result = generate(FailingProvider(), graph)
        assert result.is_failure
        assert result.error.code is ErrorCode.SUGGESTION_FAILED

    def test_provider_exception(self):
        result = generate(RaisingProvider())
        assert result.error.code is ErrorCode.SUGGESTION_FAILED
        assert "provider exploded" in result.error.message

    def test_timeout(self):
        result = generate(StaticProvider(["Redux"], delay=1.0), timeout_seconds=0.01)
        assert result.error.code is ErrorCode.SUGGESTION_TIMEOUT

    def test_nothing_new(self):
        result = generate(StaticProvider([]))
        assert result.error.code is ErrorCode.SUGGESTION_EMPTY

    def test_no_core_nodes(self):
        result = generate(StaticProvider(["Redux"]), make_graph([]))
        assert result.error.code is ErrorCode.SUGGESTION_EMPTY

    def test_cancellation_propagates(self):
        generator = SuggestionGenerator(StaticProvider(["Redux"], delay=5.0))

        async def scenario():
            task = asyncio.ensure_future(generator.generate(make_graph()))
            await asyncio.sleep(0.01)
            task.cancel()
            await task

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(scenario())
