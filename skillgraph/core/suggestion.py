"""
Suggestion Generator
====================

Asynchronously turns recommendation candidates into suggested nodes
placed next to the skill that inspired them.

CONTRACT:
=========
    await generate(graph) -> Result[SuggestionBatch]

- Side-effect free: the graph is only read, and only before the first await
- All seeds are queried concurrently; each call is bounded by a timeout
- ANY seed failure fails the whole batch (no partial merge)
- Cancelling the awaiting task propagates CancelledError

PLACEMENT:
==========
    angle    = seed.angle_from_anchor + uniform(-jitter, +jitter)
    distance = seed.distance_from_anchor + increment
    position = seed.anchor + distance * (cos angle, sin angle)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple
import asyncio
import logging
import random

from ..adapter.providers.base import (
    RecommendationProvider,
    RecommendationResponse,
    SuggestionCandidate,
)
from ..contracts.base import Error, ErrorCode, Point, Result
from ..contracts.graph import Edge, EdgeKind, GraphNode
from ..contracts.skill import LEVEL_MAX, LEVEL_MIN
from .graph import SkillGraph


logger = logging.getLogger(__name__)


@dataclass
class SuggestionConfig:
    """Configuration for suggestion generation."""
    max_seeds: int = 3
    max_per_seed: int = 2
    angle_jitter: float = 0.25
    distance_increment: float = 30.0
    edge_strength: float = 0.5
    level_jitter: int = 5
    timeout_seconds: float = 10.0
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class SuggestionBatch:
    """Nodes and their SUGGESTED edges, ready for an atomic merge."""
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[Edge, ...]

    @property
    def is_empty(self) -> bool:
        return not self.nodes


@dataclass(frozen=True)
class _Seed:
    """Copy of the seed fields placement needs, taken before suspending."""
    id: str
    name: str
    level: int
    category: str
    anchor: Point
    angle: float
    distance: float

    @staticmethod
    def of(node: GraphNode) -> _Seed:
        return _Seed(
            id=node.id,
            name=node.name,
            level=node.level,
            category=node.category,
            anchor=node.anchor,
            angle=node.angle_from_anchor,
            distance=node.distance_from_anchor,
        )


class SuggestionGenerator:
    """
    Queries a RecommendationProvider for a few random seeds and builds
    the resulting suggested nodes.
    """

    def __init__(
        self,
        provider: RecommendationProvider,
        config: SuggestionConfig = None,
        rng: Optional[random.Random] = None,
    ):
        self._provider = provider
        self._config = config or SuggestionConfig()
        self._rng = rng or random.Random(self._config.random_seed)

    @property
    def provider(self) -> RecommendationProvider:
        return self._provider

    @property
    def config(self) -> SuggestionConfig:
        return self._config

    def pick_seeds(self, graph: SkillGraph) -> List[GraphNode]:
        """Random subset of core nodes, at most max_seeds."""
        candidates = graph.core_nodes()
        count = min(len(candidates), self._config.max_seeds)
        return self._rng.sample(candidates, count)

    async def generate(self, graph: SkillGraph) -> Result:
        seeds = [_Seed.of(node) for node in self.pick_seeds(graph)]
        if not seeds:
            return Result.failure(Error.create(
                ErrorCode.SUGGESTION_EMPTY, "Graph has no core nodes to seed suggestions"
            ))
        taken_names = graph.names()
        taken_ids = {node.id for node in graph}

        outcomes = await asyncio.gather(*(self._query(seed) for seed in seeds))

        per_seed: List[Tuple[_Seed, RecommendationResponse]] = []
        for seed, outcome in zip(seeds, outcomes):
            if isinstance(outcome, Error):
                logger.warning("Suggestion batch failed at seed %r: %s", seed.name, outcome.message)
                return Result.failure(outcome)
            per_seed.append((seed, outcome))

        batch = self._build_batch(per_seed, taken_names, taken_ids)
        if batch.is_empty:
            return Result.failure(Error.create(
                ErrorCode.SUGGESTION_EMPTY,
                "No new skills were suggested",
                seeds=len(seeds),
            ))
        logger.debug("Built %d suggestions from %d seeds", len(batch.nodes), len(seeds))
        return Result.success(batch)

    async def _query(self, seed: _Seed):
        """Provider response on success, Error on any failure."""
        try:
            response = await asyncio.wait_for(
                self._provider.generate_suggestions(seed.name, seed.category),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return Error.create(
                ErrorCode.SUGGESTION_TIMEOUT,
                f"Provider did not answer within {self._config.timeout_seconds}s",
                seed=seed.name,
                provider=self._provider.provider_id,
            )
        except Exception as e:
            return Error.create(
                ErrorCode.SUGGESTION_FAILED,
                f"Provider raised {type(e).__name__}: {e}",
                seed=seed.name,
                provider=self._provider.provider_id,
            )
        if not response.success:
            return Error.create(
                ErrorCode.SUGGESTION_FAILED,
                response.error_message or "Provider reported a failure",
                seed=seed.name,
                provider=self._provider.provider_id,
                provider_error=response.error_code.value,
            )
        return response

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def _build_batch(
        self,
        per_seed: List[Tuple[_Seed, RecommendationResponse]],
        taken_names: Set[str],
        taken_ids: Set[str],
    ) -> SuggestionBatch:
        nodes: List[GraphNode] = []
        edges: List[Edge] = []
        for seed, response in per_seed:
            index = 0
            for candidate in response.candidates:
                if index >= self._config.max_per_seed:
                    break
                name = candidate.name.strip()
                lowered = name.lower()
                if lowered in taken_names:
                    continue
                taken_names.add(lowered)

                node_id = self._unique_id(f"suggested-{seed.id}-{index}", taken_ids)
                taken_ids.add(node_id)
                nodes.append(self._place(node_id, name, candidate, seed))
                edges.append(Edge(
                    source_id=seed.id,
                    target_id=node_id,
                    strength=self._config.edge_strength,
                    kind=EdgeKind.SUGGESTED,
                ))
                index += 1
        return SuggestionBatch(nodes=tuple(nodes), edges=tuple(edges))

    def _place(
        self, node_id: str, name: str, candidate: SuggestionCandidate, seed: _Seed
    ) -> GraphNode:
        cfg = self._config
        angle = seed.angle + self._rng.uniform(-cfg.angle_jitter, cfg.angle_jitter)
        distance = seed.distance + cfg.distance_increment
        node = GraphNode(
            id=node_id,
            name=name,
            level=self._level_for(candidate, seed),
            category=seed.category,
            anchor=seed.anchor,
            angle_from_anchor=angle,
            distance_from_anchor=distance,
            suggested=True,
            source_node_id=seed.id,
            description=candidate.rationale or f"Suggested based on your skill in {seed.name}",
        )
        node.place(Point.polar(seed.anchor, angle, distance))
        return node

    def _level_for(self, candidate: SuggestionCandidate, seed: _Seed) -> int:
        if candidate.estimated_level is not None:
            level = int(candidate.estimated_level)
        elif self._config.level_jitter > 0:
            spread = self._config.level_jitter
            level = seed.level + self._rng.randint(-spread, spread - 1)
        else:
            level = seed.level
        return max(LEVEL_MIN, min(LEVEL_MAX, level))

    @staticmethod
    def _unique_id(base: str, taken: Set[str]) -> str:
        if base not in taken:
            return base
        suffix = 1
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"
