"""
Shared Test Fixtures

Explicit skill records, node/graph factories and scripted providers.
Nothing here touches the network.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Sequence

from skillgraph.adapter.providers.base import (
    ProviderErrorCode,
    ProviderVersion,
    RecommendationProvider,
    RecommendationResponse,
    SuggestionCandidate,
)
from skillgraph.contracts.graph import GraphNode
from skillgraph.core.graph import SkillGraph
from skillgraph.core.loader import GraphLoader
from skillgraph.core.scheduler import ManualTickScheduler
from skillgraph.core.simulation import SimulationConfig
from skillgraph.engine import EngineConfig, SkillGraphEngine


# =============================================================================
# RECORDS
# =============================================================================

SAMPLE_RECORDS: List[Dict] = [
    {"id": "1", "name": "React", "level": 80, "lastVerified": "2024-03-01T10:00:00Z", "endorsements": 12},
    {"id": "2", "name": "Vue", "level": 55, "endorsements": 3},
    {"id": "3", "name": "Python", "level": 90, "endorsements": 20},
    {"id": "4", "name": "Node.js", "level": 70, "endorsements": 8},
    {"id": "5", "name": "Docker", "level": 65, "endorsements": 4},
    {"id": "6", "name": "Figma", "level": 40, "endorsements": 1},
    {"id": "7", "name": "TensorFlow", "level": 60, "endorsements": 2},
    {"id": "8", "name": "SQL", "level": 75, "endorsements": 9},
]

TWO_CATEGORY_RECORDS: List[Dict] = [
    {"id": "a", "name": "React", "level": 80},
    {"id": "b", "name": "Docker", "level": 50},
]


# =============================================================================
# FACTORIES
# =============================================================================

def make_node(
    node_id: str,
    name: Optional[str] = None,
    level: int = 50,
    category: str = "Frontend",
    x: float = 0.0,
    y: float = 0.0,
    suggested: bool = False,
    source_node_id: Optional[str] = None,
) -> GraphNode:
    return GraphNode(
        id=node_id,
        name=name or f"Skill {node_id}",
        level=level,
        category=category,
        x=x,
        y=y,
        suggested=suggested,
        source_node_id=source_node_id,
    )


def make_graph(records: Sequence[Dict] = SAMPLE_RECORDS) -> SkillGraph:
    graph, _ = GraphLoader().load(records)
    return graph


def make_engine(
    records: Optional[Sequence[Dict]] = SAMPLE_RECORDS,
    provider: Optional[RecommendationProvider] = None,
    config: Optional[EngineConfig] = None,
) -> SkillGraphEngine:
    """Engine on fake time; records loaded, simulation not started."""
    config = config or EngineConfig(simulation=SimulationConfig(random_seed=7))
    engine = SkillGraphEngine(
        config=config,
        provider=provider or StaticProvider(["Redux", "GraphQL"]),
        scheduler=ManualTickScheduler(),
    )
    if records is not None:
        engine.load(records)
    return engine


def positions(graph: SkillGraph) -> Dict[str, tuple]:
    return {n.id: (n.x, n.y) for n in graph}


# =============================================================================
# SCRIPTED PROVIDERS
# =============================================================================

_TEST_VERSION = ProviderVersion(provider_id="static", model_id="test", api_version="0")


class StaticProvider(RecommendationProvider):
    """Returns the same candidates for every seed, optionally after a delay."""

    def __init__(
        self,
        names: Iterable[str],
        level: Optional[int] = None,
        rationale: Optional[str] = None,
        delay: float = 0.0,
    ):
        self._names = list(names)
        self._level = level
        self._rationale = rationale
        self._delay = delay
        self.calls: List[tuple] = []

    @property
    def provider_id(self) -> str:
        return "static"

    def get_version(self) -> ProviderVersion:
        return _TEST_VERSION

    async def generate_suggestions(self, seed_skill_name, seed_category):
        self.calls.append((seed_skill_name, seed_category))
        if self._delay:
            await asyncio.sleep(self._delay)
        return RecommendationResponse(
            success=True,
            candidates=tuple(
                SuggestionCandidate(name=n, estimated_level=self._level, rationale=self._rationale)
                for n in self._names
            ),
            provider_version=_TEST_VERSION,
        )


class FailingProvider(StaticProvider):
    """Reports an explicit failure."""

    def __init__(self, code: ProviderErrorCode = ProviderErrorCode.API_ERROR):
        super().__init__([])
        self._code = code

    async def generate_suggestions(self, seed_skill_name, seed_category):
        return RecommendationResponse.failed(self._code, "scripted failure", version=_TEST_VERSION)


class RaisingProvider(StaticProvider):
    """Breaks the contract by raising."""

    def __init__(self):
        super().__init__([])

    async def generate_suggestions(self, seed_skill_name, seed_category):
        raise RuntimeError("provider exploded")
