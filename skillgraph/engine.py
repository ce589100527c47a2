"""
Engine Orchestration Module

Single entry point that owns the graph, the simulation loop, the
interaction controller and the suggestion pipeline for one view.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. The engine owns lifecycles: nothing outlives close()
3. All operations are traceable through the audit log
4. Every mutation happens on the event loop thread, between ticks
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union
import asyncio
import json
import logging

from .adapter.providers.base import RecommendationProvider
from .adapter.providers.catalog import CatalogProvider
from .contracts.base import Error, ErrorCode, Result, SkillGraphError
from .contracts.graph import GraphNode
from .core.categorization import CategorizationEngine
from .core.graph import SkillGraph
from .core.interaction import InteractionController
from .core.layout import LayoutConfig, LayoutInitializer
from .core.loader import GraphLoader, LoadReport
from .core.scheduler import AsyncioTickScheduler, TickScheduler
from .core.simulation import ForceSimulationEngine, Simulation, SimulationConfig
from .core.suggestion import SuggestionBatch, SuggestionConfig, SuggestionGenerator
from .frontend.visualization import GraphView, build_graph_view
from .observability import AuditEventType, AuditLog


logger = logging.getLogger(__name__)


def _section(cls, data: Optional[Dict[str, Any]], name: str):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"Config section {name!r} must be an object")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in {name!r}: {', '.join(sorted(unknown))}")
    return cls(**data)


@dataclass
class EngineConfig:
    """Unified configuration for the whole engine."""
    layout: LayoutConfig = None
    simulation: SimulationConfig = None
    suggestion: SuggestionConfig = None

    def __post_init__(self):
        self.layout = self.layout or LayoutConfig()
        self.simulation = self.simulation or SimulationConfig()
        self.suggestion = self.suggestion or SuggestionConfig()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EngineConfig:
        unknown = set(data) - {'layout', 'simulation', 'suggestion'}
        if unknown:
            raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")
        return cls(
            layout=_section(LayoutConfig, data.get('layout'), 'layout'),
            simulation=_section(SimulationConfig, data.get('simulation'), 'simulation'),
            suggestion=_section(SuggestionConfig, data.get('suggestion'), 'suggestion'),
        )

    @classmethod
    def load(cls, config_path: Union[str, Path]) -> EngineConfig:
        """Load from a JSON file."""
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{config_path}: top level must be an object")
        return cls.from_dict(data)


class SkillGraphEngine:
    """
    Unified engine for one interactive skill graph.

    FLOW:
    =====
    1. load(): records -> loader -> fresh graph handed to the simulation
    2. start(): simulation ticks on the scheduler until quiescent
    3. on_* events: interaction controller pins/unpins, reheats
    4. suggest(): provider round-trip, then an atomic merge + reheat
    5. close(): stop ticking, refuse late merges
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        provider: Optional[RecommendationProvider] = None,
        scheduler: Optional[TickScheduler] = None,
        audit: Optional[AuditLog] = None,
    ):
        self._config = config or EngineConfig()
        self._audit = audit or AuditLog("engine")
        self._provider = provider or CatalogProvider(seed=self._config.suggestion.random_seed)

        self._loader = GraphLoader(
            CategorizationEngine(),
            LayoutInitializer(self._config.layout),
            self._audit,
        )
        self._simulation = Simulation(
            SkillGraph(),
            scheduler or AsyncioTickScheduler(),
            ForceSimulationEngine(self._config.simulation),
            self._audit,
        )
        self._interaction = InteractionController(self._simulation, self._audit)
        self._suggestions = SuggestionGenerator(self._provider, self._config.suggestion)

        self._active = True
        self._suggest_task: Optional[asyncio.Task] = None

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def graph(self) -> SkillGraph:
        return self._simulation.graph

    @property
    def simulation(self) -> Simulation:
        return self._simulation

    @property
    def interaction(self) -> InteractionController:
        return self._interaction

    @property
    def provider(self) -> RecommendationProvider:
        return self._provider

    @property
    def audit(self) -> AuditLog:
        return self._audit

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_suggesting(self) -> bool:
        return self._suggest_task is not None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def load(self, records: Iterable[Any]) -> LoadReport:
        """Replace the whole graph with one built from `records`."""
        self._require_active()
        graph, report = self._loader.load(records)
        self._simulation.reset(graph)
        self._interaction.reset()
        return report

    def start(self) -> None:
        self._require_active()
        self._simulation.start()

    def stop(self) -> None:
        self._simulation.stop()

    def close(self) -> None:
        """Tear down: stop ticking and drop any in-flight suggestion."""
        if not self._active:
            return
        self._active = False
        self._simulation.stop()
        if self._suggest_task is not None:
            self._suggest_task.cancel()
        logger.debug("Engine closed")

    def _require_active(self) -> None:
        if not self._active:
            raise SkillGraphError("Engine has been closed", ErrorCode.ENGINE_INACTIVE)

    # =========================================================================
    # SUGGESTIONS
    # =========================================================================

    async def suggest(self) -> Result:
        """
        Generate suggestions and merge them into the live graph.

        Returns Result[SuggestionBatch]. Failures leave the graph untouched
        and can be retried.
        """
        if not self._active:
            return Result.failure(Error.create(ErrorCode.ENGINE_INACTIVE, "Engine has been closed"))
        if self._suggest_task is not None:
            return Result.failure(Error.create(
                ErrorCode.SUGGESTION_IN_PROGRESS, "A suggestion request is already running"
            ))

        graph = self._simulation.graph
        task = asyncio.ensure_future(self._suggestions.generate(graph))
        self._suggest_task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self._active:
                raise
            return self._discard("Engine closed while suggestions were pending", ErrorCode.ENGINE_INACTIVE)
        finally:
            self._suggest_task = None

        if not self._active:
            return self._discard("Engine closed while suggestions were pending", ErrorCode.ENGINE_INACTIVE)
        if self._simulation.graph is not graph:
            return self._discard("Graph was reloaded while suggestions were pending", ErrorCode.GRAPH_RELOADED)
        if result.is_failure:
            self._audit.record(
                AuditEventType.SUGGESTIONS_FAILED, result.error.message, code=result.error.code.name
            )
            return result

        batch: SuggestionBatch = result.value
        try:
            graph.merge(batch.nodes, batch.edges)
        except SkillGraphError as e:
            self._audit.record(AuditEventType.SUGGESTIONS_FAILED, str(e), code=e.code.name)
            return Result.failure(Error.create(e.code, str(e)))

        self._audit.record(
            AuditEventType.SUGGESTIONS_MERGED,
            f"Merged {len(batch.nodes)} suggestions",
            count=len(batch.nodes),
        )
        self._simulation.reheat()
        return result

    def _discard(self, message: str, code: ErrorCode) -> Result:
        self._audit.record(AuditEventType.SUGGESTIONS_DISCARDED, message, code=code.name)
        return Result.failure(Error.create(code, message))

    def accept_suggestion(self, node_id: str) -> GraphNode:
        node = self.graph.accept_suggestion(node_id)
        self._audit.record(AuditEventType.SUGGESTION_ACCEPTED, f"Accepted {node.name!r}", node_id=node_id)
        self._simulation.reheat()
        return node

    def reject_suggestion(self, node_id: str) -> GraphNode:
        node = self.graph.reject_suggestion(node_id)
        self._interaction.forget(node_id)
        self._audit.record(AuditEventType.SUGGESTION_REJECTED, f"Rejected {node.name!r}", node_id=node_id)
        self._simulation.reheat()
        return node

    # =========================================================================
    # RENDERER CONTRACT
    # =========================================================================

    def snapshot(self) -> GraphView:
        return build_graph_view(self._simulation, self._interaction)

    def on_drag_start(self, node_id: str) -> None:
        self._interaction.on_drag_start(node_id)

    def on_drag(self, node_id: str, x: float, y: float) -> None:
        self._interaction.on_drag(node_id, x, y)

    def on_drag_end(self, node_id: str) -> None:
        self._interaction.on_drag_end(node_id)

    def on_node_click(self, node_id: str) -> Optional[str]:
        return self._interaction.on_node_click(node_id)

    def on_node_hover(self, node_id: Optional[str]) -> None:
        self._interaction.on_node_hover(node_id)
