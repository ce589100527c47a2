"""
Force Simulation Engine
=======================

Iterative layout solver. One tick = alpha update + force accumulation +
velocity integration, computed on numpy arrays and written back to the
graph's nodes.

FORCES (additive, per node, per tick):
======================================
- repulsion       all pairs, strength / distance, distance clamped
- link            springs toward 50 (core) / 80 (suggested) units
- cluster pull    toward each node's anchor, scaled by alpha
- collision       soft push apart below 1.8 * (r_a + r_b)
- boundary        inward pull beyond (viewport radius - padding)
- centering       weak pull of the whole graph toward the origin

STABILITY:
==========
- repulsion uses max(d^2, min_distance^2): no 1/d blow-up
- collision correction is proportional to overlap, never a teleport
- speed is clamped to max_velocity: per-tick displacement is bounded
- coincident nodes get a seeded jitter direction, never NaN

PINNING:
========
Dragging(x, y) and Pinned(x, y) nodes are placed at (x, y) every tick
with zero velocity. They still exert forces on free nodes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

import numpy as np

from ..contracts.graph import EdgeKind, GraphNode
from ..observability import AuditEventType, AuditLog
from .graph import SkillGraph
from .scheduler import ScheduledTick, TickScheduler


logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for the force simulation."""
    # Temperature
    initial_alpha: float = 0.3
    alpha_min: float = 0.001
    alpha_decay: float = 0.02
    reheat_alpha: float = 0.3
    drag_alpha_target: float = 0.3

    # Integration
    velocity_decay: float = 0.4
    max_velocity: float = 40.0

    # Forces
    charge_strength: float = -50.0
    min_distance: float = 1.0
    core_link_distance: float = 50.0
    suggested_link_distance: float = 80.0
    cluster_strength: float = 0.3
    collision_scale: float = 1.8
    collision_strength: float = 0.7
    boundary_strength: float = 1.0
    centering_strength: float = 0.05

    # Containment area
    viewport_width: float = 800.0
    viewport_height: float = 600.0
    boundary_padding: float = 50.0

    # Loop
    frame_interval: float = 1.0 / 60.0
    random_seed: Optional[int] = None

    @property
    def viewport_radius(self) -> float:
        return min(self.viewport_width, self.viewport_height) / 2.0

    @property
    def boundary_radius(self) -> float:
        return max(0.0, self.viewport_radius - self.boundary_padding)


class ForceSimulationEngine:
    """
    Stateless-per-call tick function over a SkillGraph.

    Only the jitter RNG persists between ticks.
    """

    def __init__(self, config: SimulationConfig = None):
        self._config = config or SimulationConfig()
        self._rng = np.random.default_rng(self._config.random_seed)

    @property
    def config(self) -> SimulationConfig:
        return self._config

    def tick(self, graph: SkillGraph, alpha: float, alpha_target: float = 0.0) -> float:
        """
        Advance the graph by one tick and return the new alpha.

        alpha moves toward alpha_target by alpha_decay each tick; with a
        zero target this is alpha *= (1 - alpha_decay).
        """
        cfg = self._config
        alpha += (alpha_target - alpha) * cfg.alpha_decay

        nodes = graph.nodes
        if not nodes:
            return alpha

        pos = np.array([[n.x, n.y] for n in nodes], dtype=float)
        vel = np.array([[n.vx, n.vy] for n in nodes], dtype=float)
        radii = np.array([n.radius for n in nodes], dtype=float)
        fixed = np.array([not n.is_free for n in nodes], dtype=bool)

        self._apply_links(graph, nodes, pos, vel, alpha)
        self._apply_repulsion(pos, vel, alpha)
        self._apply_cluster_pull(nodes, pos, vel, alpha)
        self._apply_boundary(pos, vel, alpha)
        self._apply_collision(pos, vel, radii, fixed)
        self._apply_centering(pos, vel)

        vel *= (1.0 - cfg.velocity_decay)
        speed = np.linalg.norm(vel, axis=1)
        too_fast = speed > cfg.max_velocity
        if too_fast.any():
            vel[too_fast] *= (cfg.max_velocity / speed[too_fast])[:, None]
        pos += vel

        for i, node in enumerate(nodes):
            if fixed[i]:
                node.x, node.y = node.pin.x, node.pin.y
                node.vx = node.vy = 0.0
            else:
                node.x, node.y = float(pos[i, 0]), float(pos[i, 1])
                node.vx, node.vy = float(vel[i, 0]), float(vel[i, 1])

        return alpha

    # =========================================================================
    # FORCES
    # =========================================================================

    def _jitter(self, count: int) -> np.ndarray:
        """Small random offsets used to separate coincident points."""
        return (self._rng.random((count, 2)) - 0.5) * 1e-3

    def _apply_links(self, graph, nodes, pos, vel, alpha):
        cfg = self._config
        edges = graph.edges
        if not edges:
            return
        index = {n.id: i for i, n in enumerate(nodes)}
        degree = np.zeros(len(nodes))
        for edge in edges:
            degree[index[edge.source_id]] += 1
            degree[index[edge.target_id]] += 1

        for edge in edges:
            s, t = index[edge.source_id], index[edge.target_id]
            delta = (pos[t] + vel[t]) - (pos[s] + vel[s])
            length = float(np.hypot(delta[0], delta[1]))
            if length == 0.0:
                delta = self._jitter(1)[0]
                length = float(np.hypot(delta[0], delta[1]))
            rest = (
                cfg.suggested_link_distance if edge.kind is EdgeKind.SUGGESTED
                else cfg.core_link_distance
            )
            delta = delta * ((length - rest) / length * alpha * edge.strength)
            bias = degree[s] / (degree[s] + degree[t])
            vel[t] -= delta * bias
            vel[s] += delta * (1.0 - bias)

    def _pairwise(self, points: np.ndarray):
        """delta[i, j] = points[j] - points[i] and squared distances."""
        delta = points[None, :, :] - points[:, None, :]
        dist2 = np.einsum('ijk,ijk->ij', delta, delta)
        n = len(points)
        coincident = dist2 == 0.0
        np.fill_diagonal(coincident, False)
        if coincident.any():
            ii, jj = np.nonzero(np.triu(coincident))
            jitter = self._jitter(len(ii))
            delta[ii, jj] = jitter
            delta[jj, ii] = -jitter
            dist2 = np.einsum('ijk,ijk->ij', delta, delta)
        dist2[np.arange(n), np.arange(n)] = np.inf
        return delta, dist2

    def _apply_repulsion(self, pos, vel, alpha):
        cfg = self._config
        if len(pos) < 2:
            return
        delta, dist2 = self._pairwise(pos)
        dist2 = np.maximum(dist2, cfg.min_distance ** 2)
        weight = cfg.charge_strength * alpha / dist2
        vel += np.einsum('ij,ijk->ik', weight, delta)

    def _apply_cluster_pull(self, nodes: List[GraphNode], pos, vel, alpha):
        anchors = np.array([[n.anchor.x, n.anchor.y] for n in nodes], dtype=float)
        vel += (anchors - pos) * (alpha * self._config.cluster_strength)

    def _apply_boundary(self, pos, vel, alpha):
        limit = self._config.boundary_radius
        r = np.linalg.norm(pos, axis=1)
        outside = r > limit
        if not outside.any():
            return
        target = pos[outside] * (limit / r[outside])[:, None]
        vel[outside] += (target - pos[outside]) * (alpha * self._config.boundary_strength)

    def _apply_collision(self, pos, vel, radii, fixed):
        cfg = self._config
        if len(pos) < 2:
            return
        predicted = pos + vel
        # delta[i, j] points from j to i here: i is pushed along it
        delta, dist2 = self._pairwise(predicted)
        delta = -delta
        collide_r = radii * cfg.collision_scale
        reach = collide_r[:, None] + collide_r[None, :]
        overlap = dist2 < reach ** 2
        if not overlap.any():
            return
        dist = np.sqrt(np.where(overlap, dist2, 1.0))
        factor = np.where(overlap, (reach - dist) / dist * cfg.collision_strength, 0.0)

        # Share of the correction taken by i: larger partners push harder
        r2 = collide_r ** 2
        share = r2[None, :] / (r2[:, None] + r2[None, :])
        share = np.where(fixed[None, :] & ~fixed[:, None], 1.0, share)
        share = np.where(fixed[:, None], 0.0, share)
        vel += np.einsum('ij,ijk->ik', factor * share, delta)

    def _apply_centering(self, pos, vel):
        centroid = pos.mean(axis=0)
        vel -= centroid * self._config.centering_strength


# =============================================================================
# SIMULATION HANDLE
# =============================================================================

@dataclass(frozen=True)
class TickEvent:
    """Emitted to listeners after every tick."""
    tick: int
    alpha: float
    settled: bool


TickListener = Callable[[TickEvent], None]


class Simulation:
    """
    Explicitly owned simulation loop.

    LIFECYCLE:
    ==========
    start()  -> ticks are scheduled every frame_interval while not quiescent
    stop()   -> the pending tick is cancelled; nothing mutates afterwards
    reheat() -> raises alpha and resumes ticking if started

    Quiescent means alpha < alpha_min with no alpha target holding it up.
    A quiescent loop stops scheduling until it is perturbed again.
    """

    def __init__(
        self,
        graph: SkillGraph,
        scheduler: TickScheduler,
        engine: ForceSimulationEngine = None,
        audit: Optional[AuditLog] = None,
    ):
        self._graph = graph
        self._scheduler = scheduler
        self._engine = engine or ForceSimulationEngine()
        self._audit = audit or AuditLog("simulation")
        self._alpha = self._engine.config.initial_alpha
        self._alpha_target = 0.0
        self._running = False
        self._pending: Optional[ScheduledTick] = None
        self._tick_count = 0
        self._listeners: List[TickListener] = []

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def graph(self) -> SkillGraph:
        return self._graph

    @graph.setter
    def graph(self, graph: SkillGraph) -> None:
        self._graph = graph

    @property
    def config(self) -> SimulationConfig:
        return self._engine.config

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        self._alpha_target = max(0.0, float(value))
        if not self.is_quiescent:
            self._ensure_scheduled()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_quiescent(self) -> bool:
        alpha_min = self._engine.config.alpha_min
        return self._alpha < alpha_min and self._alpha_target < alpha_min

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def add_listener(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TickListener) -> None:
        self._listeners.remove(listener)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._audit.record(
            AuditEventType.SIMULATION_STARTED, "Simulation started", alpha=round(self._alpha, 4)
        )
        self._ensure_scheduled()

    def stop(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._running:
            self._running = False
            self._audit.record(
                AuditEventType.SIMULATION_STOPPED, "Simulation stopped", ticks=self._tick_count
            )

    def reheat(self, alpha: Optional[float] = None) -> None:
        """Raise the temperature (never lowers it) and resume ticking."""
        value = self._engine.config.reheat_alpha if alpha is None else alpha
        self._alpha = max(self._alpha, value)
        self._ensure_scheduled()

    def reset(self, graph: SkillGraph) -> None:
        """Swap in a freshly loaded graph at the initial temperature."""
        self._graph = graph
        self._alpha = self._engine.config.initial_alpha
        self._alpha_target = 0.0
        self._ensure_scheduled()

    # =========================================================================
    # TICKING
    # =========================================================================

    def step(self) -> TickEvent:
        """Run exactly one tick now, regardless of the schedule."""
        was_settled = self.is_quiescent
        self._alpha = self._engine.tick(self._graph, self._alpha, self._alpha_target)
        self._tick_count += 1
        event = TickEvent(tick=self._tick_count, alpha=self._alpha, settled=self.is_quiescent)
        if event.settled and not was_settled:
            self._audit.record(
                AuditEventType.SIMULATION_SETTLED, "Simulation settled", ticks=self._tick_count
            )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A failing listener is logged; later listeners and the loop carry on
                logger.exception("Tick listener %r failed on tick %d", listener, event.tick)
        return event

    def run_until_quiescent(self, max_ticks: int = 1000) -> int:
        """Tick synchronously until quiescent; returns ticks run."""
        ran = 0
        while not self.is_quiescent and ran < max_ticks:
            self.step()
            ran += 1
        return ran

    def _ensure_scheduled(self) -> None:
        if not self._running or self._pending is not None or self.is_quiescent:
            return
        self._pending = self._scheduler.call_later(
            self._engine.config.frame_interval, self._on_frame
        )

    def _on_frame(self) -> None:
        self._pending = None
        if not self._running:
            return
        self.step()
        self._ensure_scheduled()
