"""
Interaction Controller
======================

Translates pointer events into pin-state transitions and selection state.

PIN STATE MACHINE (per node):
=============================
    Free    --drag_start--> Dragging
    Pinned  --drag_start--> Dragging
    Dragging --drag------> Dragging   (pin and position updated together)
    Dragging --drag_end--> Free       (suggested nodes)
    Dragging --drag_end--> Pinned     (core nodes; anchor moves to the drop point)

Any other event/state pair raises InvalidTransitionError. Pins are only
dropped wholesale, by reset() on a graph reload.

Selection (click) and hover are independent of each other and of pins.
"""

from __future__ import annotations
from typing import Optional, Set
import logging
import math

from ..contracts.base import (
    ErrorCode, InvalidCoordinatesError, InvalidTransitionError, Point,
)
from ..contracts.graph import Dragging, FREE, GraphNode, Pinned
from ..observability import AuditEventType, AuditLog
from .graph import SkillGraph
from .simulation import Simulation


logger = logging.getLogger(__name__)


class InteractionController:
    """Owns drag, hover and selection state for one graph."""

    def __init__(self, simulation: Simulation, audit: Optional[AuditLog] = None):
        self._simulation = simulation
        self._audit = audit or AuditLog("interaction")
        self._selected_id: Optional[str] = None
        self._hovered_id: Optional[str] = None

    @property
    def graph(self) -> SkillGraph:
        return self._simulation.graph

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def hovered_id(self) -> Optional[str]:
        return self._hovered_id

    # =========================================================================
    # DRAG
    # =========================================================================

    def on_drag_start(self, node_id: str) -> None:
        node = self.graph.node(node_id)
        if isinstance(node.pin, Dragging):
            raise InvalidTransitionError(f"Node {node_id!r} is already being dragged")
        node.pin = Dragging(node.x, node.y)
        node.vx = node.vy = 0.0
        self.graph.touch()
        self._simulation.alpha_target = self._simulation.config.drag_alpha_target

    def on_drag(self, node_id: str, x: float, y: float) -> None:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise InvalidCoordinatesError(f"Drag coordinates must be finite, got ({x}, {y})")
        node = self._dragging(node_id, "drag")
        node.pin = Dragging(float(x), float(y))
        node.place(Point(float(x), float(y)))

    def on_drag_end(self, node_id: str) -> None:
        node = self._dragging(node_id, "drag_end")
        x, y = node.pin.x, node.pin.y
        if node.suggested:
            node.pin = FREE
            self._audit.record(AuditEventType.NODE_RELEASED, "Suggested node released", node_id=node_id)
        else:
            node.pin = Pinned(x, y)
            node.anchor = Point(x, y)
            self._audit.record(
                AuditEventType.NODE_PINNED, "Node pinned",
                node_id=node_id, x=round(x, 2), y=round(y, 2),
            )
        self.graph.touch()
        # Another pointer may still be dragging; keep the loop warm for it
        if not any(isinstance(other.pin, Dragging) for other in self.graph):
            self._simulation.alpha_target = 0.0

    def _dragging(self, node_id: str, event: str) -> GraphNode:
        node = self.graph.node(node_id)
        if not isinstance(node.pin, Dragging):
            raise InvalidTransitionError(
                f"{event} on {node_id!r} requires an active drag, node is {type(node.pin).__name__}",
                ErrorCode.INVALID_STATE_TRANSITION,
            )
        return node

    # =========================================================================
    # SELECTION & HOVER
    # =========================================================================

    def on_node_click(self, node_id: str) -> Optional[str]:
        """Toggle selection of `node_id`; returns the new selected id."""
        self.graph.node(node_id)
        self._selected_id = None if self._selected_id == node_id else node_id
        self.graph.touch()
        return self._selected_id

    def on_node_hover(self, node_id: Optional[str]) -> None:
        if node_id is not None:
            self.graph.node(node_id)
        if node_id != self._hovered_id:
            self._hovered_id = node_id
            self.graph.touch()

    def highlighted_ids(self) -> Set[str]:
        """The hovered node and its 1-hop neighbours."""
        if self._hovered_id is None or self._hovered_id not in self.graph:
            return set()
        return {self._hovered_id} | self.graph.neighbors(self._hovered_id)

    # =========================================================================
    # GRAPH CHANGES
    # =========================================================================

    def forget(self, node_id: str) -> None:
        """Drop hover/selection pointing at a removed node."""
        if self._selected_id == node_id:
            self._selected_id = None
        if self._hovered_id == node_id:
            self._hovered_id = None

    def reset(self) -> None:
        """Clear all interaction state after a reload."""
        self._selected_id = None
        self._hovered_id = None
        for node in self.graph:
            node.pin = FREE
        logger.debug("Interaction state reset")
