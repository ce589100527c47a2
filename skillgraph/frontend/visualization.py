"""
Graph Visualization Contracts

Responsibility:
Freeze the live graph into a renderable snapshot. Painting is the
renderer's job; this only says where things are and what state they
are in.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from ..contracts.graph import Dragging, EdgeKind, Pinned
from ..core.interaction import InteractionController
from ..core.simulation import Simulation


@dataclass(frozen=True)
class NodeView:
    """Renderable graph node."""
    node_id: str
    label: str
    category: str
    level: int
    x: float
    y: float
    radius: float
    pin: str  # free, dragging, pinned
    suggested: bool
    source_node_id: Optional[str]
    description: Optional[str]
    endorsements: int
    last_verified: Optional[str]


@dataclass(frozen=True)
class EdgeView:
    """Renderable graph edge."""
    source_id: str
    target_id: str
    strength: float
    kind: str
    style: str  # solid, dashed


@dataclass(frozen=True)
class GraphView:
    """
    Point-in-time layout snapshot.

    `version` changes whenever structure, pins, hover or selection change;
    positions may differ between two views with the same version while
    the simulation is running.
    """
    nodes: Tuple[NodeView, ...]
    edges: Tuple[EdgeView, ...]
    selected_id: Optional[str]
    hovered_id: Optional[str]
    highlighted_ids: FrozenSet[str]
    alpha: float
    is_running: bool
    is_quiescent: bool
    version: int

    def node(self, node_id: str) -> Optional[NodeView]:
        for view in self.nodes:
            if view.node_id == node_id:
                return view
        return None


def _pin_label(pin) -> str:
    if isinstance(pin, Dragging):
        return "dragging"
    if isinstance(pin, Pinned):
        return "pinned"
    return "free"


def build_graph_view(simulation: Simulation, interaction: InteractionController) -> GraphView:
    graph = simulation.graph
    nodes = tuple(
        NodeView(
            node_id=n.id,
            label=n.name,
            category=n.category,
            level=n.level,
            x=n.x,
            y=n.y,
            radius=n.radius,
            pin=_pin_label(n.pin),
            suggested=n.suggested,
            source_node_id=n.source_node_id,
            description=n.description,
            endorsements=n.endorsements,
            last_verified=n.last_verified.isoformat() if n.last_verified else None,
        )
        for n in graph
    )
    edges = tuple(
        EdgeView(
            source_id=e.source_id,
            target_id=e.target_id,
            strength=e.strength,
            kind=e.kind.value,
            style="dashed" if e.kind is EdgeKind.SUGGESTED else "solid",
        )
        for e in graph.edges
    )
    return GraphView(
        nodes=nodes,
        edges=edges,
        selected_id=interaction.selected_id,
        hovered_id=interaction.hovered_id,
        highlighted_ids=frozenset(interaction.highlighted_ids()),
        alpha=simulation.alpha,
        is_running=simulation.is_running,
        is_quiescent=simulation.is_quiescent,
        version=graph.version,
    )
