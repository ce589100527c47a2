"""
Graph Contracts

Node, edge and pin-state types shared by the layout, simulation,
suggestion and interaction layers.

PIN STATE:
==========
Pinning is an explicit tagged union, never a nullable coordinate:

    Free                 -> position computed by the simulation
    Dragging(x, y)       -> position forced to (x, y) while the user drags
    Pinned(x, y)         -> position forced to (x, y) after a core node is released

INVARIANTS:
===========
- radius is a pure function of (level, suggested)
- category is assigned once, at node creation
- a SUGGESTED edge joins a suggested node to its source node
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union
import math

from .base import Point, ORIGIN
from .skill import Skill


BASE_RADIUS = 10.0
LEVEL_RADIUS_SPAN = 10.0
SUGGESTED_RADIUS = 8.0


def radius_for_level(level: int) -> float:
    """Node radius for a core skill: 10 at level 0, 20 at level 100."""
    return BASE_RADIUS + (level / 100.0) * LEVEL_RADIUS_SPAN


# =============================================================================
# PIN STATE (tagged union)
# =============================================================================

@dataclass(frozen=True)
class Free:
    """Node moves under simulation forces."""

    @property
    def overrides_position(self) -> bool:
        return False


@dataclass(frozen=True)
class Dragging:
    """Node is held by an in-progress drag at (x, y)."""
    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Drag position must be finite, got ({self.x}, {self.y})")

    @property
    def overrides_position(self) -> bool:
        return True


@dataclass(frozen=True)
class Pinned:
    """Node stays where the user released it."""
    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Pin position must be finite, got ({self.x}, {self.y})")

    @property
    def overrides_position(self) -> bool:
        return True


PinState = Union[Free, Dragging, Pinned]

FREE = Free()


# =============================================================================
# EDGES
# =============================================================================

class EdgeKind(Enum):
    """Structural kind of an edge; selects the spring rest length."""
    CORE = "core"
    SUGGESTED = "suggested"


@dataclass(frozen=True)
class Edge:
    """Undirected spring between two nodes."""
    source_id: str
    target_id: str
    strength: float
    kind: EdgeKind = EdgeKind.CORE

    def __post_init__(self):
        if not 0.0 < self.strength <= 1.0:
            raise ValueError(f"Edge strength must be in (0, 1], got {self.strength}")
        if self.source_id == self.target_id:
            raise ValueError(f"Edge cannot loop on {self.source_id!r}")

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source_id, self.target_id)

    def other(self, node_id: str) -> str:
        """The endpoint opposite `node_id`."""
        if node_id == self.source_id:
            return self.target_id
        if node_id == self.target_id:
            return self.source_id
        raise ValueError(f"{node_id!r} is not an endpoint of this edge")


# =============================================================================
# NODES
# =============================================================================

@dataclass(eq=False)
class GraphNode:
    """
    A skill placed in the layout.

    Mutable: position, velocity and pin state change every tick or on
    user interaction. Identity is the node id.
    """
    id: str
    name: str
    level: int
    category: str
    last_verified: Optional[datetime] = None
    endorsements: int = 0

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    pin: PinState = FREE

    anchor: Point = ORIGIN
    angle_from_anchor: float = 0.0
    distance_from_anchor: float = 0.0

    suggested: bool = False
    source_node_id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_skill(cls, skill: Skill, category: str) -> GraphNode:
        return cls(
            id=skill.id,
            name=skill.name,
            level=skill.level,
            category=category,
            last_verified=skill.last_verified,
            endorsements=skill.endorsements,
        )

    @property
    def radius(self) -> float:
        if self.suggested:
            return SUGGESTED_RADIUS
        return radius_for_level(self.level)

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_free(self) -> bool:
        return isinstance(self.pin, Free)

    def place(self, point: Point) -> None:
        """Move the node to `point` and clear its velocity."""
        self.x = point.x
        self.y = point.y
        self.vx = 0.0
        self.vy = 0.0
