"""
Interaction Contracts

Responsibility:
Model pointer events as data so transport layers (HTTP, websockets,
replayed logs) can hand them to the controller.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..core.interaction import InteractionController


class ActionType(Enum):
    """Types of user interaction."""
    # Drag
    DRAG_START = "drag_start"
    DRAG = "drag"
    DRAG_END = "drag_end"

    # Selection
    NODE_CLICK = "node_click"
    NODE_HOVER = "node_hover"


@dataclass(frozen=True)
class InteractionRequest:
    """A specific user intent."""
    action: ActionType
    node_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source_component: str = "renderer"

    def __post_init__(self):
        if self.action is not ActionType.NODE_HOVER and self.node_id is None:
            raise ValueError(f"{self.action.value} requires a node_id")
        if self.action is ActionType.DRAG and (self.x is None or self.y is None):
            raise ValueError("drag requires x and y")


def dispatch_request(controller: InteractionController, request: InteractionRequest) -> None:
    """Apply one request to the controller; controller errors propagate."""
    action = request.action
    if action is ActionType.DRAG_START:
        controller.on_drag_start(request.node_id)
    elif action is ActionType.DRAG:
        controller.on_drag(request.node_id, request.x, request.y)
    elif action is ActionType.DRAG_END:
        controller.on_drag_end(request.node_id)
    elif action is ActionType.NODE_CLICK:
        controller.on_node_click(request.node_id)
    elif action is ActionType.NODE_HOVER:
        controller.on_node_hover(request.node_id)
    else:
        raise ValueError(f"Unhandled action {action!r}")
