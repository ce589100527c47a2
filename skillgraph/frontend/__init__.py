"""
Frontend Contracts

Renderer-facing snapshot types and the interaction request model.
"""

from .visualization import NodeView, EdgeView, GraphView, build_graph_view
from .interaction import ActionType, InteractionRequest, dispatch_request

__all__ = [
    'NodeView', 'EdgeView', 'GraphView', 'build_graph_view',
    'ActionType', 'InteractionRequest', 'dispatch_request',
]
