"""
Contracts Layer

Immutable value types and the mutable GraphNode shared by every layer.
Every other layer builds on these types.
"""

from .base import (
    ErrorCode, Error, Result, SkillGraphError, UnknownNodeError,
    InvalidTransitionError, InvalidCoordinatesError, Point, ORIGIN,
)
from .skill import Skill, MalformedSkillError, parse_skill_record, LEVEL_MIN, LEVEL_MAX
from .graph import (
    GraphNode, Edge, EdgeKind, PinState, Free, Dragging, Pinned, FREE,
    radius_for_level, SUGGESTED_RADIUS,
)

__all__ = [
    'ErrorCode', 'Error', 'Result', 'SkillGraphError', 'UnknownNodeError',
    'InvalidTransitionError', 'InvalidCoordinatesError', 'Point', 'ORIGIN',
    'Skill', 'MalformedSkillError', 'parse_skill_record', 'LEVEL_MIN', 'LEVEL_MAX',
    'GraphNode', 'Edge', 'EdgeKind', 'PinState', 'Free', 'Dragging', 'Pinned', 'FREE',
    'radius_for_level', 'SUGGESTED_RADIUS',
]
