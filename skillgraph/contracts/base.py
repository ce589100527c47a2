"""
Base Contracts and Shared Types

Foundational types used across all layers of the skill graph engine.

BOUNDARY ENFORCEMENT:
=====================
- Value types here are frozen dataclasses
- Errors the caller is expected to handle are DATA (Error / Result)
- Errors that indicate a misuse of the event contract are EXCEPTIONS
  (SkillGraphError hierarchy), each carrying an explicit ErrorCode
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto
import math


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every failure path of the engine maps to one of these.
    """
    # Loading errors
    MALFORMED_RECORD = auto()
    DUPLICATE_NODE_ID = auto()

    # Graph errors
    UNKNOWN_NODE = auto()
    NOT_A_SUGGESTION = auto()
    DUPLICATE_NAME = auto()

    # Interaction errors
    INVALID_STATE_TRANSITION = auto()
    INVALID_COORDINATES = auto()

    # Suggestion errors
    SUGGESTION_FAILED = auto()
    SUGGESTION_TIMEOUT = auto()
    SUGGESTION_EMPTY = auto()
    SUGGESTION_IN_PROGRESS = auto()
    ENGINE_INACTIVE = auto()
    GRAPH_RELOADED = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and inspected.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> Error:
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in sorted(context.items())),
        )


@dataclass(frozen=True)
class Result:
    """
    Generic result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(value: object) -> Result:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(value=None, error=error)


class SkillGraphError(Exception):
    """Base exception for contract violations at the engine boundary."""

    code: ErrorCode = ErrorCode.INVALID_STATE_TRANSITION

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class UnknownNodeError(SkillGraphError, KeyError):
    """Raised when an operation names a node id that is not in the graph."""

    code = ErrorCode.UNKNOWN_NODE

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class InvalidTransitionError(SkillGraphError):
    """Raised when an interaction event is not valid for the node's pin state."""

    code = ErrorCode.INVALID_STATE_TRANSITION


class InvalidCoordinatesError(SkillGraphError, ValueError):
    """Raised when a drag reports a non-finite position."""

    code = ErrorCode.INVALID_COORDINATES


# =============================================================================
# GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class Point:
    """Immutable 2D point in layout coordinates (origin at the graph center)."""
    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Point coordinates must be finite, got ({self.x}, {self.y})")

    @staticmethod
    def polar(origin: Point, angle: float, distance: float) -> Point:
        """Point at `distance` from `origin` in direction `angle` (radians)."""
        return Point(
            x=origin.x + distance * math.cos(angle),
            y=origin.y + distance * math.sin(angle),
        )

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


ORIGIN = Point(0.0, 0.0)
