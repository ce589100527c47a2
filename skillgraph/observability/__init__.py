"""
Observability & Audit Layer

RESPONSIBILITY: Record what the engine did (loads, skipped records,
simulation lifecycle, pin changes, suggestion outcomes) for inspection
by callers and tests.

WHAT THIS LAYER MUST NOT DO:
============================
- Modify engine behavior
- Make decisions based on logged data
- Block tick or event handling

Every recorded entry is also emitted to the standard `logging` module,
so hosts see engine activity in their normal log stream.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging


logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Kinds of engine activity worth recording."""
    GRAPH_LOADED = "graph_loaded"
    RECORD_SKIPPED = "record_skipped"
    SIMULATION_STARTED = "simulation_started"
    SIMULATION_STOPPED = "simulation_stopped"
    SIMULATION_SETTLED = "simulation_settled"
    NODE_PINNED = "node_pinned"
    NODE_RELEASED = "node_released"
    SUGGESTIONS_MERGED = "suggestions_merged"
    SUGGESTIONS_FAILED = "suggestions_failed"
    SUGGESTIONS_DISCARDED = "suggestions_discarded"
    SUGGESTION_ACCEPTED = "suggestion_accepted"
    SUGGESTION_REJECTED = "suggestion_rejected"


_LOG_LEVELS: Dict[AuditEventType, int] = {
    AuditEventType.RECORD_SKIPPED: logging.WARNING,
    AuditEventType.SUGGESTIONS_FAILED: logging.WARNING,
    AuditEventType.SUGGESTIONS_DISCARDED: logging.INFO,
    AuditEventType.GRAPH_LOADED: logging.INFO,
    AuditEventType.SUGGESTIONS_MERGED: logging.INFO,
}


@dataclass(frozen=True)
class AuditEntry:
    """One immutable audit record."""
    sequence: int
    timestamp: datetime
    event_type: AuditEventType
    message: str
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def get(self, key: str) -> Optional[str]:
        for k, v in self.context:
            if k == key:
                return v
        return None


class AuditLog:
    """
    Append-only audit collector.

    Entries are never modified or removed; readers get copies.
    """

    def __init__(self, name: str = "skillgraph"):
        self._name = name
        self._entries: List[AuditEntry] = []
        self._sequence: int = 0

    def record(self, event_type: AuditEventType, message: str, **context: object) -> AuditEntry:
        """Append an entry and forward it to the module logger."""
        self._sequence += 1
        entry = AuditEntry(
            sequence=self._sequence,
            timestamp=datetime.now(timezone.utc),
            event_type=event_type,
            message=message,
            context=tuple((k, str(v)) for k, v in sorted(context.items())),
        )
        self._entries.append(entry)
        logger.log(
            _LOG_LEVELS.get(event_type, logging.DEBUG),
            "[%s] %s: %s", self._name, event_type.value, message,
        )
        return entry

    def entries(self, event_type: Optional[AuditEventType] = None) -> List[AuditEntry]:
        """Get entries, optionally filtered by type."""
        if event_type is None:
            return list(self._entries)
        return [e for e in self._entries if e.event_type == event_type]

    def count(self, event_type: AuditEventType) -> int:
        return sum(1 for e in self._entries if e.event_type == event_type)

    @property
    def name(self) -> str:
        return self._name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


__all__ = ['AuditEventType', 'AuditEntry', 'AuditLog']
