"""
Graph Loader
============

Raw records -> validated Skills -> categorized, positioned, linked graph.

A bad record never aborts a load: it is skipped, logged and audited,
and the rest of the set is built normally.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Set, Tuple

from ..contracts.graph import GraphNode
from ..contracts.skill import MalformedSkillError, Skill, parse_skill_record
from ..observability import AuditEventType, AuditLog
from .categorization import CategorizationEngine
from .graph import SkillGraph
from .layout import LayoutInitializer


@dataclass(frozen=True)
class SkippedRecord:
    """A rejected input record and why."""
    index: int
    record_id: str
    reason: str


@dataclass(frozen=True)
class LoadReport:
    """Outcome of one load: which ids made it in, which records did not."""
    accepted: Tuple[str, ...] = field(default_factory=tuple)
    skipped: Tuple[SkippedRecord, ...] = field(default_factory=tuple)

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def _record_id(record: Any) -> str:
    if isinstance(record, Skill):
        return record.id
    if isinstance(record, Mapping):
        return str(record.get('id', '?'))
    return '?'


class GraphLoader:
    """Builds a fresh SkillGraph from an ordered sequence of skill records."""

    def __init__(
        self,
        categorizer: CategorizationEngine = None,
        layout: LayoutInitializer = None,
        audit: AuditLog = None,
    ):
        self._categorizer = categorizer or CategorizationEngine()
        self._layout = layout or LayoutInitializer()
        self._audit = audit or AuditLog("loader")

    def validate(self, records: Iterable[Any]) -> Tuple[List[Skill], List[SkippedRecord]]:
        skills: List[Skill] = []
        skipped: List[SkippedRecord] = []
        seen: Set[str] = set()
        for index, record in enumerate(records):
            try:
                skill = parse_skill_record(record)
            except MalformedSkillError as e:
                skipped.append(self._skip(index, _record_id(record), str(e)))
                continue
            if skill.id in seen:
                skipped.append(self._skip(index, skill.id, f"Duplicate id {skill.id!r}"))
                continue
            seen.add(skill.id)
            skills.append(skill)
        return skills, skipped

    def load(self, records: Iterable[Any]) -> Tuple[SkillGraph, LoadReport]:
        skills, skipped = self.validate(records)

        nodes = [
            GraphNode.from_skill(skill, self._categorizer.categorize(skill.name, skill.level))
            for skill in skills
        ]
        self._layout.initialize(nodes)

        graph = SkillGraph()
        graph.merge(nodes, self._layout.build_core_edges(nodes))

        report = LoadReport(
            accepted=tuple(node.id for node in nodes),
            skipped=tuple(skipped),
        )
        self._audit.record(
            AuditEventType.GRAPH_LOADED,
            f"Loaded {report.accepted_count} skills ({report.skipped_count} skipped)",
            accepted=report.accepted_count,
            skipped=report.skipped_count,
            edges=len(graph.edges),
        )
        return graph, report

    def _skip(self, index: int, record_id: str, reason: str) -> SkippedRecord:
        self._audit.record(
            AuditEventType.RECORD_SKIPPED,
            f"Skipped record {index}: {reason}",
            index=index,
            record_id=record_id,
        )
        return SkippedRecord(index=index, record_id=record_id, reason=reason)
