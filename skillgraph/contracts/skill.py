"""
Skill Record Contract

The immutable input record delivered by the data-loading collaborator,
and the validation that turns raw mappings into it.

VALIDATION RULES:
=================
- id: non-empty string
- name: non-empty string (surrounding whitespace stripped)
- level: integer in [0, 100] (booleans rejected, integral floats accepted)
- endorsements: integer >= 0 (defaults to 0)
- lastVerified / last_verified: ISO 8601 string, datetime, or absent
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from .base import ErrorCode, SkillGraphError


LEVEL_MIN = 0
LEVEL_MAX = 100


class MalformedSkillError(SkillGraphError):
    """A raw skill record failed validation."""

    code = ErrorCode.MALFORMED_RECORD


@dataclass(frozen=True)
class Skill:
    """A verified skill of the user. Immutable once received."""
    id: str
    name: str
    level: int
    last_verified: Optional[datetime] = None
    endorsements: int = 0

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise MalformedSkillError("Skill id must be a non-empty string")
        if not isinstance(self.name, str) or not self.name.strip():
            raise MalformedSkillError(f"Skill {self.id!r} has no name")
        if isinstance(self.level, bool) or not isinstance(self.level, int):
            raise MalformedSkillError(f"Skill {self.id!r} level must be an integer")
        if not LEVEL_MIN <= self.level <= LEVEL_MAX:
            raise MalformedSkillError(
                f"Skill {self.id!r} level {self.level} outside [{LEVEL_MIN}, {LEVEL_MAX}]"
            )
        if isinstance(self.endorsements, bool) or not isinstance(self.endorsements, int):
            raise MalformedSkillError(f"Skill {self.id!r} endorsements must be an integer")
        if self.endorsements < 0:
            raise MalformedSkillError(f"Skill {self.id!r} has negative endorsements")


def _coerce_level(value: Any) -> Any:
    # Integral floats from JSON (e.g. 80.0) are accepted as integers
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _parse_timestamp(value: Any, skill_id: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            raise MalformedSkillError(f"Skill {skill_id!r} has unparsable lastVerified {value!r}")
    else:
        raise MalformedSkillError(f"Skill {skill_id!r} has unparsable lastVerified {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_skill_record(record: Union[Skill, Mapping[str, Any]]) -> Skill:
    """
    Validate one raw record and return a Skill.

    Raises MalformedSkillError on any rule violation.
    """
    if isinstance(record, Skill):
        return record
    if not isinstance(record, Mapping):
        raise MalformedSkillError(f"Skill record must be a mapping, got {type(record).__name__}")

    skill_id = record.get('id')
    if isinstance(skill_id, int) and not isinstance(skill_id, bool):
        skill_id = str(skill_id)

    name = record.get('name')
    if isinstance(name, str):
        name = name.strip()

    last_verified = record.get('lastVerified', record.get('last_verified'))

    return Skill(
        id=skill_id,
        name=name,
        level=_coerce_level(record.get('level')),
        last_verified=_parse_timestamp(last_verified, str(skill_id)),
        endorsements=record.get('endorsements', 0),
    )
