"""
Categorization Engine
=====================

Assigns every skill to exactly one category bucket.

ORDER CONTRACT:
===============
CATEGORY_TABLE is scanned top to bottom and the FIRST matching rule wins.
A name that matches several categories (e.g. "AWS Lambda" is both DevOps
and Cloud) lands in the earliest one. The order below is part of the
public behavior and is covered by tests. Keywords match case-insensitively;
a category label matches as written, case-sensitive, anywhere in the name:

    Frontend, Backend, Design, DevOps, AI, Data, Mobile, Cloud, Security

Names that match no rule fall back to a level bucket, so categorize()
is total:

    level > 75 -> Advanced
    level > 50 -> Intermediate
    otherwise  -> Beginner
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class CategoryRule:
    """A category label and the lower-case keywords that select it."""
    label: str
    keywords: FrozenSet[str]

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        if any(keyword in lowered for keyword in self.keywords):
            return True
        # The label itself matches case-sensitively, as written ("CloudFormation", not "Tailwind")
        return self.label in name


def _rule(label: str, *keywords: str) -> CategoryRule:
    return CategoryRule(label=label, keywords=frozenset(k.lower() for k in keywords))


CATEGORY_TABLE: Tuple[CategoryRule, ...] = (
    _rule("Frontend", "react", "vue", "angular", "html", "css", "javascript",
          "ui", "interface", "web"),
    _rule("Backend", "node", "express", "php", "java", "python", "api",
          "server", "database"),
    _rule("Design", "ux", "ui", "figma", "sketch", "adobe", "photoshop",
          "illustrator"),
    _rule("DevOps", "docker", "kubernetes", "ci/cd", "pipeline", "aws",
          "azure", "deployment"),
    _rule("AI", "machine learning", "deep learning", "neural", "nlp",
          "vision", "tensorflow", "pytorch"),
    _rule("Data", "sql", "nosql", "analytics", "visualization", "etl",
          "warehouse", "hadoop"),
    _rule("Mobile", "android", "ios", "flutter", "react native", "swift",
          "kotlin"),
    _rule("Cloud", "aws", "azure", "gcp", "serverless", "lambda", "s3", "ec2"),
    _rule("Security", "authentication", "authorization", "encryption",
          "firewall", "penetration"),
)

ADVANCED = "Advanced"
INTERMEDIATE = "Intermediate"
BEGINNER = "Beginner"

LEVEL_BUCKETS: Tuple[str, ...] = (ADVANCED, INTERMEDIATE, BEGINNER)


def level_bucket(level: int) -> str:
    """Fallback category for names that match no keyword rule."""
    if level > 75:
        return ADVANCED
    if level > 50:
        return INTERMEDIATE
    return BEGINNER


def categorize(name: str, level: int) -> str:
    """
    Classify a skill. Pure, deterministic and total.

    Same (name, level) always yields the same category, independent of
    which other skills are being loaded.
    """
    for rule in CATEGORY_TABLE:
        if rule.matches(name):
            return rule.label
    return level_bucket(level)


class CategorizationEngine:
    """Table-driven classifier; the table can be swapped for testing."""

    def __init__(self, table: Tuple[CategoryRule, ...] = CATEGORY_TABLE):
        self._table = table

    @property
    def table(self) -> Tuple[CategoryRule, ...]:
        return self._table

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(rule.label for rule in self._table) + LEVEL_BUCKETS

    def categorize(self, name: str, level: int) -> str:
        for rule in self._table:
            if rule.matches(name):
                return rule.label
        return level_bucket(level)
