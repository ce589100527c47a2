"""
Layout Initializer
==================

Deterministic radial seed layout for categorized skills, plus the
initial CORE edges between them.

GEOMETRY:
=========
Categories sit on a circle of radius R_cat around the origin, evenly
spaced by angle in order of first appearance:

    theta_i = i * 2*pi / C
    anchor_i = (R_cat cos theta_i, R_cat sin theta_i)

The k members of a category fan out on a narrow arc around its anchor,
higher levels closer in:

    phi_j = theta_i + (j - k/2) * pi/12
    d_j   = 60 + (100 - level_j) / 5

A seeded, well-separated start keeps the force simulation from
collapsing into a single blob.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple
import math
import re

from ..contracts.base import Point, ORIGIN
from ..contracts.graph import Edge, EdgeKind, GraphNode


@dataclass
class LayoutConfig:
    """Configuration for the seed layout and core edge construction."""
    category_radius: float = 250.0
    arc_step: float = math.pi / 12
    base_distance: float = 60.0
    level_divisor: float = 5.0

    chain_strength: float = 0.7
    related_strength: float = 0.15
    min_shared_word_length: int = 3


_WORD_SPLIT = re.compile(r"[\s\-_.,;:]")


def group_by_category(nodes: List[GraphNode]) -> Dict[str, List[GraphNode]]:
    """Categories in first-appearance order, members in input order."""
    groups: Dict[str, List[GraphNode]] = {}
    for node in nodes:
        groups.setdefault(node.category, []).append(node)
    return groups


def skills_related(name_a: str, name_b: str, min_word_length: int = 3) -> bool:
    """Names share a meaningful word, or one contains the other."""
    words_a = {w for w in _WORD_SPLIT.split(name_a.lower()) if len(w) >= min_word_length}
    words_b = {w for w in _WORD_SPLIT.split(name_b.lower()) if len(w) >= min_word_length}
    if words_a & words_b:
        return True
    return name_a in name_b or name_b in name_a


class LayoutInitializer:
    """Computes anchors and seed positions; never moves a node after that."""

    def __init__(self, config: LayoutConfig = None):
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def category_anchors(self, categories: List[str]) -> Dict[str, Tuple[float, Point]]:
        """Map category -> (theta, anchor point)."""
        count = len(categories)
        anchors = {}
        for index, category in enumerate(categories):
            theta = index * (2 * math.pi) / count
            anchors[category] = (
                theta,
                Point.polar(ORIGIN, theta, self._config.category_radius),
            )
        return anchors

    def initialize(self, nodes: List[GraphNode]) -> None:
        """
        Position every node and record its anchor and polar offset.

        Mutates the nodes in place; velocities are reset.
        """
        if not nodes:
            return
        cfg = self._config
        groups = group_by_category(nodes)
        anchors = self.category_anchors(list(groups))

        for category, members in groups.items():
            theta, anchor = anchors[category]
            k = len(members)
            for j, node in enumerate(members):
                phi = theta + (j - k / 2) * cfg.arc_step
                distance = cfg.base_distance + (100 - node.level) / cfg.level_divisor
                node.anchor = anchor
                node.angle_from_anchor = phi
                node.distance_from_anchor = distance
                node.place(Point.polar(anchor, phi, distance))

    def build_core_edges(self, nodes: List[GraphNode]) -> List[Edge]:
        """
        Chain each category's members, then weakly link related skills
        across categories. Each unordered pair appears at most once.
        """
        cfg = self._config
        edges: List[Edge] = []
        seen: Set[Tuple[str, str]] = set()

        def link(a: GraphNode, b: GraphNode, strength: float) -> None:
            key = (a.id, b.id) if a.id < b.id else (b.id, a.id)
            if key in seen:
                return
            seen.add(key)
            edges.append(Edge(a.id, b.id, strength, EdgeKind.CORE))

        for members in group_by_category(nodes).values():
            for previous, current in zip(members, members[1:]):
                link(previous, current, cfg.chain_strength)

        for i, a in enumerate(nodes):
            for b in nodes[i + 1:]:
                if a.category != b.category and skills_related(
                    a.name, b.name, cfg.min_shared_word_length
                ):
                    link(a, b, cfg.related_strength)

        return edges
