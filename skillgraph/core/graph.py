"""
Skill Graph
===========

The live node/edge container shared by the simulation, the interaction
controller and the suggestion merge step.

Adjacency is mirrored into a NetworkX graph so neighbourhood queries
(hover highlighting, suggestion seeding) do not rescan the edge list.

GUARANTEES:
===========
- Node iteration order is insertion order (stable layouts, stable ticks)
- merge() is all-or-nothing: a batch that would break an invariant is
  rejected before anything is added
- Every structural change bumps `version`
"""

from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple
import networkx as nx

from ..contracts.base import ErrorCode, SkillGraphError, UnknownNodeError
from ..contracts.graph import Edge, EdgeKind, GraphNode


class GraphIntegrityError(SkillGraphError):
    """A mutation would break a graph invariant."""


class SkillGraph:
    """Ordered nodes, edges, and their topology."""

    def __init__(self):
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: List[Edge] = []
        self._topology = nx.Graph()
        self._version: int = 0

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(list(self._nodes.values()))

    def node(self, node_id: str) -> GraphNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(f"No node with id {node_id!r}")

    def get(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    def neighbors(self, node_id: str) -> Set[str]:
        """Ids of nodes one edge away from `node_id`."""
        if node_id not in self._nodes:
            raise UnknownNodeError(f"No node with id {node_id!r}")
        return set(self._topology.neighbors(node_id))

    def has_name(self, name: str) -> bool:
        """Case-insensitive name lookup."""
        lowered = name.strip().lower()
        return any(n.name.lower() == lowered for n in self._nodes.values())

    def names(self) -> Set[str]:
        """Lower-cased names of every node."""
        return {n.name.lower() for n in self._nodes.values()}

    def core_nodes(self) -> List[GraphNode]:
        return [n for n in self._nodes.values() if not n.suggested]

    def suggested_nodes(self) -> List[GraphNode]:
        return [n for n in self._nodes.values() if n.suggested]

    # =========================================================================
    # MUTATION
    # =========================================================================

    def add_node(self, node: GraphNode) -> None:
        if node.id in self._nodes:
            raise GraphIntegrityError(
                f"Duplicate node id {node.id!r}", ErrorCode.DUPLICATE_NODE_ID
            )
        self._nodes[node.id] = node
        self._topology.add_node(node.id)
        self._version += 1

    def add_edge(self, edge: Edge) -> None:
        for endpoint in (edge.source_id, edge.target_id):
            if endpoint not in self._nodes:
                raise UnknownNodeError(f"Edge endpoint {endpoint!r} is not in the graph")
        self._edges.append(edge)
        self._topology.add_edge(edge.source_id, edge.target_id)
        self._version += 1

    def merge(self, nodes: Iterable[GraphNode], edges: Iterable[Edge]) -> None:
        """
        Add a batch of nodes and edges atomically.

        Validates the whole batch first; on any violation nothing is added.
        """
        nodes = list(nodes)
        edges = list(edges)
        self._validate_batch(nodes, edges)

        for node in nodes:
            self._nodes[node.id] = node
            self._topology.add_node(node.id)
        for edge in edges:
            self._edges.append(edge)
            self._topology.add_edge(edge.source_id, edge.target_id)
        self._version += 1

    def remove_node(self, node_id: str) -> GraphNode:
        """Remove a node and every edge touching it."""
        node = self.node(node_id)
        del self._nodes[node_id]
        self._edges = [e for e in self._edges if not e.touches(node_id)]
        self._topology.remove_node(node_id)
        self._version += 1
        return node

    def accept_suggestion(self, node_id: str) -> GraphNode:
        """
        Promote a suggested node to a permanent one.

        Its SUGGESTED edge becomes a CORE edge of the same strength so the
        suggested-edge invariant keeps holding.
        """
        node = self.node(node_id)
        if not node.suggested:
            raise GraphIntegrityError(
                f"Node {node_id!r} is not a suggestion", ErrorCode.NOT_A_SUGGESTION
            )
        node.suggested = False
        node.source_node_id = None
        self._edges = [
            Edge(e.source_id, e.target_id, e.strength, EdgeKind.CORE)
            if e.kind is EdgeKind.SUGGESTED and e.touches(node_id) else e
            for e in self._edges
        ]
        self._version += 1
        return node

    def reject_suggestion(self, node_id: str) -> GraphNode:
        node = self.node(node_id)
        if not node.suggested:
            raise GraphIntegrityError(
                f"Node {node_id!r} is not a suggestion", ErrorCode.NOT_A_SUGGESTION
            )
        return self.remove_node(node_id)

    def touch(self) -> None:
        """Mark a non-structural change (pin, selection) visible to watchers."""
        self._version += 1

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _validate_batch(self, nodes: List[GraphNode], edges: List[Edge]) -> None:
        batch_ids: Set[str] = set()
        taken_names = self.names()
        for node in nodes:
            if node.id in self._nodes or node.id in batch_ids:
                raise GraphIntegrityError(
                    f"Duplicate node id {node.id!r}", ErrorCode.DUPLICATE_NODE_ID
                )
            lowered = node.name.lower()
            if node.suggested and lowered in taken_names:
                raise GraphIntegrityError(
                    f"Suggested name {node.name!r} already present", ErrorCode.DUPLICATE_NAME
                )
            batch_ids.add(node.id)
            taken_names.add(lowered)

        known = set(self._nodes) | batch_ids
        for edge in edges:
            for endpoint in (edge.source_id, edge.target_id):
                if endpoint not in known:
                    raise UnknownNodeError(f"Edge endpoint {endpoint!r} is not in the graph")


def suggested_edge_pairs(graph: SkillGraph) -> List[Tuple[str, str]]:
    """(suggested node id, source id) for every SUGGESTED edge."""
    pairs = []
    for edge in graph.edges:
        if edge.kind is not EdgeKind.SUGGESTED:
            continue
        source = graph.get(edge.source_id)
        if source is not None and source.suggested:
            pairs.append((edge.source_id, edge.target_id))
        else:
            pairs.append((edge.target_id, edge.source_id))
    return pairs
