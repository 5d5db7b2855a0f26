"""Directed, signed, weighted trust graph.

The graph is the single source of truth for topology. Nodes are NodeId
values; each ordered pair of nodes carries at most one edge. Positive
weights express trust, negative weights express distrust.

Mutations are reported to registered GraphListener objects so that
cached walks can be invalidated as soon as the topology changes.
"""

from __future__ import annotations

import logging
from typing import Protocol

from meritrank.exceptions import NodeDoesNotExist, SelfReferenceNotAllowed
from meritrank.node import MAX_NODE_ID, NodeId, NodeLike, Weight, as_node_id

logger = logging.getLogger(__name__)


class GraphListener(Protocol):
    """Receives topology change notifications from a Graph."""

    def edge_changed(
        self,
        source: NodeId,
        target: NodeId,
        old_weight: Weight | None,
        new_weight: Weight | None,
    ) -> None:
        """Called after an edge was inserted, reweighted or removed.

        ``old_weight`` is None for a new edge, ``new_weight`` is None for
        a removed one.
        """
        ...

    def node_removed(self, node: NodeId) -> None:
        """Called after a node and all its edges were removed."""
        ...

    def graph_cleared(self) -> None:
        """Called after every node and edge was dropped."""
        ...


class Graph:
    """Directed weighted graph over NodeId values.

    Example:
        graph = Graph()
        graph.add_edge(1, 2, 1.0)
        graph.add_edge(2, 3, -0.5)

        graph.outgoing(2)           # {NodeId(3): -0.5}
        graph.positive_outgoing(2)  # {}
    """

    def __init__(self) -> None:
        self._outgoing: dict[NodeId, dict[NodeId, Weight]] = {}
        self._incoming: dict[NodeId, set[NodeId]] = {}  # target -> sources
        self._listeners: list[GraphListener] = []

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: GraphListener) -> None:
        """Register a listener for topology changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: GraphListener) -> None:
        """Unregister a listener. No error if it was never registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_node(self, node: NodeLike) -> NodeId:
        """Add a node. Idempotent.

        Returns:
            The node as a NodeId.
        """
        node_id = as_node_id(node)
        if node_id not in self._outgoing:
            self._outgoing[node_id] = {}
            self._incoming[node_id] = set()
        return node_id

    def add_edge(self, source: NodeLike, target: NodeLike, weight: Weight) -> None:
        """Insert an edge or overwrite the weight of an existing one.

        Missing endpoints are added to the node set.

        Args:
            source: Node expressing the trust
            target: Node being trusted (or distrusted)
            weight: Positive for trust, negative for distrust

        Raises:
            SelfReferenceNotAllowed: If source equals target.
            InvalidNode: If either endpoint is not a concrete id.
            TypeError: If weight is not a number.
        """
        src = as_node_id(source)
        dst = as_node_id(target)
        if src == dst:
            raise SelfReferenceNotAllowed(src)

        if not isinstance(weight, (int, float)) or isinstance(weight, bool):
            raise TypeError(f"Edge weight must be a number, got {weight!r}")
        new_weight = float(weight)
        self.add_node(src)
        self.add_node(dst)

        old_weight = self._outgoing[src].get(dst)
        if old_weight is not None and old_weight == new_weight:
            return

        self._outgoing[src][dst] = new_weight
        self._incoming[dst].add(src)
        logger.debug(f"Edge {src} -> {dst} set to {new_weight} (was {old_weight})")
        for listener in list(self._listeners):
            listener.edge_changed(src, dst, old_weight, new_weight)

    def remove_edge(self, source: NodeLike, target: NodeLike) -> None:
        """Remove an edge. No error if it does not exist."""
        src = as_node_id(source)
        dst = as_node_id(target)
        targets = self._outgoing.get(src)
        if targets is None or dst not in targets:
            return

        old_weight = targets.pop(dst)
        self._incoming[dst].discard(src)
        logger.debug(f"Edge {src} -> {dst} removed (was {old_weight})")
        for listener in list(self._listeners):
            listener.edge_changed(src, dst, old_weight, None)

    def remove_node(self, node: NodeLike) -> None:
        """Remove a node together with every incident edge.

        No error if the node does not exist.
        """
        node_id = as_node_id(node)
        if node_id not in self._outgoing:
            return

        for target in list(self._outgoing[node_id]):
            self.remove_edge(node_id, target)
        for source in list(self._incoming[node_id]):
            self.remove_edge(source, node_id)

        del self._outgoing[node_id]
        del self._incoming[node_id]
        for listener in list(self._listeners):
            listener.node_removed(node_id)

    def clear(self) -> None:
        """Drop all nodes and edges."""
        self._outgoing.clear()
        self._incoming.clear()
        for listener in list(self._listeners):
            listener.graph_cleared()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def contains_node(self, node: NodeLike) -> bool:
        return as_node_id(node) in self._outgoing

    def __contains__(self, node: object) -> bool:
        if isinstance(node, int) and not isinstance(node, bool):
            node = NodeId(node) if 0 <= node <= MAX_NODE_ID else None
        return isinstance(node, NodeId) and node in self._outgoing

    def nodes(self) -> list[NodeId]:
        """Return all nodes in insertion order."""
        return list(self._outgoing)

    def node_count(self) -> int:
        return len(self._outgoing)

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._outgoing.values())

    def get_edge(self, source: NodeLike, target: NodeLike) -> Weight | None:
        """Weight of the edge source -> target, or None if there is none."""
        targets = self._outgoing.get(as_node_id(source))
        if targets is None:
            return None
        return targets.get(as_node_id(target))

    def outgoing(self, node: NodeLike) -> dict[NodeId, Weight]:
        """Outgoing neighbors and edge weights for a node.

        Returns a copy; mutating it does not affect the graph.

        Raises:
            NodeDoesNotExist: If the node is not in the graph.
        """
        return dict(self._targets_of(as_node_id(node)))

    def positive_outgoing(self, node: NodeLike) -> dict[NodeId, Weight]:
        """Outgoing edges with strictly positive weight, in insertion order."""
        return {
            target: weight
            for target, weight in self._targets_of(as_node_id(node)).items()
            if weight > 0
        }

    def incoming(self, node: NodeLike) -> set[NodeId]:
        """Sources of edges pointing at a node."""
        node_id = as_node_id(node)
        if node_id not in self._incoming:
            raise NodeDoesNotExist(node_id)
        return set(self._incoming[node_id])

    def edges(self) -> list[tuple[NodeId, NodeId, Weight]]:
        """Point-in-time snapshot of all edges as (source, target, weight)."""
        return [
            (source, target, weight)
            for source, targets in self._outgoing.items()
            for target, weight in targets.items()
        ]

    def copy(self) -> "Graph":
        """Deep copy of nodes and edges. Listeners are not copied."""
        clone = Graph()
        for node, targets in self._outgoing.items():
            clone._outgoing[node] = dict(targets)
        for node, sources in self._incoming.items():
            clone._incoming[node] = set(sources)
        return clone

    @classmethod
    def from_edges(
        cls,
        edges: list[tuple[NodeLike, NodeLike, Weight]],
        nodes: list[NodeLike] | None = None,
    ) -> "Graph":
        """Build a graph from an edge list and optional isolated nodes."""
        graph = cls()
        for node in nodes or []:
            graph.add_node(node)
        for source, target, weight in edges:
            graph.add_edge(source, target, weight)
        return graph

    def _targets_of(self, node_id: NodeId) -> dict[NodeId, Weight]:
        targets = self._outgoing.get(node_id)
        if targets is None:
            raise NodeDoesNotExist(node_id)
        return targets

    def __len__(self) -> int:
        return len(self._outgoing)

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"
