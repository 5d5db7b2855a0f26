"""Human-readable names for graph nodes.

NodeRegistry is the caller-facing id layer: it hands out sequential
NodeIds for names and resolves external references back to ids.
"""

from __future__ import annotations

from meritrank.exceptions import NodeDoesNotExist
from meritrank.node import NodeId, NodeLike, as_node_id


class NodeRegistry:
    """Bidirectional mapping between names and NodeIds.

    Ids are assigned in creation order, starting at 1.

    Example:
        registry = NodeRegistry()
        alice = registry.get_or_create("alice")  # NodeId(1)
        registry.name_of(alice)                  # "alice"
    """

    def __init__(self) -> None:
        self._ids: dict[str, NodeId] = {}
        self._names: dict[NodeId, str] = {}

    def get_or_create(self, name: str) -> NodeId:
        """Return the id for name, assigning the next free one if new."""
        node_id = self._ids.get(name)
        if node_id is None:
            node_id = NodeId(len(self._ids) + 1)
            self._ids[name] = node_id
            self._names[node_id] = name
        return node_id

    def node_id(self, name: str) -> NodeId:
        """Id for a registered name.

        Raises:
            NodeDoesNotExist: If the name was never registered.
        """
        node_id = self._ids.get(name)
        if node_id is None:
            raise NodeDoesNotExist(name, f"Node name not found: {name}")
        return node_id

    def name_of(self, node: NodeLike) -> str:
        """Name registered for an id.

        Raises:
            NodeDoesNotExist: If no name maps to the id.
        """
        node_id = as_node_id(node)
        name = self._names.get(node_id)
        if name is None:
            raise NodeDoesNotExist(node_id)
        return name

    def resolve(self, ref: str) -> NodeId:
        """Resolve a registered name, or else parse ref as a decimal id.

        Raises:
            NodeIdParseError: If ref is neither a known name nor an id.
        """
        node_id = self._ids.get(ref)
        if node_id is not None:
            return node_id
        return NodeId.parse(ref)

    def names(self) -> list[str]:
        return list(self._ids)

    def clear(self) -> None:
        self._ids.clear()
        self._names.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)
