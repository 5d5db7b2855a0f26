"""Node identifiers and edge weights.

A NodeId is either a concrete integer in ``[0, MAX_NODE_ID]`` or the
explicit absent sentinel ``NodeId.NONE``. The sentinel never compares
equal to a concrete id; use ``is_present`` to test for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from meritrank.exceptions import InvalidNode, NodeIdParseError

MAX_NODE_ID = 2**64 - 1

Weight = float


@dataclass(frozen=True)
class NodeId:
    """Identifier of a node in the trust graph.

    Example:
        alice = NodeId(1)
        assert alice.is_present
        assert not NodeId.NONE.is_present
        assert NodeId.parse("17") == NodeId(17)
    """

    value: int | None = None

    NONE: ClassVar["NodeId"]

    def __post_init__(self) -> None:
        if self.value is None:
            return
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidNode(f"Node id must be an integer, got {self.value!r}")
        if not 0 <= self.value <= MAX_NODE_ID:
            raise InvalidNode(f"Node id {self.value} outside [0, {MAX_NODE_ID}]")

    @property
    def is_present(self) -> bool:
        """True for a concrete id, False for the absent sentinel."""
        return self.value is not None

    def require(self) -> int:
        """Return the underlying integer, rejecting the sentinel."""
        if self.value is None:
            raise InvalidNode("Absent node id used where a concrete node is required")
        return self.value

    @classmethod
    def parse(cls, text: str) -> "NodeId":
        """Parse an external decimal identifier.

        Args:
            text: Decimal string such as ``"42"``. Surrounding whitespace
                is ignored; ``"None"`` parses to the sentinel.

        Returns:
            The parsed NodeId.

        Raises:
            NodeIdParseError: If the text is not a decimal id in range.
        """
        if not isinstance(text, str):
            raise NodeIdParseError(text)
        stripped = text.strip()
        if stripped == "None":
            return cls.NONE
        if not stripped.isdigit() or not stripped.isascii():
            raise NodeIdParseError(text)
        try:
            return cls(int(stripped))
        except InvalidNode as e:
            raise NodeIdParseError(text, cause=e) from e

    def __str__(self) -> str:
        return "None" if self.value is None else str(self.value)

    def __repr__(self) -> str:
        return "NodeId.NONE" if self.value is None else f"NodeId({self.value})"


NodeId.NONE = NodeId(None)

NodeLike = Union[NodeId, int]


def as_node_id(node: NodeLike) -> NodeId:
    """Coerce a NodeId or plain integer into a concrete NodeId.

    Raises:
        InvalidNode: For the sentinel, ``None``, or non-integer values.
    """
    if isinstance(node, NodeId):
        node.require()
        return node
    if node is None:
        raise InvalidNode("Absent node id used where a concrete node is required")
    return NodeId(node)
