"""Standard exception hierarchy for MeritRank.

All meritrank exceptions inherit from MeritRankError, making it easy
to catch all library-specific errors.

Exception Hierarchy:
    MeritRankError (base)
    ├── ConfigurationError - Invalid configuration
    ├── NodeDoesNotExist - Referenced node is not in the graph
    ├── SelfReferenceNotAllowed - Edge source equals edge target
    ├── RandomChoiceError - Weighted selection over degenerate weights
    ├── NoPathExists - Rank query found no usable walks for the ego
    ├── NodeIdParseError - Malformed external node identifier
    └── InvalidNode - Sentinel/out-of-domain id where a concrete id is required
"""

from __future__ import annotations

from typing import Any


class MeritRankError(Exception):
    """Base exception for all meritrank errors.

    Catch this to handle any library-specific exception:
        try:
            ranks = merit_rank.get_ranks(ego)
        except MeritRankError as e:
            logger.error(f"MeritRank error: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MeritRankError):
    """Invalid configuration.

    Raised when MeritRankConfig has out-of-range values or a config
    file cannot be read or parsed.
    """

    pass


# =============================================================================
# Graph Errors
# =============================================================================


class NodeDoesNotExist(MeritRankError):
    """An operation referenced a node id absent from the graph."""

    def __init__(self, node: Any, message: str | None = None):
        self.node = node
        super().__init__(message or f"Node does not exist: {node}")


class SelfReferenceNotAllowed(MeritRankError):
    """An edge was requested whose source and target are the same node."""

    def __init__(self, node: Any):
        self.node = node
        super().__init__(f"Self-referencing edge not allowed: {node} -> {node}")


class InvalidNode(MeritRankError):
    """A node id that cannot stand for a concrete node.

    Raised for the absent sentinel, for integers outside the id domain,
    and for values that are not node ids at all.
    """

    pass


class NodeIdParseError(MeritRankError):
    """An external identifier could not be parsed into a node id."""

    def __init__(self, text: Any, cause: Exception | None = None):
        self.text = text
        super().__init__(f"Cannot parse node id from {text!r}", cause=cause)


# =============================================================================
# Ranking Errors
# =============================================================================


class RandomChoiceError(MeritRankError):
    """Weighted random selection could not proceed.

    Raised when:
    - The candidate set is empty
    - A weight is zero, negative, NaN or infinite
    - The weight total overflows
    """

    pass


class NoPathExists(MeritRankError):
    """The ego has no cached walk that reaches any other node."""

    def __init__(self, ego: Any):
        self.ego = ego
        super().__init__(f"No path exists from ego {ego}")
