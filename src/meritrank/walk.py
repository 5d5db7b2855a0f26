"""Random walk sampling.

A walk starts at the ego and repeatedly hops along a strictly positive
outgoing edge, chosen with probability proportional to its weight. It
stops when the length ceiling is reached, when the current node has no
positive edge left, or when the per-hop restart coin fires.

Walk lifecycle:
    Start → Stepping → Terminated{MAX_LENGTH | NO_VIABLE_EDGE | RESTART}
"""

from __future__ import annotations

import logging
import math
import random
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Mapping, TypeVar

from meritrank.config import WalkConfig
from meritrank.exceptions import NodeDoesNotExist, RandomChoiceError
from meritrank.graph import Graph
from meritrank.node import NodeId, NodeLike, as_node_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


class TerminationReason(str, Enum):
    """Why a walk stopped."""

    MAX_LENGTH = "max_length"  # Length ceiling reached
    NO_VIABLE_EDGE = "no_viable_edge"  # Last node has no positive out-edge
    RESTART = "restart"  # Restart coin fired after a hop


@dataclass(frozen=True)
class RandomWalk:
    """One terminated walk seeded at ``nodes[0]``."""

    nodes: tuple[NodeId, ...]
    reason: TerminationReason

    @property
    def ego(self) -> NodeId:
        return self.nodes[0]

    @property
    def last(self) -> NodeId:
        return self.nodes[-1]

    def __len__(self) -> int:
        return len(self.nodes)

    def transitions(self) -> list[tuple[NodeId, NodeId]]:
        """Consecutive (source, target) hops taken by the walk."""
        return list(zip(self.nodes, self.nodes[1:]))

    def uses_edge(self, source: NodeId, target: NodeId) -> bool:
        """True if the walk hopped from source directly to target."""
        return (source, target) in self.transitions()

    def ends_at_dead_end(self, node: NodeId) -> bool:
        """True if the walk stopped at node for lack of a positive edge."""
        return self.reason is TerminationReason.NO_VIABLE_EDGE and self.last == node

    def visit_counts(self) -> Counter[NodeId]:
        """How many positions of the walk each node occupies."""
        return Counter(self.nodes)


def weighted_choice(candidates: Mapping[T, float], rng: random.Random) -> T:
    """Pick one key of ``candidates`` with probability proportional to its weight.

    Total over its inputs: every degenerate distribution is reported as
    RandomChoiceError instead of leaking floating point edge cases.

    Args:
        candidates: Mapping of item to unnormalized positive weight
        rng: Random source

    Returns:
        The selected item.

    Raises:
        RandomChoiceError: If the mapping is empty, any weight is
            non-finite or not strictly positive, or the total overflows.
    """
    if not candidates:
        raise RandomChoiceError("Cannot choose from an empty candidate set")

    items = list(candidates)
    weights = [candidates[item] for item in items]
    for item, weight in zip(items, weights):
        if not isinstance(weight, (int, float)) or isinstance(weight, bool):
            raise RandomChoiceError(f"Weight for {item} is not a number: {weight!r}")
        if not math.isfinite(weight) or weight <= 0:
            raise RandomChoiceError(f"Weight for {item} is not finite and positive: {weight!r}")

    total = sum(weights)
    if not math.isfinite(total) or total <= 0:
        raise RandomChoiceError(f"Weight total is not usable: {total!r}")

    if len(items) == 1:
        return items[0]
    return rng.choices(items, weights=weights, k=1)[0]


class WalkSampler:
    """Generates RandomWalk objects over a Graph.

    Example:
        sampler = WalkSampler(WalkConfig(), random.Random(7))
        walk = sampler.sample(graph, NodeId(1))
    """

    def __init__(self, config: WalkConfig | None = None, rng: random.Random | None = None):
        self.config = config or WalkConfig()
        self.rng = rng or random.Random()

    def sample(self, graph: Graph, start: NodeLike) -> RandomWalk:
        """Sample a single walk starting at ``start``.

        Raises:
            NodeDoesNotExist: If start is not in the graph.
            InvalidNode: If start is the absent sentinel.
            RandomChoiceError: If a hop faces degenerate positive weights.
        """
        current = as_node_id(start)
        if not graph.contains_node(current):
            raise NodeDoesNotExist(current)

        nodes = [current]
        while True:
            if len(nodes) >= self.config.max_walk_length:
                reason = TerminationReason.MAX_LENGTH
                break

            candidates = graph.positive_outgoing(current)
            if not candidates:
                reason = TerminationReason.NO_VIABLE_EDGE
                break

            current = weighted_choice(candidates, self.rng)
            nodes.append(current)

            if self.rng.random() < self.config.restart_probability:
                reason = TerminationReason.RESTART
                break

        return RandomWalk(nodes=tuple(nodes), reason=reason)

    def sample_many(self, graph: Graph, start: NodeLike, count: int) -> list[RandomWalk]:
        """Sample ``count`` walks. Either all succeed or none is returned."""
        walks = [self.sample(graph, start) for _ in range(count)]
        logger.debug(f"Sampled {len(walks)} walks from {start}")
        return walks
