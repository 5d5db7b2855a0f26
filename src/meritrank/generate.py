"""Random graph generation for seeding and benchmarking."""

from __future__ import annotations

import logging
import random
import string
import time

from meritrank.graph import Graph
from meritrank.names import NodeRegistry
from meritrank.node import NodeId

logger = logging.getLogger(__name__)


def generate_node_names(count: int, rng: random.Random, length: int = 8) -> list[str]:
    """Generate ``count`` unique random names of ASCII letters."""
    if count < 0 or length < 1:
        raise ValueError(f"Invalid name request: count={count}, length={length}")
    names: list[str] = []
    seen: set[str] = set()
    while len(names) < count:
        name = "".join(rng.choice(string.ascii_letters) for _ in range(length))
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


def generate_graph(
    num_nodes: int,
    edge_probability: float,
    rng: random.Random | None = None,
    negative_ratio: float = 0.0,
    registry: NodeRegistry | None = None,
) -> Graph:
    """Generate a random directed graph.

    Each ordered pair of distinct nodes gets an edge with probability
    ``edge_probability``. Weights are uniform in (0, 1] and negated with
    probability ``negative_ratio``.

    Args:
        num_nodes: Number of nodes
        edge_probability: Chance of an edge per ordered pair
        rng: Random source
        negative_ratio: Chance that an edge expresses distrust
        registry: If given, nodes get random names registered here;
            otherwise ids run from 1 to num_nodes

    Returns:
        The generated graph.
    """
    if num_nodes < 0:
        raise ValueError(f"num_nodes must be non-negative, got {num_nodes}")
    if not 0.0 <= edge_probability <= 1.0:
        raise ValueError(f"edge_probability must be in [0, 1], got {edge_probability}")
    if not 0.0 <= negative_ratio <= 1.0:
        raise ValueError(f"negative_ratio must be in [0, 1], got {negative_ratio}")

    rng = rng or random.Random()
    start = time.perf_counter()

    if registry is not None:
        nodes = [registry.get_or_create(name) for name in generate_node_names(num_nodes, rng)]
    else:
        nodes = [NodeId(i) for i in range(1, num_nodes + 1)]

    graph = Graph()
    for node in nodes:
        graph.add_node(node)

    for source in nodes:
        for target in nodes:
            if source == target or rng.random() >= edge_probability:
                continue
            weight = 1.0 - rng.random()
            if rng.random() < negative_ratio:
                weight = -weight
            graph.add_edge(source, target, weight)

    elapsed = time.perf_counter() - start
    logger.debug(
        f"Generated graph with {graph.node_count()} nodes and "
        f"{graph.edge_count()} edges in {elapsed:.3f}s"
    )
    return graph
