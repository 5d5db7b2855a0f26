"""MeritRank - personalized trust ranking over signed weighted graphs.

MeritRank estimates, by Monte-Carlo random walks, how much an ego node
should trust every other node it can reach. It supports:
- Negative ("distrust") edges that penalize their targets
- Incremental updates: only cached walks that used a changed edge are resampled
- Reproducible sampling through a seeded random source

Example:
    from meritrank import Graph, MeritRank, MeritRankConfig

    graph = Graph.from_edges([(1, 2, 1.0), (2, 3, 1.0)])
    merit_rank = MeritRank(graph, MeritRankConfig(seed=42))

    merit_rank.calculate(1, 1000)
    ranks = merit_rank.get_ranks(1)
"""

__version__ = "0.1.0"

from meritrank.config import CacheConfig, MeritRankConfig, WalkConfig, load_config
from meritrank.exceptions import (
    ConfigurationError,
    InvalidNode,
    MeritRankError,
    NodeDoesNotExist,
    NodeIdParseError,
    NoPathExists,
    RandomChoiceError,
    SelfReferenceNotAllowed,
)
from meritrank.generate import generate_graph, generate_node_names
from meritrank.graph import Graph, GraphListener
from meritrank.names import NodeRegistry
from meritrank.node import MAX_NODE_ID, NodeId, Weight, as_node_id
from meritrank.rank import MeritRank
from meritrank.storage import WalkStorage
from meritrank.walk import RandomWalk, TerminationReason, WalkSampler, weighted_choice

__all__ = [
    "__version__",
    # Config
    "MeritRankConfig",
    "WalkConfig",
    "CacheConfig",
    "load_config",
    # Errors
    "MeritRankError",
    "ConfigurationError",
    "NodeDoesNotExist",
    "SelfReferenceNotAllowed",
    "RandomChoiceError",
    "NoPathExists",
    "NodeIdParseError",
    "InvalidNode",
    # Nodes and graph
    "NodeId",
    "Weight",
    "MAX_NODE_ID",
    "as_node_id",
    "Graph",
    "GraphListener",
    "NodeRegistry",
    # Walks
    "RandomWalk",
    "TerminationReason",
    "WalkSampler",
    "weighted_choice",
    "WalkStorage",
    # Ranking
    "MeritRank",
    # Generation
    "generate_graph",
    "generate_node_names",
]
