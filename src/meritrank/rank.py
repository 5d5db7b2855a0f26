"""MeritRank calculator.

MeritRank owns one Graph and one WalkStorage. Callers mutate the graph
through the calculator, top up the walk cache with ``calculate`` and read
personalized scores with ``get_ranks``.

Scoring:
    Each cached walk carries unit mass spread evenly over its positions.
    A node's positive score is the mass it collects, averaged over walks.
    Every visit to a node u also pushes the same per-position mass along
    u's distrust edges: target t is charged ``|w(u, t)| / S_u`` of it,
    where S_u is the total absolute out-weight of u. The final score is
    positive minus distrust mass. The ego itself is never reported, so
    scores for one ego sum to at most 1.0.

Example:
    graph = Graph.from_edges([(1, 2, 1.0), (2, 3, 1.0), (1, 4, -1.0)])
    merit_rank = MeritRank(graph, MeritRankConfig(seed=7))

    merit_rank.calculate(1, 1000)
    ranks = merit_rank.get_ranks(1, limit=10)
"""

from __future__ import annotations

import logging
import math
import random
from collections import defaultdict

from meritrank.config import MeritRankConfig
from meritrank.exceptions import NodeDoesNotExist, NoPathExists
from meritrank.graph import Graph
from meritrank.node import NodeId, NodeLike, Weight, as_node_id
from meritrank.storage import WalkStorage
from meritrank.walk import RandomWalk, WalkSampler

logger = logging.getLogger(__name__)


class MeritRank:
    """Personalized trust ranking over a signed weighted graph."""

    def __init__(
        self,
        graph: Graph | None = None,
        config: MeritRankConfig | None = None,
        rng: random.Random | None = None,
    ):
        """Create a calculator over a private copy of ``graph``.

        Args:
            graph: Graph snapshot; copied, so later changes to it are not seen
            config: Sampling and cache settings
            rng: Random source; defaults to one seeded from ``config.seed``
        """
        self.config = config or MeritRankConfig()
        self.config.validate()

        self._graph = graph.copy() if graph is not None else Graph()
        self._storage = WalkStorage(max_egos=self.config.cache.max_egos)
        self._graph.add_listener(self._storage)
        self._sampler = WalkSampler(
            self.config.walk,
            rng or random.Random(self.config.seed),
        )

    # -------------------------------------------------------------------------
    # Graph mutation
    # -------------------------------------------------------------------------

    def add_node(self, node: NodeLike) -> NodeId:
        return self._graph.add_node(node)

    def add_edge(self, source: NodeLike, target: NodeLike, weight: Weight) -> None:
        """Insert or reweight an edge; cached walks that used it are dropped."""
        self._graph.add_edge(source, target, weight)

    def remove_edge(self, source: NodeLike, target: NodeLike) -> None:
        """Remove an edge if present; cached walks that used it are dropped."""
        self._graph.remove_edge(source, target)

    def remove_node(self, node: NodeLike) -> None:
        self._graph.remove_node(node)

    def clear(self) -> None:
        """Drop all nodes, edges and cached walks."""
        self._graph.clear()

    # -------------------------------------------------------------------------
    # Graph queries
    # -------------------------------------------------------------------------

    def contains_node(self, node: NodeLike) -> bool:
        return self._graph.contains_node(node)

    def node_count(self) -> int:
        return self._graph.node_count()

    def edge_count(self) -> int:
        return self._graph.edge_count()

    def edges(self) -> list[tuple[NodeId, NodeId, Weight]]:
        return self._graph.edges()

    def get_edge(self, source: NodeLike, target: NodeLike) -> Weight | None:
        return self._graph.get_edge(source, target)

    def walk_count(self, ego: NodeLike) -> int:
        """Number of valid cached walks seeded at ego."""
        return self._storage.walk_count(ego)

    def drop_ego(self, ego: NodeLike) -> int:
        """Forget every cached walk seeded at ego.

        Returns:
            Number of walks removed.
        """
        return self._storage.drop_ego(self._require_node(ego))

    # -------------------------------------------------------------------------
    # Ranking
    # -------------------------------------------------------------------------

    def calculate(self, ego: NodeLike, iterations: int | None = None) -> None:
        """Make sure at least ``iterations`` valid walks are cached for ego.

        Calling again with an equal or smaller count and no graph change
        in between samples nothing.

        Args:
            ego: Node to rank from
            iterations: Walk count; defaults to ``config.default_iterations``

        Raises:
            NodeDoesNotExist: If ego is not in the graph.
            RandomChoiceError: If sampling meets degenerate weights. The
                cache is left unchanged.
        """
        ego_id = self._require_node(ego)
        if iterations is None:
            iterations = self.config.default_iterations
        if not _is_count(iterations):
            raise ValueError(f"iterations must be a non-negative int, got {iterations!r}")

        self._storage.get_or_sample(ego_id, iterations, self._sampler, self._graph)

    def get_ranks(self, ego: NodeLike, limit: int | None = None) -> dict[NodeId, float]:
        """Aggregate the cached walks of ego into scores.

        Only walks that hopped along a changed edge are invalidated. A walk
        that merely passed through the edge's source stays cached, even
        though that node's transition weights changed. Walks from ego always
        pass through ego, so a new positive edge out of ego is not seen by
        its cached walks: with walks cached over 1 -> 2, adding 1 -> 3 leaves
        3 unranked until those walks are gone. Call ``drop_ego`` after such
        a change to resample from scratch.

        Args:
            ego: Node to rank from
            limit: Keep only the first ``limit`` entries

        Returns:
            Node to score, ordered by descending score, then ascending id.

        Raises:
            NodeDoesNotExist: If ego is not in the graph.
            NoPathExists: If no cached walk reaches beyond ego.
        """
        ego_id = self._require_node(ego)
        if limit is not None and not _is_count(limit):
            raise ValueError(f"limit must be a non-negative int, got {limit!r}")

        walks = self._storage.get_walks(ego_id)
        scores = self._aggregate(ego_id, walks)
        if not scores:
            raise NoPathExists(ego_id)
        logger.debug(f"Ranked {len(scores)} nodes for ego {ego_id} from {len(walks)} walks")

        ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0].value))
        if limit is not None:
            ordered = ordered[:limit]
        return dict(ordered)

    def get_node_score(self, ego: NodeLike, target: NodeLike) -> float:
        """Score of a single node from ego's perspective.

        Returns 0.0 for a node that exists but is not ranked.

        Raises:
            NodeDoesNotExist: If ego or target is not in the graph.
            NoPathExists: If no cached walk reaches beyond ego.
        """
        target_id = self._require_node(target)
        return self.get_ranks(ego).get(target_id, 0.0)

    def _aggregate(self, ego: NodeId, walks: list[RandomWalk]) -> dict[NodeId, float]:
        if not walks:
            return {}

        positive: dict[NodeId, float] = defaultdict(float)
        distrust: dict[NodeId, float] = defaultdict(float)
        distrust_shares: dict[NodeId, dict[NodeId, float]] = {}

        for walk in walks:
            mass = 1.0 / len(walk)
            for node, visits in walk.visit_counts().items():
                positive[node] += mass * visits
                shares = distrust_shares.get(node)
                if shares is None:
                    shares = self._distrust_shares(node)
                    distrust_shares[node] = shares
                for target, share in shares.items():
                    distrust[target] += mass * visits * share

        count = len(walks)
        scores: dict[NodeId, float] = {}
        for node in positive.keys() | distrust.keys():
            if node == ego:
                continue
            scores[node] = (positive.get(node, 0.0) - distrust.get(node, 0.0)) / count
        return scores

    def _distrust_shares(self, node: NodeId) -> dict[NodeId, float]:
        """Fraction of node's absolute out-weight on each distrust edge."""
        if not self._graph.contains_node(node):
            return {}
        out = {
            target: weight
            for target, weight in self._graph.outgoing(node).items()
            if math.isfinite(weight)
        }
        total = sum(abs(weight) for weight in out.values())
        if total <= 0 or not math.isfinite(total):
            return {}
        return {target: abs(weight) / total for target, weight in out.items() if weight < 0}

    def _require_node(self, node: NodeLike) -> NodeId:
        node_id = as_node_id(node)
        if not self._graph.contains_node(node_id):
            raise NodeDoesNotExist(node_id)
        return node_id

    def __repr__(self) -> str:
        return f"MeritRank(graph={self._graph!r}, cached_walks={len(self._storage)})"


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
