"""Walk cache with a pass-through index.

WalkStorage keeps every valid walk grouped by the ego it was seeded at,
and a reverse index from each node to the walks that visit it. The index
bounds the cost of invalidation: a change to an edge leaving node N only
inspects walks that pass through N.

The forward store and the index are always updated together, so no walk
is ever stored without being indexed and no index entry points at a walk
that is gone.
"""

from __future__ import annotations

import itertools
import logging
from collections import OrderedDict

from meritrank.graph import Graph
from meritrank.node import NodeId, NodeLike, Weight, as_node_id
from meritrank.walk import RandomWalk, WalkSampler

logger = logging.getLogger(__name__)


class WalkStorage:
    """Cache of sampled walks, per ego, with targeted invalidation.

    WalkStorage implements the GraphListener protocol; register it on a
    Graph to have walks invalidated as edges change.

    Example:
        storage = WalkStorage()
        graph.add_listener(storage)

        walks = storage.get_or_sample(ego, 1000, sampler, graph)
        graph.remove_edge(ego, friend)  # walks using ego -> friend are dropped
    """

    def __init__(self, max_egos: int | None = None):
        """Initialize an empty cache.

        Args:
            max_egos: Keep walks for at most this many egos, evicting the
                least recently used one. None means unbounded.

        Raises:
            ValueError: If max_egos is neither None nor a positive int.
        """
        if max_egos is not None and (
            not isinstance(max_egos, int) or isinstance(max_egos, bool) or max_egos < 1
        ):
            raise ValueError(f"max_egos must be None or a positive int, got {max_egos!r}")
        self.max_egos = max_egos

        self._walks: dict[int, RandomWalk] = {}  # walk_id -> walk
        self._by_ego: OrderedDict[NodeId, dict[int, None]] = OrderedDict()  # LRU order
        self._passing: dict[NodeId, set[int]] = {}  # node -> walk_ids visiting it
        self._ids = itertools.count()

    # -------------------------------------------------------------------------
    # Forward store
    # -------------------------------------------------------------------------

    def add_walk(self, ego: NodeLike, walk: RandomWalk) -> int:
        """Store a walk and index every node it visits.

        Returns:
            The walk's storage id.
        """
        ego_id = as_node_id(ego)
        if walk.ego != ego_id:
            raise ValueError(f"Walk starts at {walk.ego}, not at ego {ego_id}")

        walk_id = next(self._ids)
        self._touch(ego_id)
        self._by_ego[ego_id][walk_id] = None
        self._walks[walk_id] = walk
        for node in set(walk.nodes):
            self._passing.setdefault(node, set()).add(walk_id)
        return walk_id

    def get_walks(self, ego: NodeLike) -> list[RandomWalk]:
        """Valid walks for an ego, oldest first."""
        bucket = self._by_ego.get(as_node_id(ego))
        if not bucket:
            return []
        return [self._walks[walk_id] for walk_id in bucket]

    def walk_count(self, ego: NodeLike) -> int:
        bucket = self._by_ego.get(as_node_id(ego))
        return len(bucket) if bucket else 0

    def egos(self) -> list[NodeId]:
        """Egos with a cache bucket, least recently used first."""
        return list(self._by_ego)

    def walks_through(self, node: NodeLike) -> list[RandomWalk]:
        """Every stored walk that visits ``node``."""
        walk_ids = self._passing.get(as_node_id(node), set())
        return [self._walks[walk_id] for walk_id in sorted(walk_ids)]

    def get_or_sample(
        self,
        ego: NodeLike,
        iterations: int,
        sampler: WalkSampler,
        graph: Graph,
    ) -> list[RandomWalk]:
        """Return the valid walks for ego, sampling any deficit first.

        All missing walks are sampled before any of them is stored, so a
        sampling failure leaves the cache exactly as it was.

        Args:
            ego: Node the walks start at
            iterations: Minimum number of walks wanted
            sampler: Walk generator
            graph: Graph to walk on

        Returns:
            At least ``iterations`` walks seeded at ego.
        """
        ego_id = as_node_id(ego)
        deficit = iterations - self.walk_count(ego_id)
        if deficit > 0:
            new_walks = sampler.sample_many(graph, ego_id, deficit)
            for walk in new_walks:
                self.add_walk(ego_id, walk)
            logger.debug(f"Topped up {deficit} walks for ego {ego_id}")
        else:
            logger.debug(f"Walk cache hit for ego {ego_id} ({iterations} requested)")
        self._touch(ego_id)
        return self.get_walks(ego_id)

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate_edge(self, source: NodeLike, target: NodeLike) -> int:
        """Drop every walk that hopped directly from source to target.

        Walks that merely visit either endpoint stay valid.

        Returns:
            Number of walks removed.
        """
        src = as_node_id(source)
        dst = as_node_id(target)
        candidates = self._passing.get(src, set()) & self._passing.get(dst, set())
        doomed = [
            walk_id for walk_id in candidates if self._walks[walk_id].uses_edge(src, dst)
        ]
        for walk_id in doomed:
            self._remove_walk(walk_id)
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} walks using edge {src} -> {dst}")
        return len(doomed)

    def invalidate_dead_ends(self, node: NodeLike) -> int:
        """Drop walks that stopped at node because it had no positive edge.

        Returns:
            Number of walks removed.
        """
        node_id = as_node_id(node)
        doomed = [
            walk_id
            for walk_id in self._passing.get(node_id, set())
            if self._walks[walk_id].ends_at_dead_end(node_id)
        ]
        for walk_id in doomed:
            self._remove_walk(walk_id)
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} walks ending at dead end {node_id}")
        return len(doomed)

    def invalidate_node(self, node: NodeLike) -> int:
        """Drop every walk visiting node, and node's own ego bucket.

        Returns:
            Number of walks removed.
        """
        node_id = as_node_id(node)
        doomed = list(self._passing.get(node_id, set()))
        for walk_id in doomed:
            self._remove_walk(walk_id)
        self._by_ego.pop(node_id, None)
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} walks visiting removed node {node_id}")
        return len(doomed)

    def drop_ego(self, ego: NodeLike) -> int:
        """Forget all walks seeded at ego.

        Returns:
            Number of walks removed.
        """
        ego_id = as_node_id(ego)
        bucket = self._by_ego.pop(ego_id, None)
        if not bucket:
            return 0
        for walk_id in list(bucket):
            self._drop_from_index(walk_id)
        return len(bucket)

    def clear(self) -> None:
        """Drop every walk and index entry."""
        self._walks.clear()
        self._by_ego.clear()
        self._passing.clear()

    # -------------------------------------------------------------------------
    # GraphListener
    # -------------------------------------------------------------------------

    def edge_changed(
        self,
        source: NodeId,
        target: NodeId,
        old_weight: Weight | None,
        new_weight: Weight | None,
    ) -> None:
        self.invalidate_edge(source, target)
        if new_weight is not None and new_weight > 0:
            # A dead end at source is no longer a dead end
            self.invalidate_dead_ends(source)

    def node_removed(self, node: NodeId) -> None:
        self.invalidate_node(node)

    def graph_cleared(self) -> None:
        self.clear()

    # -------------------------------------------------------------------------
    # Consistency
    # -------------------------------------------------------------------------

    def is_consistent(self) -> bool:
        """Check the pass-through index against the forward store."""
        expected: dict[NodeId, set[int]] = {}
        for walk_id, walk in self._walks.items():
            for node in walk.nodes:
                expected.setdefault(node, set()).add(walk_id)
        if expected != self._passing:
            return False

        bucketed: set[int] = set()
        for ego, bucket in self._by_ego.items():
            for walk_id in bucket:
                walk = self._walks.get(walk_id)
                if walk is None or walk.ego != ego or walk_id in bucketed:
                    return False
                bucketed.add(walk_id)
        return bucketed == set(self._walks)

    def __len__(self) -> int:
        return len(self._walks)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _remove_walk(self, walk_id: int) -> None:
        walk = self._drop_from_index(walk_id)
        bucket = self._by_ego.get(walk.ego)
        if bucket is not None:
            bucket.pop(walk_id, None)

    def _drop_from_index(self, walk_id: int) -> RandomWalk:
        walk = self._walks.pop(walk_id)
        for node in set(walk.nodes):
            walk_ids = self._passing.get(node)
            if walk_ids is None:
                continue
            walk_ids.discard(walk_id)
            if not walk_ids:
                del self._passing[node]
        return walk

    def _touch(self, ego: NodeId) -> None:
        if ego in self._by_ego:
            self._by_ego.move_to_end(ego)
        else:
            self._by_ego[ego] = {}
        if self.max_egos is None:
            return
        while len(self._by_ego) > self.max_egos:
            evicted = next(iter(self._by_ego))
            removed = self.drop_ego(evicted)
            logger.info(f"Evicted {removed} cached walks for ego {evicted}")
