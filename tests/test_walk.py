"""Tests for weighted choice and the random walk sampler."""

import math
import random
from collections import Counter

import pytest

from meritrank import (
    Graph,
    InvalidNode,
    NodeDoesNotExist,
    NodeId,
    RandomChoiceError,
    RandomWalk,
    TerminationReason,
    WalkConfig,
    WalkSampler,
    weighted_choice,
)


class TestWeightedChoice:
    """Tests for weighted_choice on adversarial inputs."""

    @pytest.mark.parametrize(
        "candidates",
        [
            {},
            {"a": 0.0, "b": 0.0},
            {"a": -1.0, "b": -2.0},
            {"a": math.nan},
            {"a": 1.0, "b": math.nan},
            {"a": math.inf},
            {"a": 1.0, "b": 0.0},
            {"a": 1.0, "b": "heavy"},
            {"a": True},
            {"a": 1e308, "b": 1e308},
        ],
    )
    def test_degenerate_weights(self, candidates, rng):
        """Test that every unusable distribution raises."""
        with pytest.raises(RandomChoiceError):
            weighted_choice(candidates, rng)

    def test_singleton(self, rng):
        """Test a single positive candidate."""
        assert weighted_choice({"only": 0.3}, rng) == "only"

    def test_singleton_does_not_consume_randomness(self):
        """Test that a forced choice leaves the random source untouched."""
        rng = random.Random(5)
        state = rng.getstate()
        weighted_choice({"only": 2.0}, rng)
        assert rng.getstate() == state

    def test_proportional_to_weight(self, rng):
        """Test that picks follow the weight ratio."""
        picks = Counter(weighted_choice({"a": 1.0, "b": 3.0}, rng) for _ in range(20_000))
        share = picks["b"] / 20_000
        assert 0.72 < share < 0.78

    def test_integer_weights(self, rng):
        """Test that ints are accepted as weights."""
        assert weighted_choice({"a": 2, "b": 1}, rng) in {"a", "b"}

    def test_deterministic_with_seed(self):
        """Test that equal seeds give equal sequences."""
        candidates = {n: float(n) for n in range(1, 6)}
        rng_a, rng_b = random.Random(9), random.Random(9)
        seq_a = [weighted_choice(candidates, rng_a) for _ in range(50)]
        seq_b = [weighted_choice(candidates, rng_b) for _ in range(50)]
        assert seq_a == seq_b


class TestRandomWalk:
    """Tests for the RandomWalk value type."""

    def test_transitions(self):
        """Test hop extraction and lookups."""
        a, b, c = NodeId(1), NodeId(2), NodeId(3)
        walk = RandomWalk(nodes=(a, b, c, b), reason=TerminationReason.RESTART)

        assert walk.ego == a
        assert walk.last == b
        assert len(walk) == 4
        assert walk.transitions() == [(a, b), (b, c), (c, b)]
        assert walk.uses_edge(c, b)
        assert not walk.uses_edge(a, c)
        assert walk.visit_counts() == Counter({b: 2, a: 1, c: 1})

    def test_dead_end(self):
        """Test dead end detection depends on the reason."""
        a, b = NodeId(1), NodeId(2)
        dead = RandomWalk(nodes=(a, b), reason=TerminationReason.NO_VIABLE_EDGE)
        restarted = RandomWalk(nodes=(a, b), reason=TerminationReason.RESTART)

        assert dead.ends_at_dead_end(b)
        assert not dead.ends_at_dead_end(a)
        assert not restarted.ends_at_dead_end(b)

    def test_immutable(self):
        """Test that a terminated walk cannot be changed."""
        walk = RandomWalk(nodes=(NodeId(1),), reason=TerminationReason.MAX_LENGTH)
        with pytest.raises(AttributeError):
            walk.reason = TerminationReason.RESTART


class TestWalkSampler:
    """Tests for WalkSampler."""

    def test_missing_start(self, rng):
        """Test sampling from an unknown node."""
        sampler = WalkSampler(WalkConfig(), rng)
        with pytest.raises(NodeDoesNotExist):
            sampler.sample(Graph(), 1)

    def test_sentinel_start(self, rng):
        """Test sampling from the absent sentinel."""
        sampler = WalkSampler(WalkConfig(), rng)
        with pytest.raises(InvalidNode):
            sampler.sample(Graph.from_edges([(1, 2, 1.0)]), NodeId.NONE)

    def test_isolated_start(self, rng):
        """Test a start node without edges."""
        graph = Graph()
        graph.add_node(1)
        walk = WalkSampler(WalkConfig(), rng).sample(graph, 1)

        assert walk.nodes == (NodeId(1),)
        assert walk.reason is TerminationReason.NO_VIABLE_EDGE

    def test_negative_edges_not_traversed(self, rng):
        """Test that a lone distrust edge is not an error and not a hop."""
        graph = Graph.from_edges([(1, 2, -1.0), (1, 3, 0.0)])
        sampler = WalkSampler(WalkConfig(), rng)

        for _ in range(20):
            walk = sampler.sample(graph, 1)
            assert walk.nodes == (NodeId(1),)
            assert walk.reason is TerminationReason.NO_VIABLE_EDGE

    def test_max_length(self, rng):
        """Test the length ceiling on a cycle."""
        graph = Graph.from_edges([(1, 2, 1.0), (2, 1, 1.0)])
        config = WalkConfig(restart_probability=1e-12, max_walk_length=50)
        walk = WalkSampler(config, rng).sample(graph, 1)

        assert len(walk) == 50
        assert walk.reason is TerminationReason.MAX_LENGTH
        assert walk.nodes[:4] == (NodeId(1), NodeId(2), NodeId(1), NodeId(2))

    def test_max_length_one(self, rng):
        """Test that a ceiling of one never leaves the ego."""
        graph = Graph.from_edges([(1, 2, 1.0)])
        walk = WalkSampler(WalkConfig(max_walk_length=1), rng).sample(graph, 1)

        assert walk.nodes == (NodeId(1),)
        assert walk.reason is TerminationReason.MAX_LENGTH

    def test_certain_restart(self, rng):
        """Test that restart probability 1 stops after the first hop."""
        graph = Graph.from_edges([(1, 2, 1.0), (2, 3, 1.0)])
        walk = WalkSampler(WalkConfig(restart_probability=1.0), rng).sample(graph, 1)

        assert walk.nodes == (NodeId(1), NodeId(2))
        assert walk.reason is TerminationReason.RESTART

    def test_chain_reaches_dead_end(self, rng):
        """Test that walks only end at the sink by dead end."""
        graph = Graph.from_edges([(1, 2, 1.0), (2, 3, 1.0)])
        sampler = WalkSampler(WalkConfig(), rng)

        for _ in range(100):
            walk = sampler.sample(graph, 1)
            assert walk.nodes in {
                (NodeId(1), NodeId(2)),
                (NodeId(1), NodeId(2), NodeId(3)),
            }
            if walk.reason is TerminationReason.NO_VIABLE_EDGE:
                assert walk.last == NodeId(3)

    def test_infinite_weight(self, rng):
        """Test that an infinite trust weight is degenerate."""
        graph = Graph.from_edges([(1, 2, math.inf)])
        with pytest.raises(RandomChoiceError):
            WalkSampler(WalkConfig(), rng).sample(graph, 1)

    def test_sample_many(self, rng):
        """Test batch sampling."""
        graph = Graph.from_edges([(1, 2, 1.0)])
        walks = WalkSampler(WalkConfig(), rng).sample_many(graph, 1, 25)

        assert len(walks) == 25
        assert all(walk.ego == NodeId(1) for walk in walks)
