"""Pytest configuration for meritrank tests."""

import random

import pytest

from meritrank import Graph, MeritRank, MeritRankConfig


class RecordingListener:
    """GraphListener that records every notification it receives."""

    def __init__(self):
        self.events: list[tuple] = []

    def edge_changed(self, source, target, old_weight, new_weight):
        self.events.append(("edge", source, target, old_weight, new_weight))

    def node_removed(self, node):
        self.events.append(("node_removed", node))

    def graph_cleared(self):
        self.events.append(("cleared",))


@pytest.fixture
def rng():
    """Seeded random source for reproducible sampling."""
    return random.Random(1234)


@pytest.fixture
def config():
    """Default configuration with a fixed seed."""
    return MeritRankConfig(seed=42)


@pytest.fixture
def chain_graph():
    """A -> B -> C with unit trust weights (A=1, B=2, C=3)."""
    return Graph.from_edges([(1, 2, 1.0), (2, 3, 1.0)])


@pytest.fixture
def chain_rank(chain_graph, config):
    """MeritRank over the A -> B -> C chain."""
    return MeritRank(chain_graph, config)


@pytest.fixture
def recording_listener():
    return RecordingListener()
