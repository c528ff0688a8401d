"""Tests for cstlnet.metrics.connectivity."""

from __future__ import annotations

import networkx as nx
import pytest

from cstlnet.metrics import (
    connected_ground_stations,
    count_components,
    giant_component_fraction,
    giant_component_size,
    mean_edge_weight,
)


@pytest.fixture
def split_graph() -> nx.Graph:
    """Ring of four satellites, one linked ground station, one isolated one."""
    G = nx.Graph()
    for a, b in [(0, 1), (1, 2), (2, 3), (3, 0)]:
        G.add_edge(a, b, distance_km=1000.0, weight=1000, link_type="isl")
    G.add_edge(4, 2, distance_km=600.0, weight=600, link_type="gsl")
    G.add_node(5)
    return G


class TestComponents:
    def test_empty_graph(self) -> None:
        G = nx.Graph()
        assert count_components(G) == 0
        assert giant_component_size(G) == 0
        assert giant_component_fraction(G) == 0.0

    def test_split(self, split_graph: nx.Graph) -> None:
        assert count_components(split_graph) == 2
        assert giant_component_size(split_graph) == 5
        assert giant_component_fraction(split_graph) == pytest.approx(5 / 6)

    def test_connected(self) -> None:
        G = nx.path_graph(4)
        assert count_components(G) == 1
        assert giant_component_fraction(G) == 1.0


class TestGroundStations:
    def test_connected_count(self, split_graph: nx.Graph) -> None:
        assert connected_ground_stations(split_graph, [4, 5]) == 1

    def test_unknown_ids_ignored(self, split_graph: nx.Graph) -> None:
        assert connected_ground_stations(split_graph, [99]) == 0


class TestMeanEdgeWeight:
    def test_by_type(self, split_graph: nx.Graph) -> None:
        assert mean_edge_weight(split_graph, link_type="isl") == pytest.approx(1000.0)
        assert mean_edge_weight(split_graph, link_type="gsl") == pytest.approx(600.0)
        assert mean_edge_weight(split_graph) == pytest.approx(4600.0 / 5)

    def test_no_matching_edges(self, split_graph: nx.Graph) -> None:
        assert mean_edge_weight(split_graph, link_type="laser") == 0.0

    def test_falls_back_to_weight(self) -> None:
        G = nx.Graph()
        G.add_edge(0, 1, weight=10)
        G.add_edge(1, 2, weight=20)
        assert mean_edge_weight(G) == pytest.approx(15.0)
