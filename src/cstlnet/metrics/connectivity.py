"""Pure connectivity metrics over exported constellation graphs.

Every function takes a networkx graph and returns a number; none of them
knows about propagation or the constellation object.
"""

from __future__ import annotations

from typing import Iterable, Optional

import networkx as nx


def count_components(G: nx.Graph) -> int:
    """Number of connected components (0 for a graph without nodes)."""
    if G.number_of_nodes() == 0:
        return 0
    return nx.number_connected_components(G)


def giant_component_size(G: nx.Graph) -> int:
    """Node count of the largest connected component."""
    if G.number_of_nodes() == 0:
        return 0
    return max(len(component) for component in nx.connected_components(G))


def giant_component_fraction(G: nx.Graph) -> float:
    """Share of nodes inside the largest component, in [0, 1]."""
    n = G.number_of_nodes()
    if n == 0:
        return 0.0
    return giant_component_size(G) / n


def connected_ground_stations(G: nx.Graph, ground_station_ids: Iterable[int]) -> int:
    """How many of the given ground stations currently have at least one link."""
    return sum(1 for gs in ground_station_ids if G.has_node(gs) and G.degree(gs) > 0)


def mean_edge_weight(
    G: nx.Graph,
    link_type: Optional[str] = None,
    weight: str = "distance_km",
) -> float:
    """
    Mean edge weight, optionally restricted to one link type ("isl" / "gsl").

    Falls back to the integer "weight" attribute for graphs that only carry
    the exported weight. Returns 0.0 when no edge matches.
    """
    values = [
        data.get(weight, data.get("weight", 0.0))
        for _, _, data in G.edges(data=True)
        if link_type is None or data.get("link_type") == link_type
    ]
    if not values:
        return 0.0
    return float(sum(values) / len(values))
