"""
Read-only projections of a constellation for downstream graph tooling.

The node-link shape matches what networkx.node_link_graph() reads back:

    {
        "directed": false,
        "multigraph": false,
        "graph": {},
        "nodes": [{"id": 0}, {"id": 1}, ...],
        "links": [{"weight": 1234, "source": 0, "target": 1}, ...]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Tuple, Union

import networkx as nx

from cstlnet.network.node import NodeId

if TYPE_CHECKING:
    from cstlnet.network.constellation import Constellation

Edge = Tuple[NodeId, NodeId, int]


@dataclass(frozen=True)
class GraphSnapshot:
    """Nodes in id order and (source, target, weight_km) edges in mesh order."""

    nodes: Tuple[NodeId, ...]
    edges: Tuple[Edge, ...]

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return len(self.edges)


def to_networkx(snapshot: GraphSnapshot) -> nx.Graph:
    """Build an undirected networkx graph with integer km edge weights."""
    G = nx.Graph()
    for node in snapshot.nodes:
        G.add_node(node)
    for source, target, weight in snapshot.edges:
        G.add_edge(source, target, weight=weight)
    return G


def to_node_link(snapshot: GraphSnapshot) -> dict:
    return {
        "directed": False,
        "multigraph": False,
        "graph": {},
        "nodes": [{"id": int(node)} for node in snapshot.nodes],
        "links": [
            {"weight": int(weight), "source": int(source), "target": int(target)}
            for source, target, weight in snapshot.edges
        ],
    }


def write_node_link(snapshot: GraphSnapshot, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(to_node_link(snapshot), f, indent=2)
    return path


def constellation_to_networkx(constellation: "Constellation") -> nx.Graph:
    """
    Annotated networkx graph of the current mesh.

    Nodes carry type ("S"/"G") plus plane placement or the station name;
    edges carry weight (rounded km), distance_km and link_type.
    """
    G = nx.Graph(epoch=constellation.epoch.isoformat())
    for sat in constellation.satellites:
        G.add_node(
            sat.id,
            type=sat.node_type.value,
            plane=sat.plane,
            number_in_plane=sat.number_in_plane,
        )
    for gs in constellation.ground_stations:
        G.add_node(gs.id, type=gs.node_type.value, name=gs.name)
    for link in constellation.links:
        G.add_edge(
            link.first,
            link.second,
            weight=link.weight,
            distance_km=link.distance_km,
            link_type=link.link_type.value,
        )
    return G


def positions_ecef(
    constellation: "Constellation",
) -> Dict[int, Tuple[str, Tuple[float, float, float]]]:
    """{node id: ("S" | "G", (x, y, z) km)}"""
    return {
        int(node.id): (node.node_type.value, constellation.position_of(node.id).as_tuple())
        for node in constellation.nodes()
    }


def positions_geodetic(
    constellation: "Constellation",
) -> Dict[int, Tuple[str, Tuple[float, float, float]]]:
    """{node id: ("S" | "G", (lat deg, lon deg, alt km))}"""
    return {
        int(node.id): (node.node_type.value, constellation.geodetic_of(node.id).as_tuple())
        for node in constellation.nodes()
    }
