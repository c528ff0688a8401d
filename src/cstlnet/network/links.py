"""Typed, weighted, undirected links and the type-partitioned link mesh."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Set, Tuple

from cstlnet.network.node import NodeId


class LinkType(str, Enum):
    ISL = "isl"
    GSL = "gsl"


@dataclass(frozen=True)
class UndirectedLink:
    """A link between two nodes; endpoint order is kept for stable export."""

    link_type: LinkType
    first: NodeId
    second: NodeId
    distance_km: float

    @classmethod
    def isl(cls, first: NodeId, second: NodeId, distance_km: float) -> "UndirectedLink":
        return cls(LinkType.ISL, first, second, distance_km)

    @classmethod
    def gsl(cls, groundstation: NodeId, satellite: NodeId, distance_km: float) -> "UndirectedLink":
        return cls(LinkType.GSL, groundstation, satellite, distance_km)

    @property
    def pair(self) -> Tuple[NodeId, NodeId]:
        """Endpoints as an order-independent key."""
        return (self.first, self.second) if self.first <= self.second else (self.second, self.first)

    @property
    def weight(self) -> int:
        """Distance rounded to whole kilometers, as exported."""
        return int(round(self.distance_km))


class LinkMesh:
    """
    Flat collection of links, rebuilt one link type at a time.

    replace() drops every link of the given type and appends the new set, so
    ISL and GSL recomputation never clobber each other.
    """

    def __init__(self) -> None:
        self._links: List[UndirectedLink] = []

    def __iter__(self) -> Iterator[UndirectedLink]:
        return iter(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def of_type(self, link_type: LinkType) -> List[UndirectedLink]:
        return [link for link in self._links if link.link_type is link_type]

    def count(self, link_type: LinkType) -> int:
        return sum(1 for link in self._links if link.link_type is link_type)

    def replace(self, link_type: LinkType, links: Iterable[UndirectedLink]) -> None:
        new_links = list(links)
        seen: Set[Tuple[NodeId, NodeId]] = set()
        for link in new_links:
            if link.link_type is not link_type:
                raise ValueError(f"cannot add {link.link_type.value} link while rebuilding {link_type.value}")
            if link.first == link.second:
                raise ValueError(f"self-link on node {link.first}")
            if link.pair in seen:
                raise ValueError(f"duplicate {link_type.value} link {link.pair}")
            seen.add(link.pair)
        self._links = [link for link in self._links if link.link_type is not link_type]
        self._links.extend(new_links)

    def snapshot(self) -> Tuple[UndirectedLink, ...]:
        return tuple(self._links)
