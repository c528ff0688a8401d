"""Tests for UndirectedLink and LinkMesh."""

from __future__ import annotations

import pytest

from cstlnet.network.links import LinkMesh, LinkType, UndirectedLink
from cstlnet.network.node import NodeId


def isl(a: int, b: int, d: float = 1000.0) -> UndirectedLink:
    return UndirectedLink.isl(NodeId(a), NodeId(b), d)


def gsl(gs: int, sat: int, d: float = 800.0) -> UndirectedLink:
    return UndirectedLink.gsl(NodeId(gs), NodeId(sat), d)


class TestUndirectedLink:
    def test_pair_is_order_independent(self) -> None:
        assert isl(3, 1).pair == isl(1, 3).pair == (1, 3)

    def test_gsl_endpoint_order(self) -> None:
        """GSL keeps (ground station, satellite) order."""
        link = gsl(10, 2)
        assert (link.first, link.second) == (10, 2)
        assert link.link_type is LinkType.GSL

    def test_weight_rounds(self) -> None:
        assert isl(0, 1, 1234.4).weight == 1234
        assert isl(0, 1, 1234.6).weight == 1235


class TestLinkMesh:
    """Tests for type-partitioned replacement."""

    def test_replace_keeps_other_type(self) -> None:
        mesh = LinkMesh()
        mesh.replace(LinkType.ISL, [isl(0, 1), isl(1, 2)])
        mesh.replace(LinkType.GSL, [gsl(3, 0)])
        mesh.replace(LinkType.ISL, [isl(0, 2)])

        assert mesh.count(LinkType.ISL) == 1
        assert mesh.count(LinkType.GSL) == 1
        assert [link.pair for link in mesh.of_type(LinkType.ISL)] == [(0, 2)]
        assert len(mesh) == 2

    def test_replace_with_empty_clears_type(self) -> None:
        mesh = LinkMesh()
        mesh.replace(LinkType.GSL, [gsl(3, 0), gsl(3, 1)])
        mesh.replace(LinkType.GSL, [])
        assert len(mesh) == 0

    def test_rejects_duplicate_pair(self) -> None:
        mesh = LinkMesh()
        with pytest.raises(ValueError, match="duplicate"):
            mesh.replace(LinkType.ISL, [isl(0, 1), isl(1, 0)])

    def test_rejects_self_link(self) -> None:
        with pytest.raises(ValueError, match="self-link"):
            LinkMesh().replace(LinkType.ISL, [isl(4, 4)])

    def test_rejects_wrong_type(self) -> None:
        with pytest.raises(ValueError):
            LinkMesh().replace(LinkType.ISL, [gsl(3, 0)])

    def test_failed_replace_leaves_mesh_unchanged(self) -> None:
        mesh = LinkMesh()
        mesh.replace(LinkType.ISL, [isl(0, 1)])
        with pytest.raises(ValueError):
            mesh.replace(LinkType.ISL, [isl(1, 2), isl(2, 1)])
        assert [link.pair for link in mesh] == [(0, 1)]

    def test_snapshot_is_detached(self) -> None:
        mesh = LinkMesh()
        mesh.replace(LinkType.ISL, [isl(0, 1)])
        snap = mesh.snapshot()
        mesh.replace(LinkType.ISL, [])
        assert len(snap) == 1
