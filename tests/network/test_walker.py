"""Tests for Walker placement and the neighbor grid."""

from __future__ import annotations

import math

import pytest

from cstlnet.errors import ConfigurationError
from cstlnet.network.walker import (
    TWO_PI,
    ConstellationType,
    WalkerConfig,
    grid_neighbors,
    iter_grid,
    walker_slots,
)


class TestConstellationType:
    def test_parse_case_insensitive(self) -> None:
        assert ConstellationType.parse("Star") is ConstellationType.STAR
        assert ConstellationType.parse(ConstellationType.DELTA) is ConstellationType.DELTA

    def test_parse_unknown(self) -> None:
        with pytest.raises(ConfigurationError):
            ConstellationType.parse("rosette")

    def test_raan_spacing(self) -> None:
        """Star spreads planes over pi, Delta over 2*pi."""
        assert ConstellationType.STAR.raan_delta(6) == pytest.approx(math.pi / 6)
        assert ConstellationType.DELTA.raan_delta(6) == pytest.approx(TWO_PI / 6)


class TestWalkerConfig:
    """Tests for WalkerConfig validation."""

    def test_defaults(self) -> None:
        cfg = WalkerConfig(pattern="delta", satellite_count=24, plane_count=4)
        assert cfg.pattern is ConstellationType.DELTA
        assert cfg.sats_per_plane == 6
        assert cfg.altitude_km == 550.0
        assert cfg.inclination_deg == 53.0

    @pytest.mark.parametrize(
        "kwargs, parameter",
        [
            ({"satellite_count": 0}, "satellite_count"),
            ({"plane_count": 0}, "plane_count"),
            ({"satellite_count": 10, "plane_count": 4}, "satellite_count"),
            ({"inter_plane_spacing": -1}, "inter_plane_spacing"),
            ({"altitude_km": 0.0}, "altitude_km"),
            ({"inclination_deg": 181.0}, "inclination_deg"),
        ],
    )
    def test_invalid(self, kwargs, parameter) -> None:
        """Each invalid parameter is named in the error."""
        params = {"pattern": "star", "satellite_count": 8, "plane_count": 2}
        params.update(kwargs)
        with pytest.raises(ConfigurationError) as exc_info:
            WalkerConfig(**params).validate()
        assert exc_info.value.parameter == parameter

    def test_frozen(self) -> None:
        cfg = WalkerConfig(pattern="star", satellite_count=8, plane_count=2)
        with pytest.raises(AttributeError):
            cfg.plane_count = 4  # type: ignore


class TestWalkerSlots:
    """Tests for walker_slots placement."""

    def test_ids_contiguous_row_major(self) -> None:
        """NodeId = k + p*Q and ids cover 0..S-1 in order."""
        slots = walker_slots(WalkerConfig("delta", 12, 3, 1))
        assert [s.node_id for s in slots] == list(range(12))
        for slot in slots:
            assert slot.node_id == slot.number_in_plane + slot.plane * 4

    def test_angles_normalized(self) -> None:
        slots = walker_slots(WalkerConfig("delta", 60, 5, 4))
        for slot in slots:
            assert 0.0 <= slot.raan <= TWO_PI
            assert 0.0 <= slot.aol < TWO_PI

    def test_raan_per_plane(self) -> None:
        star = walker_slots(WalkerConfig("star", 8, 4))
        assert [s.raan for s in star if s.number_in_plane == 0] == pytest.approx(
            [0.0, math.pi / 4, math.pi / 2, 3 * math.pi / 4]
        )

    def test_phase_offset(self) -> None:
        """Plane p is shifted by p * 2*pi*F/S, slots by 2*pi/Q."""
        slots = walker_slots(WalkerConfig("delta", 8, 2, 1))
        by_id = {s.node_id: s for s in slots}
        assert by_id[1].aol == pytest.approx(TWO_PI / 4)
        assert by_id[4].aol == pytest.approx(TWO_PI / 8)
        assert by_id[5].aol == pytest.approx(TWO_PI / 8 + TWO_PI / 4)

    def test_phase_offset_wraps(self) -> None:
        """F >= S gives an offset of 2*pi or more; the error names F."""
        for spacing in (8, 9):
            with pytest.raises(ConfigurationError) as exc_info:
                walker_slots(WalkerConfig("delta", 8, 2, spacing))
            assert exc_info.value.parameter == "inter_plane_spacing"

    def test_largest_phase_offset(self) -> None:
        slots = walker_slots(WalkerConfig("delta", 8, 2, 7))
        assert slots[4].aol == pytest.approx(TWO_PI * 7 / 8)


class TestNeighborGrid:
    """Tests for top/right grid neighbors."""

    def test_wraparound(self) -> None:
        n = grid_neighbors(plane=1, number_in_plane=3, sats_per_plane=4, number_of_planes=2)
        assert n.node_id == 7
        assert n.top == 4
        assert n.right == 3

    def test_top_cycle(self) -> None:
        """Following top Q times returns to the start, staying in one plane."""
        Q, P = 5, 3
        grid = {n.node_id: n for n in iter_grid(Q, P)}
        for start in grid:
            node = start
            visited = set()
            for _ in range(Q):
                visited.add(node)
                node = grid[node].top
            assert node == start
            assert len(visited) == Q
            assert {v // Q for v in visited} == {start // Q}

    def test_right_cycle(self) -> None:
        """Following right P times returns to the start, visiting every plane."""
        Q, P = 5, 3
        grid = {n.node_id: n for n in iter_grid(Q, P)}
        for start in grid:
            node = start
            planes = set()
            for _ in range(P):
                planes.add(node // Q)
                node = grid[node].right
            assert node == start
            assert planes == set(range(P))

    def test_single_plane_right_is_self(self) -> None:
        assert grid_neighbors(0, 2, 4, 1).right == 2
