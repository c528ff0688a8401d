"""Tests for the cstlnet-simulate command line."""

from __future__ import annotations

import json

import pandas as pd
import pytest

from cstlnet.cli import config_from_args, main, parse_args


class TestParseArgs:
    def test_ground_stations_repeat(self) -> None:
        args = parse_args(["--ground-station", "A:1:2", "--ground-station", "B:-3:4:0.1"])
        cfg = config_from_args(args)
        assert [gs.name for gs in cfg.ground_stations] == ["A", "B"]
        assert cfg.ground_stations[1].alt_km == 0.1

    def test_walker_fields(self) -> None:
        args = parse_args(["--pattern", "star", "--satellites", "12", "--planes", "3", "--spacing", "2"])
        cfg = config_from_args(args)
        assert cfg.walker.pattern.value == "star"
        assert cfg.walker.sats_per_plane == 4
        assert cfg.walker.inter_plane_spacing == 2


class TestMain:
    """End-to-end runs of main()."""

    def test_writes_outputs(self, tmp_path, capsys) -> None:
        graph_path = tmp_path / "graph.json"
        steps_path = tmp_path / "nested" / "steps.csv"
        status = main([
            "--satellites", "8",
            "--planes", "2",
            "--ground-station", "ZRH:47.37:8.54",
            "--min-elevation", "0",
            "--duration", "120",
            "--step", "60",
            "--graph-out", str(graph_path),
            "--steps-out", str(steps_path),
            "--log-level", "WARNING",
        ])
        assert status == 0

        out = capsys.readouterr().out
        assert "Walker Delta" in out
        assert '"num_steps": 3' in out

        with open(graph_path) as f:
            graph = json.load(f)
        assert len(graph["nodes"]) == 9
        assert graph["directed"] is False

        df = pd.read_csv(steps_path)
        assert df["t"].tolist() == [0, 1, 2]
        assert (df["num_isl"] == 12).all()

    def test_invalid_config_exits_1(self, capsys) -> None:
        assert main(["--satellites", "7", "--planes", "2"]) == 1

    def test_bad_ground_station_exits_1(self) -> None:
        assert main(["--ground-station", "nowhere"]) == 1

    @pytest.mark.parametrize("flag", ["--duration", "--step"])
    def test_non_finite_time_exits_1(self, flag: str) -> None:
        assert main(["--satellites", "4", "--planes", "2", flag, "inf"]) == 1
