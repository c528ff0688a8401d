"""Time-stepped rollouts of a constellation."""

from cstlnet.simulation.rollout import (
    GroundStationSpec,
    SimulationConfig,
    SimulationStep,
    SimulationSummary,
    build_constellation,
    iter_snapshots,
    run_simulation,
    steps_to_frame,
)

__all__ = [
    "GroundStationSpec",
    "SimulationConfig",
    "SimulationStep",
    "SimulationSummary",
    "build_constellation",
    "iter_snapshots",
    "run_simulation",
    "steps_to_frame",
]
