"""Metrics for constellation connectivity analysis.

This module contains pure functions for computing connectivity metrics
from exported graph state. No propagation or topology dependencies.
"""

from cstlnet.metrics.connectivity import (
    connected_ground_stations,
    count_components,
    giant_component_fraction,
    giant_component_size,
    mean_edge_weight,
)

__all__ = [
    "count_components",
    "giant_component_size",
    "giant_component_fraction",
    "connected_ground_stations",
    "mean_edge_weight",
]
