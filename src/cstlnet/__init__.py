"""cstlnet: time-varying connectivity graphs of Walker satellite constellations."""

from cstlnet.errors import (
    ConfigurationError,
    CstlnetError,
    NodeLookupError,
    PropagationError,
)
from cstlnet.network.constellation import Constellation, create_constellation
from cstlnet.network.links import LinkType
from cstlnet.network.node import NodeId, NodeType
from cstlnet.network.walker import ConstellationType, WalkerConfig
from cstlnet.orbital.propagator import (
    KeplerianPropagator,
    Propagator,
    Sgp4Propagator,
    make_propagator,
)

__version__ = "0.1.0"

__all__ = [
    "Constellation",
    "ConstellationType",
    "ConfigurationError",
    "CstlnetError",
    "KeplerianPropagator",
    "LinkType",
    "NodeId",
    "NodeLookupError",
    "NodeType",
    "PropagationError",
    "Propagator",
    "Sgp4Propagator",
    "WalkerConfig",
    "create_constellation",
    "make_propagator",
]
