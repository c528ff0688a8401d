"""Error taxonomy for the constellation engine.

Three families of failure are distinguished:

- ConfigurationError: bad construction or call parameters. Raised eagerly,
  never retried.
- NodeLookupError: a NodeId that does not name a current node. This is a
  programming-contract violation on the caller's side.
- PropagationError: the orbital propagator could not produce a state for
  the requested step. The step is not partially applied.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


class CstlnetError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(CstlnetError, ValueError):
    """Invalid constellation, ground station or step parameter."""

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {parameter}={value!r}: {reason}")


class NodeLookupError(CstlnetError, LookupError):
    """A NodeId is out of range or does not refer to an existing node."""

    def __init__(self, node_id: Any, node_count: int):
        self.node_id = node_id
        self.node_count = node_count
        super().__init__(
            f"unknown node id {node_id!r} (valid ids: 0..{node_count - 1})"
            if node_count > 0
            else f"unknown node id {node_id!r} (constellation has no nodes)"
        )


class PropagationError(CstlnetError, RuntimeError):
    """The propagator failed to advance an orbit."""

    def __init__(
        self,
        message: str,
        epoch: Optional[datetime] = None,
        duration_seconds: Optional[float] = None,
    ):
        self.epoch = epoch
        self.duration_seconds = duration_seconds
        if epoch is not None and duration_seconds is not None:
            message = (
                f"{message} (epoch={epoch.isoformat()}, "
                f"duration={duration_seconds}s)"
            )
        super().__init__(message)
