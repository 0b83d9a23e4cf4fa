"""Adapters — bindings for the host primitives.

Public re-exports for convenient access.
"""

from ublue_it.adapters.base import Adapter, ExecutionContext
from ublue_it.adapters.mock import MockAdapter, SimulatedHost
from ublue_it.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "SimulatedHost",
]
