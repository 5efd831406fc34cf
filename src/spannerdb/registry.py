"""
Explicit driver registry.

Nothing registers itself on import. The composing application builds the
registry once at start-up and passes it where adapters are looked up:

    registry = build_registry()
    cn = registry.open('spanner', 'projects/p/instances/i/databases/d')

Registering the same driver twice under a name is a no-op; registering a
different driver under a taken name raises ConfigurationError.
"""
import logging
import threading
from collections.abc import Mapping
from typing import Any, Protocol

from spannerdb.context import CallContext
from spannerdb.driver import DRIVER_NAME, SpannerDriver
from spannerdb.exceptions import ConfigurationError

__all__ = [
    'Driver',
    'DriverRegistry',
    'build_registry',
]

logger = logging.getLogger(__name__)


class Driver(Protocol):

    def open(self, dsn: Any, ctx: CallContext | None = None) -> Any:
        ...


class DriverRegistry:
    """Thread-safe map of adapter names to drivers.
    """

    def __init__(self) -> None:
        self._drivers: dict[str, Driver] = {}
        self._lock = threading.RLock()

    def register(self, name: str, driver: Driver) -> None:
        """Register a driver under a name.

        Raises
            ConfigurationError: If a different driver already holds the name
        """
        if not name:
            raise ConfigurationError('Driver name cannot be empty')
        if driver is None:
            raise ConfigurationError(f'Driver for {name} cannot be None')
        with self._lock:
            existing = self._drivers.get(name)
            if existing is None:
                self._drivers[name] = driver
                logger.debug(f'Registered driver {name}: {driver!r}')
                return
            if existing is driver or existing == driver:
                return
            raise ConfigurationError(f'Driver already registered under {name}: {existing!r}')

    def get(self, name: str) -> Driver:
        """Get the driver registered under a name.

        Raises
            ConfigurationError: If no driver holds the name
        """
        with self._lock:
            if name not in self._drivers:
                available = sorted(self._drivers)
                raise ConfigurationError(f'Unknown driver: {name}. Available: {available}')
            return self._drivers[name]

    def open(self, name: str, dsn: Any, ctx: CallContext | None = None) -> Any:
        """Open a connection through the named driver.
        """
        return self.get(name).open(dsn, ctx)

    def names(self) -> list[str]:
        """Return registered driver names."""
        with self._lock:
            return list(self._drivers)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._drivers

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)


def build_registry(drivers: Mapping[str, Driver] | None = None,
                   registry: DriverRegistry | None = None) -> DriverRegistry:
    """Build (or extend) a driver registry.

    Args:
        drivers: Name to driver mapping, by default the Spanner driver under 'spanner'
        registry: Existing registry to add to, by default a new one

    Returns
        The registry. Calling again with the same drivers changes nothing.
    """
    registry = registry if registry is not None else DriverRegistry()
    if drivers is None:
        drivers = {DRIVER_NAME: SpannerDriver()}
    for name, driver in drivers.items():
        registry.register(name, driver)
    return registry
