"""
A registry of the scheduler-specific drivers, resolved by the scheduler's name.

The registry is an explicit object, created at startup and passed to where
the drivers are resolved. Usually, all drivers are registered first, and then
resolved many times. However, the registry is lock-protected, so the drivers
can also be registered while other tasks or threads resolve them.

For convenience, there is also a default registry, which is used when
no explicit registry is given (e.g. by the :func:`driver` decorator).
"""
import logging
import threading
from typing import Callable, Collection, Dict, Optional, Type, TypeVar

from konverge._core.intents import drivers

logger = logging.getLogger(__name__)

# A fixed tag of what is not found, to tell it from other "not found" errors.
DRIVER_CATEGORY = 'Scheduler Storage Operations'

_DriverT = TypeVar('_DriverT', bound=Type[drivers.SchedulerOps])


class DriverNotFoundError(LookupError):
    """ No driver is registered under the requested name. """

    def __init__(self, name: str, *, category: str = DRIVER_CATEGORY) -> None:
        super().__init__(f"{category} driver {name!r} is not found.")
        self.name = name
        self.category = category


class DriverRegistry:
    """
    A mapping of the scheduler names to their drivers.

    Re-registering the same name replaces the previous driver silently.
    The resolved drivers are the same objects as registered, not copies.
    """

    def __init__(self) -> None:
        super().__init__()
        self._drivers: Dict[str, drivers.SchedulerOps] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._drivers

    def names(self) -> Collection[str]:
        with self._lock:
            return frozenset(self._drivers)

    def register(self, name: str, driver: drivers.SchedulerOps) -> None:
        logger.info(f"Registering the scheduler operations driver: {name}")
        with self._lock:
            self._drivers[name] = driver

    def resolve(self, name: str) -> drivers.SchedulerOps:
        with self._lock:
            try:
                return self._drivers[name]
            except KeyError:
                raise DriverNotFoundError(name) from None


_default_registry: Optional[DriverRegistry] = None


def get_default_registry() -> DriverRegistry:
    """
    Get the default registry to be used by the decorators & helpers
    unless the explicit registry is provided to them.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = DriverRegistry()
    return _default_registry


def set_default_registry(registry: DriverRegistry) -> None:
    """
    Set the default registry to be used by the decorators & helpers
    unless the explicit registry is provided to them.
    """
    global _default_registry
    _default_registry = registry


def driver(
        name: str,
        *,
        registry: Optional[DriverRegistry] = None,
) -> Callable[[_DriverT], _DriverT]:
    """
    A class decorator to register a driver under the scheduler's name::

        @konverge.driver('nomad')
        class NomadOps(konverge.SchedulerOps):
            ...

    The class is instantiated with no arguments. The class itself is returned
    unchanged, so it can be instantiated again and registered elsewhere.
    """
    def decorator(cls: _DriverT) -> _DriverT:
        real_registry = registry if registry is not None else get_default_registry()
        real_registry.register(name, cls())
        return cls
    return decorator
