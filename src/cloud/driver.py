"""Template-execution driver abstractions.

A driver exposes a service's operations to the template engine as
functions looked up by an (action, entity) pair, e.g. ("create", "bucket").
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Callable, Dict, List

DriverFn = Callable[[Dict[str, Any]], Any]


class DriverLookupError(LookupError):
    """Raised when no driver implements an (action, entity) pair."""

    pass


class Driver(ABC):
    """Base class for template-execution drivers."""

    @abstractmethod
    def lookup(self, action: str, entity: str) -> DriverFn:
        """Find the function implementing action on entity.

        Raises:
            DriverLookupError: When the pair is not supported
        """
        pass

    @abstractmethod
    def set_dry_run(self, dry_run: bool) -> None:
        """Enable or disable dry-run mode."""
        pass

    @abstractmethod
    def set_logger(self, logger: logging.Logger) -> None:
        """Replace the driver logger."""
        pass

    def supports(self, action: str, entity: str) -> bool:
        """Check whether the driver implements action on entity."""
        try:
            self.lookup(action, entity)
        except DriverLookupError:
            return False
        return True


class MultiDriver(Driver):
    """Aggregates several drivers behind a single lookup.

    The first driver supporting a pair wins.
    """

    def __init__(self, *drivers: Driver) -> None:
        self._drivers: List[Driver] = list(drivers)

    @property
    def drivers(self) -> List[Driver]:
        """Aggregated drivers in lookup order."""
        return list(self._drivers)

    def __len__(self) -> int:
        return len(self._drivers)

    def lookup(self, action: str, entity: str) -> DriverFn:
        for driver in self._drivers:
            try:
                return driver.lookup(action, entity)
            except DriverLookupError:
                continue
        raise DriverLookupError(
            f"function corresponding to '{action} {entity}' not found"
        )

    def set_dry_run(self, dry_run: bool) -> None:
        for driver in self._drivers:
            driver.set_dry_run(dry_run)

    def set_logger(self, logger: logging.Logger) -> None:
        for driver in self._drivers:
            driver.set_logger(logger)
