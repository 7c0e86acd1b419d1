"""Cloud service base class and the caller-owned service registry."""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .driver import Driver


class Service(ABC):
    """Base class for per-domain cloud services.

    Services hold a reference to a validated session and must not
    replace its credentials or transport configuration.
    """

    def __init__(
        self, session: Any, config: Any, logger: Optional[logging.Logger] = None
    ) -> None:
        """Initialize service.

        Args:
            session: Validated provider session
            config: Read-only configuration view
            logger: Logger for service activity
        """
        self.session = session
        self.config = config
        self.logger = logger or logging.getLogger(type(self).__module__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Get service name used as registry key."""
        pass

    @abstractmethod
    def drivers(self) -> List[Driver]:
        """Get template-execution drivers for this service."""
        pass


class ServiceRegistry:
    """Mapping from service name to service instance.

    Populated once per initialization and read many times afterwards.
    Populating again replaces every entry; nothing is merged. Not safe for
    concurrent population from several threads.
    """

    def __init__(self) -> None:
        self._services: Dict[str, Service] = {}

    def populate(self, services: Iterable[Service]) -> None:
        """Replace registry content with services keyed by name.

        Args:
            services: Services to register

        Raises:
            ValueError: When two services share a name
        """
        entries: Dict[str, Service] = {}
        for service in services:
            if service.name in entries:
                raise ValueError(f"duplicate service name '{service.name}'")
            entries[service.name] = service
        self._services = entries

    def get(self, name: str) -> Service:
        """Get a registered service.

        Raises:
            KeyError: When no service is registered under name
        """
        try:
            return self._services[name]
        except KeyError:
            raise KeyError(f"unknown service '{name}'")

    def names(self) -> List[str]:
        """Get registered service names in registration order."""
        return list(self._services)

    def __getitem__(self, name: str) -> Service:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)
