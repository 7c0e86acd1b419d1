"""Provider-independent service and driver abstractions."""

from .driver import Driver, DriverLookupError, MultiDriver
from .service import Service, ServiceRegistry

__all__ = ["Driver", "DriverLookupError", "MultiDriver", "Service", "ServiceRegistry"]
