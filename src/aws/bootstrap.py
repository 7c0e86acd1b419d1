"""Startup entry points assembling AWS services.

init_services() builds the named service registry consumed by inventory
tooling. new_driver() builds a single aggregate driver for one-shot
template runs without touching any registry.
"""

import logging
from typing import Any, Optional

from ..cloud.driver import MultiDriver
from ..cloud.service import ServiceRegistry
from ..core.config import Configuration
from ..core.errors import ConfigError
from .regions import is_valid_region
from .services import build_services
from .session import SessionBootstrap


logger = logging.getLogger(__name__)


def discard_logger() -> logging.Logger:
    """Logger that drops every record."""
    discard = logging.getLogger("skyform.discard")
    if not discard.handlers:
        discard.addHandler(logging.NullHandler())
    discard.propagate = False
    return discard


def init_services(
    config: Any,
    log: Optional[logging.Logger] = None,
    registry: Optional[ServiceRegistry] = None,
    bootstrap: Optional[SessionBootstrap] = None,
) -> ServiceRegistry:
    """Bootstrap an AWS session and register every domain service.

    Args:
        config: Configuration view exposing region() and profile()
        log: Logger handed to every service
        registry: Registry to populate, a new one when None
        bootstrap: Session bootstrap to use, a default one when None

    Returns:
        Registry holding the nine services keyed by name

    Raises:
        ConfigError: When the region is missing or invalid
        AuthError: When credentials cannot be acquired
    """
    region = config.region()
    if not region:
        raise ConfigError(
            "empty AWS region. Set 'aws.region' in your configuration file "
            "or export AWS_REGION"
        )

    bootstrap = bootstrap or SessionBootstrap()
    session = bootstrap.bootstrap(region, config.profile())

    registry = registry if registry is not None else ServiceRegistry()
    registry.populate(build_services(session, config, log))
    logger.info(f"Registered AWS services: {', '.join(registry.names())}")
    return registry


def new_driver(
    region: str,
    profile: str = "",
    log: Optional[logging.Logger] = None,
    bootstrap: Optional[SessionBootstrap] = None,
) -> MultiDriver:
    """Bootstrap an AWS session and aggregate every service driver.

    Args:
        region: AWS region name
        profile: Shared config profile name, empty for default
        log: Logger for the drivers, discarding when None
        bootstrap: Session bootstrap to use, a default one when None

    Returns:
        MultiDriver over all service drivers

    Raises:
        ConfigError: When the region is invalid
        AuthError: When credentials cannot be acquired
    """
    if not is_valid_region(region):
        raise ConfigError(f"invalid region '{region}' provided")

    bootstrap = bootstrap or SessionBootstrap()
    session = bootstrap.bootstrap(region, profile)

    driver_log = log if log is not None else discard_logger()
    config = Configuration.from_dict({"aws.region": region, "aws.profile": profile})

    drivers = []
    for service in build_services(session, config, driver_log):
        drivers.extend(service.drivers())
    return MultiDriver(*drivers)
