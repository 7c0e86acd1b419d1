"""Error taxonomy for session bootstrap and credential caching.

Every failure raised while resolving configuration, acquiring credentials
or touching the local credential cache derives from BootstrapError so the
command line entry point can report it uniformly.
"""


class BootstrapError(Exception):
    """Base class for session bootstrap failures."""

    pass


class ConfigError(BootstrapError):
    """Raised when region or profile configuration is missing or invalid."""

    pass


class AuthError(BootstrapError):
    """Raised when no usable credentials could be acquired."""

    pass


class CacheIOError(BootstrapError):
    """Raised when the on-disk credential cache cannot be read or written."""

    pass
