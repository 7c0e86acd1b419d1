"""AWS session bootstrap, credential caching and domain services."""

from .bootstrap import init_services, new_driver
from .credentials import CredentialCache, CredentialSnapshot
from .session import AWSSession, SessionBootstrap

__all__ = [
    "AWSSession",
    "CredentialCache",
    "CredentialSnapshot",
    "SessionBootstrap",
    "init_services",
    "new_driver",
]
