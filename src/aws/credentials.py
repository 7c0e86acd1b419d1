"""Credential resolution with a transparent on-disk cache.

This module wraps the botocore credential chain so that credentials
resolved once (possibly after an interactive MFA prompt) are persisted
under a cache root and reused by later invocations of the tool.

The cache root is taken from the ``__SKYFORM_CACHE`` environment
variable. When it is unset, caching is bypassed entirely and the
filesystem is never touched.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from botocore.credentials import (
    CredentialProvider,
    CredentialResolver,
    Credentials,
    RefreshableCredentials,
)
from botocore.exceptions import NoCredentialsError

from ..core.errors import CacheIOError


logger = logging.getLogger(__name__)

CACHE_ENV_VAR = "__SKYFORM_CACHE"
CREDENTIALS_DIR = "credentials"
CACHE_FILE = "aws.tmp"

# Matches botocore's advisory refresh window for temporary credentials.
EXPIRY_WINDOW_SECONDS = 15 * 60
STATIC_EXPIRY = datetime(9999, 12, 31, tzinfo=timezone.utc)


@dataclass(frozen=True)
class CredentialSnapshot:
    """Point-in-time copy of resolved AWS credentials."""

    access_key_id: str
    secret_access_key: str
    session_token: str = ""
    provider_name: str = ""
    expiration: Optional[datetime] = None

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the on-disk cache representation.

        Returns:
            JSON-compatible dictionary
        """
        data = {
            "AccessKeyID": self.access_key_id,
            "SecretAccessKey": self.secret_access_key,
            "SessionToken": self.session_token,
            "ProviderName": self.provider_name,
        }
        if self.expiration is not None:
            data["Expiration"] = self.expiration.isoformat()
        return data

    @classmethod
    def from_json(cls, data: Any) -> "CredentialSnapshot":
        """Build a snapshot from its on-disk cache representation.

        Args:
            data: Decoded JSON document

        Returns:
            CredentialSnapshot instance

        Raises:
            ValueError: When the document is not a complete snapshot
        """
        if not isinstance(data, dict):
            raise ValueError("credential cache entry must be a JSON object")
        if not data.get("AccessKeyID") or not data.get("SecretAccessKey"):
            raise ValueError("credential cache entry is missing access keys")

        expiration = None
        if data.get("Expiration"):
            expiration = datetime.fromisoformat(data["Expiration"])
            if expiration.tzinfo is None:
                expiration = expiration.replace(tzinfo=timezone.utc)

        return cls(
            access_key_id=data["AccessKeyID"],
            secret_access_key=data["SecretAccessKey"],
            session_token=data.get("SessionToken") or "",
            provider_name=data.get("ProviderName") or "",
            expiration=expiration,
        )

    def expires_within(
        self, seconds: int, now: Optional[datetime] = None
    ) -> bool:
        """Check whether the snapshot expires within the given window.

        Snapshots without an expiration (static keys) never expire.
        """
        if self.expiration is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expiration - now <= timedelta(seconds=seconds)

    def to_metadata(self) -> Dict[str, Any]:
        """Convert to the metadata format botocore refreshers return."""
        return {
            "access_key": self.access_key_id,
            "secret_key": self.secret_access_key,
            "token": self.session_token or None,
            "expiry_time": self.expiration.isoformat() if self.expiration else None,
        }


class ChainCredentialSource:
    """Underlying credential source backed by a botocore provider chain.

    The chain (environment, shared config and credentials files,
    assume-role with MFA, container and instance metadata) is only run on
    the first retrieval; refreshable credentials refresh themselves
    afterwards.
    """

    def __init__(self, resolver: CredentialResolver) -> None:
        self._resolver = resolver
        self._credentials: Optional[Credentials] = None

    def retrieve(self) -> CredentialSnapshot:
        """Resolve credentials through the provider chain.

        Raises:
            NoCredentialsError: When no provider in the chain has credentials
        """
        if self._credentials is None:
            credentials = self._resolver.load_credentials()
            if credentials is None:
                raise NoCredentialsError()
            self._credentials = credentials

        frozen = self._credentials.get_frozen_credentials()
        expiration = None
        if isinstance(self._credentials, RefreshableCredentials):
            # botocore keeps the expiry private; it is only read here.
            expiration = self._credentials._expiry_time

        return CredentialSnapshot(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token or "",
            provider_name=self._credentials.method or "",
            expiration=expiration,
        )

    def is_expired(self) -> bool:
        """Check whether the resolved credentials need refreshing."""
        if self._credentials is None:
            return True
        if isinstance(self._credentials, RefreshableCredentials):
            return self._credentials.refresh_needed()
        return False


class CredentialCache:
    """Serves credentials from the disk cache or the underlying source.

    Retrieval order:

    1. Cache root unset: delegate to the underlying source.
    2. Cache file present and not about to expire: serve it.
    3. Otherwise: resolve through the underlying source and persist.
    """

    def __init__(
        self,
        source: Any,
        environ: Optional[Mapping[str, str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize credential cache.

        Args:
            source: Underlying source with retrieve() and is_expired()
            environ: Environment mapping, defaults to os.environ
            clock: Returns the current UTC time, for expiry checks
        """
        self._source = source
        self._environ = os.environ if environ is None else environ
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def cache_path(self) -> Optional[Path]:
        """Path of the cache file, None when caching is disabled."""
        cache_root = self._environ.get(CACHE_ENV_VAR)
        if not cache_root:
            return None
        return Path(cache_root) / CREDENTIALS_DIR / CACHE_FILE

    def retrieve(self) -> CredentialSnapshot:
        """Retrieve credentials, using the disk cache when enabled.

        Returns:
            Credential snapshot

        Raises:
            CacheIOError: When an existing cache file cannot be read or decoded
            BotoCoreError: Propagated unmodified from the underlying source
        """
        cache_path = self.cache_path()
        if cache_path is None:
            return self._source.retrieve()

        self._ensure_directory(cache_path.parent)

        if self._cache_file_exists(cache_path):
            snapshot = self._read(cache_path)
            if not snapshot.expires_within(EXPIRY_WINDOW_SECONDS, self._clock()):
                logger.info(f"Credentials retrieved from cache file {cache_path}")
                return snapshot
            logger.info(f"Cached credentials in {cache_path} expired, refreshing")

        logger.info("Resolving credentials through the provider chain")
        snapshot = self._source.retrieve()
        try:
            self._write(cache_path, snapshot)
        except CacheIOError as e:
            logger.error(f"Credential caching is not working: {e}")
        return snapshot

    def is_expired(self) -> bool:
        """Delegate the expiry check to the underlying source."""
        return self._source.is_expired()

    def _ensure_directory(self, directory: Path) -> None:
        try:
            if directory.is_dir():
                return
            missing = []
            path = directory
            while not path.exists():
                missing.append(path)
                path = path.parent
            for path in reversed(missing):
                path.mkdir(mode=0o700, exist_ok=True)
        except OSError as e:
            logger.warning(f"Unable to create credential cache directory {directory}: {e}")

    def _cache_file_exists(self, cache_path: Path) -> bool:
        try:
            return cache_path.exists()
        except OSError as e:
            raise CacheIOError(f"Unable to access credential cache {cache_path}: {e}") from e

    def _read(self, cache_path: Path) -> CredentialSnapshot:
        try:
            with open(cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CacheIOError(f"Unable to decode credential cache {cache_path}: {e}") from e
        except OSError as e:
            raise CacheIOError(f"Unable to read credential cache {cache_path}: {e}") from e

        try:
            return CredentialSnapshot.from_json(data)
        except ValueError as e:
            raise CacheIOError(f"Invalid credential cache {cache_path}: {e}") from e

    def _write(self, cache_path: Path, snapshot: CredentialSnapshot) -> None:
        try:
            content = json.dumps(snapshot.to_json())
        except (TypeError, ValueError) as e:
            raise CacheIOError(f"Unable to encode credentials: {e}") from e

        try:
            fd = os.open(cache_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise CacheIOError(f"Unable to write credential cache {cache_path}: {e}") from e


class CachedCredentialProvider(CredentialProvider):
    """botocore provider that sources credentials from a CredentialCache.

    Installed as the only provider of a session's credential resolver so
    every signed request goes through the cache.
    """

    METHOD = "skyform-file-cache"
    CANONICAL_NAME = None

    def __init__(self, cache: CredentialCache) -> None:
        super().__init__()
        self.cache = cache

    def load(self) -> Credentials:
        snapshot = self.cache.retrieve()
        if snapshot.expiration is None:
            return Credentials(
                snapshot.access_key_id,
                snapshot.secret_access_key,
                snapshot.session_token or None,
                method=self.METHOD,
            )
        return RefreshableCredentials.create_from_metadata(
            metadata=snapshot.to_metadata(),
            refresh_using=self._refresh,
            method=self.METHOD,
        )

    def _refresh(self) -> Dict[str, Any]:
        metadata = self.cache.retrieve().to_metadata()
        if metadata["expiry_time"] is None:
            # Static keys replaced temporary ones; they never need refreshing again.
            metadata["expiry_time"] = STATIC_EXPIRY.isoformat()
        return metadata
