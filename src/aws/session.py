"""AWS session bootstrap with fail-fast credential validation.

The bootstrap builds a botocore session bound to a region and profile,
routes its credential resolution through the on-disk CredentialCache and
fetches credentials once before handing the session out, so a broken
credential setup is reported at startup instead of deep inside the first
service call.
"""

import getpass
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Mapping, Optional, Tuple

import boto3
import botocore.session
from botocore.config import Config
from botocore.credentials import AssumeRoleProvider, CredentialResolver
from botocore.exceptions import BotoCoreError, ClientError, UnknownCredentialError

from ..core.errors import AuthError, CacheIOError, ConfigError
from .credentials import (
    CachedCredentialProvider,
    ChainCredentialSource,
    CredentialCache,
)
from .regions import is_valid_region


logger = logging.getLogger(__name__)

VALIDATION_TIMEOUT_SECONDS = 2

CREDENTIALS_DOCS_URL = (
    "https://docs.aws.amazon.com/cli/latest/userguide/cli-configure-envvars.html"
)

AUTH_ERROR_MESSAGE = (
    "Your AWS credentials seem undefined! AWS_ACCESS_KEY_ID and "
    "AWS_SECRET_ACCESS_KEY need to be exported in your CLI environment\n"
    "Installation documentation is in the Installation section of README.md "
    f"and at {CREDENTIALS_DOCS_URL}"
)

TokenProvider = Callable[[str], str]


def prompt_mfa_token(prompt: str = "Assume Role MFA token code: ") -> str:
    """Prompt for a one-time MFA code on the controlling terminal."""
    return getpass.getpass(prompt).strip()


def validation_client_config() -> Config:
    """Client configuration bounding calls made while validating credentials."""
    return Config(
        connect_timeout=VALIDATION_TIMEOUT_SECONDS,
        read_timeout=VALIDATION_TIMEOUT_SECONDS,
        retries={"total_max_attempts": 1},
    )


def default_client_config() -> Config:
    """SDK default client configuration used once the session is validated."""
    return Config()


class SessionState(Enum):
    """Bootstrap lifecycle state."""

    UNVALIDATED = "UNVALIDATED"
    VALIDATING = "VALIDATING"
    VALIDATED = "VALIDATED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AWSSession:
    """Validated AWS session shared read-only by every service."""

    region: str
    profile: str
    boto_session: boto3.Session
    client_config: Config
    credential_cache: CredentialCache

    def client(self, service_name: str):
        """Create a boto3 client bound to the session region.

        Args:
            service_name: AWS API name (e.g., 'ec2', 's3')

        Returns:
            boto3 client
        """
        return self.boto_session.client(
            service_name, region_name=self.region, config=self.client_config
        )


class SessionBootstrap:
    """Builds authenticated AWS sessions.

    Each call to bootstrap() walks the session through
    UNVALIDATED -> VALIDATING -> VALIDATED or FAILED.
    """

    def __init__(
        self,
        token_provider: TokenProvider = prompt_mfa_token,
        session_factory: Callable[..., botocore.session.Session] = botocore.session.Session,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize session bootstrap.

        Args:
            token_provider: Callable returning an MFA code for a prompt
            session_factory: Creates the underlying botocore session
            environ: Environment mapping used for the credential cache root
        """
        self._token_provider = token_provider
        self._session_factory = session_factory
        self._environ = environ
        self.state = SessionState.UNVALIDATED

    def bootstrap(self, region: str, profile: str = "") -> AWSSession:
        """Create a validated session for region and profile.

        Args:
            region: AWS region name
            profile: Shared config profile name, empty for default

        Returns:
            Validated AWSSession

        Raises:
            ConfigError: When region is empty or unknown, or the profile is unusable
            AuthError: When credentials cannot be acquired
        """
        self.state = SessionState.UNVALIDATED
        if not region:
            raise ConfigError("empty AWS region")
        if not is_valid_region(region):
            raise ConfigError(f"invalid region '{region}' provided")

        self.state = SessionState.VALIDATING
        try:
            session = self._build_session(region, profile)
            cache = self._install_credential_cache(session)
            self._validate_credentials(session)
        except Exception:
            self.state = SessionState.FAILED
            raise

        self._release_validation_limits(session)
        self.state = SessionState.VALIDATED
        logger.info(f"AWS session validated for region {region}")

        return AWSSession(
            region=region,
            profile=profile or "",
            boto_session=boto3.Session(botocore_session=session, region_name=region),
            client_config=default_client_config(),
            credential_cache=cache,
        )

    def _build_session(self, region: str, profile: str) -> botocore.session.Session:
        try:
            session = self._session_factory(profile=profile or None)
            session.set_config_variable("region", region)
            session.set_config_variable(
                "metadata_service_timeout", VALIDATION_TIMEOUT_SECONDS
            )
            session.set_config_variable("metadata_service_num_attempts", 1)
            session.set_default_client_config(validation_client_config())
            chain = session.get_component("credential_provider")
        except BotoCoreError as e:
            raise ConfigError(
                f"Unable to create AWS session for profile '{profile or 'default'}': {e}"
            ) from e

        try:
            chain.get_provider(AssumeRoleProvider.METHOD)._prompter = self._token_provider
        except UnknownCredentialError:
            logger.debug("No assume-role provider in credential chain")

        return session

    def _release_validation_limits(self, session: botocore.session.Session) -> None:
        """Drop the startup timeouts for anything built after validation.

        The metadata fetcher already created by the credential chain keeps
        its timeout; botocore fixes it when the fetcher is built, and the
        chain runs at most once per process.
        """
        session.set_config_variable("metadata_service_timeout", None)
        session.set_config_variable("metadata_service_num_attempts", None)
        session.set_default_client_config(default_client_config())

    def _install_credential_cache(self, session: botocore.session.Session) -> CredentialCache:
        chain = session.get_component("credential_provider")
        cache = CredentialCache(ChainCredentialSource(chain), environ=self._environ)
        session.register_component(
            "credential_provider",
            CredentialResolver(providers=[CachedCredentialProvider(cache)]),
        )
        return cache

    def _validate_credentials(self, session: botocore.session.Session) -> None:
        try:
            credentials = session.get_credentials()
        except (BotoCoreError, ClientError, CacheIOError) as e:
            log_provider_errors(e)
            raise AuthError(AUTH_ERROR_MESSAGE) from e

        if credentials is None:
            raise AuthError(AUTH_ERROR_MESSAGE)


def log_provider_errors(error: BaseException) -> None:
    """Log every error in a credential failure chain at warning level.

    Args:
        error: Outermost error raised while resolving credentials
    """
    for nested in _iter_error_chain(error):
        code, message = _describe_error(nested)
        logger.warning(f"AWS credential provider error [{code}]: {message}")
        detail = _error_detail(nested)
        if detail:
            logger.warning(f"AWS credential provider error detail: {detail}")


def _iter_error_chain(error: Optional[BaseException]) -> Iterator[BaseException]:
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        error = error.__cause__ or error.__context__


def _describe_error(error: BaseException) -> Tuple[str, str]:
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        return details.get("Code", "Unknown"), details.get("Message", str(error))
    return type(error).__name__, str(error)


def _error_detail(error: BaseException) -> str:
    if isinstance(error, ClientError):
        request_id = error.response.get("ResponseMetadata", {}).get("RequestId")
        detail = f"operation={error.operation_name}"
        if request_id:
            detail += f" request_id={request_id}"
        return detail
    if isinstance(error, BotoCoreError) and error.kwargs:
        return ", ".join(f"{key}={value}" for key, value in sorted(error.kwargs.items()))
    return ""
