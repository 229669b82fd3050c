"""Configuration module for issue board interactions."""

import logging
import os
from dataclasses import dataclass

from ..models.constants import DEFAULT_PROJECT_KEY

DEFAULT_IDENTITY_API_URL = "https://api.clerk.com/v1"
# Largest page the identity provider serves in a single user listing call.
IDENTITY_PAGE_SIZE_CEILING = 20
DEFAULT_IDENTITY_PAGE_SIZE = 10
DEFAULT_IDENTITY_CACHE_TTL = 300


@dataclass
class BoardConfig:
    """Issue board configuration.

    Holds the fallback identities applied by the lifecycle coordinator and
    the settings of the external identity provider:
    - default_reporter_id / default_creator_id: used when a create request
      names no reporter / creator
    - identity_secret_key: bearer secret for the provider; no provider
      lookups happen without it
    - project_key: key of the project returned by the project lookup
    """

    default_reporter_id: str | None = None
    default_creator_id: str | None = None
    identity_api_url: str = DEFAULT_IDENTITY_API_URL
    identity_secret_key: str | None = None  # Provider secret key
    identity_page_size: int = DEFAULT_IDENTITY_PAGE_SIZE
    identity_cache_ttl: int = DEFAULT_IDENTITY_CACHE_TTL  # Seconds
    identity_timeout: float = 10.0  # Seconds per provider call
    ssl_verify: bool = True  # Whether to verify provider SSL certificates
    seed_file: str | None = None  # JSON file preloading the in-memory stores
    project_key: str = DEFAULT_PROJECT_KEY  # Key of the project the board serves

    def __post_init__(self) -> None:
        if not 1 <= self.identity_page_size <= IDENTITY_PAGE_SIZE_CEILING:
            logger = logging.getLogger("mcp-issueboard.board.config")
            clamped = min(max(self.identity_page_size, 1), IDENTITY_PAGE_SIZE_CEILING)
            logger.warning(
                f"Identity page size {self.identity_page_size} is outside "
                f"1..{IDENTITY_PAGE_SIZE_CEILING}, using {clamped}"
            )
            self.identity_page_size = clamped

    @classmethod
    def from_env(cls) -> "BoardConfig":
        """Create configuration from environment variables.

        Returns:
            BoardConfig with values from environment variables

        Raises:
            ValueError: If a numeric environment variable is not a number
        """
        page_size_env = os.getenv("IDENTITY_PAGE_SIZE", str(DEFAULT_IDENTITY_PAGE_SIZE))
        cache_ttl_env = os.getenv("IDENTITY_CACHE_TTL", str(DEFAULT_IDENTITY_CACHE_TTL))
        timeout_env = os.getenv("IDENTITY_TIMEOUT", "10")
        try:
            page_size = int(page_size_env)
            cache_ttl = int(cache_ttl_env)
            timeout = float(timeout_env)
        except ValueError as e:
            error_msg = f"Invalid numeric identity provider setting: {e}"
            raise ValueError(error_msg) from e

        # SSL verification for the identity provider
        ssl_verify_env = os.getenv("IDENTITY_SSL_VERIFY", "true").lower()
        ssl_verify = ssl_verify_env not in ("false", "0", "no")

        return cls(
            default_reporter_id=os.getenv("DEFAULT_REPORTER_ID") or None,
            default_creator_id=os.getenv("DEFAULT_CREATOR_ID") or None,
            identity_api_url=os.getenv("CLERK_API_URL", DEFAULT_IDENTITY_API_URL),
            identity_secret_key=os.getenv("CLERK_SECRET_KEY") or None,
            identity_page_size=page_size,
            identity_cache_ttl=cache_ttl,
            identity_timeout=timeout,
            ssl_verify=ssl_verify,
            seed_file=os.getenv("ISSUEBOARD_SEED_FILE") or None,
            project_key=os.getenv("PROJECT_KEY") or DEFAULT_PROJECT_KEY,
        )

    @property
    def is_identity_provider_configured(self) -> bool:
        """Check if external identity lookups can be made.

        Returns:
            True if both the provider URL and secret key are set
        """
        return bool(self.identity_api_url and self.identity_secret_key)
