"""Module for identity sources: the local user store and the external provider."""

import logging
import threading
from collections.abc import Iterable
from typing import Any

import requests
from cachetools import TTLCache
from requests import Session
from requests.exceptions import HTTPError

from ..exceptions import IdentityProviderError
from ..models.board import UserIdentity
from .config import BoardConfig
from .protocols import UserStoreProto

logger = logging.getLogger("mcp-issueboard.board.sources")


def identity_from_provider_user(data: Any) -> UserIdentity | None:
    """
    Convert an identity provider user object to a UserIdentity.

    Args:
        data: A user object from the provider's user listing

    Returns:
        The identity, or None for unusable data
    """
    if not isinstance(data, dict) or not data.get("id"):
        logger.debug(f"Skipping provider user without an id: {str(data)[:200]}")
        return None

    first_name = data.get("first_name") or ""
    last_name = data.get("last_name") or ""
    name = f"{first_name} {last_name}".strip() or data.get("username") or None

    email = None
    addresses = data.get("email_addresses")
    if isinstance(addresses, list) and addresses:
        primary_id = data.get("primary_email_address_id")
        primary = next(
            (
                address
                for address in addresses
                if isinstance(address, dict) and address.get("id") == primary_id
            ),
            addresses[0],
        )
        if isinstance(primary, dict):
            email = primary.get("email_address") or None

    avatar = data.get("image_url") or data.get("profile_image_url") or None
    return UserIdentity(id=str(data["id"]), name=name, email=email, avatar=avatar)


class LocalIdentitySource:
    """Identity source backed by the local user store."""

    def __init__(self, store: UserStoreProto) -> None:
        self.store = store

    def fetch_many(self, user_ids: Iterable[str]) -> list[UserIdentity]:
        ids = [user_id for user_id in user_ids if user_id]
        if not ids:
            return []
        return self.store.find_many(ids)


class ClerkIdentitySource:
    """Identity source backed by the external provider's user listing API.

    The provider serves at most ``config.identity_page_size`` users per call,
    so lookups are split into batches of that size. Fetched identities are
    kept in a TTL cache so repeated board reads do not refetch them.
    """

    def __init__(self, config: BoardConfig, session: Session | None = None) -> None:
        """Initialize the provider client.

        Args:
            config: Board configuration holding the provider settings
            session: Optional pre-configured requests session

        Raises:
            ValueError: If the provider secret key is not configured
        """
        if not config.is_identity_provider_configured:
            error_msg = "Identity provider requires CLERK_API_URL and CLERK_SECRET_KEY"
            raise ValueError(error_msg)

        self.config = config
        self.session = session or Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {config.identity_secret_key}",
                "Accept": "application/json",
            }
        )
        self.session.verify = config.ssl_verify
        self._cache: TTLCache[str, UserIdentity] = TTLCache(
            maxsize=1024, ttl=config.identity_cache_ttl
        )
        self._cache_lock = threading.Lock()

    @property
    def users_url(self) -> str:
        return f"{self.config.identity_api_url.rstrip('/')}/users"

    def _batches(self, user_ids: list[str]) -> Iterable[list[str]]:
        size = self.config.identity_page_size
        for start in range(0, len(user_ids), size):
            yield user_ids[start : start + size]

    def _get_user_list(self, user_ids: list[str]) -> list[Any]:
        """
        Call the provider's user listing for one batch of ids.

        Args:
            user_ids: At most ``identity_page_size`` ids

        Returns:
            The raw user objects, or an empty list when the call failed

        Raises:
            IdentityProviderError: If the provider rejects the credentials
        """
        params = {"user_id": user_ids, "limit": self.config.identity_page_size}
        try:
            response = self.session.get(
                self.users_url, params=params, timeout=self.config.identity_timeout
            )
            response.raise_for_status()
            data = response.json()
        except HTTPError as http_err:
            status_code = (
                http_err.response.status_code if http_err.response is not None else None
            )
            if status_code in (401, 403):
                logger.error(f"Identity provider rejected credentials: {status_code}")
                raise IdentityProviderError(
                    f"Identity provider denied access ({status_code})"
                ) from http_err
            logger.error(f"Error getting users from identity provider: {http_err}")
            return []
        except requests.RequestException as e:
            logger.error(f"Network error getting users from identity provider: {e}")
            return []
        except ValueError as e:
            logger.error(f"Identity provider returned invalid JSON: {e}")
            return []

        # Some deployments wrap the listing as {"data": [...]}
        if isinstance(data, dict):
            data = data.get("data", [])
        if not isinstance(data, list):
            msg = f"Unexpected return value type from identity provider: {type(data)}"
            logger.error(msg)
            return []
        return data

    def fetch_many(self, user_ids: Iterable[str]) -> list[UserIdentity]:
        """
        Fetch identities for the given ids, batching by the provider ceiling.

        Args:
            user_ids: Ids to look up

        Returns:
            Identities known to the provider

        Raises:
            IdentityProviderError: If the provider rejects the credentials
        """
        requested = list(dict.fromkeys(user_id for user_id in user_ids if user_id))
        found: dict[str, UserIdentity] = {}
        with self._cache_lock:
            for user_id in requested:
                cached = self._cache.get(user_id)
                if cached is not None:
                    found[user_id] = cached
        missing = [user_id for user_id in requested if user_id not in found]

        for batch in self._batches(missing):
            logger.debug(f"Fetching {len(batch)} users from identity provider")
            for raw_user in self._get_user_list(batch):
                identity = identity_from_provider_user(raw_user)
                if identity is None:
                    continue
                found[identity.id] = identity
                with self._cache_lock:
                    self._cache[identity.id] = identity

        return [found[user_id] for user_id in requested if user_id in found]
