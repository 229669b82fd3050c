"""Module for resolving user identities from the local store and the provider."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from ..exceptions import IdentityProviderError
from ..models.board import UserIdentity
from .protocols import IdentitySource

logger = logging.getLogger("mcp-issueboard.board.identity")


def _coerce_identity(record: Any) -> UserIdentity | None:
    if isinstance(record, UserIdentity):
        identity = record
    elif isinstance(record, Mapping):
        try:
            identity = UserIdentity.from_api_response(dict(record))
        except ValidationError as e:
            logger.debug(f"Skipping malformed identity record: {e}")
            return None
    else:
        logger.debug(f"Skipping identity record of unexpected type {type(record)}")
        return None

    if not identity.is_valid:
        logger.debug("Skipping identity record without an id")
        return None
    return identity


def _index_identities(records: Iterable[Any] | None) -> dict[str, UserIdentity]:
    indexed: dict[str, UserIdentity] = {}
    for record in records or ():
        identity = _coerce_identity(record)
        if identity is None:
            continue
        if identity.id in indexed:
            indexed[identity.id] = indexed[identity.id].merged_with(identity)
        else:
            indexed[identity.id] = identity
    return indexed


def resolve(
    local_users: Iterable[Any] | None,
    external_users: Iterable[Any] | None,
) -> dict[str, UserIdentity]:
    """
    Merge identities from the local store and the external provider.

    When both sources know a user, fields set on the local record win and
    the provider fills whatever the local record lacks (typically avatar and
    display name for a minimal local stub). Malformed records from either
    source are skipped.

    The resolver does no fetching: the external records are expected to
    come from calls that already respected the provider's per-call ceiling.

    Args:
        local_users: Identities (or raw records) from the local user store
        external_users: Identities (or raw records) from the identity provider

    Returns:
        Mapping of user id to merged identity
    """
    local = _index_identities(local_users)
    external = _index_identities(external_users)

    resolved: dict[str, UserIdentity] = dict(external)
    for user_id, identity in local.items():
        fallback = external.get(user_id)
        resolved[user_id] = identity.merged_with(fallback) if fallback else identity

    logger.debug(
        f"Resolved {len(resolved)} identities "
        f"({len(local)} local, {len(external)} external)"
    )
    return resolved


def collect_user_ids(*groups: Iterable[str | None]) -> list[str]:
    """Flatten id groups into a de-duplicated list, dropping empty ids."""
    seen: dict[str, None] = {}
    for group in groups:
        for user_id in group:
            if user_id:
                seen.setdefault(user_id, None)
    return list(seen)


def resolve_from_sources(
    user_ids: Iterable[str | None],
    local_source: IdentitySource,
    external_source: IdentitySource | None = None,
) -> dict[str, UserIdentity]:
    """
    Fetch identities from both sources and resolve them.

    A provider that rejects our credentials only costs the provider's data:
    the failure is logged and the local identities are still returned.

    Args:
        user_ids: Ids to resolve (None and duplicates are ignored)
        local_source: The local user store source
        external_source: The external identity provider source, if configured

    Returns:
        Mapping of user id to merged identity
    """
    ids = collect_user_ids(user_ids)
    if not ids:
        return {}

    local_users = local_source.fetch_many(ids)
    external_users: list[UserIdentity] = []
    if external_source is not None:
        try:
            external_users = external_source.fetch_many(ids)
        except IdentityProviderError as e:
            logger.error(f"Identity provider unavailable, using local users only: {e}")

    return resolve(local_users, external_users)
