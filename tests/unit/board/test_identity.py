"""Tests for the identity resolution module."""

from unittest.mock import MagicMock

from mcp_issueboard.board.identity import (
    collect_user_ids,
    resolve,
    resolve_from_sources,
)
from mcp_issueboard.exceptions import IdentityProviderError
from mcp_issueboard.models.board import UserIdentity


def test_resolve_empty_sources():
    assert resolve([], []) == {}
    assert resolve(None, None) == {}


def test_resolve_local_fields_win_over_external():
    """A local stub keeps its own fields and borrows what it lacks."""
    local = [UserIdentity(id="u1", name="Local Name", email=None)]
    external = [
        UserIdentity(
            id="u1",
            name="Provider Name",
            email="u1@example.com",
            avatar="https://img.example.com/u1.png",
        )
    ]

    resolved = resolve(local, external)

    assert resolved["u1"].name == "Local Name"
    assert resolved["u1"].email == "u1@example.com"
    assert resolved["u1"].avatar == "https://img.example.com/u1.png"


def test_resolve_keeps_users_known_to_one_source():
    resolved = resolve(
        [UserIdentity(id="local-only", name="L")],
        [UserIdentity(id="external-only", name="E")],
    )
    assert set(resolved) == {"local-only", "external-only"}


def test_resolve_accepts_raw_records():
    resolved = resolve(
        [{"id": "u1", "name": "Ada", "avatarUrl": "https://img.example.com/a.png"}],
        [],
    )
    assert resolved["u1"].avatar == "https://img.example.com/a.png"


def test_resolve_skips_malformed_records():
    local = [
        None,
        "not-a-record",
        {"name": "no id"},
        {"id": "   "},
        {"id": "u1", "name": "Valid"},
    ]
    resolved = resolve(local, [42])
    assert list(resolved) == ["u1"]


def test_collect_user_ids_deduplicates_and_drops_empty():
    assert collect_user_ids(["a", None, "b"], ["a", "", "c"]) == ["a", "b", "c"]


def test_resolve_from_sources_merges_both_sources():
    local_source = MagicMock()
    local_source.fetch_many.return_value = [UserIdentity(id="u1", name="Local")]
    external_source = MagicMock()
    external_source.fetch_many.return_value = [
        UserIdentity(id="u1", name="Remote", avatar="https://img.example.com/u1.png")
    ]

    resolved = resolve_from_sources(["u1", None, "u1"], local_source, external_source)

    local_source.fetch_many.assert_called_once_with(["u1"])
    external_source.fetch_many.assert_called_once_with(["u1"])
    assert resolved["u1"].name == "Local"
    assert resolved["u1"].avatar == "https://img.example.com/u1.png"


def test_resolve_from_sources_without_ids_skips_fetching():
    local_source = MagicMock()
    assert resolve_from_sources([None, ""], local_source) == {}
    local_source.fetch_many.assert_not_called()


def test_resolve_from_sources_degrades_when_provider_rejects(caplog):
    local_source = MagicMock()
    local_source.fetch_many.return_value = [UserIdentity(id="u1", name="Local")]
    external_source = MagicMock()
    external_source.fetch_many.side_effect = IdentityProviderError("denied (401)")

    resolved = resolve_from_sources(["u1"], local_source, external_source)

    assert resolved["u1"].name == "Local"
    assert "Identity provider unavailable" in caplog.text
