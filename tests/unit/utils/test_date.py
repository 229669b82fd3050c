"Tests for the date utility functions."

from datetime import datetime, timezone

import pytest

from mcp_issueboard.utils import parse_date, utc_now


@pytest.mark.parametrize("value", [None, ""])
def test_parse_date_empty_values(value):
    """Test that parse_date returns None for empty values."""
    assert parse_date(value) is None


def test_parse_date_invalid_input():
    """Test that parse_date raises for strings that are not dates."""
    with pytest.raises(ValueError):
        parse_date("next sprint")


@pytest.mark.parametrize("value", [12.5, True, ["2024"]])
def test_parse_date_unsupported_types(value):
    with pytest.raises(TypeError):
        parse_date(value)


def test_parse_date_plain_date():
    """Test that a plain date parses to a naive midnight datetime."""
    assert str(parse_date("2024-03-05")) == "2024-03-05 00:00:00"


def test_parse_date_epoch_millis_as_str():
    """Test that digit-only strings are read as epoch milliseconds."""
    assert str(parse_date("1704112496000")) == "2024-01-01 12:34:56+00:00"


def test_parse_date_epoch_millis_as_int():
    """Test that integers are read as epoch milliseconds."""
    assert str(parse_date(1704112496000)) == "2024-01-01 12:34:56+00:00"
    assert parse_date(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_parse_date_iso8601_with_offset():
    """Test that ISO 8601 timestamps keep their offset."""
    parsed = parse_date("2024-01-02T10:00:00+02:00")
    assert parsed.utcoffset().total_seconds() == 7200
    assert parsed.hour == 10


def test_parse_date_zulu_suffix():
    assert parse_date("2024-01-02T10:00:00Z").tzinfo is not None


def test_parse_date_datetime_passthrough():
    now = datetime.now(timezone.utc)
    assert parse_date(now) is now


def test_utc_now_is_aware():
    assert utc_now().tzinfo == timezone.utc
