"""Unit tests for settings helpers."""

from datetime import timedelta

import pytest

from finquest.config import Settings, parse_duration


@pytest.mark.parametrize(
    "value, expected",
    [
        ("7d", timedelta(days=7)),
        ("30d", timedelta(days=30)),
        ("15m", timedelta(minutes=15)),
        ("12h", timedelta(hours=12)),
        ("2w", timedelta(weeks=2)),
        ("45s", timedelta(seconds=45)),
        ("3600", timedelta(seconds=3600)),
        (" 1D ", timedelta(days=1)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "d7", "7 days", "-1d", "1.5h"])
def test_parse_duration_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_settings_reject_bad_lifetime():
    with pytest.raises(ValueError):
        Settings(jwt_secret="a", jwt_refresh_secret="b", jwt_expire="soon")


def test_settings_derived_values():
    config = Settings(
        jwt_secret="a",
        jwt_refresh_secret="b",
        jwt_expire="1h",
        app_env="Production",
    )

    assert config.access_token_lifetime == timedelta(hours=1)
    assert config.refresh_token_lifetime == timedelta(days=30)
    assert config.is_production is True
