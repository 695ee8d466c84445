"""Tests for the CLI's human-readable formatting."""

import pytest

from cache_cli import format_age, format_size

NOW = 1_700_000_000.0


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (-5, "0 B"),
        (512, "512.0 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024**3, "3.0 GB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    "seconds_ago, expected",
    [
        (60, "1 minute ago"),
        (30 * 60, "30 minutes ago"),
        (3600, "1 hour ago"),
        (5 * 3600, "5 hours ago"),
        (24 * 3600, "1 day ago"),
        (3 * 24 * 3600, "3 days ago"),
    ],
)
def test_format_age(seconds_ago, expected):
    assert format_age(NOW - seconds_ago, now=NOW) == expected


def test_format_age_never():
    assert format_age(None) == "Never"
