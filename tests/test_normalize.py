from __future__ import annotations

import pytest

from trackersync.models import Priority
from trackersync.normalize import (
    GITHUB_PRIORITY_LABELS,
    JIRA_PRIORITIES,
    LINEAR_PRIORITIES,
    clean_title,
    convert_estimate,
    parse_estimate,
    parse_labels,
    parse_priority,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("[P0] crash", Priority.HIGHEST),
        ("[critical] crash", Priority.HIGHEST),
        ("[high] thing", Priority.HIGH),
        ("[p2] thing", Priority.MEDIUM),
        ("🟢 thing", Priority.LOW),
        ("[lowest] thing", Priority.LOWEST),
        ("plain thing", Priority.NONE),
    ],
)
def test_parse_priority(text, expected):
    assert parse_priority(text) is expected


def test_highest_marker_wins():
    assert parse_priority("[low] then [P1] then 🟡") is Priority.HIGH


def test_estimate_conversion():
    assert convert_estimate(2, "d") == 16
    assert convert_estimate(1.5, "h") == 1.5
    assert parse_estimate("[1.5w]") == 60
    assert parse_estimate("[3 pts]") == 3
    assert parse_estimate("[4h] then [2d]") == 4
    assert parse_estimate("no estimate") is None


def test_labels_are_lowercased_and_limited_to_vocabulary():
    assert parse_labels("[Bug] [feature] [unknown] [bug]") == frozenset({"bug", "feature"})


def test_clean_title_strips_markers():
    assert clean_title("🟠 Improve  caching [tech-debt] [2h] [P1]") == "Improve caching"
    assert clean_title("Keep [unknown] tag") == "Keep [unknown] tag"


def test_highest_tier_maps_to_top_priority_everywhere():
    assert GITHUB_PRIORITY_LABELS[Priority.HIGHEST] == "priority: critical"
    assert LINEAR_PRIORITIES[Priority.HIGHEST] == 1
    assert JIRA_PRIORITIES[Priority.HIGHEST] == "Highest"
    assert LINEAR_PRIORITIES[Priority.NONE] == 0
    assert JIRA_PRIORITIES[Priority.NONE] is None
