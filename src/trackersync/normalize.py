"""Marker vocabulary shared by the parser and the tracker adapters.

Markers are bracketed tokens inside task text (``[P0]``, ``[3pt]``,
``[bug]``) plus a handful of coloured emoji glyphs used as priority
shorthand. Parsing only recognises the fixed vocabularies below; anything
else stays in the title as plain text.
"""

from __future__ import annotations

import re

from .models import Priority

LABEL_VOCABULARY = (
    "feature",
    "bug",
    "tech-debt",
    "research",
    "design",
    "devops",
    "security",
    "testing",
    "documentation",
)

PRIORITY_GLYPHS = {
    "\U0001F534": Priority.HIGHEST,  # red circle
    "\U0001F7E0": Priority.HIGH,  # orange circle
    "\U0001F7E1": Priority.MEDIUM,  # yellow circle
    "\U0001F7E2": Priority.LOW,  # green circle
}

PRIORITY_WORDS = {
    "p0": Priority.HIGHEST,
    "urgent": Priority.HIGHEST,
    "critical": Priority.HIGHEST,
    "highest": Priority.HIGHEST,
    "p1": Priority.HIGH,
    "high": Priority.HIGH,
    "p2": Priority.MEDIUM,
    "medium": Priority.MEDIUM,
    "p3": Priority.LOW,
    "low": Priority.LOW,
    "p4": Priority.LOWEST,
    "lowest": Priority.LOWEST,
}

# Tier order decides which marker wins when several are present.
_TIER_ORDER = (
    Priority.HIGHEST,
    Priority.HIGH,
    Priority.MEDIUM,
    Priority.LOW,
    Priority.LOWEST,
)

ESTIMATE_FACTORS = {
    "h": 1,
    "hr": 1,
    "hrs": 1,
    "hour": 1,
    "hours": 1,
    "d": 8,
    "day": 8,
    "days": 8,
    "w": 40,
    "wk": 40,
    "wks": 40,
    "week": 40,
    "weeks": 40,
    "pt": 1,
    "pts": 1,
    "sp": 1,
    "point": 1,
    "points": 1,
}

_PRIORITY_MARKER_RE = re.compile(
    r"\[(" + "|".join(sorted(PRIORITY_WORDS, key=len, reverse=True)) + r")\]",
    re.IGNORECASE,
)
_ESTIMATE_MARKER_RE = re.compile(
    r"\[(\d+(?:\.\d+)?)\s*("
    + "|".join(sorted(ESTIMATE_FACTORS, key=len, reverse=True))
    + r")\]",
    re.IGNORECASE,
)
_LABEL_MARKER_RE = re.compile(
    r"\[(" + "|".join(re.escape(lbl) for lbl in LABEL_VOCABULARY) + r")\]",
    re.IGNORECASE,
)
_GLYPH_RE = re.compile("[" + "".join(PRIORITY_GLYPHS) + "]")
_SPACES_RE = re.compile(r"\s{2,}")


def parse_priority(text: str) -> Priority:
    """Return the highest tier named by any priority marker in ``text``."""
    found: set[Priority] = set()
    for match in _PRIORITY_MARKER_RE.finditer(text):
        found.add(PRIORITY_WORDS[match.group(1).lower()])
    for glyph, tier in PRIORITY_GLYPHS.items():
        if glyph in text:
            found.add(tier)
    for tier in _TIER_ORDER:
        if tier in found:
            return tier
    return Priority.NONE


def convert_estimate(value: float, unit: str) -> int | float:
    converted = value * ESTIMATE_FACTORS.get(unit.lower(), 1)
    if float(converted).is_integer():
        return int(converted)
    return converted


def parse_estimate(text: str) -> int | float | None:
    match = _ESTIMATE_MARKER_RE.search(text)
    if not match:
        return None
    return convert_estimate(float(match.group(1)), match.group(2))


def parse_labels(text: str) -> frozenset[str]:
    return frozenset(m.group(1).lower() for m in _LABEL_MARKER_RE.finditer(text))


def clean_title(text: str) -> str:
    cleaned = _PRIORITY_MARKER_RE.sub("", text)
    cleaned = _ESTIMATE_MARKER_RE.sub("", cleaned)
    cleaned = _LABEL_MARKER_RE.sub("", cleaned)
    cleaned = _GLYPH_RE.sub("", cleaned)
    return _SPACES_RE.sub(" ", cleaned).strip()


# ---- per-target vocabularies -------------------------------------------

GITHUB_PRIORITY_LABELS: dict[Priority, str | None] = {
    Priority.HIGHEST: "priority: critical",
    Priority.HIGH: "priority: high",
    Priority.MEDIUM: "priority: medium",
    Priority.LOW: "priority: low",
    Priority.LOWEST: "priority: low",
    Priority.NONE: None,
}

# Linear: 0 = no priority, 1 = urgent, 2 = high, 3 = medium, 4 = low
LINEAR_PRIORITIES: dict[Priority, int] = {
    Priority.HIGHEST: 1,
    Priority.HIGH: 2,
    Priority.MEDIUM: 3,
    Priority.LOW: 4,
    Priority.LOWEST: 4,
    Priority.NONE: 0,
}

JIRA_PRIORITIES: dict[Priority, str | None] = {
    Priority.HIGHEST: "Highest",
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.LOW: "Low",
    Priority.LOWEST: "Lowest",
    Priority.NONE: None,
}


__all__ = [
    "ESTIMATE_FACTORS",
    "GITHUB_PRIORITY_LABELS",
    "JIRA_PRIORITIES",
    "LABEL_VOCABULARY",
    "LINEAR_PRIORITIES",
    "PRIORITY_GLYPHS",
    "PRIORITY_WORDS",
    "clean_title",
    "convert_estimate",
    "parse_estimate",
    "parse_labels",
    "parse_priority",
]
