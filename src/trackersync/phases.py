"""Release-phase extraction.

Phases come from Markdown headers that start with ``phase``, ``sprint``,
``cycle`` or ``milestone``. Dates are read from the text that follows the
header; when no document names a phase the active ``NoPhasesFoundPolicy``
decides what happens.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Protocol

from .errors import NoPhasesFoundError
from .models import Document, Phase

CONTEXT_WINDOW = 500
DEFAULT_SPAN_DAYS = 14

_phase_header_re = re.compile(
    r"^#{1,6}[ \t]*(?P<keyword>phase|sprint|cycle|milestone)(?![a-z])"
    r"(?:[ \t]*(?P<number>\d+|[ivx]+)\b)?"
    r"(?P<rest>[^\n]*)$",
    re.IGNORECASE | re.MULTILINE,
)
_date_re = re.compile(r"\b(\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4})\b")
_empty_parens_re = re.compile(r"\(\s*[-–—to,\s]*\s*\)")
_DEFAULT_NAMES = ("Foundation", "Core Features")


def _parse_date(value: str) -> date | None:
    for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _phase_name(keyword: str, number: str | None, rest: str) -> str:
    head = f"{keyword} {number}" if number else keyword
    separated = rest.lstrip().startswith((":", "-", "–", "—"))
    rest = _date_re.sub("", rest)
    rest = _empty_parens_re.sub("", rest)
    rest = rest.strip().strip(" \t:-–—/,")
    if not rest:
        return head
    if number or separated:
        return f"{head}: {rest}"
    return f"{head} {rest}"


def _description(context: str) -> str | None:
    for line in context.split("\n")[1:4]:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return stripped
    return None


def phases_in_text(text: str) -> list[Phase]:
    phases: list[Phase] = []
    for m in _phase_header_re.finditer(text):
        context = text[m.start() : m.start() + CONTEXT_WINDOW]
        dates = [d.group(1) for d in _date_re.finditer(context)][:2]
        start = _parse_date(dates[0]) if dates else None
        end = _parse_date(dates[1]) if len(dates) > 1 else None
        phases.append(
            Phase(
                name=_phase_name(m.group("keyword"), m.group("number"), m.group("rest")),
                start_date=start,
                end_date=end,
                description=_description(context),
            )
        )
    return phases


class NoPhasesFoundPolicy(Protocol):
    def resolve(self, today: date) -> list[Phase]: ...  # pragma: no cover - structural only


@dataclass(frozen=True)
class SynthesizeDefaults:
    """Substitute evenly spaced placeholder phases starting today."""

    count: int = 2
    span_days: int = DEFAULT_SPAN_DAYS
    prefix: str = "Phase"

    def resolve(self, today: date) -> list[Phase]:
        phases: list[Phase] = []
        span = timedelta(days=self.span_days)
        for idx in range(self.count):
            suffix = f" - {_DEFAULT_NAMES[idx]}" if idx < len(_DEFAULT_NAMES) else ""
            start = today + span * idx
            phases.append(
                Phase(name=f"{self.prefix} {idx + 1}{suffix}", start_date=start, end_date=start + span)
            )
        return phases


class FailIfNoPhases:
    def resolve(self, today: date) -> list[Phase]:
        raise NoPhasesFoundError("No phase, sprint, cycle or milestone headers found")


def extract_phases(
    documents: Iterable[Document],
    policy: NoPhasesFoundPolicy | None = None,
    *,
    today: date | None = None,
) -> list[Phase]:
    phases: list[Phase] = []
    for doc in documents:
        phases.extend(phases_in_text(doc.content))
    if phases:
        return phases
    return (policy or SynthesizeDefaults()).resolve(today or date.today())


def schedule_phases(
    phases: Iterable[Phase], start: date, span_days: int = DEFAULT_SPAN_DAYS
) -> list[Phase]:
    """Fill missing dates so every phase covers a concrete window.

    Phases without a start begin where the previous one ended; phases
    without an end last ``span_days``.
    """
    scheduled: list[Phase] = []
    cursor = start
    for phase in phases:
        begin = phase.start_date or cursor
        finish = phase.end_date or begin + timedelta(days=span_days)
        scheduled.append(replace(phase, start_date=begin, end_date=finish))
        cursor = finish
    return scheduled


__all__ = [
    "FailIfNoPhases",
    "NoPhasesFoundPolicy",
    "SynthesizeDefaults",
    "extract_phases",
    "phases_in_text",
    "schedule_phases",
]
