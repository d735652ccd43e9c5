from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from .models import Priority, WorkItem
from .normalize import clean_title, parse_estimate, parse_labels, parse_priority

CHILD_INDENT = 4
MIN_TITLE_LENGTH = 4

_bullet_re = re.compile(r"^(?P<indent>\s*)[-*]\s+(?:\[[ xX]\]\s*)?(?P<text>.+)$")
_numbered_re = re.compile(r"^\d+\.\s+(?P<text>.+)$")
_header_re = re.compile(r"^\s*#{1,6}\s")


class TextToWorkItems(Protocol):
    """Strategy turning loosely structured Markdown into work items."""

    def parse(self, text: str) -> list[WorkItem]: ...  # pragma: no cover - structural only


@dataclass
class _Draft:
    title: str
    priority: Priority
    estimate: int | float | None
    labels: frozenset[str]
    description: list[str] = field(default_factory=list)
    children: list[WorkItem] = field(default_factory=list)

    def freeze(self) -> WorkItem:
        return WorkItem(
            title=self.title,
            description='\n'.join(self.description) or None,
            priority=self.priority,
            estimate=self.estimate,
            labels=self.labels,
            children=tuple(self.children),
        )


def _draft_from_text(raw: str) -> _Draft:
    # Markers are read from the raw text before the title is cleaned.
    return _Draft(
        title=clean_title(raw),
        priority=parse_priority(raw),
        estimate=parse_estimate(raw),
        labels=parse_labels(raw),
    )


class MarkdownTaskParser:
    """Regex heuristics over bullet and numbered lists.

    Top-level bullets (indent below ``CHILD_INDENT``) open a work item;
    deeper bullets attach to the most recently opened item as children.
    Nesting stops at one level: any indentation at or past the threshold
    lands on the current top-level item.
    """

    def __init__(self, child_indent: int = CHILD_INDENT) -> None:
        self.child_indent = child_indent

    def parse(self, text: str) -> list[WorkItem]:
        if not text:
            return []
        drafts = self._scan_bullets(text.splitlines())
        items = [d.freeze() for d in drafts]
        seen = {item.title for item in items}
        for item in self._scan_numbered(text.splitlines()):
            if item.title in seen:
                continue
            seen.add(item.title)
            items.append(item)
        return items

    def _scan_bullets(self, lines: list[str]) -> list[_Draft]:
        drafts: list[_Draft] = []
        current: _Draft | None = None
        collecting = False
        for raw_line in lines:
            line = raw_line.expandtabs(CHILD_INDENT)
            m = _bullet_re.match(line)
            if m:
                indent = len(m.group('indent'))
                draft = _draft_from_text(m.group('text').strip())
                if len(draft.title) < MIN_TITLE_LENGTH:
                    continue
                if indent < self.child_indent:
                    current = draft
                    drafts.append(current)
                    collecting = True
                elif current is not None:
                    current.children.append(
                        WorkItem(
                            title=draft.title,
                            priority=draft.priority,
                            estimate=draft.estimate,
                            labels=draft.labels,
                        )
                    )
                continue
            if _header_re.match(line):
                collecting = False
                continue
            stripped = line.strip()
            if not stripped or _numbered_re.match(stripped):
                continue
            if current is not None and collecting:
                current.description.append(stripped)
        return drafts

    @staticmethod
    def _scan_numbered(lines: list[str]) -> list[WorkItem]:
        items: list[WorkItem] = []
        for line in lines:
            m = _numbered_re.match(line)
            if not m:
                continue
            draft = _draft_from_text(m.group('text').strip())
            if len(draft.title) < MIN_TITLE_LENGTH:
                continue
            items.append(draft.freeze())
        return items


_DEFAULT_PARSER = MarkdownTaskParser()


def parse_work_items(text: str, parser: TextToWorkItems | None = None) -> list[WorkItem]:
    return (parser or _DEFAULT_PARSER).parse(text)


__all__ = [
    "CHILD_INDENT",
    "MarkdownTaskParser",
    "TextToWorkItems",
    "parse_work_items",
]
