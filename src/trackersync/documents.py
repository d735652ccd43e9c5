from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from .models import Document

BACKLOG_PHASE = "Backlog"
SUMMARY_SCAN_LINES = 10

_doc_phase_re = re.compile(
    r"^#{1,6}[ \t]*(phase|sprint|cycle|milestone)(?![a-z])(?:[ \t]*(\d+|[ivx]+)\b)?",
    re.IGNORECASE | re.MULTILINE,
)


def load_documents(paths: Iterable[str | Path]) -> list[Document]:
    docs: list[Document] = []
    for raw in paths:
        p = Path(raw)
        docs.append(Document(name=p.name, content=p.read_text(encoding="utf-8")))
    return docs


def extract_description(documents: list[Document], limit: int = 500) -> str:
    """Summary text for a top-level container.

    Prefers the lines following a "summary"/"overview" line in a PRD or
    product document; otherwise the leading text of the first document.
    """
    prd = next(
        (d for d in documents if "prd" in d.name.lower() or "product" in d.name.lower()),
        None,
    )
    if prd is not None:
        lines = prd.content.splitlines()
        start = next(
            (
                i
                for i, line in enumerate(lines)
                if "summary" in line.lower() or "overview" in line.lower()
            ),
            None,
        )
        if start is not None:
            picked: list[str] = []
            for line in lines[start + 1 : start + SUMMARY_SCAN_LINES]:
                if line.startswith("#"):
                    break
                if line.strip():
                    picked.append(line)
            return "\n".join(picked)[:limit]
    if not documents:
        return ""
    return documents[0].content[:limit]


def infer_phase_name(document: Document) -> str:
    """Phase a document's tasks belong to: its first phase-like header."""
    m = _doc_phase_re.search(document.content)
    if not m:
        return BACKLOG_PHASE
    keyword, number = m.group(1), m.group(2)
    return f"{keyword} {number}" if number else keyword


__all__ = [
    "BACKLOG_PHASE",
    "extract_description",
    "infer_phase_name",
    "load_documents",
]
