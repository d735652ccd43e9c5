from __future__ import annotations

from trackersync.documents import (
    BACKLOG_PHASE,
    extract_description,
    infer_phase_name,
    load_documents,
)
from trackersync.models import Document


def test_load_documents_reads_files(tmp_path):
    path = tmp_path / "tasks.md"
    path.write_text("- Build thing\n", encoding="utf-8")

    (doc,) = load_documents([path])

    assert doc == Document("tasks.md", "- Build thing\n")


def test_description_prefers_prd_summary():
    docs = [
        Document("tasks.md", "- Something"),
        Document(
            "PRD.md",
            "# Product\n## Executive Summary\nWe build X.\n\nFor Y teams.\n## Goals\nIgnored",
        ),
    ]

    assert extract_description(docs) == "We build X.\nFor Y teams."


def test_description_falls_back_to_first_document():
    docs = [Document("notes.md", "abcdefghij")]

    assert extract_description(docs, limit=4) == "abcd"
    assert extract_description([]) == ""


def test_infer_phase_name():
    assert infer_phase_name(Document("a.md", "intro\n## Phase 2: Core\n- task")) == "Phase 2"
    assert infer_phase_name(Document("b.md", "# Sprint\n- task")) == "Sprint"
    assert infer_phase_name(Document("c.md", "- task only")) == BACKLOG_PHASE
