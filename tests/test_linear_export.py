from __future__ import annotations

import asyncio
from datetime import date

import pytest
from fakes import DummyResponse, DummySession

from trackersync.config import ConfigError, LinearTargetConfig
from trackersync.exporter import Exporter
from trackersync.linear_export import LinearAdapter, create_linear_adapter
from trackersync.linear_graphql import LinearClient
from trackersync.models import CreatedEntity, Document, ExportOptions, Phase, Priority, WorkItem


def _adapter(responses: list[DummyResponse]) -> tuple[LinearAdapter, DummySession]:
    session = DummySession(responses)
    return LinearAdapter(LinearClient(api_key="lin_api_key", team_id="TEAM", session=session)), session


def _data(payload: dict) -> DummyResponse:
    return DummyResponse(200, {"data": payload})


def _created_issue(ident: str, identifier: str) -> DummyResponse:
    return _data({"issueCreate": {"success": True, "issue": {"id": ident, "identifier": identifier}}})


def test_priorities_map_to_linear_integers():
    adapter, _ = _adapter([])

    assert adapter.normalize_priority(Priority.HIGHEST) == 1
    assert adapter.normalize_priority(Priority.LOW) == 4
    assert adapter.normalize_priority(Priority.NONE) == 0


def test_plan_phases_schedules_cycles():
    adapter, _ = _adapter([])

    phases = adapter.plan_phases([Phase("Cycle 1"), Phase("Cycle 2")], date(2024, 1, 1))

    assert phases[0].start_date == date(2024, 1, 1)
    assert phases[1].start_date == phases[0].end_date


def test_ensure_label_reuses_existing_labels():
    adapter, session = _adapter(
        [
            _data({"team": {"labels": {"nodes": [{"id": "l-bug", "name": "Bug"}]}}}),
            _data({"issueLabelCreate": {"success": True, "issueLabel": {"id": "l-new"}}}),
        ]
    )

    async def scenario():
        existing = await adapter.ensure_label(adapter.label_catalog(ExportOptions())[-5])
        created = await adapter.ensure_label(adapter.label_catalog(ExportOptions())[0])
        return existing, created

    existing, created = asyncio.run(scenario())

    assert (existing.name, existing.id) == ("bug", "l-bug")
    assert (created.name, created.id) == ("prd", "l-new")
    assert len(session.request_log) == 2


def test_cycle_requires_window():
    adapter, _ = _adapter([])

    with pytest.raises(ValueError):
        asyncio.run(adapter.create_container(Phase("Cycle 1"), ExportOptions()))


@pytest.mark.asyncio
async def test_create_item_sets_parent_cycle_and_project():
    adapter, session = _adapter(
        [
            _data({"team": {"states": {"nodes": [{"id": "s-backlog", "type": "backlog"}]}}}),
            _created_issue("i-child", "ENG-2"),
        ]
    )
    parent = CreatedEntity(
        id="i-parent", key="ENG-1", name="Parent", kind="issue", extra={"project_id": "p-1"}
    )
    cycle = CreatedEntity(id="c-1", key="1", name="Cycle 1", kind="cycle")

    child = await adapter.create_item(
        WorkItem("Child", priority=Priority.MEDIUM, estimate=3), parent=parent, container=cycle
    )

    sent = session.request_log[1][2]["json"]["variables"]["input"]
    assert sent == {
        "teamId": "TEAM",
        "title": "Child",
        "priority": 3,
        "estimate": 3,
        "stateId": "s-backlog",
        "parentId": "i-parent",
        "cycleId": "c-1",
        "projectId": "p-1",
    }
    assert (child.key, child.kind) == ("ENG-2", "subtask")


def test_export_creates_project_and_links_at_creation():
    adapter, session = _adapter(
        [
            _data({"viewer": {"id": "u1"}}),
            _data({"projectCreate": {"success": True, "project": {"id": "p-1", "name": "Launch"}}}),
            _data({"team": {"states": {"nodes": []}}}),
            _created_issue("i-1", "ENG-1"),
            _created_issue("i-2", "ENG-2"),
        ]
    )
    doc = Document("tasks.md", "- Parent task\n    - Child task\n")
    options = ExportOptions(container_name="Launch", sync_labels=False)

    result = asyncio.run(Exporter(adapter).export([doc], options))

    assert result.success, result.errors
    assert [e.key for e in result.top_level] == ["p-1"]
    child_input = session.request_log[-1][2]["json"]["variables"]["input"]
    assert child_input["parentId"] == "i-1"
    assert child_input["projectId"] == "p-1"
    assert len(session.request_log) == 5


def test_factory_requires_team_and_key():
    with pytest.raises(ConfigError):
        create_linear_adapter(LinearTargetConfig(api_key="lin_api_x"))
    with pytest.raises(ConfigError):
        create_linear_adapter(LinearTargetConfig(team_id="TEAM"))

    adapter = create_linear_adapter(LinearTargetConfig(team_id="TEAM"), require_credentials=False)
    assert adapter.client.team_id == "TEAM"
