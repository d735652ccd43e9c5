"""Jira target: components, sprints or fix versions, an Epic, Stories and Sub-tasks."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from .adapters import LabelSpec, TrackerAdapter, run_blocking
from .config import ConfigError, JiraTargetConfig
from .exporter import Exporter
from .jira_rest import JiraClient
from .models import (
    CreatedEntity,
    Document,
    ExportOptions,
    ExportResult,
    Phase,
    Priority,
    WorkItem,
)
from .normalize import JIRA_PRIORITIES

CATEGORY_COMPONENTS = {
    "feature": "Features",
    "bug": "Bug Fixes",
    "tech-debt": "Technical Debt",
    "research": "Research",
    "design": "Design",
    "devops": "DevOps",
    "security": "Security",
    "testing": "Testing",
}

ISSUE_TYPE_EPIC = "Epic"
ISSUE_TYPE_STORY = "Story"
ISSUE_TYPE_SUBTASK = "Sub-task"


def _sprint_datetime(value: date | None) -> str | None:
    return f"{value.isoformat()}T00:00:00.000Z" if value is not None else None


class JiraAdapter(TrackerAdapter):
    """Components stand in for labels; sprints or versions for phases.

    Sub-tasks get their parent on create, so ``link_child`` only has work to
    do for Stories joining the Epic.
    """

    target = "jira"
    default_phase_prefix = "Sprint"
    top_level_kind = "epic"

    def __init__(
        self,
        client: JiraClient,
        *,
        container_kind: str = "sprint",
        board_id: int | None = None,
        story_points_field: str | None = None,
    ) -> None:
        self.client = client
        self.container_kind = container_kind
        self.board_id = board_id
        self.story_points_field = story_points_field
        self.accepts_estimate = bool(story_points_field)
        self._components: set[str] | None = None

    async def verify(self) -> None:
        await run_blocking(self.client.verify)

    def label_catalog(self, options: ExportOptions) -> list[LabelSpec]:
        return [
            LabelSpec(name, "", f"{category} work") for category, name in CATEGORY_COMPONENTS.items()
        ]

    def normalize_priority(self, priority: Priority) -> str | None:
        return JIRA_PRIORITIES[priority]

    async def ensure_label(self, spec: LabelSpec) -> CreatedEntity:
        if self._components is None:
            existing = await run_blocking(self.client.components)
            self._components = {str(c.get("name")) for c in existing}
        if spec.name in self._components:
            return CreatedEntity(id=spec.name, key=spec.name, name=spec.name, kind="component")
        data = await run_blocking(
            self.client.create_component, name=spec.name, description=spec.description
        )
        self._components.add(spec.name)
        return CreatedEntity(
            id=str(data.get("id", spec.name)),
            key=spec.name,
            name=spec.name,
            kind="component",
            url=data.get("self"),
        )

    async def _board(self) -> int:
        if self.board_id is None:
            boards = await run_blocking(self.client.boards)
            scrum = next((b for b in boards if b.get("type") == "scrum"), None)
            if scrum is None:
                raise ConfigError(
                    f"no scrum board found for project {self.client.project_key}; set jira.board_id"
                )
            self.board_id = int(scrum["id"])
        return self.board_id

    async def create_container(self, phase: Phase, options: ExportOptions) -> CreatedEntity:
        if self.container_kind == "version":
            data = await run_blocking(
                self.client.create_version,
                name=phase.name,
                description=phase.description,
                start_date=phase.start_date.isoformat() if phase.start_date else None,
                release_date=phase.end_date.isoformat() if phase.end_date else None,
            )
        else:
            data = await run_blocking(
                self.client.create_sprint,
                name=phase.name,
                board_id=await self._board(),
                start_date=_sprint_datetime(phase.start_date),
                end_date=_sprint_datetime(phase.end_date),
                goal=phase.description,
            )
        return CreatedEntity(
            id=str(data["id"]),
            key=str(data["id"]),
            name=str(data.get("name", phase.name)),
            kind=self.container_kind,
            url=data.get("self"),
        )

    async def create_top_level(
        self, name: str, description: str, options: ExportOptions
    ) -> CreatedEntity:
        data = await run_blocking(
            self.client.create_issue,
            summary=name,
            issue_type=ISSUE_TYPE_EPIC,
            description=description or None,
        )
        return self._entity(data, name=name, kind="epic")

    async def create_item(
        self,
        item: WorkItem,
        *,
        parent: CreatedEntity | None = None,
        container: CreatedEntity | None = None,
        top_level: CreatedEntity | None = None,
        labels: Iterable[str] = (),
    ) -> CreatedEntity:
        label_names = sorted(labels)
        components = [CATEGORY_COMPONENTS[n] for n in label_names if n in CATEGORY_COMPONENTS]
        extra_fields: dict[str, Any] = {}
        if self.story_points_field and item.estimate is not None:
            extra_fields[self.story_points_field] = item.estimate
        fix_versions = (
            [container.name]
            if container is not None and container.kind == "version" and parent is None
            else None
        )
        data = await run_blocking(
            self.client.create_issue,
            summary=item.title,
            issue_type=ISSUE_TYPE_SUBTASK if parent is not None else ISSUE_TYPE_STORY,
            description=item.description,
            parent_key=parent.key if parent is not None else None,
            priority=self.normalize_priority(item.priority),
            labels=label_names or None,
            components=components or None,
            fix_versions=fix_versions,
            extra_fields=extra_fields or None,
        )
        entity = self._entity(data, name=item.title, kind="subtask" if parent else "issue")
        entity.parent_id = parent.id if parent is not None else None
        entity.container_id = container.id if container is not None else None
        return entity

    async def assign_container(self, item: CreatedEntity, container: CreatedEntity) -> None:
        if container.kind == "sprint":
            await run_blocking(self.client.add_to_sprint, int(container.id), [item.key])

    async def link_child(self, parent: CreatedEntity, child: CreatedEntity) -> None:
        if child.kind == "subtask":
            return
        await run_blocking(self.client.link_to_epic, child.key, parent.key)

    def _entity(self, data: dict[str, Any], *, name: str, kind: str) -> CreatedEntity:
        key = str(data["key"])
        return CreatedEntity(
            id=str(data.get("id", key)),
            key=key,
            name=name,
            kind=kind,
            url=self.client.browse_url(key),
        )


def create_jira_adapter(
    config: JiraTargetConfig, *, require_credentials: bool = True
) -> JiraAdapter:
    if not config.project_key:
        raise ConfigError("jira.project_key is required")
    if require_credentials and not (config.base_url and config.email and config.api_token):
        raise ConfigError(
            "Jira credentials missing: set jira.base_url, jira.email and jira.api_token "
            "(or JIRA_BASE_URL, JIRA_EMAIL, JIRA_API_TOKEN)"
        )
    client = JiraClient(
        base_url=config.base_url or "",
        email=config.email or "",
        api_token=config.api_token or "",
        project_key=config.project_key,
    )
    return JiraAdapter(
        client,
        container_kind=config.container_kind,
        board_id=config.board_id,
        story_points_field=config.story_points_field,
    )


async def export_to_jira(
    documents: Iterable[Document],
    config: JiraTargetConfig,
    options: ExportOptions | None = None,
) -> ExportResult:
    return await Exporter(create_jira_adapter(config)).export(documents, options)


__all__ = [
    "CATEGORY_COMPONENTS",
    "JiraAdapter",
    "create_jira_adapter",
    "export_to_jira",
]
