"""GitHub target: milestones, an epic tracking issue and sub-issues."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .adapters import LabelSpec, TrackerAdapter, run_blocking
from .config import ConfigError, GitHubTargetConfig
from .errors import HTTP_UNPROCESSABLE, TrackerAPIError, VerificationError
from .exporter import Exporter
from .github_rest import GitHubRestClient
from .logging import get_logger
from .models import (
    CreatedEntity,
    Document,
    ExportOptions,
    ExportResult,
    Phase,
    Priority,
    WorkItem,
)
from .normalize import GITHUB_PRIORITY_LABELS

STANDARD_LABELS = (
    LabelSpec("blueprint", "5319E7", "Generated from planning documents"),
    LabelSpec("task", "1D76DB", "Implementation task"),
    LabelSpec("epic", "3E4B9E", "Tracking issue grouping related work"),
)

CATEGORY_LABELS = (
    LabelSpec("feature", "0052CC", "New functionality"),
    LabelSpec("bug", "DE350B", "Something is not working"),
    LabelSpec("tech-debt", "FF8B00", "Refactoring or cleanup"),
    LabelSpec("research", "6554C0", "Investigation or spike"),
    LabelSpec("design", "00B8D9", "UX or system design"),
    LabelSpec("devops", "36B37E", "Build, deploy and infrastructure"),
    LabelSpec("security", "DD4124", "Security related"),
    LabelSpec("testing", "EFC050", "Test coverage"),
    LabelSpec("documentation", "5B5EA6", "Docs and guides"),
)

PRIORITY_LABELS = (
    LabelSpec("priority: critical", "B60205", "Must be addressed immediately"),
    LabelSpec("priority: high", "D93F0B", "High priority"),
    LabelSpec("priority: medium", "FBCA04", "Medium priority"),
    LabelSpec("priority: low", "0E8A16", "Low priority"),
)

PROJECT_LABEL_COLOR = "7057FF"


def _due_on(phase: Phase) -> str | None:
    if phase.end_date is None:
        return None
    return f"{phase.end_date.isoformat()}T00:00:00Z"


def render_issue_body(item: WorkItem, *, include_children: bool = True) -> str:
    sections: list[str] = []
    if item.description:
        sections.append(item.description)
    if item.estimate is not None:
        sections.append(f"**Estimate:** {item.estimate}")
    if include_children and item.children:
        checklist = "\n".join(f"- [ ] {child.title}" for child in item.children)
        sections.append(f"### Sub-tasks\n\n{checklist}")
    sections.append("_Created by trackersync_")
    return "\n\n".join(sections)


class GitHubAdapter(TrackerAdapter):
    target = "github"
    default_phase_prefix = "Milestone"
    container_kind = "milestone"
    top_level_kind = "epic"

    def __init__(self, client: GitHubRestClient) -> None:
        self.client = client
        self.logger = get_logger()

    async def verify(self) -> None:
        repo = await run_blocking(self.client.get_repo)
        permissions = repo.get("permissions") or {}
        if permissions and not (permissions.get("push") or permissions.get("admin")):
            raise VerificationError(f"token lacks push access to {self.client.repo}")

    def label_catalog(self, options: ExportOptions) -> list[LabelSpec]:
        labels = [*STANDARD_LABELS, *CATEGORY_LABELS, *PRIORITY_LABELS]
        if options.label_prefix:
            labels.append(
                LabelSpec(
                    options.label_prefix,
                    PROJECT_LABEL_COLOR,
                    f"{options.container_name or options.label_prefix} project",
                )
            )
        return labels

    def normalize_priority(self, priority: Priority) -> str | None:
        return GITHUB_PRIORITY_LABELS[priority]

    async def ensure_label(self, spec: LabelSpec) -> CreatedEntity:
        try:
            data = await run_blocking(
                self.client.create_label,
                name=spec.name,
                color=spec.color,
                description=spec.description,
            )
        except TrackerAPIError as exc:
            if exc.status != HTTP_UNPROCESSABLE:
                raise
            # Already exists: bring colour/description in line instead.
            data = await run_blocking(
                self.client.update_label,
                name=spec.name,
                color=spec.color,
                description=spec.description,
            )
        return CreatedEntity(
            id=str(data.get("id", spec.name)),
            key=spec.name,
            name=spec.name,
            kind="label",
            url=data.get("url"),
            extra={"color": spec.color},
        )

    async def create_container(self, phase: Phase, options: ExportOptions) -> CreatedEntity:
        try:
            data = await run_blocking(
                self.client.create_milestone,
                title=phase.name,
                description=phase.description,
                due_on=_due_on(phase),
            )
        except TrackerAPIError as exc:
            if exc.status != HTTP_UNPROCESSABLE:
                raise
            existing = await run_blocking(self.client.find_milestone, phase.name)
            if existing is None:
                raise
            data = existing
        return CreatedEntity(
            id=str(data.get("id", "")),
            key=str(data.get("number", "")),
            name=str(data.get("title", phase.name)),
            kind="milestone",
            url=data.get("html_url"),
            extra={"number": data.get("number"), "due_on": data.get("due_on")},
        )

    async def create_top_level(
        self, name: str, description: str, options: ExportOptions
    ) -> CreatedEntity:
        labels = ["blueprint", "epic"]
        if options.label_prefix:
            labels.append(options.label_prefix)
        data = await run_blocking(
            self.client.create_issue,
            title=name,
            body=f"{description}\n\n_Tracking issue created by trackersync_".lstrip(),
            labels=labels if options.sync_labels else None,
        )
        return self._entity(data, kind="epic")

    def _issue_labels(self, item: WorkItem, labels: Iterable[str]) -> list[str]:
        names = ["blueprint", "task"]
        priority_label = self.normalize_priority(item.priority)
        if priority_label:
            names.append(priority_label)
        names.extend(label for label in labels if label not in names)
        return names

    async def create_item(
        self,
        item: WorkItem,
        *,
        parent: CreatedEntity | None = None,
        container: CreatedEntity | None = None,
        top_level: CreatedEntity | None = None,
        labels: Iterable[str] = (),
    ) -> CreatedEntity:
        milestone = container.extra.get("number") if container is not None else None
        data = await run_blocking(
            self.client.create_issue,
            title=item.title,
            body=render_issue_body(item, include_children=parent is None),
            labels=self._issue_labels(item, labels),
            milestone=milestone,
        )
        entity = self._entity(data, kind="subtask" if parent is not None else "issue")
        entity.parent_id = parent.id if parent is not None else None
        entity.container_id = container.id if container is not None else None
        return entity

    async def link_child(self, parent: CreatedEntity, child: CreatedEntity) -> None:
        await run_blocking(
            self.client.add_sub_issue,
            parent_number=int(parent.extra["number"]),
            sub_issue_id=int(child.id),
        )

    @staticmethod
    def _entity(data: dict[str, Any], *, kind: str) -> CreatedEntity:
        number = data["number"]
        return CreatedEntity(
            id=str(data.get("id", number)),
            key=f"#{number}",
            name=str(data.get("title", "")),
            kind=kind,
            url=data.get("html_url"),
            extra={"number": number},
        )


def create_github_adapter(
    config: GitHubTargetConfig, *, require_credentials: bool = True
) -> GitHubAdapter:
    if not config.repo:
        raise ConfigError("github.repo is required (owner/repo)")
    if require_credentials and not config.token:
        raise ConfigError("GitHub token missing: set github.token or GITHUB_TOKEN")
    return GitHubAdapter(
        GitHubRestClient(token=config.token or "", repo=config.repo, base_url=config.api_url)
    )


async def export_to_github(
    documents: Iterable[Document],
    config: GitHubTargetConfig,
    options: ExportOptions | None = None,
) -> ExportResult:
    return await Exporter(create_github_adapter(config)).export(documents, options)


__all__ = [
    "CATEGORY_LABELS",
    "GitHubAdapter",
    "PRIORITY_LABELS",
    "STANDARD_LABELS",
    "create_github_adapter",
    "export_to_github",
    "render_issue_body",
]
