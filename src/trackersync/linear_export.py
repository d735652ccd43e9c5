from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from .adapters import LabelSpec, TrackerAdapter, run_blocking
from .config import ConfigError, LinearTargetConfig
from .exporter import Exporter
from .linear_graphql import LinearClient
from .models import (
    CreatedEntity,
    Document,
    ExportOptions,
    ExportResult,
    Phase,
    Priority,
    WorkItem,
)
from .normalize import LINEAR_PRIORITIES
from .phases import schedule_phases

STANDARD_LABELS = (
    LabelSpec("prd", "#6B5B95"),
    LabelSpec("technical-spec", "#88B04B"),
    LabelSpec("architecture", "#F7CAC9"),
    LabelSpec("api-design", "#92A8D1"),
    LabelSpec("security", "#DD4124"),
    LabelSpec("infrastructure", "#45B8AC"),
    LabelSpec("testing", "#EFC050"),
    LabelSpec("documentation", "#5B5EA6"),
)

CATEGORY_LABELS = (
    LabelSpec("feature", "#0052CC"),
    LabelSpec("bug", "#DE350B"),
    LabelSpec("tech-debt", "#FF8B00"),
    LabelSpec("research", "#6554C0"),
    LabelSpec("design", "#00B8D9"),
    LabelSpec("devops", "#36B37E"),
)


class LinearAdapter(TrackerAdapter):
    """Projects as the top level, cycles as containers.

    Parent, project and cycle are all set on ``issueCreate`` so
    ``link_child`` has nothing left to do.
    """

    target = "linear"
    default_phase_prefix = "Phase"
    container_kind = "cycle"
    top_level_kind = "project"

    def __init__(self, client: LinearClient) -> None:
        self.client = client
        self._label_ids: dict[str, str] | None = None
        self._backlog_state: str | None = None
        self._backlog_loaded = False

    async def verify(self) -> None:
        await run_blocking(self.client.verify)

    def label_catalog(self, options: ExportOptions) -> list[LabelSpec]:
        return [*STANDARD_LABELS, *CATEGORY_LABELS]

    def normalize_priority(self, priority: Priority) -> int:
        return LINEAR_PRIORITIES[priority]

    def plan_phases(self, phases: Sequence[Phase], today: date) -> list[Phase]:
        # Cycles need concrete windows.
        return schedule_phases(phases, today)

    async def _known_labels(self) -> dict[str, str]:
        if self._label_ids is None:
            existing = await run_blocking(self.client.list_labels)
            self._label_ids = {
                str(label["name"]).lower(): str(label["id"])
                for label in existing
                if isinstance(label, dict) and label.get("id")
            }
        return self._label_ids

    async def ensure_label(self, spec: LabelSpec) -> CreatedEntity:
        known = await self._known_labels()
        label_id = known.get(spec.name.lower())
        if label_id is None:
            data = await run_blocking(self.client.create_label, name=spec.name, color=spec.color)
            label_id = str(data["id"])
            known[spec.name.lower()] = label_id
        return CreatedEntity(
            id=label_id, key=spec.name, name=spec.name, kind="label", extra={"color": spec.color}
        )

    async def create_container(self, phase: Phase, options: ExportOptions) -> CreatedEntity:
        if phase.start_date is None or phase.end_date is None:
            raise ValueError(f"cycle {phase.name!r} has no scheduled window")
        data = await run_blocking(
            self.client.create_cycle,
            name=phase.name,
            starts_at=phase.start_date.isoformat(),
            ends_at=phase.end_date.isoformat(),
            description=phase.description,
        )
        return CreatedEntity(
            id=str(data["id"]),
            key=str(data.get("number", "")),
            name=str(data.get("name") or phase.name),
            kind="cycle",
            extra={"starts_at": data.get("startsAt"), "ends_at": data.get("endsAt")},
        )

    async def create_top_level(
        self, name: str, description: str, options: ExportOptions
    ) -> CreatedEntity:
        data = await run_blocking(
            self.client.create_project, name=name, description=description or None
        )
        return CreatedEntity(
            id=str(data["id"]),
            key=str(data["id"]),
            name=str(data.get("name", name)),
            kind="project",
            url=data.get("url"),
        )

    async def _backlog_state_id(self) -> str | None:
        if not self._backlog_loaded:
            self._backlog_state = await run_blocking(self.client.backlog_state_id)
            self._backlog_loaded = True
        return self._backlog_state

    async def create_item(
        self,
        item: WorkItem,
        *,
        parent: CreatedEntity | None = None,
        container: CreatedEntity | None = None,
        top_level: CreatedEntity | None = None,
        labels: Iterable[str] = (),
    ) -> CreatedEntity:
        project_id = top_level.id if top_level is not None else None
        if project_id is None and parent is not None:
            project_id = parent.extra.get("project_id")
        label_names = list(labels)
        label_ids: list[str] = []
        if label_names:
            known = await self._known_labels()
            label_ids = [known[n.lower()] for n in label_names if n.lower() in known]
        fields: dict[str, Any] = {
            "title": item.title,
            "description": item.description,
            "priority": self.normalize_priority(item.priority),
            "estimate": item.estimate if self.accepts_estimate else None,
            "labelIds": label_ids or None,
            "stateId": await self._backlog_state_id(),
            "parentId": parent.id if parent is not None else None,
            "cycleId": container.id if container is not None else None,
            "projectId": project_id,
        }
        data = await run_blocking(self.client.create_issue, **fields)
        return CreatedEntity(
            id=str(data["id"]),
            key=str(data.get("identifier", data["id"])),
            name=str(data.get("title", item.title)),
            kind="subtask" if parent is not None else "issue",
            url=data.get("url"),
            parent_id=parent.id if parent is not None else None,
            container_id=container.id if container is not None else None,
            extra={"project_id": project_id, "priority": fields["priority"]},
        )

    async def link_child(self, parent: CreatedEntity, child: CreatedEntity) -> None:
        return None


def create_linear_adapter(
    config: LinearTargetConfig, *, require_credentials: bool = True
) -> LinearAdapter:
    if not config.team_id:
        raise ConfigError("linear.team_id is required")
    if require_credentials and not config.api_key:
        raise ConfigError("Linear API key missing: set linear.api_key or LINEAR_API_KEY")
    return LinearAdapter(
        LinearClient(api_key=config.api_key or "", team_id=config.team_id, api_url=config.api_url)
    )


async def export_to_linear(
    documents: Iterable[Document],
    config: LinearTargetConfig,
    options: ExportOptions | None = None,
) -> ExportResult:
    return await Exporter(create_linear_adapter(config)).export(documents, options)


__all__ = [
    "CATEGORY_LABELS",
    "LinearAdapter",
    "STANDARD_LABELS",
    "create_linear_adapter",
    "export_to_linear",
]
