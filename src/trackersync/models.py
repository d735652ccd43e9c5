from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class Priority(str, Enum):
    """Target-agnostic priority tier derived from task markers."""

    HIGHEST = "highest"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    LOWEST = "lowest"
    NONE = "none"


@dataclass(frozen=True)
class WorkItem:
    """Canonical in-memory representation of a parsed unit of work.

    Children are limited to a single nesting level; the parser never builds
    deeper trees.
    """

    title: str
    description: str | None = None
    priority: Priority = Priority.NONE
    estimate: int | float | None = None
    labels: frozenset[str] = field(default_factory=frozenset)
    children: tuple[WorkItem, ...] = ()


@dataclass(frozen=True)
class Phase:
    name: str
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None


@dataclass(frozen=True)
class Document:
    name: str
    content: str


@dataclass
class ExportOptions:
    container_name: str | None = None  # epic (GitHub/Jira) or project (Linear)
    create_containers: bool = False  # milestones / cycles / sprints / versions
    sync_labels: bool = True
    add_labels: bool = False
    dry_run: bool = False
    label_prefix: str | None = None


@dataclass
class CreatedEntity:
    id: str
    key: str
    name: str
    kind: str  # label|milestone|cycle|sprint|version|epic|project|issue|subtask
    url: str | None = None
    parent_id: str | None = None
    container_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class ExportStage(str, Enum):
    IDLE = "idle"
    VERIFYING = "verifying"
    SYNCING_LABELS = "syncing_labels"
    CREATING_CONTAINERS = "creating_containers"
    CREATING_TOP_LEVEL = "creating_top_level"
    CREATING_ITEMS = "creating_items"
    CREATING_CHILDREN = "creating_children"
    DONE = "done"


@dataclass
class ExportResult:
    """Aggregate outcome of one export or preview run.

    Partial success is expected: entities created before a failure stay in
    the lists and the failure is appended to ``errors``.
    """

    target: str
    dry_run: bool = False
    stage: ExportStage = ExportStage.IDLE
    work_items: list[WorkItem] = field(default_factory=list)
    phases: list[Phase] = field(default_factory=list)
    labels: list[CreatedEntity] = field(default_factory=list)
    containers: list[CreatedEntity] = field(default_factory=list)
    top_level: list[CreatedEntity] = field(default_factory=list)
    issues: list[CreatedEntity] = field(default_factory=list)
    subtasks: list[CreatedEntity] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.stage is ExportStage.DONE and not self.errors

    def totals(self) -> dict[str, int]:
        return {
            "labels": len(self.labels),
            "containers": len(self.containers),
            "top_level": len(self.top_level),
            "issues": len(self.issues),
            "subtasks": len(self.subtasks),
            "errors": len(self.errors),
        }


__all__ = [
    "CreatedEntity",
    "Document",
    "ExportOptions",
    "ExportResult",
    "ExportStage",
    "Phase",
    "Priority",
    "WorkItem",
]
