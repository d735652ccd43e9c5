"""Tracker adapter capability interface.

One adapter per external tracker turns the target-agnostic ``WorkItem`` /
``Phase`` model into tracker entities. The exporter only talks to this
interface; a ``PreviewAdapter`` wraps a real adapter for dry runs.

Adapters raise on failure. The exporter turns every create/link call into
an ``Outcome`` via :func:`attempt` so failures accumulate instead of
propagating.
"""

from __future__ import annotations

import abc
import asyncio
import functools
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, TypeVar, Union

from .errors import describe_failure
from .models import CreatedEntity, ExportOptions, Phase, Priority, WorkItem

T = TypeVar("T")


@dataclass(frozen=True)
class LabelSpec:
    name: str
    color: str
    description: str | None = None


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str


Outcome = Union[Ok[T], Err]


async def attempt(
    action: str, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
) -> Outcome[T]:
    """Await ``func`` and tag the result; exceptions become ``Err``."""
    try:
        return Ok(await func(*args, **kwargs))
    except Exception as exc:  # noqa: BLE001 - per-entity failures are recorded, not raised
        return Err(describe_failure(action, exc))


async def run_blocking(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Run a blocking client call on the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class TrackerAdapter(abc.ABC):
    """Capability interface implemented once per tracker."""

    target: str = "tracker"
    default_phase_prefix: str = "Phase"
    accepts_estimate: bool = True
    container_kind: str = "milestone"
    top_level_kind: str = "epic"

    @abc.abstractmethod
    async def verify(self) -> None:
        """Raise when the tracker is unreachable or credentials are rejected."""

    @abc.abstractmethod
    def label_catalog(self, options: ExportOptions) -> list[LabelSpec]: ...

    @abc.abstractmethod
    def normalize_priority(self, priority: Priority) -> Any: ...

    def plan_phases(self, phases: Sequence[Phase], today: date) -> list[Phase]:
        return list(phases)

    @abc.abstractmethod
    async def ensure_label(self, spec: LabelSpec) -> CreatedEntity: ...

    @abc.abstractmethod
    async def create_container(self, phase: Phase, options: ExportOptions) -> CreatedEntity: ...

    @abc.abstractmethod
    async def create_top_level(
        self, name: str, description: str, options: ExportOptions
    ) -> CreatedEntity: ...

    @abc.abstractmethod
    async def create_item(
        self,
        item: WorkItem,
        *,
        parent: CreatedEntity | None = None,
        container: CreatedEntity | None = None,
        top_level: CreatedEntity | None = None,
        labels: Iterable[str] = (),
    ) -> CreatedEntity: ...

    @abc.abstractmethod
    async def link_child(self, parent: CreatedEntity, child: CreatedEntity) -> None:
        """Attach ``child`` under ``parent`` (an item or the top-level container)."""

    async def assign_container(self, item: CreatedEntity, container: CreatedEntity) -> None:
        """Place an existing item in a container; most trackers do it on create."""
        return None


class PreviewAdapter(TrackerAdapter):
    """Dry-run stand-in that fabricates entities without any network call.

    Vocabulary (labels, priority mapping, phase planning) comes from the
    wrapped adapter so a preview shows exactly what an export would send.
    """

    def __init__(self, delegate: TrackerAdapter) -> None:
        self.delegate = delegate
        self.target = delegate.target
        self.default_phase_prefix = delegate.default_phase_prefix
        self.accepts_estimate = delegate.accepts_estimate
        self.container_kind = delegate.container_kind
        self.top_level_kind = delegate.top_level_kind
        self._labels = 0
        self._containers = 0
        self._issues = 0

    async def verify(self) -> None:
        return None

    def label_catalog(self, options: ExportOptions) -> list[LabelSpec]:
        return self.delegate.label_catalog(options)

    def normalize_priority(self, priority: Priority) -> Any:
        return self.delegate.normalize_priority(priority)

    def plan_phases(self, phases: Sequence[Phase], today: date) -> list[Phase]:
        return self.delegate.plan_phases(phases, today)

    async def ensure_label(self, spec: LabelSpec) -> CreatedEntity:
        entity = CreatedEntity(
            id=f"preview-label-{self._labels}",
            key=spec.name,
            name=spec.name,
            kind="label",
            extra={"color": spec.color},
        )
        self._labels += 1
        return entity

    async def create_container(self, phase: Phase, options: ExportOptions) -> CreatedEntity:
        kind = self.container_kind
        entity = CreatedEntity(
            id=f"preview-{kind}-{self._containers}",
            key=str(self._containers + 1),
            name=phase.name,
            kind=kind,
            extra={
                "start_date": phase.start_date.isoformat() if phase.start_date else None,
                "end_date": phase.end_date.isoformat() if phase.end_date else None,
            },
        )
        self._containers += 1
        return entity

    async def create_top_level(
        self, name: str, description: str, options: ExportOptions
    ) -> CreatedEntity:
        kind = self.top_level_kind
        return CreatedEntity(
            id=f"preview-{kind}",
            key="PREVIEW-0",
            name=name,
            kind=kind,
            extra={"description": description},
        )

    async def create_item(
        self,
        item: WorkItem,
        *,
        parent: CreatedEntity | None = None,
        container: CreatedEntity | None = None,
        top_level: CreatedEntity | None = None,
        labels: Iterable[str] = (),
    ) -> CreatedEntity:
        self._issues += 1
        extra: dict[str, Any] = {
            "priority": self.normalize_priority(item.priority),
            "labels": sorted(labels),
        }
        if self.accepts_estimate and item.estimate is not None:
            extra["estimate"] = item.estimate
        return CreatedEntity(
            id=f"preview-issue-{self._issues}",
            key=f"PREVIEW-{self._issues}",
            name=item.title,
            kind="subtask" if parent is not None else "issue",
            parent_id=parent.id if parent is not None else None,
            container_id=container.id if container is not None else None,
            extra=extra,
        )

    async def link_child(self, parent: CreatedEntity, child: CreatedEntity) -> None:
        return None


__all__ = [
    "Err",
    "LabelSpec",
    "Ok",
    "Outcome",
    "PreviewAdapter",
    "TrackerAdapter",
    "attempt",
    "run_blocking",
]
