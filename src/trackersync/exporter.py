from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from .adapters import Err, Outcome, PreviewAdapter, TrackerAdapter, attempt
from .documents import extract_description, infer_phase_name
from .errors import NoPhasesFoundError, redact
from .logging import get_logger
from .models import (
    CreatedEntity,
    Document,
    ExportOptions,
    ExportResult,
    ExportStage,
    WorkItem,
)
from .parser import MarkdownTaskParser, TextToWorkItems
from .phases import NoPhasesFoundPolicy, SynthesizeDefaults, extract_phases


@dataclass
class _Extraction:
    per_document: list[tuple[Document, list[WorkItem]]] = field(default_factory=list)

    @property
    def items(self) -> list[WorkItem]:
        return [item for _, items in self.per_document for item in items]


def match_container(
    containers: Sequence[CreatedEntity], phase_name: str
) -> CreatedEntity | None:
    """First container whose name contains ``phase_name`` (case-insensitive)."""
    needle = phase_name.lower()
    for container in containers:
        if needle in container.name.lower():
            return container
    return None


class Exporter:
    """Drives one export run through the ``ExportStage`` sequence.

    Verification failure is the only fatal error; every later create or
    link is best-effort and lands on ``ExportResult.errors`` when it fails.
    Calls are awaited one after another, parents before children and
    containers before items.
    """

    def __init__(
        self,
        adapter: TrackerAdapter,
        parser: TextToWorkItems | None = None,
        phase_policy: NoPhasesFoundPolicy | None = None,
        *,
        today: date | None = None,
    ) -> None:
        self.adapter = adapter
        self.parser = parser or MarkdownTaskParser()
        self.phase_policy = phase_policy or SynthesizeDefaults(prefix=adapter.default_phase_prefix)
        self.today = today
        self.logger = get_logger()

    async def export(
        self, documents: Iterable[Document], options: ExportOptions | None = None
    ) -> ExportResult:
        options = options or ExportOptions()
        if options.dry_run:
            return await self.preview(documents, options)
        return await self._run(self.adapter, list(documents), options, dry_run=False)

    async def preview(
        self, documents: Iterable[Document], options: ExportOptions | None = None
    ) -> ExportResult:
        return await self._run(
            PreviewAdapter(self.adapter), list(documents), options or ExportOptions(), dry_run=True
        )

    # ---- extraction ---------------------------------------------------
    def _extract(self, documents: list[Document]) -> _Extraction:
        extraction = _Extraction()
        for doc in documents:
            extraction.per_document.append((doc, self.parser.parse(doc.content)))
        return extraction

    # ---- run ----------------------------------------------------------
    def _enter(self, result: ExportResult, stage: ExportStage) -> None:
        result.stage = stage
        self.logger.log_operation(
            "export_stage", target=result.target, stage=stage.value, dry_run=result.dry_run
        )

    def _record(
        self,
        result: ExportResult,
        outcome: Outcome[CreatedEntity],
        bucket: list[CreatedEntity],
    ) -> CreatedEntity | None:
        if isinstance(outcome, Err):
            self._fail(result, outcome.reason)
            return None
        entity = outcome.value
        bucket.append(entity)
        self.logger.log_entity_action(
            "created", entity.kind, entity.name, key=entity.key, dry_run=result.dry_run
        )
        return entity

    def _fail(self, result: ExportResult, reason: str) -> None:
        message = redact(reason)
        result.errors.append(message)
        self.logger.log_error("export step failed", error=message, target=result.target)

    async def _link(
        self,
        result: ExportResult,
        adapter: TrackerAdapter,
        parent: CreatedEntity,
        child: CreatedEntity,
    ) -> None:
        outcome = await attempt(
            f"link {child.key} to {parent.key}", adapter.link_child, parent, child
        )
        if isinstance(outcome, Err):
            self._fail(result, outcome.reason)

    async def _run(
        self,
        adapter: TrackerAdapter,
        documents: list[Document],
        options: ExportOptions,
        *,
        dry_run: bool,
    ) -> ExportResult:
        result = ExportResult(target=adapter.target, dry_run=dry_run)
        today = self.today or date.today()

        extraction = self._extract(documents)
        result.work_items = extraction.items
        try:
            phases = extract_phases(documents, self.phase_policy, today=today)
        except NoPhasesFoundError as exc:
            self._fail(result, str(exc))
            return result
        result.phases = adapter.plan_phases(phases, today)

        with self.logger.timed_operation("export", target=result.target, dry_run=dry_run):
            self._enter(result, ExportStage.VERIFYING)
            try:
                await adapter.verify()
            except Exception as exc:  # noqa: BLE001 - a failed check ends the run with one error
                self._fail(result, f"{adapter.target} connection failed: {exc}")
                return result

            self._enter(result, ExportStage.SYNCING_LABELS)
            if options.sync_labels:
                for spec in adapter.label_catalog(options):
                    outcome = await attempt(f"create label {spec.name}", adapter.ensure_label, spec)
                    self._record(result, outcome, result.labels)

            self._enter(result, ExportStage.CREATING_CONTAINERS)
            if options.create_containers:
                for phase in result.phases:
                    outcome = await attempt(
                        f"create {adapter.container_kind} {phase.name}",
                        adapter.create_container,
                        phase,
                        options,
                    )
                    self._record(result, outcome, result.containers)

            self._enter(result, ExportStage.CREATING_TOP_LEVEL)
            top_level: CreatedEntity | None = None
            if options.container_name:
                outcome = await attempt(
                    f"create {adapter.top_level_kind} {options.container_name}",
                    adapter.create_top_level,
                    options.container_name,
                    extract_description(documents),
                    options,
                )
                top_level = self._record(result, outcome, result.top_level)

            self._enter(result, ExportStage.CREATING_ITEMS)
            pending: list[tuple[CreatedEntity, WorkItem, CreatedEntity | None]] = []
            for doc, items in extraction.per_document:
                container = match_container(result.containers, infer_phase_name(doc))
                for item in items:
                    labels = sorted(item.labels) if options.add_labels else []
                    outcome = await attempt(
                        f"create issue {item.title}",
                        adapter.create_item,
                        item,
                        container=container,
                        top_level=top_level,
                        labels=labels,
                    )
                    entity = self._record(result, outcome, result.issues)
                    if entity is None:
                        continue
                    if container is not None:
                        assigned = await attempt(
                            f"add {entity.key} to {container.name}",
                            adapter.assign_container,
                            entity,
                            container,
                        )
                        if isinstance(assigned, Err):
                            self._fail(result, assigned.reason)
                    if top_level is not None:
                        await self._link(result, adapter, top_level, entity)
                    if item.children:
                        pending.append((entity, item, container))

            self._enter(result, ExportStage.CREATING_CHILDREN)
            for parent, item, container in pending:
                for child in item.children:
                    labels = sorted(child.labels) if options.add_labels else []
                    outcome = await attempt(
                        f"create sub-task {child.title}",
                        adapter.create_item,
                        child,
                        parent=parent,
                        container=container,
                        labels=labels,
                    )
                    entity = self._record(result, outcome, result.subtasks)
                    if entity is not None:
                        await self._link(result, adapter, parent, entity)

            self._enter(result, ExportStage.DONE)
        self.logger.info(
            f"Export to {result.target} finished",
            dry_run=dry_run,
            error_count=len(result.errors),
            **{f"total_{k}": v for k, v in result.totals().items() if k != "errors"},
        )
        return result


__all__ = ["Exporter", "match_container"]
