"""trackersync - turn Markdown planning documents into tracker issues.

High-level public API:

import asyncio
from trackersync import Exporter, GitHubAdapter, load_documents
from trackersync.github_export import create_github_adapter

adapter = create_github_adapter(cfg.github)
result = asyncio.run(Exporter(adapter).preview(load_documents(['TASKS.md'])))
print(result.totals())

``preview`` never touches the network; ``export`` performs the full run and
collects per-entity failures on ``result.errors``.
"""

from __future__ import annotations

from .adapters import PreviewAdapter, TrackerAdapter
from .config import SyncConfig, load_config
from .documents import load_documents
from .exporter import Exporter
from .github_export import GitHubAdapter, export_to_github
from .jira_export import JiraAdapter, export_to_jira
from .linear_export import LinearAdapter, export_to_linear
from .models import (
    CreatedEntity,
    Document,
    ExportOptions,
    ExportResult,
    ExportStage,
    Phase,
    Priority,
    WorkItem,
)
from .parser import MarkdownTaskParser, parse_work_items
from .phases import FailIfNoPhases, SynthesizeDefaults, extract_phases

# Keep in sync with pyproject.toml
__version__ = "0.2.0"

__all__ = [
    "CreatedEntity",
    "Document",
    "ExportOptions",
    "ExportResult",
    "ExportStage",
    "Exporter",
    "FailIfNoPhases",
    "GitHubAdapter",
    "JiraAdapter",
    "LinearAdapter",
    "MarkdownTaskParser",
    "Phase",
    "PreviewAdapter",
    "Priority",
    "SyncConfig",
    "SynthesizeDefaults",
    "TrackerAdapter",
    "WorkItem",
    "__version__",
    "export_to_github",
    "export_to_jira",
    "export_to_linear",
    "extract_phases",
    "load_config",
    "load_documents",
    "parse_work_items",
]
