"""Terminal rendering for CLI results."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from .models import CreatedEntity, ExportResult, WorkItem

RULE_WIDTH = 60


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if the stream is a color-capable terminal."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", Colors.GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("✗", Colors.RED, bold=True, stream=stream) + " " + message, file=stream)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("⚠", Colors.YELLOW, bold=True, stream=stream) + " " + message, file=stream)


def print_summary_box(
    title: str, items: Sequence[tuple[str, str | int]], stream: TextIO | None = None
) -> None:
    stream = stream or sys.stdout
    width = max((len(k) for k, _ in items), default=0)
    print(colorize(f"\n{title}", Colors.CYAN, bold=True, stream=stream), file=stream)
    print(colorize("─" * RULE_WIDTH, Colors.DIM, stream=stream), file=stream)
    for key, value in items:
        shown = str(value)
        if isinstance(value, int) and value > 0:
            shown = colorize(shown, Colors.GREEN, bold=True, stream=stream)
        print(f"  {key.ljust(width)}  {shown}", file=stream)
    print(colorize("─" * RULE_WIDTH, Colors.DIM, stream=stream), file=stream)


def _entity_line(entity: CreatedEntity) -> str:
    suffix = f"  {entity.url}" if entity.url else ""
    return f"  [{entity.kind}] {entity.key}  {entity.name}{suffix}"


def print_work_items(items: Sequence[WorkItem], stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    for item in items:
        meta = [item.priority.value]
        if item.estimate is not None:
            meta.append(f"est {item.estimate}")
        meta.extend(sorted(item.labels))
        detail = colorize(f"({', '.join(meta)})", Colors.DIM, stream=stream)
        print(f"- {item.title}  {detail}", file=stream)
        for child in item.children:
            print(f"    - {child.title}", file=stream)


def print_result(result: ExportResult, stream: TextIO | None = None) -> None:
    """Human summary of an export or preview run."""
    stream = stream or sys.stdout
    mode = "preview" if result.dry_run else "export"
    totals = result.totals()
    print_summary_box(
        f"{result.target} {mode}",
        [
            ("stage", result.stage.value),
            ("work items", len(result.work_items)),
            ("phases", len(result.phases)),
            *((name.replace("_", " "), count) for name, count in totals.items()),
        ],
        stream=stream,
    )
    for bucket in (result.containers, result.top_level, result.issues, result.subtasks):
        for entity in bucket:
            print(_entity_line(entity), file=stream)
    for message in result.errors:
        print_error(message, stream=stream)
    if result.success:
        print_success(f"{mode} to {result.target} completed", stream=stream)


__all__ = [
    "Colors",
    "colorize",
    "print_error",
    "print_result",
    "print_success",
    "print_summary_box",
    "print_warning",
    "print_work_items",
]
