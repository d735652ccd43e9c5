"""trackersync CLI.

Subcommands:
  parse    -> show the work items and phases extracted from documents
  preview  -> dry-run an export; fabricates placeholder ids, no network
  export   -> create labels, containers and issues in the target tracker

Exit codes: 0 success, 1 the run recorded errors, 2 configuration problems.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from .adapters import TrackerAdapter
from .config import TARGETS, ConfigError, SyncConfig, load_config
from .documents import load_documents
from .env_auth import EnvAuthConfig, create_env_auth_manager
from .exporter import Exporter
from .github_export import create_github_adapter
from .jira_export import create_jira_adapter
from .linear_export import create_linear_adapter
from .logging import configure_logging
from .models import Document, ExportOptions
from .parser import parse_work_items
from .phases import SynthesizeDefaults, extract_phases
from .schemas import result_to_dict, validate_result, work_item_to_dict
from .ux import print_error, print_result, print_warning, print_work_items

CONFIG_DEFAULT = "trackersync.yaml"
EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_CONFIG = 2

_MAX_HELP_WIDTH = 100
_PHASE_PREFIXES = {"github": "Milestone", "linear": "Phase", "jira": "Sprint"}


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_common(p: argparse.ArgumentParser, *, target_required: bool) -> None:
    p.add_argument(
        "--target",
        choices=TARGETS,
        required=target_required,
        help="Issue tracker to export to",
    )
    p.add_argument("--config", help=f"YAML configuration (default: {CONFIG_DEFAULT} if present)")
    p.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    p.add_argument(
        "documents",
        nargs="*",
        metavar="DOCUMENT",
        help="Markdown documents (default: config 'source')",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="trackersync", description="Turn Markdown plans into tracker issues"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors (env: TRACKERSYNC_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pp = sub.add_parser("parse", help="Show extracted work items and phases")
    _add_common(pp, target_required=False)

    for name, help_text in (
        ("preview", "Dry-run an export without touching the tracker"),
        ("export", "Create labels, containers and issues in the tracker"),
    ):
        px = sub.add_parser(name, help=help_text)
        _add_common(px, target_required=True)
        px.add_argument("--container-name", help="Create a top-level epic/project with this name")
        px.add_argument(
            "--containers",
            action="store_true",
            help="Create milestones/cycles/sprints/versions from phases",
        )
        px.add_argument("--no-labels", action="store_true", help="Skip label/component sync")
        px.add_argument(
            "--add-labels", action="store_true", help="Attach category labels to created issues"
        )
        px.add_argument("--label-prefix", help="Extra project label (GitHub)")
    return p


def _load_cfg(args: argparse.Namespace) -> SyncConfig:
    if args.config:
        return load_config(args.config)
    if Path(CONFIG_DEFAULT).exists():
        return load_config(CONFIG_DEFAULT)
    return SyncConfig()


def _options(cfg: SyncConfig, args: argparse.Namespace) -> ExportOptions:
    opts = cfg.export
    overrides: dict[str, Any] = {}
    if getattr(args, "container_name", None):
        overrides["container_name"] = args.container_name
    if getattr(args, "containers", False):
        overrides["create_containers"] = True
    if getattr(args, "no_labels", False):
        overrides["sync_labels"] = False
    if getattr(args, "add_labels", False):
        overrides["add_labels"] = True
    if getattr(args, "label_prefix", None):
        overrides["label_prefix"] = args.label_prefix
    return replace(opts, **overrides)


def _documents(cfg: SyncConfig, args: argparse.Namespace) -> list[Document]:
    paths: list[str | Path] = list(args.documents)
    if not paths and cfg.source is not None:
        source = cfg.source
        paths = sorted(source.glob("*.md")) if source.is_dir() else [source]
    if not paths:
        raise ConfigError("No documents given and no 'source' configured")
    try:
        return load_documents(paths)
    except OSError as exc:
        raise ConfigError(f"Cannot read document: {exc}") from exc


def build_adapter(target: str, cfg: SyncConfig, *, require_credentials: bool) -> TrackerAdapter:
    if target == "github":
        return create_github_adapter(cfg.github, require_credentials=require_credentials)
    if target == "linear":
        return create_linear_adapter(cfg.linear, require_credentials=require_credentials)
    if target == "jira":
        return create_jira_adapter(cfg.jira, require_credentials=require_credentials)
    raise ConfigError(f"Unknown target {target!r}; expected one of {', '.join(TARGETS)}")


def _emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _cmd_parse(cfg: SyncConfig, args: argparse.Namespace) -> int:
    documents = _documents(cfg, args)
    items = [item for doc in documents for item in parse_work_items(doc.content)]
    prefix = _PHASE_PREFIXES.get(args.target or "", "Phase")
    phases = extract_phases(documents, SynthesizeDefaults(prefix=prefix))
    if args.json:
        _emit_json(
            {
                "work_items": [work_item_to_dict(item) for item in items],
                "phases": [
                    {
                        "name": p.name,
                        "start_date": p.start_date,
                        "end_date": p.end_date,
                        "description": p.description,
                    }
                    for p in phases
                ],
            }
        )
        return EXIT_OK
    if not items:
        print_warning(f"No work items found in {len(documents)} document(s)", stream=sys.stderr)
    print_work_items(items)
    for phase in phases:
        window = f" ({phase.start_date} → {phase.end_date})" if phase.start_date else ""
        print(f"# {phase.name}{window}")
    return EXIT_OK


def _cmd_run(cfg: SyncConfig, args: argparse.Namespace, *, dry_run: bool) -> int:
    documents = _documents(cfg, args)
    options = _options(cfg, args)
    if dry_run:
        options = replace(options, dry_run=True)
    adapter = build_adapter(args.target, cfg, require_credentials=not options.dry_run)
    exporter = Exporter(adapter)
    result = asyncio.run(exporter.export(documents, options))
    if args.json:
        payload = result_to_dict(result)
        problems = validate_result(payload)
        if problems:  # pragma: no cover - schema and serializer ship together
            raise RuntimeError("result does not match schema: " + "; ".join(problems))
        _emit_json(payload)
    else:
        print_result(result)
    return EXIT_OK if not result.errors else EXIT_ERRORS


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    quiet = args.quiet or os.environ.get("TRACKERSYNC_QUIET") == "1"
    try:
        cfg = _load_cfg(args)
        configure_logging(
            json_logging=cfg.logging_json_enabled,
            level="WARNING" if quiet else cfg.logging_level,
        )
        auth = create_env_auth_manager(
            EnvAuthConfig(
                load_dotenv=cfg.env_auth_load_dotenv,
                dotenv_path=cfg.env_auth_dotenv_path,
            )
        )
        cfg = auth.apply(cfg)
        if args.cmd == "parse":
            return _cmd_parse(cfg, args)
        return _cmd_run(cfg, args, dry_run=args.cmd == "preview")
    except ConfigError as exc:
        print_error(str(exc), stream=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
