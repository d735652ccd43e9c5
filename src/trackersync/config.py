from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .models import ExportOptions

TARGETS = ("github", "linear", "jira")
JIRA_CONTAINER_KINDS = ("sprint", "version")


class ConfigError(RuntimeError):
    pass


@dataclass
class GitHubTargetConfig:
    repo: str | None = None  # owner/repo
    token: str | None = None
    api_url: str = "https://api.github.com"


@dataclass
class LinearTargetConfig:
    team_id: str | None = None
    api_key: str | None = None
    api_url: str = "https://api.linear.app/graphql"


@dataclass
class JiraTargetConfig:
    base_url: str | None = None
    email: str | None = None
    api_token: str | None = None
    project_key: str | None = None
    board_id: int | None = None
    container_kind: str = "sprint"
    story_points_field: str | None = None  # e.g. customfield_10016


@dataclass
class SyncConfig:
    source: Path | None = None
    github: GitHubTargetConfig = field(default_factory=GitHubTargetConfig)
    linear: LinearTargetConfig = field(default_factory=LinearTargetConfig)
    jira: JiraTargetConfig = field(default_factory=JiraTargetConfig)
    export: ExportOptions = field(default_factory=ExportOptions)
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    # Environment authentication configuration
    env_auth_load_dotenv: bool = True
    env_auth_dotenv_path: str | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], None)
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f'Section {name!r} must be a mapping')
    return {k: _resolve_env_var(v) for k, v in cast(dict[str, Any], value).items()}


def _optional_int(value: Any, key: str) -> int | None:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'{key} must be an integer, got {value!r}') from exc


def parse_config(raw: dict[str, Any], base_dir: Path | None = None) -> SyncConfig:
    gh = _section(raw, 'github')
    lin = _section(raw, 'linear')
    jira = _section(raw, 'jira')
    export = _section(raw, 'export')
    logging_config = _section(raw, 'logging')
    env_auth = _section(raw, 'environment')

    container_kind = str(jira.get('container_kind', 'sprint')).lower()
    if container_kind not in JIRA_CONTAINER_KINDS:
        raise ConfigError(
            f'jira.container_kind must be one of {", ".join(JIRA_CONTAINER_KINDS)}'
        )

    source_raw = raw.get('source')
    source: Path | None = None
    if isinstance(source_raw, str) and source_raw:
        source = (base_dir or Path.cwd()) / source_raw

    return SyncConfig(
        source=source,
        github=GitHubTargetConfig(
            repo=gh.get('repo'),
            token=gh.get('token'),
            api_url=gh.get('api_url') or GitHubTargetConfig.api_url,
        ),
        linear=LinearTargetConfig(
            team_id=lin.get('team_id'),
            api_key=lin.get('api_key'),
            api_url=lin.get('api_url') or LinearTargetConfig.api_url,
        ),
        jira=JiraTargetConfig(
            base_url=jira.get('base_url'),
            email=jira.get('email'),
            api_token=jira.get('api_token'),
            project_key=jira.get('project_key'),
            board_id=_optional_int(jira.get('board_id'), 'jira.board_id'),
            container_kind=container_kind,
            story_points_field=jira.get('story_points_field'),
        ),
        export=ExportOptions(
            container_name=export.get('container_name'),
            create_containers=bool(export.get('create_containers', False)),
            sync_labels=bool(export.get('sync_labels', True)),
            add_labels=bool(export.get('add_labels', False)),
            dry_run=bool(export.get('dry_run', False)),
            label_prefix=export.get('label_prefix'),
        ),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
    )


def load_config(path: str | Path) -> SyncConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw_any = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(raw_any, dict):
        raise ConfigError(f'Configuration root must be a mapping: {p}')
    return parse_config(cast(dict[str, Any], raw_any), base_dir=p.parent)


__all__ = [
    "ConfigError",
    "GitHubTargetConfig",
    "JiraTargetConfig",
    "LinearTargetConfig",
    "SyncConfig",
    "TARGETS",
    "load_config",
    "parse_config",
]
