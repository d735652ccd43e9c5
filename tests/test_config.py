from __future__ import annotations

import pytest

from trackersync.config import ConfigError, SyncConfig, load_config, parse_config


def test_load_config_full(tmp_path, monkeypatch):
    monkeypatch.setenv("MY_GH_TOKEN", "ghp_from_env")
    cfg_path = tmp_path / "trackersync.yaml"
    cfg_path.write_text(
        """
source: docs/plan.md
github:
  repo: acme/widgets
  token: $MY_GH_TOKEN
linear:
  team_id: TEAM
jira:
  base_url: https://acme.atlassian.net
  project_key: PROJ
  board_id: "42"
  container_kind: Version
  story_points_field: customfield_10016
export:
  container_name: Launch
  create_containers: true
  sync_labels: false
logging:
  json_enabled: true
  level: DEBUG
environment:
  load_dotenv: false
"""
    )

    cfg = load_config(cfg_path)

    assert cfg.source == tmp_path / "docs/plan.md"
    assert cfg.github.repo == "acme/widgets"
    assert cfg.github.token == "ghp_from_env"
    assert cfg.github.api_url == "https://api.github.com"
    assert cfg.linear.team_id == "TEAM"
    assert cfg.jira.board_id == 42
    assert cfg.jira.container_kind == "version"
    assert cfg.jira.story_points_field == "customfield_10016"
    assert cfg.export.container_name == "Launch"
    assert cfg.export.create_containers is True
    assert cfg.export.sync_labels is False
    assert cfg.export.add_labels is False
    assert cfg.logging_json_enabled is True
    assert cfg.logging_level == "DEBUG"
    assert cfg.env_auth_load_dotenv is False


def test_unset_env_reference_resolves_to_none(monkeypatch):
    monkeypatch.delenv("NOT_THERE", raising=False)

    cfg = parse_config({"linear": {"api_key": "$NOT_THERE"}})

    assert cfg.linear.api_key is None


def test_empty_config_uses_defaults():
    cfg = parse_config({})

    assert cfg == SyncConfig()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("github: [unclosed")

    with pytest.raises(ConfigError):
        load_config(bad)


def test_invalid_values():
    with pytest.raises(ConfigError):
        parse_config({"jira": {"container_kind": "board"}})
    with pytest.raises(ConfigError):
        parse_config({"jira": {"board_id": "abc"}})
    with pytest.raises(ConfigError):
        parse_config({"github": ["not", "a", "mapping"]})
