"""Environment-based authentication for trackersync.

Credentials are looked up in the process environment after optionally
loading a ``.env`` file. Values already present in the YAML configuration
always win over the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from .config import SyncConfig
from .logging import get_logger

DOTENV_CANDIDATES = ('.env', '.env.local')


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"
    linear_api_key_var: str = "LINEAR_API_KEY"
    jira_api_token_var: str = "JIRA_API_TOKEN"
    jira_email_var: str = "JIRA_EMAIL"
    jira_base_url_var: str = "JIRA_BASE_URL"


class EnvironmentAuthManager:
    """Manages authentication through environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False
        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        """Load .env file if available."""
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else DOTENV_CANDIDATES
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    @staticmethod
    def _first_env(*names: str) -> str | None:
        for name in names:
            value = os.getenv(name)
            if value and value.strip():
                return value.strip()
        return None

    def get_github_token(self) -> str | None:
        return self._first_env(self.config.github_token_var, "GH_TOKEN", "GITHUB_PAT")

    def get_linear_api_key(self) -> str | None:
        return self._first_env(self.config.linear_api_key_var)

    def get_jira_credentials(self) -> dict[str, str | None]:
        return {
            'base_url': self._first_env(self.config.jira_base_url_var),
            'email': self._first_env(self.config.jira_email_var),
            'api_token': self._first_env(self.config.jira_api_token_var, "ATLASSIAN_API_TOKEN"),
        }

    def apply(self, cfg: SyncConfig) -> SyncConfig:
        """Return a copy of ``cfg`` with missing credentials filled from the environment."""
        jira_env = self.get_jira_credentials()
        updated = replace(
            cfg,
            github=replace(cfg.github, token=cfg.github.token or self.get_github_token()),
            linear=replace(cfg.linear, api_key=cfg.linear.api_key or self.get_linear_api_key()),
            jira=replace(
                cfg.jira,
                base_url=cfg.jira.base_url or jira_env['base_url'],
                email=cfg.jira.email or jira_env['email'],
                api_token=cfg.jira.api_token or jira_env['api_token'],
            ),
        )
        self.logger.debug(
            "Resolved tracker credentials",
            github=bool(updated.github.token),
            linear=bool(updated.linear.api_key),
            jira=bool(updated.jira.api_token),
        )
        return updated


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "create_env_auth_manager"]
