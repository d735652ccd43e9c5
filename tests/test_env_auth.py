from trackersync.config import GitHubTargetConfig, SyncConfig
from trackersync.env_auth import EnvAuthConfig, EnvironmentAuthManager, create_env_auth_manager


def test_env_auth_config_defaults():
    config = EnvAuthConfig()

    assert config.load_dotenv is True
    assert config.dotenv_path is None
    assert config.github_token_var == "GITHUB_TOKEN"
    assert config.linear_api_key_var == "LINEAR_API_KEY"


def test_no_credentials_available():
    manager = EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False))

    assert manager.get_github_token() is None
    assert manager.get_linear_api_key() is None
    assert manager.get_jira_credentials() == {"base_url": None, "email": None, "api_token": None}
    assert manager.dotenv_loaded is False


def test_alternative_github_variables(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "  gh_token_value  ")

    manager = EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False))

    assert manager.get_github_token() == "gh_token_value"


def test_apply_fills_only_missing_values(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "env_token")
    monkeypatch.setenv("LINEAR_API_KEY", "lin_env")
    monkeypatch.setenv("JIRA_EMAIL", "dev@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "jira_env")
    monkeypatch.setenv("JIRA_BASE_URL", "https://acme.atlassian.net")
    cfg = SyncConfig(github=GitHubTargetConfig(repo="acme/widgets", token="from_config"))

    updated = EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False)).apply(cfg)

    assert updated.github.token == "from_config"
    assert updated.github.repo == "acme/widgets"
    assert updated.linear.api_key == "lin_env"
    assert updated.jira.email == "dev@example.com"
    assert updated.jira.api_token == "jira_env"
    assert updated.jira.base_url == "https://acme.atlassian.net"
    assert cfg.linear.api_key is None


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    # Registers the variable with monkeypatch so the value loaded from the file is undone.
    monkeypatch.setenv("TRACKERSYNC_TEST_LINEAR_KEY", "placeholder")
    monkeypatch.delenv("TRACKERSYNC_TEST_LINEAR_KEY")
    env_file = tmp_path / "custom.env"
    env_file.write_text("TRACKERSYNC_TEST_LINEAR_KEY=lin_from_file\n")

    manager = create_env_auth_manager(
        EnvAuthConfig(dotenv_path=str(env_file), linear_api_key_var="TRACKERSYNC_TEST_LINEAR_KEY")
    )

    assert manager.dotenv_loaded is True
    assert manager.get_linear_api_key() == "lin_from_file"


def test_missing_dotenv_file_is_ignored(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    manager = create_env_auth_manager()

    assert manager.dotenv_loaded is False
