from __future__ import annotations

import os

import pytest

from ledgersync.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_flag,
    get_app_config,
    get_github_config,
    get_notion_config,
    get_sync_config,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from ledgersync.config.notion import NOTION_API_VERSION
from ledgersync.domain.reconciliation import AmbiguityPolicy, TitleMatchMode
from ledgersync.domain.types import RepositoryRef

_ENV_NAMES = (
    "GITHUB_REPOSITORY",
    "NOTION_API_KEY",
    "NOTION_DATABASE_ID",
    "PROJECT_TOKEN",
    "GITHUB_TOKEN",
    "INCLUDE_PULL_REQUESTS",
    "GITHUB_PROJECT_NAME",
    "GITHUB_PROJECT_FALLBACK",
    "LEDGERSYNC_TITLE_MATCH",
    "LEDGERSYNC_AMBIGUITY",
    "LEDGERSYNC_REQUIRE_MATCHING_URL",
    "LEDGERSYNC_HTTP_CACHE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)
    assert exc.value.field == "MISSING_VAR"


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_returns_first_non_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIRST_VAR", " ")
    monkeypatch.setenv("SECOND_VAR", "token")

    assert optional_env_var("FIRST_VAR", "SECOND_VAR") == "token"
    assert os.getenv("FIRST_VAR") == " "


@pytest.mark.parametrize(("value", "expected"), [("true", True), ("0", False), ("Yes", True)])
def test_env_flag_parses_booleans(
    monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    monkeypatch.setenv("FLAG_VAR", value)

    assert env_flag("FLAG_VAR") is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG_VAR", "maybe")

    with pytest.raises(ConfigurationError) as exc:
        env_flag("FLAG_VAR")

    assert exc.value.field == "FLAG_VAR"


def test_github_config_reads_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_REPOSITORY", "octo/widgets")
    clean_env.setenv("GITHUB_TOKEN", "fallback-token")
    clean_env.setenv("PROJECT_TOKEN", "project-token")
    clean_env.setenv("INCLUDE_PULL_REQUESTS", "true")
    clean_env.setenv("GITHUB_PROJECT_NAME", "Roadmap")
    clean_env.setenv("GITHUB_PROJECT_FALLBACK", "first")

    config = get_github_config()

    assert config.repository == RepositoryRef(owner="octo", name="widgets")
    assert config.token == "project-token"
    assert config.include_pull_requests is True
    assert config.project_name == "Roadmap"
    assert config.fallback_to_first_project is True
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer project-token"
    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "memory"


def test_github_config_without_token(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_REPOSITORY", "octo/widgets")
    clean_env.setenv("LEDGERSYNC_HTTP_CACHE", "off")

    config = get_github_config()

    assert config.has_token is False
    assert config.include_pull_requests is False
    assert config.fallback_to_first_project is False
    assert config.resilience.default_headers is not None
    assert "Authorization" not in config.resilience.default_headers
    assert config.resilience.cache is not None
    assert config.resilience.cache.enabled is False


@pytest.mark.parametrize("value", ["widgets", "octo/", "octo/widgets/extra"])
def test_github_config_rejects_malformed_repository(
    clean_env: pytest.MonkeyPatch, value: str
) -> None:
    clean_env.setenv("GITHUB_REPOSITORY", value)

    with pytest.raises(ConfigurationError) as exc:
        get_github_config()

    assert exc.value.field == "GITHUB_REPOSITORY"
    assert "owner/repo" in str(exc.value)


def test_github_config_rejects_unknown_fallback(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_REPOSITORY", "octo/widgets")
    clean_env.setenv("GITHUB_PROJECT_FALLBACK", "random")

    with pytest.raises(ConfigurationError) as exc:
        get_github_config()

    assert exc.value.field == "GITHUB_PROJECT_FALLBACK"


def test_notion_config_sets_api_headers(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("NOTION_API_KEY", "secret")
    clean_env.setenv("NOTION_DATABASE_ID", "db-1")

    config = get_notion_config()

    assert config.database_id == "db-1"
    assert config.resilience.retry is None
    assert config.resilience.ratelimit is not None
    assert config.resilience.ratelimit.max_calls == 3
    assert config.resilience.default_headers == {
        "Authorization": "Bearer secret",
        "Notion-Version": NOTION_API_VERSION,
        "Content-Type": "application/json",
    }


def test_notion_config_requires_both_values(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("NOTION_API_KEY", "secret")

    with pytest.raises(MissingConfigurationError) as exc:
        get_notion_config()

    assert exc.value.field == "NOTION_DATABASE_ID"


def test_sync_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = get_sync_config()

    assert config.title_match_mode is TitleMatchMode.EXACT
    assert config.require_matching_url is False
    assert config.ambiguity is AmbiguityPolicy.MOST_RECENT
    assert config.reverse_delay_seconds == pytest.approx(0.1)
    assert "完了" in config.reverse_excluded_statuses


def test_sync_config_reads_choices(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LEDGERSYNC_TITLE_MATCH", "Substring")
    clean_env.setenv("LEDGERSYNC_AMBIGUITY", "fail")
    clean_env.setenv("LEDGERSYNC_REQUIRE_MATCHING_URL", "true")

    config = get_sync_config()

    assert config.title_match_mode is TitleMatchMode.SUBSTRING
    assert config.ambiguity is AmbiguityPolicy.FAIL
    assert config.require_matching_url is True


def test_sync_config_rejects_unknown_choice(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LEDGERSYNC_AMBIGUITY", "random")

    with pytest.raises(ConfigurationError) as exc:
        get_sync_config()

    assert exc.value.field == "LEDGERSYNC_AMBIGUITY"
    assert "most-recent" in str(exc.value)


def test_app_config_fails_before_work_when_incomplete(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_REPOSITORY", "octo/widgets")

    with pytest.raises(MissingConfigurationError):
        get_app_config()
