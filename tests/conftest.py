from __future__ import annotations

import pytest

from ledgersync.common.retry import BackoffPolicy
from ledgersync.config import AppConfig, GitHubConfig, NotionConfig, SyncConfig
from ledgersync.config.github import default_github_resilience
from ledgersync.config.notion import default_notion_resilience
from tests.helpers.items import REPOSITORY


@pytest.fixture
def fast_backoff() -> BackoffPolicy:
    return BackoffPolicy(base_delay=0.0, max_delay=0.0)


@pytest.fixture
def github_config() -> GitHubConfig:
    return GitHubConfig(
        repository=REPOSITORY,
        token="test-token",
        project_name="Roadmap",
        resilience=default_github_resilience("test-token"),
    )


@pytest.fixture
def notion_config() -> NotionConfig:
    return NotionConfig(database_id="db-1", resilience=default_notion_resilience("secret"))


@pytest.fixture
def app_config(
    github_config: GitHubConfig,
    notion_config: NotionConfig,
    fast_backoff: BackoffPolicy,
) -> AppConfig:
    return AppConfig(
        github=github_config,
        notion=notion_config,
        sync=SyncConfig(backoff=fast_backoff, reverse_delay_seconds=0.0),
    )
