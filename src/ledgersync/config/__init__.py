"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GitHubConfig, get_github_config, parse_repository
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .notion import NotionConfig, get_notion_config
from .sync import SyncConfig, get_sync_config


@dataclass(frozen=True, slots=True)
class AppConfig:
    github: GitHubConfig
    notion: NotionConfig
    sync: SyncConfig


def get_app_config() -> AppConfig:
    """Load every section, failing before any work starts if one is incomplete."""

    return AppConfig(
        github=get_github_config(),
        notion=get_notion_config(),
        sync=get_sync_config(),
    )


__all__ = [
    "AppConfig",
    "CacheConfig",
    "ConfigurationError",
    "GitHubConfig",
    "MissingConfigurationError",
    "NotionConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "env_flag",
    "get_app_config",
    "get_github_config",
    "get_notion_config",
    "get_sync_config",
    "optional_env_var",
    "parse_repository",
    "require_env_var",
    "require_env_vars",
]
