"""GitHub configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from ledgersync.domain.errors import InvalidRepositoryError
from ledgersync.domain.types import RepositoryRef

from .env import env_flag, optional_env_var, require_env_var
from .errors import ConfigurationError
from .http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 30.0
GITHUB_USER_AGENT = "ledgersync"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds GitHub API configuration values."""

    repository: RepositoryRef
    resilience: ResilienceConfig
    token: str | None = None
    include_pull_requests: bool = False
    project_name: str | None = None
    fallback_to_first_project: bool = False

    @property
    def has_token(self) -> bool:
        return self.token is not None


def default_github_resilience(
    token: str | None = None,
    *,
    cache: CacheConfig | None = None,
) -> ResilienceConfig:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": GITHUB_USER_AGENT,
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return ResilienceConfig(
        name="github",
        base_url=GITHUB_API_URL,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        retry=RetryPolicy(),
        cache=cache if cache is not None else CacheConfig(backend="memory"),
        default_headers=headers,
    )


def parse_repository(value: str, *, field: str = "GITHUB_REPOSITORY") -> RepositoryRef:
    try:
        return RepositoryRef.parse(value)
    except InvalidRepositoryError as exc:
        raise ConfigurationError(str(exc), field=field) from exc


def _cache_config() -> CacheConfig:
    backend = (optional_env_var("LEDGERSYNC_HTTP_CACHE") or "memory").lower()
    match backend:
        case "memory" | "sqlite":
            return CacheConfig(backend=backend)
        case "off" | "none":
            return CacheConfig(enabled=False)
    raise ConfigurationError(
        f"Invalid LEDGERSYNC_HTTP_CACHE: {backend!r} (expected memory, sqlite or off)",
        field="LEDGERSYNC_HTTP_CACHE",
    )


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    repository = parse_repository(require_env_var("GITHUB_REPOSITORY"))
    token = optional_env_var("PROJECT_TOKEN", "GITHUB_TOKEN")
    fallback = (optional_env_var("GITHUB_PROJECT_FALLBACK") or "").lower()
    if fallback not in {"", "first", "none"}:
        raise ConfigurationError(
            f"Invalid GITHUB_PROJECT_FALLBACK: {fallback!r} (expected 'first' or 'none')",
            field="GITHUB_PROJECT_FALLBACK",
        )
    return GitHubConfig(
        repository=repository,
        token=token,
        include_pull_requests=env_flag("INCLUDE_PULL_REQUESTS"),
        project_name=optional_env_var("GITHUB_PROJECT_NAME"),
        fallback_to_first_project=fallback == "first",
        resilience=resilience or default_github_resilience(token, cache=_cache_config()),
    )
