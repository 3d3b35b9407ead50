"""Notion configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

if TYPE_CHECKING:
    import httpx

log = getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1/"
NOTION_API_VERSION = "2022-06-28"
NOTION_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class NotionConfig:
    """Holds Notion API configuration values."""

    database_id: str
    resilience: ResilienceConfig


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    log.debug("Notion %s %s -> %s", request.method, request.url.path, response.status_code)


def default_notion_resilience(api_key: str) -> ResilienceConfig:
    # Writes are retried by the reconciliation core, so the transport does not retry.
    return ResilienceConfig(
        name="notion",
        base_url=NOTION_API_URL,
        timeout_seconds=NOTION_TIMEOUT_SECONDS,
        retry=None,
        ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        cache=None,
        response_hooks=(_log_response,),
        default_headers={
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": NOTION_API_VERSION,
            "Content-Type": "application/json",
        },
    )


def get_notion_config(*, resilience: ResilienceConfig | None = None) -> NotionConfig:
    values = require_env_vars(("NOTION_API_KEY", "NOTION_DATABASE_ID"))
    return NotionConfig(
        database_id=values["NOTION_DATABASE_ID"],
        resilience=resilience or default_notion_resilience(values["NOTION_API_KEY"]),
    )
