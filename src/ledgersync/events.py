"""Map the triggering workflow event onto the items a run should sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ledgersync.domain.ports.fetching import (
    ProjectItemsFilter,
    RepositoryFilter,
    SingleItemFilter,
)
from ledgersync.domain.types import ItemKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ledgersync.config.github import GitHubConfig
    from ledgersync.domain.ports.fetching import ItemFilter

log = getLogger(__name__)


class UnsupportedEventError(ValueError):
    def __init__(self, event_name: str) -> None:
        super().__init__(
            f"Unsupported event type: {event_name or '<none>'}. "
            f"Supported events: {', '.join(event.value for event in EventType)}"
        )
        self.event_name = event_name


class EventType(StrEnum):
    SCHEDULE = "schedule"
    WORKFLOW_DISPATCH = "workflow_dispatch"
    ISSUES = "issues"
    PULL_REQUEST = "pull_request"

    @property
    def is_batch(self) -> bool:
        return self in {EventType.SCHEDULE, EventType.WORKFLOW_DISPATCH}


@dataclass(frozen=True, slots=True, kw_only=True)
class EventContext:
    event_name: str
    event_type: EventType | None = None
    issue_number: int | None = None
    pull_request_number: int | None = None

    @classmethod
    def for_event(cls, event_name: str, payload: Mapping[str, Any] | None = None) -> EventContext:
        payload = payload or {}
        try:
            event_type: EventType | None = EventType(event_name)
        except ValueError:
            event_type = None
        return cls(
            event_name=event_name,
            event_type=event_type,
            issue_number=_number_of(payload.get("issue")),
            pull_request_number=_number_of(payload.get("pull_request")),
        )

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> EventContext:
        """Read ``GITHUB_EVENT_NAME`` and the payload file at ``GITHUB_EVENT_PATH``."""

        env = os.environ if environ is None else environ
        event_name = env.get("GITHUB_EVENT_NAME", "").strip()
        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH", "").strip()
        if event_path:
            path = Path(event_path)
            if path.is_file():
                payload = json.loads(path.read_text(encoding="utf-8"))
            else:
                log.warning("Event payload %s not found", event_path)

        context = cls.for_event(event_name, payload)
        log.info(
            "Event: %s | Issue: %s | PR: %s",
            event_name or "<none>",
            context.issue_number or "N/A",
            context.pull_request_number or "N/A",
        )
        sender = (payload.get("sender") or {}).get("login")
        log.debug("Sender: %s", sender or "Unknown")
        return context


def _number_of(entity: object) -> int | None:
    if not isinstance(entity, dict):
        return None
    number = entity.get("number")
    return number if isinstance(number, int) else None


def build_item_filter(context: EventContext, config: GitHubConfig) -> ItemFilter | None:
    """Return the filter for this event, or ``None`` when there is nothing to sync."""

    match context.event_type:
        case EventType.SCHEDULE | EventType.WORKFLOW_DISPATCH:
            if not config.has_token:
                log.warning("No project token configured, syncing all repository items instead")
                return RepositoryFilter(
                    repository=config.repository,
                    include_pull_requests=config.include_pull_requests,
                )
            log.info("Fetching items from GitHub Projects")
            return ProjectItemsFilter(
                owner=config.repository.owner,
                project_name=config.project_name,
            )
        case EventType.ISSUES:
            if context.issue_number is None:
                log.error("Issue number not found in event payload")
                return None
            return SingleItemFilter(
                repository=config.repository,
                number=context.issue_number,
                kind=ItemKind.ISSUE,
            )
        case EventType.PULL_REQUEST:
            if context.pull_request_number is None:
                log.error("Pull request number not found in event payload")
                return None
            return SingleItemFilter(
                repository=config.repository,
                number=context.pull_request_number,
                kind=ItemKind.PULL_REQUEST,
            )
    raise UnsupportedEventError(context.event_name)


def sync_message(count: int, context: EventContext | None) -> str:
    event_type = context.event_type if context else None
    if event_type is None:
        return f"Found {count} items to sync"
    if event_type.is_batch:
        return f"Found {count} items to sync from GitHub Projects"
    if event_type is EventType.ISSUES:
        return f"Found {count} items to sync (single issue from event)"
    return f"Found {count} items to sync (single PR from event)"
