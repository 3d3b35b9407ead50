from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path  # noqa: TC003

import pytest

from ledgersync.config import GitHubConfig  # noqa: TC001
from ledgersync.domain.ports.fetching import (
    ProjectItemsFilter,
    RepositoryFilter,
    SingleItemFilter,
)
from ledgersync.domain.types import ItemKind
from ledgersync.events import (
    EventContext,
    EventType,
    UnsupportedEventError,
    build_item_filter,
    sync_message,
)
from tests.helpers.items import REPOSITORY


def test_context_from_environment_reads_payload(tmp_path: Path) -> None:
    payload_path = tmp_path / "event.json"
    payload_path.write_text(
        json.dumps({"issue": {"number": 7}, "sender": {"login": "octocat"}}),
        encoding="utf-8",
    )

    context = EventContext.from_environment(
        {"GITHUB_EVENT_NAME": "issues", "GITHUB_EVENT_PATH": str(payload_path)}
    )

    assert context.event_type is EventType.ISSUES
    assert context.issue_number == 7
    assert context.pull_request_number is None


def test_context_tolerates_missing_payload(tmp_path: Path) -> None:
    context = EventContext.from_environment(
        {"GITHUB_EVENT_NAME": "push", "GITHUB_EVENT_PATH": str(tmp_path / "missing.json")}
    )

    assert context.event_name == "push"
    assert context.event_type is None


@pytest.mark.parametrize("event", ["schedule", "workflow_dispatch"])
def test_batch_events_use_the_project_board(github_config: GitHubConfig, event: str) -> None:
    item_filter = build_item_filter(EventContext.for_event(event), github_config)

    assert item_filter == ProjectItemsFilter(owner="octo", project_name="Roadmap")


def test_batch_events_without_token_fall_back_to_repository(
    github_config: GitHubConfig,
) -> None:
    config = replace(github_config, token=None, include_pull_requests=True)

    item_filter = build_item_filter(EventContext.for_event("schedule"), config)

    assert item_filter == RepositoryFilter(repository=REPOSITORY, include_pull_requests=True)


def test_issue_and_pull_request_events(github_config: GitHubConfig) -> None:
    issue = EventContext.for_event("issues", {"issue": {"number": 7}})
    pull = EventContext.for_event("pull_request", {"pull_request": {"number": 12}})

    assert build_item_filter(issue, github_config) == SingleItemFilter(
        repository=REPOSITORY, number=7, kind=ItemKind.ISSUE
    )
    assert build_item_filter(pull, github_config) == SingleItemFilter(
        repository=REPOSITORY, number=12, kind=ItemKind.PULL_REQUEST
    )


def test_event_without_number_yields_no_filter(github_config: GitHubConfig) -> None:
    assert build_item_filter(EventContext.for_event("issues", {}), github_config) is None


def test_unsupported_event_raises(github_config: GitHubConfig) -> None:
    with pytest.raises(UnsupportedEventError) as exc:
        build_item_filter(EventContext.for_event("push"), github_config)

    assert exc.value.event_name == "push"
    assert "Supported events: schedule, workflow_dispatch, issues, pull_request" in str(exc.value)


def test_sync_messages() -> None:
    assert sync_message(3, EventContext.for_event("schedule")) == (
        "Found 3 items to sync from GitHub Projects"
    )
    assert sync_message(1, EventContext.for_event("issues")) == (
        "Found 1 items to sync (single issue from event)"
    )
    assert sync_message(1, EventContext.for_event("pull_request")) == (
        "Found 1 items to sync (single PR from event)"
    )
    assert sync_message(5, None) == "Found 5 items to sync"
