from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ledgersync.config import AppConfig, MissingConfigurationError
from ledgersync.domain.errors import SyncError
from ledgersync.domain.ports.fetching import (
    ProjectItemsFilter,
    RepositoryFilter,
    SingleItemFilter,
)
from ledgersync.domain.reconciliation import BatchResult, FailedItem, ReverseSyncSummary
from ledgersync.domain.types import ItemKind
from ledgersync.events import UnsupportedEventError
from ledgersync.ui import cli
from tests.helpers.items import REPOSITORY, make_item

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def captured(
    monkeypatch: pytest.MonkeyPatch, app_config: AppConfig
) -> dict[str, dict[str, object]]:
    calls: dict[str, dict[str, object]] = {}

    def fake_sync(**kwargs: object) -> BatchResult:
        calls["sync"] = kwargs
        return BatchResult()

    def fake_reverse(**kwargs: object) -> ReverseSyncSummary:
        calls["reverse"] = kwargs
        return ReverseSyncSummary()

    monkeypatch.setattr(cli, "get_app_config", lambda: app_config)
    monkeypatch.setattr(cli, "sync_items", fake_sync)
    monkeypatch.setattr(cli, "reverse_sync_ledger", fake_reverse)
    return calls


def test_sync_defaults_to_the_workflow_event(captured: dict[str, dict[str, object]]) -> None:
    cli.main(["sync"])

    assert captured["sync"]["item_filter"] is None
    assert captured["sync"]["event"] is None


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (
            ["sync", "--issue", "7"],
            SingleItemFilter(repository=REPOSITORY, number=7, kind=ItemKind.ISSUE),
        ),
        (
            ["sync", "--pull-request", "12"],
            SingleItemFilter(repository=REPOSITORY, number=12, kind=ItemKind.PULL_REQUEST),
        ),
        (["sync", "--repository"], RepositoryFilter(repository=REPOSITORY)),
        (["sync", "--project"], ProjectItemsFilter(owner="octo", project_name="Roadmap")),
    ],
)
def test_sync_target_flags(
    captured: dict[str, dict[str, object]], argv: list[str], expected: object
) -> None:
    cli.main(argv)

    assert captured["sync"]["item_filter"] == expected


def test_sync_event_override(
    captured: dict[str, dict[str, object]], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)

    cli.main(["sync", "--event", "schedule"])

    event = captured["sync"]["event"]
    assert event is not None
    assert event.event_name == "schedule"  # type: ignore[attr-defined]


@pytest.mark.parametrize("flag", ["-d", "--dry-run"])
def test_reverse_sync_dry_run_flag(captured: dict[str, dict[str, object]], flag: str) -> None:
    cli.main(["reverse-sync", flag])

    assert captured["reverse"]["dry_run"] is True


def test_reverse_sync_is_live_by_default(captured: dict[str, dict[str, object]]) -> None:
    cli.main(["reverse-sync"])

    assert captured["reverse"]["dry_run"] is False


def _exit_code(action: Callable[[], None]) -> int | str | None:
    with pytest.raises(SystemExit) as exc:
        action()
    return exc.value.code


def test_invalid_arguments_exit_with_usage_error(captured: dict[str, dict[str, object]]) -> None:
    assert _exit_code(lambda: cli.main(["sync", "--issue", "zero"])) == 2
    assert _exit_code(lambda: cli.main(["sync", "--issue", "1", "--project"])) == 2
    assert "sync" not in captured


def test_missing_configuration_exits_with_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_config() -> AppConfig:
        raise MissingConfigurationError(
            "Missing configuration for: NOTION_API_KEY", field="NOTION_API_KEY"
        )

    monkeypatch.setattr(cli, "get_app_config", broken_config)

    assert _exit_code(lambda: cli.main(["sync"])) == 2


def test_unsupported_event_exits_with_2(
    captured: dict[str, dict[str, object]], monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_sync(**_kwargs: object) -> BatchResult:
        raise UnsupportedEventError("push")

    monkeypatch.setattr(cli, "sync_items", fake_sync)

    assert _exit_code(lambda: cli.main(["sync"])) == 2


def test_failed_items_exit_with_1(
    captured: dict[str, dict[str, object]], monkeypatch: pytest.MonkeyPatch
) -> None:
    item = make_item(7)
    result = BatchResult(
        failed=[FailedItem(item=item, cause=SyncError("Issue", 7, RuntimeError("boom")))]
    )
    monkeypatch.setattr(cli, "sync_items", lambda **_kwargs: result)

    assert _exit_code(lambda: cli.main(["sync"])) == 1


def test_fatal_errors_exit_with_1(
    captured: dict[str, dict[str, object]], monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_reverse(**_kwargs: object) -> ReverseSyncSummary:
        raise RuntimeError("notion down")

    monkeypatch.setattr(cli, "reverse_sync_ledger", fake_reverse)

    assert _exit_code(lambda: cli.main(["reverse-sync"])) == 1


def test_sigint_handler_exits_cleanly() -> None:
    assert _exit_code(lambda: cli.sigint_handler(2, None)) == 0
