from __future__ import annotations

import argparse
import logging
import os
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ledgersync.app import reverse_sync_ledger, sync_items
from ledgersync.common.logging import configure_logging
from ledgersync.config import ConfigurationError, get_app_config
from ledgersync.domain.ports.fetching import (
    ProjectItemsFilter,
    RepositoryFilter,
    SingleItemFilter,
)
from ledgersync.domain.types import ItemKind
from ledgersync.events import EventContext, UnsupportedEventError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from ledgersync.config import AppConfig
    from ledgersync.domain.ports.fetching import ItemFilter

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"Number must be positive: {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mirror GitHub issues into a Notion ledger")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync tracker items into the ledger")
    sync.add_argument(
        "--event",
        type=str,
        help="Workflow event name (defaults to GITHUB_EVENT_NAME)",
    )
    target = sync.add_mutually_exclusive_group()
    target.add_argument(
        "--issue",
        type=_positive_int,
        metavar="N",
        help="Sync a single issue by number",
    )
    target.add_argument(
        "--pull-request",
        type=_positive_int,
        metavar="N",
        help="Sync a single pull request by number",
    )
    target.add_argument(
        "--repository",
        action="store_true",
        help="Sync every issue in the repository",
    )
    target.add_argument(
        "--project",
        action="store_true",
        help="Sync every item on the planning board",
    )

    reverse = subparsers.add_parser(
        "reverse-sync",
        help="Refresh ledger statuses from the planning board",
    )
    reverse.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Show what would change without writing to the ledger",
    )

    return parser.parse_args(list(argv))


def _explicit_filter(args: argparse.Namespace, config: AppConfig) -> ItemFilter | None:
    github = config.github
    if args.issue is not None:
        return SingleItemFilter(
            repository=github.repository, number=args.issue, kind=ItemKind.ISSUE
        )
    if args.pull_request is not None:
        return SingleItemFilter(
            repository=github.repository,
            number=args.pull_request,
            kind=ItemKind.PULL_REQUEST,
        )
    if args.repository:
        return RepositoryFilter(
            repository=github.repository,
            include_pull_requests=github.include_pull_requests,
        )
    if args.project:
        return ProjectItemsFilter(owner=github.repository.owner, project_name=github.project_name)
    return None


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        config = get_app_config()
    except ConfigurationError as exc:
        log.error("Configuration error (%s): %s", exc.field or "unknown", exc)  # noqa: TRY400
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            item_filter = _explicit_filter(parsed_args, config)
            event = None
            if item_filter is None and parsed_args.event:
                event = EventContext.from_environment(
                    {**os.environ, "GITHUB_EVENT_NAME": parsed_args.event}
                )
            result = sync_items(item_filter=item_filter, event=event, config=config)
            for failure in result.failed:
                log.error("%s", failure.cause)
            if result.failed:
                sys.exit(1)
            log.info("Sync completed successfully")
        elif parsed_args.command == "reverse-sync":
            reverse_sync_ledger(dry_run=parsed_args.dry_run, config=config)
            suffix = "dry run " if parsed_args.dry_run else ""
            log.info("Reverse sync %scompleted successfully", suffix)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except UnsupportedEventError:
        log.exception("Unsupported event")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
