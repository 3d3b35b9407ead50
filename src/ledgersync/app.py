"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.adapters.github import GitHubClient
from ledgersync.adapters.notion import NotionLedger
from ledgersync.config import get_app_config
from ledgersync.domain.reconciliation import (
    BatchResult,
    IdentityResolver,
    ReconciliationController,
    TitleMatcher,
    reverse_sync,
)
from ledgersync.domain.status import StatusTranslator
from ledgersync.events import EventContext, build_item_filter, sync_message

if TYPE_CHECKING:
    from ledgersync.config import AppConfig
    from ledgersync.domain.ports.fetching import (
        ItemFilter,
        ProjectStatusSource,
        SourceItemFetcher,
    )
    from ledgersync.domain.ports.ledger import DestinationWriter
    from ledgersync.domain.reconciliation import ReverseSyncSummary


log = getLogger(__name__)


def _log_config(config: AppConfig) -> None:
    github = config.github
    log.info("Repository: %s", github.repository)
    log.info("Notion database: %s", config.notion.database_id)
    log.info("Include pull requests: %s", github.include_pull_requests)
    log.info("Project name: %s", github.project_name or "<first available>")
    log.info("GitHub token configured: %s", github.has_token)
    log.debug(
        "Title match: %s, ambiguity policy: %s",
        config.sync.title_match_mode,
        config.sync.ambiguity,
    )


async def _open_adapters(
    stack: AsyncExitStack,
    config: AppConfig,
    *,
    fetcher: SourceItemFetcher | None,
    status_source: ProjectStatusSource | None,
    writer: DestinationWriter | None,
) -> tuple[SourceItemFetcher, ProjectStatusSource | None, DestinationWriter]:
    wants_status = status_source is None and config.github.has_token
    if fetcher is None or wants_status:
        github = await stack.enter_async_context(GitHubClient(config=config.github))
        fetcher = fetcher or github
        if wants_status:
            status_source = github
    if writer is None:
        writer = await stack.enter_async_context(NotionLedger(config=config.notion))
    return fetcher, status_source, writer


def sync_items(
    *,
    item_filter: ItemFilter | None = None,
    event: EventContext | None = None,
    config: AppConfig | None = None,
    fetcher: SourceItemFetcher | None = None,
    status_source: ProjectStatusSource | None = None,
    writer: DestinationWriter | None = None,
) -> BatchResult:
    """Mirror tracker items into the ledger using the configured adapters.

    Without an explicit ``item_filter`` the triggering workflow event decides
    what to sync. Adapters not passed in are built from ``config`` and closed
    when the run finishes.
    """

    effective_config = config or get_app_config()
    _log_config(effective_config)

    context: EventContext | None = None
    if item_filter is None:
        context = event or EventContext.from_environment()
        item_filter = build_item_filter(context, effective_config.github)
        if item_filter is None:
            log.info("Nothing to sync for event %s", context.event_name)
            return BatchResult()

    return asyncio.run(
        _sync_items(
            effective_config,
            item_filter,
            context,
            fetcher=fetcher,
            status_source=status_source,
            writer=writer,
        )
    )


async def _sync_items(
    config: AppConfig,
    item_filter: ItemFilter,
    context: EventContext | None,
    *,
    fetcher: SourceItemFetcher | None,
    status_source: ProjectStatusSource | None,
    writer: DestinationWriter | None,
) -> BatchResult:
    async with AsyncExitStack() as stack:
        fetcher, status_source, writer = await _open_adapters(
            stack,
            config,
            fetcher=fetcher,
            status_source=status_source,
            writer=writer,
        )
        items = await fetcher.fetch_batch(item_filter)
        log.info("%s", sync_message(len(items), context))

        sync = config.sync
        controller = ReconciliationController(
            writer=writer,
            resolver=IdentityResolver(
                writer=writer,
                ambiguity=sync.ambiguity,
                require_matching_url=sync.require_matching_url,
                backoff=sync.backoff,
            ),
            status_source=status_source,
            translator=StatusTranslator.from_labels(sync.status_labels),
            backoff=sync.backoff,
            include_pull_requests=config.github.include_pull_requests,
            product=config.github.repository.name,
        )
        result = await controller.reconcile_batch(items)

    log.info(
        "Finished sync: succeeded=%s, created=%s, updated=%s, status_updated=%s, "
        "skipped=%s, failed=%s",
        result.succeeded,
        result.created,
        result.updated,
        result.status_updated,
        result.skipped,
        len(result.failed),
    )
    return result


def reverse_sync_ledger(
    *,
    dry_run: bool = False,
    config: AppConfig | None = None,
    fetcher: SourceItemFetcher | None = None,
    status_source: ProjectStatusSource | None = None,
    writer: DestinationWriter | None = None,
) -> ReverseSyncSummary:
    """Refresh in-flight ledger statuses from the planning board."""

    effective_config = config or get_app_config()
    _log_config(effective_config)
    return asyncio.run(
        _reverse_sync(
            effective_config,
            dry_run=dry_run,
            fetcher=fetcher,
            status_source=status_source,
            writer=writer,
        )
    )


async def _reverse_sync(
    config: AppConfig,
    *,
    dry_run: bool,
    fetcher: SourceItemFetcher | None,
    status_source: ProjectStatusSource | None,
    writer: DestinationWriter | None,
) -> ReverseSyncSummary:
    async with AsyncExitStack() as stack:
        fetcher, status_source, writer = await _open_adapters(
            stack,
            config,
            fetcher=fetcher,
            status_source=status_source,
            writer=writer,
        )
        if status_source is None:
            log.warning("No planning-board status source configured, statuses will not change")
            status_source = _NoStatus()

        sync = config.sync
        return await reverse_sync(
            writer=writer,
            fetcher=fetcher,
            status_source=status_source,
            repository=config.github.repository,
            dry_run=dry_run,
            include_pull_requests=config.github.include_pull_requests,
            matcher=TitleMatcher(mode=sync.title_match_mode),
            translator=StatusTranslator.from_labels(sync.status_labels),
            excluded_statuses=sync.reverse_excluded_statuses,
            delay_seconds=sync.reverse_delay_seconds,
            backoff=sync.backoff,
        )


class _NoStatus:
    async def status_for(self, item: object) -> None:  # noqa: ARG002
        return None
