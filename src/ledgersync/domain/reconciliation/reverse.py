"""Reverse sync: refresh ledger statuses from the planning board.

Ledger records still in flight are matched to tracker items by title, and each
matched record gets the item's current board status. Dry runs go through every
read and every matching decision; only ``_apply_status`` looks at ``dry_run``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from ledgersync.common.retry import BackoffPolicy, with_backoff
from ledgersync.domain.ports.fetching import RepositoryFilter
from ledgersync.domain.status import NOT_STARTED, StatusTranslator
from ledgersync.domain.types import StatusNotIn, StatusPatch

from .matching import TitleMatcher

if TYPE_CHECKING:
    from ledgersync.common.logging import SyncLogger
    from ledgersync.common.retry import Sleep
    from ledgersync.domain.ports.fetching import ProjectStatusSource, SourceItemFetcher
    from ledgersync.domain.ports.ledger import DestinationWriter
    from ledgersync.domain.types import DestinationRecord, RepositoryRef, SourceItem

    from .matching import TitleMatch

log = logging.getLogger(__name__)

# Statuses that are either untouched or settled; reverse sync leaves them alone.
DEFAULT_EXCLUDED_STATUSES: Final[tuple[str, ...]] = (NOT_STARTED, "完了", "無効")
DEFAULT_REVERSE_DELAY_SECONDS: Final[float] = 0.1


@dataclass(slots=True, frozen=True)
class UnmatchedRecord:
    record_id: str
    title: str
    status: str | None


@dataclass(slots=True)
class ReverseSyncSummary:
    dry_run: bool = False
    processed: int = 0
    matched: int = 0
    updated: int = 0
    skipped: int = 0
    unmatched: list[UnmatchedRecord] = field(default_factory=list)

    def summary_lines(self) -> list[str]:
        suffix = " (DRY RUN)" if self.dry_run else ""
        would = "would be " if self.dry_run else ""
        lines = [
            f"Reverse sync summary{suffix}:",
            f"- Ledger records processed: {self.processed}",
            f"- Matched with tracker items: {self.matched}",
            f"- Status {would}updated: {self.updated}",
            f"- Status already synced or skipped: {self.skipped}",
            f"- Unmatched records: {len(self.unmatched)}",
        ]
        if self.unmatched:
            lines.append("Unmatched ledger records (no corresponding tracker item found):")
            lines.extend(
                f"{index}. \"{record.title or 'Untitled'}\" (Status: {record.status or 'Unknown'})"
                for index, record in enumerate(self.unmatched, start=1)
            )
        return lines


@dataclass(slots=True, kw_only=True)
class ReverseSync:
    writer: DestinationWriter
    fetcher: SourceItemFetcher
    status_source: ProjectStatusSource
    repository: RepositoryRef
    include_pull_requests: bool = False
    matcher: TitleMatcher = field(default_factory=TitleMatcher)
    translator: StatusTranslator = field(default_factory=StatusTranslator)
    excluded_statuses: tuple[str, ...] = DEFAULT_EXCLUDED_STATUSES
    delay_seconds: float = DEFAULT_REVERSE_DELAY_SECONDS
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    sleep: Sleep = asyncio.sleep
    logger: SyncLogger = log

    async def run(self, *, dry_run: bool = False) -> ReverseSyncSummary:
        summary = ReverseSyncSummary(dry_run=dry_run)
        if dry_run:
            self.logger.info("DRY RUN - no ledger records will be modified")

        records = await self.writer.query(StatusNotIn(self.excluded_statuses))
        self.logger.info(
            "Found %s ledger records to check (excluding %s)",
            len(records),
            ", ".join(self.excluded_statuses),
        )
        items = await self.fetcher.fetch_batch(
            RepositoryFilter(
                repository=self.repository,
                include_pull_requests=self.include_pull_requests,
            )
        )
        self.logger.info("Found %s tracker items in %s", len(items), self.repository)

        for record in records:
            summary.processed += 1
            match = self.matcher.match(record.title, items)
            if match.item is None:
                summary.unmatched.append(
                    UnmatchedRecord(record_id=record.id, title=record.title, status=record.status)
                )
                continue

            summary.matched += 1
            await self._sync_record(record, match, summary, dry_run=dry_run)
            await self.sleep(self.delay_seconds)

        for line in summary.summary_lines():
            self.logger.info("%s", line)
        return summary

    async def _sync_record(
        self,
        record: DestinationRecord,
        match: TitleMatch,
        summary: ReverseSyncSummary,
        *,
        dry_run: bool,
    ) -> None:
        item = match.item
        if item is None:
            return
        self.logger.info(
            'Matched "%s" -> %s (%s: %s)',
            record.title,
            item.describe(),
            match.kind,
            match.evidence,
        )
        try:
            board_status = await self.status_source.status_for(item)
            if board_status is None:
                self.logger.info(
                    'No board status for %s, keeping ledger status "%s"',
                    item.describe(),
                    record.status,
                )
                summary.skipped += 1
                return

            target = self.translator.translate(board_status, logger=self.logger)
            if record.status == target:
                self.logger.info('Status already synced: "%s"', record.status)
                summary.skipped += 1
                return

            await self._apply_status(record, item, target, board_status, dry_run=dry_run)
            summary.updated += 1
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Error syncing status of %s: %s", record.id, exc)
            summary.skipped += 1

    async def _apply_status(
        self,
        record: DestinationRecord,
        item: SourceItem,
        target: str,
        board_status: str,
        *,
        dry_run: bool,
    ) -> None:
        if dry_run:
            self.logger.info(
                '[DRY RUN] Would update status of %s: "%s" -> "%s" (board: "%s")',
                item.describe(),
                record.status,
                target,
                board_status,
            )
            return
        self.logger.info(
            'Status sync for %s: "%s" -> "%s" (board: "%s")',
            item.describe(),
            record.status,
            target,
            board_status,
        )
        patch = with_backoff(self.backoff, logger=self.logger)(self.writer.patch)
        await patch(record.id, StatusPatch(target))


async def reverse_sync(
    *,
    writer: DestinationWriter,
    fetcher: SourceItemFetcher,
    status_source: ProjectStatusSource,
    repository: RepositoryRef,
    dry_run: bool = False,
    include_pull_requests: bool = False,
    matcher: TitleMatcher | None = None,
    translator: StatusTranslator | None = None,
    excluded_statuses: tuple[str, ...] = DEFAULT_EXCLUDED_STATUSES,
    delay_seconds: float = DEFAULT_REVERSE_DELAY_SECONDS,
    backoff: BackoffPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
    logger: SyncLogger | None = None,
) -> ReverseSyncSummary:
    runner = ReverseSync(
        writer=writer,
        fetcher=fetcher,
        status_source=status_source,
        repository=repository,
        include_pull_requests=include_pull_requests,
        matcher=matcher or TitleMatcher(),
        translator=translator or StatusTranslator(),
        excluded_statuses=excluded_statuses,
        delay_seconds=delay_seconds,
        backoff=backoff or BackoffPolicy(),
        sleep=sleep,
        logger=logger or log,
    )
    return await runner.run(dry_run=dry_run)
