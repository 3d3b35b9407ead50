"""Per-item reconciliation and the batch loop around it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from ledgersync.common.retry import BackoffPolicy, retry_with_backoff
from ledgersync.domain.errors import SyncError
from ledgersync.domain.shapes import build_create_shape, build_update_shape
from ledgersync.domain.status import StatusTranslator
from ledgersync.domain.types import IdentityPatch, ItemKind, StatusPatch

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from ledgersync.common.logging import SyncLogger
    from ledgersync.domain.ports.fetching import ProjectStatusSource
    from ledgersync.domain.ports.ledger import DestinationWriter
    from ledgersync.domain.types import DestinationRecord, SourceItem

    from .resolve import IdentityResolver

log = logging.getLogger(__name__)


class ReconcileState(StrEnum):
    RESOLVING = "resolving"
    CREATING = "creating"
    UPDATING = "updating"
    STATUS_SYNCING = "status_syncing"
    DONE = "done"
    FAILED = "failed"


class ReconcileAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class StatusChange:
    previous: str | None
    current: str


@dataclass(slots=True, kw_only=True)
class ReconcileOutcome:
    item: SourceItem
    action: ReconcileAction
    state: ReconcileState
    record: DestinationRecord | None = None
    status_change: StatusChange | None = None
    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.state is ReconcileState.DONE


@dataclass(slots=True, frozen=True)
class FailedItem:
    item: SourceItem
    cause: SyncError


@dataclass(slots=True)
class BatchResult:
    """Outcome of one pass over a batch of tracker items."""

    succeeded: int = 0
    created: int = 0
    updated: int = 0
    status_updated: int = 0
    skipped: int = 0
    failed: list[FailedItem] = field(default_factory=list)
    outcomes: list[ReconcileOutcome] = field(default_factory=list)

    def record(self, outcome: ReconcileOutcome) -> None:
        self.outcomes.append(outcome)
        match outcome.action:
            case ReconcileAction.SKIPPED:
                self.skipped += 1
                return
            case ReconcileAction.FAILED:
                if outcome.error is not None:
                    self.failed.append(FailedItem(item=outcome.item, cause=outcome.error))
                return
            case ReconcileAction.CREATED:
                self.created += 1
            case ReconcileAction.UPDATED:
                self.updated += 1
        self.succeeded += 1
        if outcome.status_change is not None:
            self.status_updated += 1


@dataclass(slots=True, kw_only=True)
class ReconciliationController:
    writer: DestinationWriter
    resolver: IdentityResolver
    status_source: ProjectStatusSource | None = None
    translator: StatusTranslator = field(default_factory=StatusTranslator)
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    include_pull_requests: bool = True
    product: str | None = None
    logger: SyncLogger = log

    async def reconcile_batch(self, items: Iterable[SourceItem]) -> BatchResult:
        """Reconcile ``items`` one at a time, in order, isolating per-item failures."""

        result = BatchResult()
        for item in items:
            result.record(await self.reconcile_one(item))
        self.logger.info(
            "Batch finished: succeeded=%s (created=%s, updated=%s, status_updated=%s), "
            "skipped=%s, failed=%s",
            result.succeeded,
            result.created,
            result.updated,
            result.status_updated,
            result.skipped,
            len(result.failed),
        )
        return result

    async def reconcile_one(self, item: SourceItem) -> ReconcileOutcome:
        if item.kind is ItemKind.PULL_REQUEST and not self.include_pull_requests:
            self.logger.debug("Skipping %s: pull requests are not synced", item.describe())
            return ReconcileOutcome(
                item=item,
                action=ReconcileAction.SKIPPED,
                state=ReconcileState.DONE,
            )

        state = ReconcileState.RESOLVING
        try:
            existing = await self.resolver.resolve(item)
            if existing is None:
                state = ReconcileState.CREATING
                action = ReconcileAction.CREATED
                record = await self._create(item)
            else:
                state = ReconcileState.UPDATING
                action = ReconcileAction.UPDATED
                record = await self._update(item, existing)

            state = ReconcileState.STATUS_SYNCING
            record, change = await self._sync_status(item, record)
        except Exception as exc:
            error = SyncError(str(item.kind), item.number, exc)
            self.logger.error("%s while %s: %s", error.args[0], state, exc)
            return ReconcileOutcome(
                item=item,
                action=ReconcileAction.FAILED,
                state=ReconcileState.FAILED,
                error=error,
            )

        self.logger.info("%s synced successfully (%s)", item.describe(), action)
        return ReconcileOutcome(
            item=item,
            action=action,
            state=ReconcileState.DONE,
            record=record,
            status_change=change,
        )

    async def _create(self, item: SourceItem) -> DestinationRecord:
        self.logger.debug("Creating ledger record for %s", item.describe())
        shape = build_create_shape(item, product=self.product)
        created = await self._write(lambda: self.writer.create(shape))
        # The identity property cannot be set in the create call itself.
        return await self._write(lambda: self.writer.patch(created.id, IdentityPatch(item.id)))

    async def _update(self, item: SourceItem, existing: DestinationRecord) -> DestinationRecord:
        self.logger.debug("Updating ledger record %s for %s", existing.id, item.describe())
        shape = build_update_shape(item, product=self.product)
        return await self._write(lambda: self.writer.patch(existing.id, shape))

    async def _sync_status(
        self,
        item: SourceItem,
        record: DestinationRecord,
    ) -> tuple[DestinationRecord, StatusChange | None]:
        if self.status_source is None:
            return record, None

        board_status = await self.status_source.status_for(item)
        if board_status is None:
            self.logger.debug("No board status for %s, leaving ledger status alone", item.describe())
            return record, None

        target = self.translator.translate(board_status, logger=self.logger)
        if record.status == target:
            self.logger.debug("Status of %s already %r", item.describe(), target)
            return record, None

        self.logger.info(
            "Status of %s: %r -> %r (board: %r)",
            item.describe(),
            record.status,
            target,
            board_status,
        )
        updated = await self._write(lambda: self.writer.patch(record.id, StatusPatch(target)))
        return updated, StatusChange(previous=record.status, current=target)

    async def _write(
        self,
        operation: Callable[[], Awaitable[DestinationRecord]],
    ) -> DestinationRecord:
        return await retry_with_backoff(operation, self.backoff, logger=self.logger)
