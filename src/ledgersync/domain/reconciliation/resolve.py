"""Forward identity resolution: tracker item -> existing ledger record.

Strategies run in a fixed order and stop at the first one that yields a record:

1. identity field equals the item's opaque id
2. number field equals the item's number
3. URL field equals the item's URL

A hit from strategy 2 or 3 means the record predates the current identity
scheme (or holds a legacy numeric id), so its identity field is rewritten before
the record is handed back. That way the next run finds it through strategy 1.

Number hits are taken as they are. With ``require_matching_url`` set, a number
hit whose stored URL points at another item is dropped instead, for ledgers
shared between repositories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from ledgersync.common.retry import BackoffPolicy, with_backoff
from ledgersync.domain.errors import AmbiguousMatchError
from ledgersync.domain.types import IdentityEquals, IdentityPatch, NumberEquals, UrlEquals

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledgersync.common.logging import SyncLogger
    from ledgersync.domain.ports.ledger import DestinationWriter
    from ledgersync.domain.types import DestinationRecord, LedgerFilter, SourceItem

log = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


class LookupStrategy(StrEnum):
    IDENTITY = "identity"
    NUMBER = "number"
    URL = "url"


class AmbiguityPolicy(StrEnum):
    """What to do when one strategy returns several records."""

    MOST_RECENT = "most-recent"
    FAIL = "fail"


@dataclass(slots=True, kw_only=True)
class IdentityResolver:
    writer: DestinationWriter
    ambiguity: AmbiguityPolicy = AmbiguityPolicy.MOST_RECENT
    require_matching_url: bool = False
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    logger: SyncLogger = log

    async def resolve(self, item: SourceItem) -> DestinationRecord | None:
        self.logger.debug("Searching ledger for %s (id=%s)", item.describe(), item.id)
        for strategy in LookupStrategy:
            candidates = await self._lookup(strategy, item)
            if not candidates:
                continue
            record = self._pick(strategy, candidates)
            self.logger.info(
                "Found ledger record %s for %s by %s", record.id, item.describe(), strategy
            )
            if strategy is not LookupStrategy.IDENTITY:
                record = await self._repair_identity(record, item)
            return record

        self.logger.debug("No ledger record found for %s", item.describe())
        return None

    async def _lookup(
        self,
        strategy: LookupStrategy,
        item: SourceItem,
    ) -> Sequence[DestinationRecord]:
        ledger_filter = _filter_for(strategy, item)
        try:
            records = await self.writer.query(ledger_filter)
        except Exception as exc:  # noqa: BLE001
            self.logger.debug("Lookup by %s failed for %s: %s", strategy, item.describe(), exc)
            return ()
        if strategy is LookupStrategy.NUMBER and self.require_matching_url:
            return [record for record in records if _same_origin(record, item, self.logger)]
        return records

    def _pick(
        self,
        strategy: LookupStrategy,
        candidates: Sequence[DestinationRecord],
    ) -> DestinationRecord:
        if len(candidates) == 1:
            return candidates[0]
        if self.ambiguity is AmbiguityPolicy.FAIL:
            raise AmbiguousMatchError(str(strategy), candidates)
        chosen = max(candidates, key=lambda record: record.last_edited or _EPOCH)
        self.logger.warning(
            "%s ledger records matched by %s (%s); using most recently edited %s",
            len(candidates),
            strategy,
            ", ".join(record.id for record in candidates),
            chosen.id,
        )
        return chosen

    async def _repair_identity(
        self,
        record: DestinationRecord,
        item: SourceItem,
    ) -> DestinationRecord:
        if record.identity == item.id:
            return record
        self.logger.info(
            "Repairing identity of ledger record %s: %r -> %r",
            record.id,
            record.identity,
            item.id,
        )
        try:
            patch = with_backoff(self.backoff, logger=self.logger)(self.writer.patch)
            return await patch(record.id, IdentityPatch(item.id))
        except Exception:
            self.logger.exception("Failed to repair identity of ledger record %s", record.id)
            return record


def _filter_for(strategy: LookupStrategy, item: SourceItem) -> LedgerFilter:
    match strategy:
        case LookupStrategy.IDENTITY:
            return IdentityEquals(item.id)
        case LookupStrategy.NUMBER:
            return NumberEquals(item.number)
        case LookupStrategy.URL:
            return UrlEquals(item.url)


def _same_origin(record: DestinationRecord, item: SourceItem, logger: SyncLogger) -> bool:
    if record.url and record.url != item.url:
        logger.debug(
            "Ignoring ledger record %s with number %s: URL %s belongs to another item",
            record.id,
            item.number,
            record.url,
        )
        return False
    return True
