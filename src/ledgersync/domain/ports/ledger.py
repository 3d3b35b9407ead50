"""Port for reading and writing ledger records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledgersync.domain.types import (
        CreateShape,
        DestinationRecord,
        LedgerFilter,
        PatchShape,
    )


@runtime_checkable
class DestinationWriter(Protocol):
    """Record store the reconciliation core writes into.

    Every call may fail transiently; failures should expose an HTTP-like status
    (``exc.response.status_code`` or ``exc.status_code``) so callers can decide
    whether to retry.
    """

    async def query(self, ledger_filter: LedgerFilter) -> Sequence[DestinationRecord]: ...

    async def create(self, shape: CreateShape) -> DestinationRecord: ...

    async def patch(self, record_id: str, shape: PatchShape) -> DestinationRecord: ...


__all__ = ["DestinationWriter"]
