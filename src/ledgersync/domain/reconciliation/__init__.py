"""Identity resolution and reconciliation between the tracker and the ledger.

Forward flow: resolve each tracker item to at most one ledger record, create or
update it, then copy the planning-board status across. Reverse flow: match
in-flight ledger records back to tracker items by title and refresh their
status.
"""

from __future__ import annotations

from .controller import (
    BatchResult,
    FailedItem,
    ReconcileAction,
    ReconcileOutcome,
    ReconcileState,
    ReconciliationController,
    StatusChange,
)
from .matching import (
    TitleMatch,
    TitleMatcher,
    TitleMatchKind,
    TitleMatchMode,
    extract_structured_key,
    normalize_title,
)
from .resolve import AmbiguityPolicy, IdentityResolver, LookupStrategy
from .reverse import ReverseSync, ReverseSyncSummary, UnmatchedRecord, reverse_sync

__all__ = [
    "AmbiguityPolicy",
    "BatchResult",
    "FailedItem",
    "IdentityResolver",
    "LookupStrategy",
    "ReconcileAction",
    "ReconcileOutcome",
    "ReconcileState",
    "ReconciliationController",
    "ReverseSync",
    "ReverseSyncSummary",
    "StatusChange",
    "TitleMatch",
    "TitleMatchKind",
    "TitleMatchMode",
    "TitleMatcher",
    "UnmatchedRecord",
    "extract_structured_key",
    "normalize_title",
    "reverse_sync",
]
