"""Domain-level error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .types import DestinationRecord


class InvalidRepositoryError(ValueError):
    """Raised when a repository reference is not of the form ``owner/name``."""


class SyncError(RuntimeError):
    """One item failed to reconcile; carries enough context to find it again."""

    def __init__(self, item_kind: str, item_number: int, cause: BaseException) -> None:
        super().__init__(f"Failed to sync {item_kind} #{item_number}")
        self.item_kind = item_kind
        self.item_number = item_number
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.args[0]}: {self.cause}"


class AmbiguousMatchError(LookupError):
    """Raised when a lookup strategy returns several ledger records."""

    def __init__(self, strategy: str, candidates: Sequence[DestinationRecord]) -> None:
        ids = ", ".join(record.id for record in candidates)
        super().__init__(f"{len(candidates)} ledger records matched by {strategy}: {ids}")
        self.strategy = strategy
        self.candidates = tuple(candidates)
