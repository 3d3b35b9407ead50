"""Workflow status translation from the planning board into the ledger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ledgersync.common.logging import SyncLogger

log = logging.getLogger(__name__)

NOT_STARTED: Final[str] = "Not started"

# Labels shared verbatim by the Projects board and the ledger's status property.
DEFAULT_STATUS_LABELS: Final[tuple[str, ...]] = (
    "お手すきに",
    "Backlog",
    "今週やる",
    "着手中",
    "相談中",
    "完了",
)


@dataclass(slots=True, frozen=True)
class StatusTranslator:
    labels: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_STATUS_LABELS))
    default: str = NOT_STARTED

    @classmethod
    def from_labels(cls, labels: Iterable[str], *, default: str = NOT_STARTED) -> StatusTranslator:
        return cls(labels=frozenset(label for label in labels if label), default=default)

    def translate(self, status: str | None, *, logger: SyncLogger | None = None) -> str:
        """Map a board status onto a ledger status; unknown labels become ``default``."""

        logger = logger or log
        if status and status in self.labels:
            logger.debug('Status mapping: "%s" -> "%s"', status, status)
            return status
        if status:
            logger.warning('Unmapped board status "%s", using "%s"', status, self.default)
            logger.debug("Known statuses: %s", sorted(self.labels))
        else:
            logger.debug('No board status, using "%s"', self.default)
        return self.default


_DEFAULT_TRANSLATOR = StatusTranslator()


def translate_status(status: str | None) -> str:
    return _DEFAULT_TRANSLATOR.translate(status)
