"""Reverse matching: ledger title -> tracker item.

The structured key (``PBI-42:``) is authoritative and always checked first; free
text titles collide and get renamed, so text only serves as a fallback. The text
rule compares whole normalized titles. ``TitleMatchMode.SUBSTRING`` opts into a
looser containment rule that will also pair a short title with any longer title
containing it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledgersync.domain.types import SourceItem

DEFAULT_TAG = "PBI"


class TitleMatchKind(StrEnum):
    STRUCTURED_PREFIX = "structured-prefix"
    NORMALIZED_TEXT = "normalized-text"
    SUBSTRING = "substring"
    NONE = "none"


class TitleMatchMode(StrEnum):
    EXACT = "exact"
    SUBSTRING = "substring"


@dataclass(slots=True, frozen=True)
class TitleMatch:
    item: SourceItem | None
    kind: TitleMatchKind
    evidence: str | None = None

    @property
    def matched(self) -> bool:
        return self.item is not None


_NO_MATCH = TitleMatch(item=None, kind=TitleMatchKind.NONE)


def _prefix_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(tag)}-(\d+):", re.IGNORECASE)


def extract_structured_key(title: str, tag: str = DEFAULT_TAG) -> str | None:
    match = _prefix_pattern(tag).match(title)
    return match.group(1) if match else None


def normalize_title(title: str, tag: str = DEFAULT_TAG) -> str:
    stripped = re.sub(rf"^{re.escape(tag)}-\d+:\s*", "", title, flags=re.IGNORECASE)
    return stripped.strip().casefold()


@dataclass(slots=True, frozen=True)
class TitleMatcher:
    tag: str = DEFAULT_TAG
    mode: TitleMatchMode = TitleMatchMode.EXACT

    def match(self, title: str, candidates: Sequence[SourceItem]) -> TitleMatch:
        key = extract_structured_key(title, self.tag)
        if key is not None:
            for candidate in candidates:
                if extract_structured_key(candidate.title, self.tag) == key:
                    return TitleMatch(
                        item=candidate,
                        kind=TitleMatchKind.STRUCTURED_PREFIX,
                        evidence=f"{self.tag}-{key}",
                    )

        normalized = normalize_title(title, self.tag)
        for candidate in candidates:
            if normalize_title(candidate.title, self.tag) == normalized:
                return TitleMatch(
                    item=candidate,
                    kind=TitleMatchKind.NORMALIZED_TEXT,
                    evidence=normalized,
                )

        if self.mode is TitleMatchMode.SUBSTRING and normalized:
            for candidate in candidates:
                other = normalize_title(candidate.title, self.tag)
                if other and (other in normalized or normalized in other):
                    return TitleMatch(
                        item=candidate,
                        kind=TitleMatchKind.SUBSTRING,
                        evidence=other,
                    )

        return _NO_MATCH
