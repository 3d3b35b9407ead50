"""Value types shared by the reconciliation core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .errors import InvalidRepositoryError

if TYPE_CHECKING:
    from datetime import datetime


class ItemKind(StrEnum):
    """Source item subtype, spelled the way the ledger's ``Type`` select spells it."""

    ISSUE = "Issue"
    PULL_REQUEST = "Pull Request"


class ItemState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(slots=True, frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> RepositoryRef:
        owner, _, name = value.strip().partition("/")
        if not owner or not name or "/" in name:
            raise InvalidRepositoryError(
                f"Invalid repository format: {value}. Expected format: owner/repo"
            )
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(slots=True, frozen=True, kw_only=True)
class SourceItem:
    """One issue fetched from the tracker; immutable for the duration of a run."""

    id: str
    number: int
    title: str
    state: ItemState
    url: str
    body: str | None = None
    labels: tuple[str, ...] = ()
    repository: RepositoryRef | None = None

    @property
    def kind(self) -> ItemKind:
        return ItemKind.ISSUE

    def describe(self) -> str:
        return f"{self.kind} #{self.number}"


@dataclass(slots=True, frozen=True, kw_only=True)
class PullRequest(SourceItem):
    merged: bool = False
    draft: bool = False
    merged_at: datetime | None = None
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = None

    @property
    def kind(self) -> ItemKind:
        return ItemKind.PULL_REQUEST


@dataclass(slots=True, frozen=True, kw_only=True)
class DestinationRecord:
    """One ledger entry as last read from (or returned by) the destination."""

    id: str
    title: str = ""
    number: int | None = None
    status: str | None = None
    state: str | None = None
    labels: tuple[str, ...] = ()
    url: str | None = None
    kind: str | None = None
    identity: str | None = None
    last_edited: datetime | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class RecordFields:
    """Fields written on every sync of an item."""

    title: str
    number: int
    state: str
    labels: tuple[str, ...]
    url: str
    kind: ItemKind
    product: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class CreateShape:
    """Create-only payload: base fields plus one-time values."""

    fields: RecordFields
    status: str
    icon: str
    body: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class UpdateShape:
    """Resync payload; leaves status and page content alone."""

    fields: RecordFields


@dataclass(slots=True, frozen=True)
class IdentityPatch:
    identity: str


@dataclass(slots=True, frozen=True)
class StatusPatch:
    status: str


type PatchShape = UpdateShape | IdentityPatch | StatusPatch


@dataclass(slots=True, frozen=True)
class IdentityEquals:
    value: str


@dataclass(slots=True, frozen=True)
class NumberEquals:
    value: int


@dataclass(slots=True, frozen=True)
class UrlEquals:
    value: str


@dataclass(slots=True, frozen=True)
class StatusNotIn:
    values: tuple[str, ...] = field(default_factory=tuple)


type LedgerFilter = IdentityEquals | NumberEquals | UrlEquals | StatusNotIn
