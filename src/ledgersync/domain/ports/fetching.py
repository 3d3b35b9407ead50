"""Ports for reading items and planning statuses from the tracker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from ledgersync.domain.types import ItemKind, RepositoryRef, SourceItem


@dataclass(slots=True, frozen=True)
class ProjectItemsFilter:
    """Every item currently tracked by a named planning board."""

    owner: str
    project_name: str | None = None


@dataclass(slots=True, frozen=True)
class RepositoryFilter:
    """Every item in a repository, optionally only those updated since ``since``."""

    repository: RepositoryRef
    include_pull_requests: bool = False
    since: datetime | None = None


@dataclass(slots=True, frozen=True)
class SingleItemFilter:
    """One item addressed by its human-facing number."""

    repository: RepositoryRef
    number: int
    kind: ItemKind


type ItemFilter = ProjectItemsFilter | RepositoryFilter | SingleItemFilter


@runtime_checkable
class SourceItemFetcher(Protocol):
    """Already-paginated, already-normalised access to tracker items."""

    async def fetch_one(self, item_id: str) -> SourceItem | None: ...

    async def fetch_batch(self, item_filter: ItemFilter) -> Sequence[SourceItem]: ...


@runtime_checkable
class ProjectStatusSource(Protocol):
    """Current planning-board status of an item, ``None`` when it has none."""

    async def status_for(self, item: SourceItem) -> str | None: ...


__all__ = [
    "ItemFilter",
    "ProjectItemsFilter",
    "ProjectStatusSource",
    "RepositoryFilter",
    "SingleItemFilter",
    "SourceItemFetcher",
]
