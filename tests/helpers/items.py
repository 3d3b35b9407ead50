from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ledgersync.domain.ports.fetching import RepositoryFilter
from ledgersync.domain.types import (
    DestinationRecord,
    ItemState,
    PullRequest,
    RepositoryRef,
    SourceItem,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ledgersync.domain.ports.fetching import ItemFilter

REPOSITORY = RepositoryRef(owner="octo", name="widgets")


def make_item(
    number: int = 7,
    *,
    item_id: str | None = None,
    title: str = "Fix login",
    state: ItemState = ItemState.OPEN,
    labels: tuple[str, ...] = (),
    body: str | None = None,
    repository: RepositoryRef = REPOSITORY,
) -> SourceItem:
    return SourceItem(
        id=item_id or f"I_node{number}",
        number=number,
        title=title,
        state=state,
        url=f"https://github.com/{repository}/issues/{number}",
        body=body,
        labels=labels,
        repository=repository,
    )


def make_pull_request(
    number: int = 12,
    *,
    item_id: str | None = None,
    title: str = "Add feature",
    merged: bool = False,
) -> PullRequest:
    return PullRequest(
        id=item_id or f"PR_node{number}",
        number=number,
        title=title,
        state=ItemState.CLOSED if merged else ItemState.OPEN,
        url=f"https://github.com/{REPOSITORY}/pull/{number}",
        repository=REPOSITORY,
        merged=merged,
    )


def make_record(
    record_id: str,
    *,
    title: str = "",
    number: int | None = None,
    status: str | None = None,
    url: str | None = None,
    identity: str | None = None,
    last_edited: datetime | None = None,
) -> DestinationRecord:
    return DestinationRecord(
        id=record_id,
        title=title,
        number=number,
        status=status,
        url=url,
        identity=identity,
        last_edited=last_edited or datetime(2024, 1, 1, tzinfo=UTC),
    )


class FakeFetcher:
    def __init__(self, items: Sequence[SourceItem]) -> None:
        self.items = list(items)
        self.filters: list[ItemFilter] = []

    async def fetch_one(self, item_id: str) -> SourceItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    async def fetch_batch(self, item_filter: ItemFilter) -> Sequence[SourceItem]:
        self.filters.append(item_filter)
        if isinstance(item_filter, RepositoryFilter) and not item_filter.include_pull_requests:
            return [item for item in self.items if not isinstance(item, PullRequest)]
        return list(self.items)


class FakeStatusSource:
    def __init__(
        self,
        statuses: Mapping[int, str | None] | None = None,
        *,
        errors: Mapping[int, Exception] | None = None,
    ) -> None:
        self.statuses = dict(statuses or {})
        self.errors = dict(errors or {})
        self.calls: list[int] = []

    async def status_for(self, item: SourceItem) -> str | None:
        self.calls.append(item.number)
        if item.number in self.errors:
            raise self.errors[item.number]
        return self.statuses.get(item.number)


async def no_sleep(_seconds: float) -> None:
    return None
