"""Builders for the ledger write payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .status import NOT_STARTED
from .types import CreateShape, ItemKind, RecordFields, UpdateShape

if TYPE_CHECKING:
    from .types import SourceItem

_UNTITLED: Final[dict[ItemKind, str]] = {
    ItemKind.ISSUE: "Untitled Issue",
    ItemKind.PULL_REQUEST: "Untitled Pull Request",
}
_ICONS: Final[dict[ItemKind, str]] = {
    ItemKind.ISSUE: "\N{HIGH VOLTAGE SIGN}",
    ItemKind.PULL_REQUEST: "\N{TWISTED RIGHTWARDS ARROWS}",
}


def build_record_fields(item: SourceItem, *, product: str | None = None) -> RecordFields:
    return RecordFields(
        title=item.title or _UNTITLED[item.kind],
        number=item.number,
        state=item.state.label,
        labels=item.labels,
        url=item.url,
        kind=item.kind,
        product=product,
    )


def build_create_shape(
    item: SourceItem,
    *,
    product: str | None = None,
    initial_status: str = NOT_STARTED,
) -> CreateShape:
    return CreateShape(
        fields=build_record_fields(item, product=product),
        status=initial_status,
        icon=_ICONS[item.kind],
        body=item.body or None,
    )


def build_update_shape(item: SourceItem, *, product: str | None = None) -> UpdateShape:
    return UpdateShape(fields=build_record_fields(item, product=product))
