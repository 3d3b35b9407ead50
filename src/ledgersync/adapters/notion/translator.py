"""Translate between ledger values and Notion page payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from ledgersync.domain.types import (
    CreateShape,
    DestinationRecord,
    IdentityEquals,
    IdentityPatch,
    NumberEquals,
    RecordFields,
    StatusNotIn,
    StatusPatch,
    UpdateShape,
    UrlEquals,
)

if TYPE_CHECKING:
    from ledgersync.domain.types import LedgerFilter, PatchShape

    from .schema import JSONObject, NotionPage

TITLE: Final = "Name"
IDENTITY: Final = "ID"
NUMBER: Final = "Number"
STATE: Final = "State"
LABELS: Final = "Labels"
URL: Final = "URL"
STATUS: Final = "Status"
TYPE: Final = "Type"
PRODUCT: Final = "Product"

# Notion caps rich text content and the number of children per request.
MAX_TEXT_LENGTH: Final = 2000
MAX_BLOCKS: Final = 100


def page_to_record(page: NotionPage) -> DestinationRecord:
    identity = page.prop(IDENTITY)
    number = page.prop(NUMBER)
    status = page.prop(STATUS)
    state = page.prop(STATE)
    labels = page.prop(LABELS)
    url = page.prop(URL)
    kind = page.prop(TYPE)
    title = page.prop(TITLE)

    identity_value: str | None = None
    if identity is not None:
        # Older ledgers stored the identity as a number property.
        if identity.number is not None:
            identity_value = str(int(identity.number))
        else:
            identity_value = identity.text() or None

    return DestinationRecord(
        id=page.id,
        title=title.text() if title else "",
        number=int(number.number) if number and number.number is not None else None,
        status=_option_name(status.status or status.select) if status else None,
        state=_option_name(state.select) if state else None,
        labels=tuple(option.name for option in (labels.multi_select or ())) if labels else (),
        url=url.url if url else None,
        kind=_option_name(kind.select) if kind else None,
        identity=identity_value,
        last_edited=page.last_edited_time,
    )


def _option_name(option: object) -> str | None:
    return getattr(option, "name", None)


def _rich_text(value: str) -> list[JSONObject]:
    return [{"type": "text", "text": {"content": value[:MAX_TEXT_LENGTH]}}]


def encode_fields(fields: RecordFields) -> JSONObject:
    properties: JSONObject = {
        TITLE: {"title": _rich_text(fields.title)},
        NUMBER: {"number": fields.number},
        STATE: {"select": {"name": fields.state}},
        LABELS: {"multi_select": [{"name": label} for label in fields.labels]},
        URL: {"url": fields.url},
        TYPE: {"select": {"name": str(fields.kind)}},
    }
    if fields.product:
        properties[PRODUCT] = {"select": {"name": fields.product}}
    return properties


def encode_status(status: str) -> JSONObject:
    return {STATUS: {"status": {"name": status}}}


def encode_create(shape: CreateShape, *, database_id: str) -> JSONObject:
    payload: JSONObject = {
        "parent": {"database_id": database_id},
        "icon": {"type": "emoji", "emoji": shape.icon},
        "properties": {**encode_fields(shape.fields), **encode_status(shape.status)},
    }
    if shape.body:
        payload["children"] = body_to_blocks(shape.body)
    return payload


def encode_patch(shape: PatchShape) -> JSONObject:
    match shape:
        case UpdateShape(fields=fields):
            properties = encode_fields(fields)
        case IdentityPatch(identity=identity):
            properties = {IDENTITY: {"rich_text": _rich_text(identity)}}
        case StatusPatch(status=status):
            properties = encode_status(status)
        case _:
            raise TypeError(f"Unsupported patch shape: {shape!r}")
    return {"properties": properties}


def encode_filter(ledger_filter: LedgerFilter) -> JSONObject:
    match ledger_filter:
        case IdentityEquals(value=value):
            return {"property": IDENTITY, "rich_text": {"equals": value}}
        case NumberEquals(value=value):
            return {"property": NUMBER, "number": {"equals": value}}
        case UrlEquals(value=value):
            return {"property": URL, "url": {"equals": value}}
        case StatusNotIn(values=values):
            clauses = [
                {"property": STATUS, "status": {"does_not_equal": value}} for value in values
            ]
            if not clauses:
                return {}
            if len(clauses) == 1:
                return clauses[0]
            return {"and": clauses}
    raise TypeError(f"Unsupported ledger filter: {ledger_filter!r}")


def body_to_blocks(body: str) -> list[JSONObject]:
    """Render an item body as plain paragraph blocks.

    Paragraphs are split on blank lines; long paragraphs are chunked to fit the
    rich text limit, and the block list is capped to what one request accepts.
    """

    blocks: list[JSONObject] = []
    for paragraph in body.replace("\r\n", "\n").split("\n\n"):
        text = paragraph.strip()
        if not text:
            continue
        for start in range(0, len(text), MAX_TEXT_LENGTH):
            blocks.append(
                {
                    "object": "block",
                    "type": "paragraph",
                    "paragraph": {"rich_text": _rich_text(text[start : start + MAX_TEXT_LENGTH])},
                }
            )
    return blocks[:MAX_BLOCKS]
