"""Pydantic models describing the Notion page and query payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotionBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TextContent(NotionBaseModel):
    content: str = ""


class RichText(NotionBaseModel):
    plain_text: str | None = None
    text: TextContent | None = None

    @property
    def value(self) -> str:
        if self.plain_text is not None:
            return self.plain_text
        return self.text.content if self.text else ""


class SelectOption(NotionBaseModel):
    name: str


class NotionProperty(NotionBaseModel):
    """One property value; only the member matching ``type`` is populated."""

    type: str | None = None
    title: list[RichText] | None = None
    rich_text: list[RichText] | None = None
    number: float | None = None
    select: SelectOption | None = None
    multi_select: list[SelectOption] | None = None
    status: SelectOption | None = None
    url: str | None = None

    def text(self) -> str:
        parts = self.title if self.title is not None else self.rich_text
        return "".join(part.value for part in parts or ())


class NotionPage(NotionBaseModel):
    id: str
    last_edited_time: datetime | None = None
    archived: bool = False
    properties: dict[str, NotionProperty] = Field(default_factory=dict)

    def prop(self, name: str) -> NotionProperty | None:
        return self.properties.get(name)


class NotionQueryResponse(NotionBaseModel):
    results: list[NotionPage] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None


class NotionErrorPayload(NotionBaseModel):
    status: int | None = None
    code: str | None = None
    message: str | None = None


type JSONObject = dict[str, Any]
