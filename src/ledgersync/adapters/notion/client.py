"""Notion database adapter for the ledger."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from ledgersync.adapters.http_resilience import ResilientClient
from ledgersync.domain.types import StatusPatch

from .schema import NotionErrorPayload, NotionPage, NotionQueryResponse
from .translator import encode_create, encode_filter, encode_patch, page_to_record

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from ledgersync.common.logging import SyncLogger
    from ledgersync.config.http_resilience import ResilienceConfig
    from ledgersync.config.notion import NotionConfig
    from ledgersync.domain.types import (
        CreateShape,
        DestinationRecord,
        LedgerFilter,
        PatchShape,
    )

log = getLogger(__name__)

PAGE_SIZE = 100


class NotionAPIError(RuntimeError):
    """Notion rejected a request; ``response`` carries the HTTP status for retries."""

    def __init__(self, message: str, *, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class NotionLedger:
    """``DestinationWriter`` backed by one Notion database."""

    def __init__(
        self,
        *,
        config: NotionConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        logger: SyncLogger | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._client: ResilientClient | None = None
        self._log = logger or log

    async def __aenter__(self) -> NotionLedger:
        self._http()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def query(self, ledger_filter: LedgerFilter) -> Sequence[DestinationRecord]:
        body: dict[str, Any] = {"page_size": PAGE_SIZE}
        encoded = encode_filter(ledger_filter)
        if encoded:
            body["filter"] = encoded

        records: list[DestinationRecord] = []
        path = f"databases/{self._config.database_id}/query"
        while True:
            payload = await self._request("POST", path, json=body)
            page = NotionQueryResponse.model_validate(payload)
            records.extend(page_to_record(result) for result in page.results if not result.archived)
            if not page.has_more or not page.next_cursor:
                break
            body["start_cursor"] = page.next_cursor

        self._log.debug("Query %r matched %s ledger records", ledger_filter, len(records))
        return records

    async def create(self, shape: CreateShape) -> DestinationRecord:
        payload = await self._request(
            "POST",
            "pages",
            json=encode_create(shape, database_id=self._config.database_id),
        )
        record = page_to_record(NotionPage.model_validate(payload))
        self._log.debug("Created ledger record %s", record.id)
        return record

    async def patch(self, record_id: str, shape: PatchShape) -> DestinationRecord:
        payload = await self._request("PATCH", f"pages/{record_id}", json=encode_patch(shape))
        record = page_to_record(NotionPage.model_validate(payload))
        if isinstance(shape, StatusPatch) and record.status not in {None, shape.status}:
            self._log.warning(
                "Status mismatch on %s: expected %r, ledger reports %r",
                record_id,
                shape.status,
                record.status,
            )
        return record

    async def _request(self, method: str, path: str, *, json: dict[str, Any]) -> dict[str, Any]:
        response = await self._http().request(method, path, json=json)
        if response.is_error:
            raise NotionAPIError(_describe_error(method, path, response), response=response)
        payload = response.json()
        if not isinstance(payload, dict):
            raise NotionAPIError(f"Unexpected Notion response payload for {method} {path}")
        return payload

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self._client_factory(self._config.resilience)
        return self._client


def _describe_error(method: str, path: str, response: httpx.Response) -> str:
    prefix = f"Notion API error {response.status_code} on {method} {path}"
    try:
        error = NotionErrorPayload.model_validate(response.json())
    except ValueError:
        # Non-JSON bodies (proxies, gateways) only have the reason phrase.
        return f"{prefix}: {response.reason_phrase}"
    return f"{prefix}: {error.message or error.code or response.reason_phrase}"
