from __future__ import annotations

import asyncio

import httpx
import pytest
from hishel.httpx import AsyncCacheClient

from ledgersync.adapters.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    _build_cache_storage,  # type: ignore[reportPrivateUsage]
)


def test_cache_storage_is_optional() -> None:
    assert _build_cache_storage(None) is None
    assert _build_cache_storage(CacheConfig(enabled=False)) is None


def test_unknown_cache_backend_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        _build_cache_storage(CacheConfig(backend="redis"))  # type: ignore[arg-type]


def test_client_without_cache_or_retry_is_a_plain_async_client() -> None:
    client = ResilientClient(
        ResilienceConfig(name="plain", retry=None, ratelimit=RateLimit(max_calls=3, per_seconds=1))
    )
    try:
        assert type(client._client) is httpx.AsyncClient  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        assert client._limiter is not None  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    finally:
        asyncio.run(client.aclose())


def test_memory_cache_uses_cache_client() -> None:
    client = ResilientClient(ResilienceConfig(name="cached", cache=CacheConfig(backend="memory")))
    try:
        assert isinstance(client._client, AsyncCacheClient)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    finally:
        asyncio.run(client.aclose())
