import asyncio
import logging
from typing import cast

import pytest
from conftest import MockHTTPProtocol, mock_scope
from limits import RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage
from limits.aio.strategies import FixedWindowRateLimiter

from minimux.middleware.builtin import auth, logging_middleware, rate_limit
from minimux.rsgi import HTTPProtocol, HTTPScope, RSGIHTTPHandler


# --- helpers -----------------------------------------------------------------
async def _ok_handler(scope: HTTPScope, proto: HTTPProtocol) -> None:
    proto.response_str(200, [("content-type", "text/plain")], "ok")


async def _statuses(handler: RSGIHTTPHandler, n: int, client: str) -> list:
    statuses = []
    for _ in range(n):
        proto = MockHTTPProtocol()
        await handler(mock_scope(client=client), proto)
        statuses.append(proto.response_status)
    return statuses


# --- auth --------------------------------------------------------------------
@pytest.mark.asyncio
async def test_auth_rejects_empty_header() -> None:
    handler = auth(_ok_handler)
    proto = MockHTTPProtocol()
    await handler(mock_scope(headers={"authorization": ""}), proto)
    assert proto.response_status == 401


@pytest.mark.asyncio
async def test_auth_admits_with_header() -> None:
    handler = auth(_ok_handler)
    proto = MockHTTPProtocol()
    await handler(mock_scope(headers={"authorization": "Bearer x"}), proto)
    assert proto.response_status == 200


# --- logging -----------------------------------------------------------------
@pytest.mark.asyncio
async def test_logging_middleware(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="minimux")
    handler = logging_middleware(_ok_handler)
    await handler(mock_scope("/things", "POST"), MockHTTPProtocol())
    assert [r.getMessage() for r in caplog.records] == ["[LOG] POST /things"]


# --- rate limit --------------------------------------------------------------
@pytest.mark.asyncio
async def test_no_limit_admits_everything() -> None:
    handler = cast("RSGIHTTPHandler", rate_limit()(_ok_handler))
    assert await _statuses(handler, 50, "127.0.0.1") == [200] * 50


@pytest.mark.asyncio
async def test_limit_rejects_within_window(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="minimux")
    handler = rate_limit("2/minute")(_ok_handler)

    assert await _statuses(handler, 3, "10.0.0.1") == [200, 200, 429]
    assert [r.getMessage() for r in caplog.records] == [
        "[RateLimit] OK",
        "[RateLimit] OK",
        "[RateLimit] rejected 10.0.0.1",
    ]


@pytest.mark.asyncio
async def test_rejection_sets_retry_after() -> None:
    handler = rate_limit("1/minute")(_ok_handler)
    await handler(mock_scope(), MockHTTPProtocol())

    proto = MockHTTPProtocol()
    await handler(mock_scope(), proto)

    assert proto.response_status == 429
    assert proto.response_body == b"Too Many Requests"
    assert proto.response_headers is not None
    retry_after = dict(proto.response_headers)["retry-after"]
    assert 0 <= int(retry_after) <= 60


@pytest.mark.asyncio
async def test_limit_is_per_client() -> None:
    handler = rate_limit(RateLimitItemPerSecond(1, 60))(_ok_handler)

    assert await _statuses(handler, 1, "10.0.0.1") == [200]
    assert await _statuses(handler, 1, "10.0.0.2") == [200]
    assert await _statuses(handler, 1, "10.0.0.1") == [429]


@pytest.mark.asyncio
async def test_limit_window_resets() -> None:
    handler = rate_limit("1/second")(_ok_handler)

    assert await _statuses(handler, 2, "10.0.0.1") == [200, 429]
    await asyncio.sleep(1.1)
    assert await _statuses(handler, 1, "10.0.0.1") == [200]


@pytest.mark.asyncio
async def test_expired_window_leaves_full_allowance() -> None:
    storage = MemoryStorage()
    item = RateLimitItemPerSecond(2)
    handler = rate_limit(item, storage=storage, namespace="api")(_ok_handler)
    await _statuses(handler, 2, "10.0.0.1")

    limiter = FixedWindowRateLimiter(storage)
    stats = await limiter.get_window_stats(item, "api", "10.0.0.1")
    assert stats.remaining == 0

    await asyncio.sleep(1.1)
    stats = await limiter.get_window_stats(item, "api", "10.0.0.1")
    assert stats.remaining == 2


@pytest.mark.asyncio
async def test_namespaces_share_storage_independently() -> None:
    storage = MemoryStorage()
    first = rate_limit("1/minute", storage=storage, namespace="a")(_ok_handler)
    second = rate_limit("1/minute", storage=storage, namespace="b")(_ok_handler)

    assert await _statuses(first, 1, "10.0.0.1") == [200]
    assert await _statuses(second, 1, "10.0.0.1") == [200]
    assert await _statuses(first, 1, "10.0.0.1") == [429]

    await storage.reset()
    assert await _statuses(first, 1, "10.0.0.1") == [200]
