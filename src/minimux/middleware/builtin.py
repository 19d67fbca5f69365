"""Built-in middleware.

`logger` and `timer` are Context handlers for `Engine`. `logging_middleware`,
`auth` and `rate_limit` wrap RSGI handlers for `Router`.
"""

from __future__ import annotations

import logging
import math
import time
from typing import TYPE_CHECKING

from limits import parse
from limits.aio.storage import MemoryStorage
from limits.aio.strategies import FixedWindowRateLimiter

if TYPE_CHECKING:
    from collections.abc import Callable

    from limits import RateLimitItem
    from limits.aio.storage import Storage

    from minimux.context import Context
    from minimux.rsgi import HTTPProtocol, HTTPScope, RSGIHTTPHandler

log = logging.getLogger(__name__)

_TEXT = [("content-type", "text/plain; charset=utf-8")]


# --- Engine (cursor strategy) ---------------------------------------------------
async def logger(ctx: Context) -> None:
    log.info("[LOG] %s %s", ctx.method, ctx.path)
    await ctx.next()


async def timer(ctx: Context) -> None:
    log.info("[TIMER] before")
    start = time.perf_counter()
    try:
        await ctx.next()
    finally:
        log.info("[TIMER] after %.6fs", time.perf_counter() - start)


# --- Router (closure strategy) --------------------------------------------------
def logging_middleware(handler: RSGIHTTPHandler) -> RSGIHTTPHandler:
    async def logged_handler(scope: HTTPScope, proto: HTTPProtocol) -> None:
        log.info("[LOG] %s %s", scope.method, scope.path)
        await handler(scope, proto)

    return logged_handler


def auth(handler: RSGIHTTPHandler) -> RSGIHTTPHandler:
    """Rejects requests without an Authorization header with 401."""

    async def authed_handler(scope: HTTPScope, proto: HTTPProtocol) -> None:
        if not scope.headers.get("authorization"):
            proto.response_str(401, _TEXT, "Unauthorized: missing token")
            return
        await handler(scope, proto)

    return authed_handler


def rate_limit(
    limit: RateLimitItem | str | None = None,
    *,
    storage: Storage | None = None,
    namespace: str = "minimux",
) -> Callable[[RSGIHTTPHandler], RSGIHTTPHandler]:
    """Create fixed-window rate limiting middleware, keyed on scope.client.

    Args:
        limit: Requests allowed per client, as a `limits` item or a string
            like ``"10/second"``. None admits everything and only logs.
        storage: `limits` async storage holding the counters. Defaults to a
            private in-memory storage, which expires counters with their
            window. Pass a shared storage to limit across workers.
        namespace: Key prefix in the storage, keeps limiters apart.

    Returns:
        Middleware function that wraps handlers with rate limiting. Requests
        over the limit get 429 with a Retry-After header and never reach the
        wrapped handler.

    Example:
        router.use(rate_limit("100/minute"))
    """
    item = parse(limit) if isinstance(limit, str) else limit
    limiter = FixedWindowRateLimiter(
        storage if storage is not None else MemoryStorage()
    )

    def middleware(handler: RSGIHTTPHandler) -> RSGIHTTPHandler:
        async def limited_handler(scope: HTTPScope, proto: HTTPProtocol) -> None:
            if item is not None and not await limiter.hit(
                item, namespace, scope.client
            ):
                stats = await limiter.get_window_stats(item, namespace, scope.client)
                retry_after = max(0, math.ceil(stats.reset_time - time.time()))
                log.warning("[RateLimit] rejected %s", scope.client)
                proto.response_str(
                    429,
                    [*_TEXT, ("retry-after", str(retry_after))],
                    "Too Many Requests",
                )
                return
            log.info("[RateLimit] OK")
            await handler(scope, proto)

        return limited_handler

    return middleware
