"""Per-request context for the cursor strategy.

Inspired by gin's Context: the handler chain for one request is the
middleware list with the route handler appended, and each link hands control
to the next by calling `Context.next()`.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable

from .rsgi import HTTPProtocol, HTTPScope

type Handler = Callable[[Context], Awaitable[None]]


class Context:
    """Request, response sink and chain cursor for one in-flight request.

    A new Context is created for every request and must never be shared
    between requests.
    """

    __slots__ = ("_handlers", "_index", "proto", "scope")
    scope: HTTPScope
    proto: HTTPProtocol
    _handlers: tuple[Handler, ...]
    _index: int

    def __init__(
        self, scope: HTTPScope, proto: HTTPProtocol, handlers: tuple[Handler, ...]
    ) -> None:
        self.scope = scope
        self.proto = proto
        self._handlers = handlers
        self._index = -1  # before the first link

    @property
    def index(self) -> int:
        """Position of the link currently executing, -1 before dispatch.

        Not monotonic: when a downstream `next()` returns, the cursor goes back
        to the calling link's position.
        """
        return self._index

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return self._handlers

    async def next(self) -> None:
        """Runs the link after the current one, and everything it continues to.

        Returns once the downstream chain has finished or short-circuited, so
        code after `await ctx.next()` is post-processing. Calling next() on the
        last link is a no-op.

        The cursor is put back on the calling link when the downstream chain
        returns, so calling next() twice from one link runs the downstream
        links twice. Nothing guards against that.
        """
        index = self._index + 1
        if index >= len(self._handlers):
            return
        self._index = index
        try:
            await self._handlers[index](self)
        finally:
            self._index = index - 1

    # --- request ---------------------------------------------------------------
    @property
    def method(self) -> str:
        return self.scope.method

    @property
    def path(self) -> str:
        return self.scope.path

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.scope.headers.get(name.lower(), default)

    async def body(self) -> bytes:
        return await self.proto()

    # --- response --------------------------------------------------------------
    def string(self, status: int, body: str) -> None:
        """Writes a text/plain response."""
        self.proto.response_str(
            status, [("content-type", "text/plain; charset=utf-8")], body
        )

    def json(self, status: int, data: object) -> None:
        """Serializes data and writes an application/json response."""
        self.proto.response_str(
            status, [("content-type", "application/json")], json.dumps(data)
        )
