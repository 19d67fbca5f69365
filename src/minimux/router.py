"""Closure strategy dispatcher.

Inspired by go-chi/mux's Mux. Handlers are plain RSGI HTTP handlers and
middleware are functions that wrap the next handler.
"""

import asyncio
import logging

from .chain import Middleware, compose
from .registry import HTTPMethod, Registry, RouteKey, RouteMethods, current_route
from .rsgi import HTTPProtocol, HTTPScope, RSGIHTTPHandler

logger = logging.getLogger(__name__)


async def not_found(_scope: HTTPScope, proto: HTTPProtocol) -> None:
    proto.response_str(
        404, [("content-type", "text/plain; charset=utf-8")], "404 Not Found"
    )


class Router(RouteMethods[RSGIHTTPHandler, Middleware[RSGIHTTPHandler]]):
    """RSGI application dispatching each request to a composed handler.

    Each route is composed once, on finalize, as
    `use()` middleware wrapping the route's own middleware wrapping the
    handler. Unmatched requests go to the not found handler without passing
    through any middleware.
    """

    __slots__ = ("_chains", "_finalized", "_middleware", "_not_found", "_routes")
    _routes: Registry[RSGIHTTPHandler]
    _chains: Registry[RSGIHTTPHandler]
    _middleware: tuple[Middleware[RSGIHTTPHandler], ...]
    _not_found: RSGIHTTPHandler
    _finalized: bool

    def __init__(self, *, not_found_handler: RSGIHTTPHandler | None = None) -> None:
        self._routes = Registry()
        self._chains = Registry()
        self._middleware = ()
        self._not_found = not_found_handler or not_found
        self._finalized = False

    async def __rsgi__(self, scope: HTTPScope, proto: HTTPProtocol) -> None:
        self.finalize()
        handler = self._chains.resolve(scope.method, scope.path)
        if handler is None:
            logger.debug("no route for %s %s", scope.method, scope.path)
            await self._not_found(scope, proto)
            return
        with current_route.set(RouteKey(scope.method, scope.path)):
            await handler(scope, proto)

    def __rsgi_init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.finalize()

    def __rsgi_del__(self, loop: asyncio.AbstractEventLoop) -> None:
        pass

    def finalize(self) -> None:
        """Composes every route with the middleware and freezes the router.

        Idempotent - safe to call multiple times. Called automatically by the
        RSGI init hook and on the first request.
        """
        if self._finalized:
            return
        for key, handler in self._routes.items():
            self._chains.register(
                key.method, key.path, compose(handler, *self._middleware)
            )
        self._routes.freeze()
        self._chains.freeze()
        self._finalized = True
        logger.debug(
            "router finalized: %d routes, %d middleware",
            len(self._chains),
            len(self._middleware),
        )

    def use(self, *middleware: Middleware[RSGIHTTPHandler]) -> None:
        """Appends middleware; the first registered is the outermost wrapper."""
        if self._finalized:
            msg = "router is finalized, middleware must be added before serving"
            raise ValueError(msg)
        self._middleware += middleware

    def method(
        self,
        method: HTTPMethod | str,
        path: str,
        handler: RSGIHTTPHandler,
        middleware: tuple[Middleware[RSGIHTTPHandler], ...] = (),
    ) -> None:
        """Registers handler at method+path, with optional route middleware."""
        self._routes.register(method, path, compose(handler, *middleware))
