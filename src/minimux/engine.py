"""Cursor strategy dispatcher.

Inspired by gin's Engine. Middleware and route handlers share one signature,
`async def handler(ctx: Context) -> None`, and continue the chain by awaiting
`ctx.next()`.
"""

import asyncio
import logging

from .context import Context, Handler
from .registry import HTTPMethod, Registry, RouteKey, RouteMethods, current_route
from .rsgi import HTTPProtocol, HTTPScope

logger = logging.getLogger(__name__)


async def not_found(ctx: Context) -> None:
    ctx.string(404, "404 Not Found")


class Engine(RouteMethods[Handler, Handler]):
    """RSGI application dispatching each request through a Context chain.

    Example:
        engine = Engine()
        engine.use(logger, timer)
        engine.get("/hello", hello)
        Server(engine, address="127.0.0.1", port=8000)
    """

    __slots__ = ("_chains", "_finalized", "_middleware", "_not_found", "_routes")
    _routes: Registry[tuple[Handler, ...]]
    _chains: Registry[tuple[Handler, ...]]
    _middleware: tuple[Handler, ...]
    _not_found: tuple[Handler, ...]
    _finalized: bool

    def __init__(self, *, not_found_handler: Handler | None = None) -> None:
        self._routes = Registry()
        self._chains = Registry()
        self._middleware = ()
        self._not_found = (not_found_handler or not_found,)
        self._finalized = False

    async def __rsgi__(self, scope: HTTPScope, proto: HTTPProtocol) -> None:
        self.finalize()
        handlers = self._chains.resolve(scope.method, scope.path)
        if handlers is None:
            logger.debug("no route for %s %s", scope.method, scope.path)
            await Context(scope, proto, self._not_found).next()
            return
        with current_route.set(RouteKey(scope.method, scope.path)):
            await Context(scope, proto, handlers).next()

    def __rsgi_init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.finalize()

    def __rsgi_del__(self, loop: asyncio.AbstractEventLoop) -> None:
        pass

    def finalize(self) -> None:
        """Freezes middleware and routes and builds each route's handler chain.

        Every chain is the middleware list, then the route's own middleware,
        then the route handler. Idempotent - safe to call multiple times.

        Called automatically by the RSGI init hook and on the first request.
        """
        if self._finalized:
            return
        for key, route in self._routes.items():
            self._chains.register(key.method, key.path, self._middleware + route)
        self._routes.freeze()
        self._chains.freeze()
        self._finalized = True
        logger.debug(
            "engine finalized: %d routes, %d middleware",
            len(self._chains),
            len(self._middleware),
        )

    def use(self, *middleware: Handler) -> None:
        """Appends middleware; registration order is execution order."""
        if self._finalized:
            msg = "engine is finalized, middleware must be added before serving"
            raise ValueError(msg)
        self._middleware += middleware

    def method(
        self,
        method: HTTPMethod | str,
        path: str,
        handler: Handler,
        middleware: tuple[Handler, ...] = (),
    ) -> None:
        """Registers handler at method+path, with optional route middleware."""
        self._routes.register(method, path, (*middleware, handler))

