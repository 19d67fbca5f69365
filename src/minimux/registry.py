"""Exact-match route registry.

Routes are keyed on the (method, path) pair exactly as received: no case
folding, no trailing slash handling, no parameters.
"""

from abc import ABC, abstractmethod
from collections.abc import ItemsView
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Literal

type HTTPMethod = Literal[
    "CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "TRACE"
]


@dataclass(slots=True, frozen=True)
class RouteKey:
    method: str
    path: str

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


# set by the dispatchers for the duration of a matched chain
current_route: ContextVar[RouteKey] = ContextVar("current_route")


class Registry[T]:
    """Maps RouteKey to handler, last registration wins.

    Mutated only during setup. Once frozen it is read-only, so lookups from
    concurrent requests need no locking.
    """

    __slots__ = ("_frozen", "_routes")
    _routes: dict[RouteKey, T]
    _frozen: bool

    def __init__(self) -> None:
        self._routes = {}
        self._frozen = False

    def register(self, method: str, path: str, handler: T) -> None:
        """Inserts handler at method+path, replacing any existing handler."""
        if self._frozen:
            msg = "registry is frozen, routes must be registered before serving"
            raise ValueError(msg)
        if not method:
            msg = "method must not be empty"
            raise ValueError(msg)
        if not path:
            msg = "path must not be empty"
            raise ValueError(msg)
        self._routes[RouteKey(method, path)] = handler

    def resolve(self, method: str, path: str) -> T | None:
        """Returns the handler for method+path, or None if no route matches."""
        return self._routes.get(RouteKey(method, path))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def items(self) -> ItemsView[RouteKey, T]:
        return self._routes.items()

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, key: object) -> bool:
        return key in self._routes


class RouteMethods[H, M](ABC):
    """Per-method registration shorthands over `method()`.

    H is the handler type, M the type of one route-level middleware entry.
    """

    __slots__ = ()

    @abstractmethod
    def method(
        self,
        method: HTTPMethod | str,
        path: str,
        handler: H,
        middleware: tuple[M, ...] = (),
    ) -> None:
        """Register `handler` for `method` `path`."""

    def connect(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for CONNECT, with optional middleware."""
        self.method("CONNECT", path, handler, middleware)

    def delete(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for DELETE, with optional middleware."""
        self.method("DELETE", path, handler, middleware)

    def get(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for GET, with optional middleware."""
        self.method("GET", path, handler, middleware)

    def head(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for HEAD, with optional middleware."""
        self.method("HEAD", path, handler, middleware)

    def options(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for OPTIONS, with optional middleware."""
        self.method("OPTIONS", path, handler, middleware)

    def patch(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for PATCH, with optional middleware."""
        self.method("PATCH", path, handler, middleware)

    def post(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for POST, with optional middleware."""
        self.method("POST", path, handler, middleware)

    def put(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for PUT, with optional middleware."""
        self.method("PUT", path, handler, middleware)

    def trace(
        self, path: str, handler: H, middleware: tuple[M, ...] = ()
    ) -> None:
        """Registers handler at path for TRACE, with optional middleware."""
        self.method("TRACE", path, handler, middleware)
