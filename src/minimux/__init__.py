from importlib.metadata import version

from .chain import Middleware, compose
from .context import Context, Handler
from .engine import Engine
from .registry import Registry, RouteKey, current_route
from .router import Router

__all__ = [
    "Context",
    "Engine",
    "Handler",
    "Middleware",
    "Registry",
    "RouteKey",
    "Router",
    "__version__",
    "compose",
    "current_route",
]

__version__ = version("minimux")
