"""Closure-wrapping chain composition.

Inspired by go-chi's middleware stack: a middleware is a function from the
next handler to a new handler that wraps it.
"""

from collections.abc import Callable
from functools import reduce

type Middleware[T] = Callable[[T], T]


def compose[T](base: T, *middleware: Middleware[T]) -> T:
    """Wraps base in middleware, returning a single handler.

    The middleware sequence is folded right-to-left over base, so the first
    entry becomes the outermost wrapper: it runs first on the way in and last
    on the way out. For middleware (m1, m2, m3) the result is m1(m2(m3(base))),
    which gives the same call order as walking the list front to back at
    request time.

    The result holds no per-request state and can be reused across requests.
    """
    return reduce(lambda h, m: m(h), reversed(middleware), base)
