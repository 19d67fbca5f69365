from .builtin import auth, logger, logging_middleware, rate_limit, timer

__all__ = [
    "auth",
    "logger",
    "logging_middleware",
    "rate_limit",
    "timer",
]
