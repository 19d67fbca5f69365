# /// script
# requires-python = ">=3.14"
# dependencies = [
#     "minimux",
#     "granian[uvloop]>=2.6.0,<3.0.0",
# ]
#
# [tool.uv.sources]
# minimux = { path = "../", editable = true }
# ///
"""Closure strategy demo.

Middleware wrap the next handler; the first registered runs first.

    curl localhost:8000/                               # 401
    curl -H "Authorization: Bearer x" localhost:8000/  # 200
"""

import asyncio
import logging

from granian.server.embed import Server

from minimux import Router
from minimux.middleware import auth, logging_middleware, rate_limit
from minimux.rsgi import HTTPProtocol, HTTPScope

ADDRESS = "127.0.0.1"
PORT = 8000


async def hello(_scope: HTTPScope, proto: HTTPProtocol) -> None:
    proto.response_str(
        200, [("content-type", "text/plain")], "Hello with middleware!"
    )


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    router = Router()
    router.use(logging_middleware, auth, rate_limit("10/second"))
    router.get("/", hello)
    router.finalize()

    server = Server(router, address=ADDRESS, port=PORT, log_access=True)
    try:
        await server.serve()
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    asyncio.run(main())
