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
"""Cursor strategy demo.

Middleware and handlers share one signature and continue with `ctx.next()`.

    curl localhost:8000/hello    # 200, logs [LOG], [TIMER] before, [TIMER] after
    curl localhost:8000/missing  # 404, no middleware output
"""

import asyncio
import logging

from granian.server.embed import Server

from minimux import Context, Engine
from minimux.middleware import logger, timer

ADDRESS = "127.0.0.1"
PORT = 8000


async def hello(ctx: Context) -> None:
    ctx.string(200, "Hello from minimux!")


async def status(ctx: Context) -> None:
    ctx.json(200, {"status": "ok"})


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    engine = Engine()
    engine.use(logger, timer)
    engine.get("/hello", hello)
    engine.get("/status", status)
    engine.finalize()

    server = Server(engine, address=ADDRESS, port=PORT, log_access=True)
    try:
        await server.serve()
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    asyncio.run(main())
