"""
Run the formpages server.

Run:
  python -m formpages

Then try:
  curl -i http://127.0.0.1:3000/
  curl -i http://127.0.0.1:3000/submit
  curl -i -X POST http://127.0.0.1:3000/submit -d 'name=Alice&email=a@b.com'
"""

from __future__ import annotations

import logging

import anyio

from .app import handle_request
from .config import ServerConfig
from .http import HttpServer


logger = logging.getLogger("formpages")


async def serve(config: ServerConfig) -> None:
    server = HttpServer(handle_request, host=config.host, port=config.port)
    async with anyio.create_task_group() as tg:
        port = await tg.start(server.serve)
        logger.info("Server is running on http://localhost:%d", port)


def main() -> None:
    config = ServerConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        anyio.run(serve, config)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
