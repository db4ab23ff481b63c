from __future__ import annotations

import asyncio
import logging

import uvicorn

from .api import app, get_config


async def serve() -> None:
    config = get_config()

    server = uvicorn.Server(
        uvicorn.Config(
            app=app,
            host="0.0.0.0",
            port=config.api_port,
            log_level="info",
        )
    )
    await server.serve()


def run_server() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    asyncio.run(serve())


if __name__ == "__main__":
    run_server()
