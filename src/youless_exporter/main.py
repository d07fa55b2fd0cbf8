"""FastAPI application for the YouLess exporter."""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from youless_exporter.backends import create_backend
from youless_exporter.config import load_config
from youless_exporter.frontends import create_frontend

logger = logging.getLogger("youless_exporter")

# Module-level config path, set before app creation. None means defaults.
_config_path: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config(_config_path)

    # Create and start backend
    backend_type = config.backend.type
    backend_conf = {}
    if backend_type == "youless":
        backend_conf = config.backend.youless.model_dump()

    backend = create_backend(backend_type, backend_conf)
    logger.info("Starting backend (%s)...", backend_type)
    await backend.start()

    # Create and start frontend
    frontend_type = config.frontend.type
    frontend_conf = config.frontend.prometheus.model_dump()

    frontend = create_frontend(frontend_type, backend, frontend_conf)
    app.include_router(frontend.get_router())
    logger.info("Starting frontend (%s)...", frontend_type)
    await frontend.start()

    logger.info(
        "YouLess exporter ready on %s:%d, frontend=%s, backend=%s",
        config.server.host,
        config.server.port,
        frontend_type,
        backend_type,
    )

    yield

    # Shutdown
    await frontend.stop()
    await backend.stop()


app = FastAPI(title="YouLess Exporter", lifespan=lifespan)


def run() -> None:
    """CLI entry point."""
    global _config_path

    parser = argparse.ArgumentParser(description="YouLess Prometheus exporter")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config YAML file (built-in defaults when omitted)",
    )
    args = parser.parse_args()

    _config_path = args.config
    config = load_config(_config_path)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    # uvicorn exits the process when the port cannot be bound
    uvicorn.run(app, host=config.server.host, port=config.server.port)
