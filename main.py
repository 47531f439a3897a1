# main.py

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI

from config import Settings, load_config, load_settings, parse_listen_addr
from errors import ConfigError
from executor import Executor
from job_queue import JobQueue
from logging_config import setup_logging
from models.endpoint import EndpointConfig

# Routers
from routers.health import router as health_router
from routers.webhook import build_router

logger = logging.getLogger(__name__)


def create_app(endpoints: Dict[str, EndpointConfig], settings: Settings, start_executor: bool = True) -> FastAPI:
    """
    Assemble the service: one shared job queue, one executor, and a route for
    every configured endpoint.

    With ``start_executor`` off nothing drains the queue, which lets callers
    inspect queued jobs.
    """
    job_queue = JobQueue(settings.queue_size)
    executor = Executor(job_queue, timeout=settings.command_timeout, verbose=settings.verbose)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(executor.run()) if start_executor else None
        yield
        if task is not None:
            # Jobs still queued are abandoned.
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    app = FastAPI(
        title="HookRunner",
        description="Runs local commands when GitHub pushes to a configured repository",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.job_queue = job_queue
    app.state.executor = executor

    app.include_router(health_router)
    app.include_router(build_router(endpoints))
    return app


def parse_args(argv: Optional[List[str]], defaults: Settings) -> Settings:
    parser = argparse.ArgumentParser(description="Run local commands on GitHub push webhooks.")
    parser.add_argument("--listen", default=defaults.listen_addr, help="address to listen at")
    parser.add_argument("--qsize", type=int, default=defaults.queue_size, help="job queue size")
    parser.add_argument("--config", default=defaults.config_path, help="path to config (yaml)")
    parser.add_argument("--cert", default=defaults.cert_file, help="path to ssl certificate")
    parser.add_argument("--key", default=defaults.key_file, help="path to ssl certificate key")
    parser.add_argument("--timeout", type=float, default=defaults.command_timeout,
                        help="timeout for command run, in seconds (0 disables)")
    parser.add_argument("--verbose", action=argparse.BooleanOptionalAction, default=defaults.verbose,
                        help="pass stdout/stderr from commands to stderr")
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=defaults.debug_mode,
                        help="debug logging")
    args = parser.parse_args(argv)
    return Settings.model_validate({
        **defaults.model_dump(),
        "listen_addr": args.listen,
        "queue_size": args.qsize,
        "config_path": args.config,
        "cert_file": args.cert,
        "key_file": args.key,
        "command_timeout": args.timeout,
        "verbose": args.verbose,
        "debug_mode": args.debug,
    })


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = parse_args(argv, load_settings())
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 1

    # Initialize logging once
    setup_logging(settings.debug_mode, settings.log_db_path)
    logger.info("Starting the HookRunner application...")

    try:
        endpoints = load_config(settings.config_path)
        host, port = parse_listen_addr(settings.listen_addr)
    except ConfigError as e:
        logger.critical(f"Startup failed: {e}")
        return 1

    app = create_app(endpoints, settings)
    uvicorn.run(
        app,
        host=host,
        port=port,
        ssl_certfile=settings.cert_file if settings.tls_enabled else None,
        ssl_keyfile=settings.key_file if settings.tls_enabled else None,
        timeout_keep_alive=15,
        http="h11",
        h11_max_incomplete_event_size=1 << 20,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
