"""FastAPI application entrypoint for the review server."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from prmanager import __version__
from prmanager.api import api_router, root_router
from prmanager.github.client import github_client
from prmanager.log_config import configure_logging
from prmanager.maintenance import maintenance_loop
from prmanager.middleware import (
    http_exception_handler,
    request_logging_middleware,
    validation_exception_handler,
)
from prmanager.opencode.manager import opencode_manager
from prmanager.settings import settings
from prmanager.startup import log_ui_urls, open_browser, ui_url

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    maintenance_task = asyncio.create_task(maintenance_loop())
    host, port = settings.host(), settings.port()
    log_ui_urls(host, port)
    if settings.open_browser():
        await asyncio.to_thread(open_browser, ui_url(host, port, settings.open_pr()))
    try:
        yield
    finally:
        maintenance_task.cancel()
        with suppress(asyncio.CancelledError):
            await maintenance_task
        await opencode_manager.stop()
        await github_client.close()
        logger.info("Server shut down")


app = FastAPI(title="RPM", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(api_router)
app.include_router(root_router)


def run() -> None:
    """Entry point for the rpm server."""
    uvicorn.run(
        "prmanager.main:app",
        host=settings.host(),
        port=settings.port(),
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    run()
