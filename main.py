"""
App entrypoint.

- Configures logging from settings
- Connects the Prisma backend when it is selected
- Flushes pending author edits on shutdown
- Routes under /v1
"""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI

import routers
from config import settings
from logging_config import configure_logging
from session_service import get_session_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = configure_logging(settings.log_level)
    service = get_session_service()
    connect = getattr(service.host, "connect", None)
    if connect is not None:
        await connect()
    logger.info("%s %s started", settings.service_name, settings.version)
    try:
        yield
    finally:
        await service.shutdown()
        disconnect = getattr(service.host, "disconnect", None)
        if disconnect is not None:
            await disconnect()


app = FastAPI(
    title="Quiz Answers Widget",
    version=settings.version,
    description="Author and display tools for a host-embedded multiple-choice quiz",
    lifespan=lifespan,
)

app.include_router(routers.router, prefix="/v1")
