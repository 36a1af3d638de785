from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from collector.api.event import build_router
from collector.core.app_context import AppContext
from collector.core.settings import Settings, load_settings


def create_app(settings: Settings | None = None, *, ctx: AppContext | None = None) -> FastAPI:
    if ctx is not None:
        settings = ctx.settings
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.ctx = ctx or AppContext(settings)
        await app.state.ctx.start_background()
        yield
        await app.state.ctx.shutdown()

    app = FastAPI(title="Clickstream Collector", version="0.1.0", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.include_router(build_router(settings.event_path))
    return app


def run() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
