from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse


def build_router(event_path: str = "/event") -> APIRouter:
    router = APIRouter(tags=["event"])

    async def handle_event(request: Request) -> Response:
        ctx = request.app.state.ctx
        return ctx.handler.handle(request)

    # No method restriction: every method reaches the handler, which alone answers non-GET requests.
    router.add_route(event_path, handle_event, methods=None, include_in_schema=False)

    @router.get("/ping", response_class=PlainTextResponse)
    async def ping() -> str:
        return "pong"

    return router
