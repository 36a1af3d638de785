from __future__ import annotations

from time import time

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field


class RequestContext(BaseModel):
    """Raw request material handed downstream for parsing; not interpreted here."""

    model_config = ConfigDict(frozen=True)

    method: str
    scheme: str
    path: str
    query_string: str = ""
    query_params: list[tuple[str, str]] = Field(default_factory=list)
    headers: list[tuple[str, str]] = Field(default_factory=list)
    cookies: dict[str, str] = Field(default_factory=dict)
    client_host: str | None = None
    client_port: int | None = None
    received_at: float = Field(default_factory=time)

    @classmethod
    def from_request(cls, request: Request) -> RequestContext:
        client = request.client
        return cls(
            method=request.method,
            scheme=request.url.scheme,
            path=request.url.path,
            query_string=request.url.query,
            query_params=list(request.query_params.multi_items()),
            headers=list(request.headers.items()),
            cookies=dict(request.cookies),
            client_host=client.host if client else None,
            client_port=client.port if client else None,
        )


class BeaconEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    party_id: str = Field(...)
    session_id: str = Field(...)
    context: RequestContext
