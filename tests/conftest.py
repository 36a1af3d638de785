"""Shared fixtures for the collector test suite."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from collector.core.app_context import AppContext
from collector.core.settings import Settings
from collector.main import create_app
from collector.schema.events import BeaconEvent


class RecordingPool:
    """Processing pool stand-in that remembers every enqueue call in order."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.calls: list[tuple[str, BeaconEvent]] = []
        self.fail_with = fail_with

    async def enqueue(self, partition_key: str, event: BeaconEvent) -> None:
        self.calls.append((partition_key, event))
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture
def settings() -> Settings:
    return Settings(
        party_cookie="_dvp",
        party_timeout=timedelta(days=730),
        session_cookie="_dvs",
        session_timeout=timedelta(minutes=30),
    )


@pytest.fixture
def pool() -> RecordingPool:
    return RecordingPool()


@pytest.fixture
def client(settings, pool):
    ctx = AppContext(settings, pool=pool)
    with TestClient(create_app(ctx=ctx)) as c:
        yield c
