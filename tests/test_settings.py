from __future__ import annotations

from datetime import timedelta

import pytest

from collector.core.app_context import AppContext
from collector.core.errors import ConfigurationError
from collector.core.response import TransparentImage
from collector.core.settings import Settings, load_settings

from conftest import RecordingPool


def test_defaults(monkeypatch):
    for name in ("PARTY_COOKIE", "PARTY_TIMEOUT", "SESSION_COOKIE", "SESSION_TIMEOUT"):
        monkeypatch.delenv(f"COLLECTOR_{name}", raising=False)
    s = load_settings(_env_file=None)
    assert s.party_cookie == "_dvp"
    assert s.party_timeout == timedelta(days=730)
    assert s.session_cookie == "_dvs"
    assert s.session_timeout == timedelta(minutes=30)
    assert s.event_path == "/event"


def test_environment(monkeypatch):
    monkeypatch.setenv("COLLECTOR_PARTY_COOKIE", "pid")
    monkeypatch.setenv("COLLECTOR_SESSION_TIMEOUT", "PT15M")
    monkeypatch.setenv("COLLECTOR_MAX_ENQUEUE_DELAY", "PT2S")
    s = load_settings(_env_file=None)
    assert s.party_cookie == "pid"
    assert s.session_timeout == timedelta(minutes=15)
    assert s.max_enqueue_delay == timedelta(seconds=2)


@pytest.mark.parametrize(
    "overrides",
    [
        {"party_cookie": ""},
        {"session_cookie": "has space"},
        {"party_timeout": timedelta(0)},
        {"session_timeout": "not-a-duration"},
        {"pool_partitions": 0},
        {"max_write_queue": -1},
        {"event_path": "event"},
    ],
)
def test_invalid_values_are_fatal(overrides):
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, **overrides)


def test_context_rejects_bad_identity_config():
    bad = Settings.model_construct(**{**Settings(_env_file=None).model_dump(), "party_cookie": "bad;name"})
    with pytest.raises(ConfigurationError):
        AppContext(bad, pool=RecordingPool())


def test_empty_image_is_fatal():
    with pytest.raises(ConfigurationError):
        TransparentImage(b"")


def test_missing_image_resource_is_fatal():
    with pytest.raises(ConfigurationError):
        TransparentImage.load("missing.gif")


def test_image_is_loaded_once_as_bytes():
    image = TransparentImage.load()
    assert isinstance(image.data, bytes)
    assert len(image) == 43
    assert image.data is image.data
