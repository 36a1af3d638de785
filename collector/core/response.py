from __future__ import annotations

from importlib.resources import files

from fastapi import Response

from collector.core.errors import ConfigurationError

IMAGE_RESOURCE = "transparent1x1.gif"

CACHE_SUPPRESSION_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class TransparentImage:
    """
    The 1x1 GIF returned for every accepted beacon.

    Loaded once; the bytes are never written afterwards, so every response
    shares the same immutable bytes without locking.
    """

    def __init__(self, data: bytes) -> None:
        if not data:
            raise ConfigurationError("transparent image payload is empty")
        self._data = bytes(data)

    @classmethod
    def load(cls, resource: str = IMAGE_RESOURCE) -> TransparentImage:
        try:
            data = files("collector.resources").joinpath(resource).read_bytes()
        except (OSError, ModuleNotFoundError) as e:
            raise ConfigurationError(f"could not load transparent image resource: {resource}") from e
        return cls(data)

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)


def accepted_response(image: TransparentImage) -> Response:
    """202: the event was accepted for processing, not processed."""
    response = Response(content=image.data, status_code=202, media_type="image/gif")
    response.headers.update(CACHE_SUPPRESSION_HEADERS)
    return response


def method_not_allowed_response(method: str) -> Response:
    response = Response(
        content=f"HTTP method {method} not allowed.",
        status_code=405,
        media_type="text/plain; charset=utf-8",
    )
    response.headers["Allow"] = "GET"
    return response
