from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from http.cookies import SimpleCookie

from starlette.datastructures import MutableHeaders

from collector.core.errors import ConfigurationError

# Max-Age is only emitted when it fits a signed 32-bit integer; Expires is always set.
MAX_AGE_LIMIT = 2**31 - 1
MAX_TIMEOUT = timedelta(days=365 * 1000)

# RFC 6265 token
COOKIE_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_tracking_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TrackingCookie:
    name: str
    value: str
    expires: datetime
    max_age: int | None
    version: int = 1
    path: str = "/"
    domain: str | None = None

    def header_value(self) -> str:
        jar: SimpleCookie = SimpleCookie()
        jar[self.name] = self.value
        morsel = jar[self.name]
        morsel["version"] = str(self.version)
        morsel["path"] = self.path
        morsel["expires"] = format_datetime(self.expires, usegmt=True)
        if self.max_age is not None:
            morsel["max-age"] = str(self.max_age)
        if self.domain:
            morsel["domain"] = self.domain
        return morsel.OutputString()


def build_tracking_cookie(
    request_cookies: Mapping[str, str],
    cookie_name: str,
    timeout: timedelta,
    *,
    domain: str | None = None,
    now: datetime | None = None,
) -> TrackingCookie:
    """
    Get-or-create the tracking cookie named ``cookie_name``.

    An inbound value is reused verbatim; only a missing cookie gets a fresh
    identifier. The expiry slides: it is always ``now + timeout``.
    """
    value = request_cookies.get(cookie_name)
    if value is None:
        value = new_tracking_id()

    now = now or utcnow()
    max_age = int(timeout.total_seconds())
    return TrackingCookie(
        name=cookie_name,
        value=value,
        expires=now + timedelta(seconds=max_age),
        max_age=max_age if max_age <= MAX_AGE_LIMIT else None,
        domain=domain,
    )


def resolve_identifier(
    request_cookies: Mapping[str, str],
    response_headers: MutableHeaders,
    cookie_name: str,
    timeout: timedelta,
    *,
    domain: str | None = None,
) -> str:
    cookie = build_tracking_cookie(request_cookies, cookie_name, timeout, domain=domain)
    response_headers.append("set-cookie", cookie.header_value())
    return cookie.value


class TrackingIdentity:
    """
    One kind of tracking identity (party or session): a cookie name plus its sliding TTL.

    Invalid names or timeouts are rejected here, at construction, never per request.
    """

    def __init__(self, *, cookie_name: str, timeout: timedelta, domain: str | None = None) -> None:
        if not cookie_name or not COOKIE_NAME_RE.fullmatch(cookie_name):
            raise ConfigurationError(f"invalid tracking cookie name: {cookie_name!r}")
        if not isinstance(timeout, timedelta) or timeout.total_seconds() < 1:
            raise ConfigurationError(f"invalid timeout for cookie {cookie_name}: {timeout!r}")
        if timeout > MAX_TIMEOUT:
            raise ConfigurationError(f"timeout for cookie {cookie_name} is out of range: {timeout!r}")
        self.cookie_name = cookie_name
        self.timeout = timeout
        self.domain = domain

    def resolve(self, request_cookies: Mapping[str, str], response_headers: MutableHeaders) -> str:
        return resolve_identifier(
            request_cookies,
            response_headers,
            self.cookie_name,
            self.timeout,
            domain=self.domain,
        )
