#Purpose: the HTTP "downloader" used by RoutingWebClient.
#Sole responsibility: push one prepared call through a requests.Session-like object
#with the configured connect/read timeouts. No retries, no parsing.
#Anything with a Session-style request(method, url, **kwargs) method can be plugged in,
#which is how tests replace the network with an in-memory fake.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000

_KEY_PARAM = re.compile(r"([?&]key=)[^&]*")


def redact_key(url: str) -> str:
    return _KEY_PARAM.sub(r"\1***", url)


@dataclass(frozen=True)
class PreparedCall:
    """One outbound HTTP call, fully built but not yet sent."""
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[str] = None


@dataclass(frozen=True)
class HttpTransport:
    session: Any = field(default_factory=requests.Session)
    connect_timeout_ms: int = DEFAULT_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_TIMEOUT_MS

    def with_timeout(self, timeout_ms: int) -> HttpTransport:
        """Copy sharing the same session, with both timeouts set to timeout_ms."""
        return replace(self, connect_timeout_ms=int(timeout_ms), read_timeout_ms=int(timeout_ms))

    @property
    def timeout(self):
        """(connect, read) in seconds, as requests expects it."""
        return (self.connect_timeout_ms / 1000.0, self.read_timeout_ms / 1000.0)

    def send(self, call: PreparedCall):
        try:
            response = self.session.request(
                call.method,
                call.url,
                headers=dict(call.headers),
                data=call.body.encode("utf-8") if call.body is not None else None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", call.method, redact_key(call.url), exc)
            raise

        logger.debug("%s %s -> HTTP %s", call.method, redact_key(call.url), response.status_code)
        return response
