"""
Browser origin admission.

The allow-list is normalized once at startup into a set of hosts
(hostname[:port], scheme and trailing slash stripped). An inbound Origin
header is admitted when its host is in that set or when the raw header
equals one of the configured entries. Requests without an Origin header
(server-to-server, curl, Postman) are always admitted.
"""

import logging
from urllib.parse import urlsplit

from chat_gateway.errors import OriginNotAllowed

logger = logging.getLogger(__name__)


def normalize_origin(value: str) -> str:
    """
    Reduce an origin string to hostname[:port].

    Absolute URLs lose their scheme, path and userinfo. Anything else is
    treated as a bare host and only loses trailing slashes. Never raises:
    an unparseable value comes back unchanged so it can still match literally.
    """
    candidate = value.strip()
    try:
        parts = urlsplit(candidate)
        if parts.scheme and parts.netloc and parts.hostname:
            host = parts.hostname
            if ":" in host:
                host = f"[{host}]"  # IPv6 literal
            if parts.port is not None:
                host = f"{host}:{parts.port}"
            return host
    except ValueError:
        # Bad port or malformed IPv6 literal: degrade to a literal match
        return candidate.rstrip("/")
    return candidate.rstrip("/").lower()


class OriginMatcher:
    """Immutable allow-list built from configured origin strings."""

    def __init__(self, allowed_origins: list[str]):
        self._raw = tuple(allowed_origins)
        self._hosts = frozenset(normalize_origin(o) for o in allowed_origins)

    @property
    def raw_origins(self) -> tuple[str, ...]:
        return self._raw

    @property
    def hosts(self) -> frozenset[str]:
        return self._hosts

    def allows(self, origin: str | None) -> bool:
        if not origin:
            return True
        if origin in self._raw:
            return True
        return normalize_origin(origin) in self._hosts

    def check(self, origin: str | None) -> None:
        """Raise OriginNotAllowed unless the origin is admitted."""
        if not self.allows(origin):
            logger.warning("Blocked CORS origin: %s", origin)
            raise OriginNotAllowed(origin)
