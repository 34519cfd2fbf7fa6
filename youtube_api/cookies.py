"""Credential storage for YouTube sessions.

Credentials are kept as cookie-style bundles (``key=value; key=value``)
grouped by service name. The OAuth session lives under ``youtube_oauth``.

The on-disk format is a JSON object mapping a service name to a list of
cookie strings::

    {
        "youtube_oauth": [
            "access_token=ya29...; refresh_token=1//0...; expires=2026-10-18T12:00:00.000Z"
        ]
    }
"""

import json
import logging
import os
import random
import threading
from typing import Mapping, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class Cookie:
    """A named bundle of credential values."""

    def __init__(self, service: str, values: Mapping[str, str]):
        self.service = service
        self._values: dict[str, str] = {str(k): str(v) for k, v in values.items()}

    @classmethod
    def from_string(cls, service: str, cookie: str) -> "Cookie":
        """Parse a ``key=value; key=value`` string. Pairs without '=' are skipped."""
        values = {}
        for pair in cookie.split(";"):
            key, sep, value = pair.strip().partition("=")
            if sep and key:
                values[key] = value
        return cls(service, values)

    def values(self) -> dict[str, str]:
        return dict(self._values)

    def set(self, values: Mapping[str, object]) -> None:
        """Merge values into the bundle."""
        for key, value in values.items():
            self._values[str(key)] = str(value)

    def __str__(self) -> str:
        return "; ".join(f"{k}={v}" for k, v in self._values.items())

    def __repr__(self) -> str:
        return f"Cookie(service={self.service!r}, keys={sorted(self._values)})"


class CredentialStore(Protocol):
    """Key-value store of named credential bundles."""

    def get(self, service: str) -> Optional[Cookie]:
        """Return a credential bundle for the service, or None if there is none."""
        ...

    def update(self, cookie: Cookie, values: Mapping[str, object]) -> None:
        """Merge values into a bundle previously returned by :meth:`get`."""
        ...


class MemoryCookieStore:
    """In-process credential store.

    Args:
        cookies: Mapping of service name to cookies (strings, dicts or Cookie objects)
    """

    def __init__(
        self,
        cookies: Optional[Mapping[str, list[Union[str, Mapping[str, str], Cookie]]]] = None,
    ):
        self._cookies: dict[str, list[Cookie]] = {}
        self._lock = threading.Lock()
        for service, entries in (cookies or {}).items():
            self._cookies[service] = [self._to_cookie(service, e) for e in entries]

    @staticmethod
    def _to_cookie(service: str, entry: Union[str, Mapping[str, str], Cookie]) -> Cookie:
        if isinstance(entry, Cookie):
            return entry
        if isinstance(entry, str):
            return Cookie.from_string(service, entry)
        return Cookie(service, entry)

    def get(self, service: str) -> Optional[Cookie]:
        cookies = self._cookies.get(service)
        if not cookies:
            return None
        return random.choice(cookies)

    def update(self, cookie: Cookie, values: Mapping[str, object]) -> None:
        with self._lock:
            cookie.set(values)
            self._persist()

    def _persist(self) -> None:
        """Hook for stores that write changes somewhere. Called under the lock."""

    def to_json(self) -> dict[str, list[str]]:
        return {
            service: [str(cookie) for cookie in cookies]
            for service, cookies in self._cookies.items()
        }


class CookieStore(MemoryCookieStore):
    """JSON file backed credential store.

    Updated values are written back to the file immediately. Concurrent
    updates are serialized; the last writer wins.

    Args:
        path: Path to the cookie file
    """

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        super().__init__(self._load(self.path))

    @staticmethod
    def _load(path: str) -> dict[str, list[str]]:
        if not os.path.isfile(path):
            logger.warning(f"Cookie file not found: {path} - requests will be unauthenticated")
            return {}

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Cookie file {path} must contain a JSON object")

        cookies = {}
        for service, entries in data.items():
            if isinstance(entries, str):
                entries = [entries]
            cookies[service] = [e for e in entries if isinstance(e, str)]
        logger.info(
            f"Loaded cookies for {len(cookies)} services from {path}"
        )
        return cookies

    def _persist(self) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self.to_json(), f, indent=4)
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved cookies to {self.path}")
