"""Shared pytest fixtures for the youtube_api test suite.

Guidelines
----------
* No internet access in any test.
* yt-dlp and HTTP are replaced at the platform/transport boundary.
* Async code is driven with ``asyncio.run`` inside plain tests.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest

from youtube_api.models import VideoInfo
from youtube_api.session import ClientSession, SharedClientCache
from youtube_api.transport import ProxyManager, Transport, TransportResponse


class FakeTransport(Transport):
    """Transport answering token requests from a canned response."""

    def __init__(self, status: int = 200, body: bytes = b"{}", proxy: Optional[str] = None):
        super().__init__(proxy=proxy)
        self.status = status
        self.body = body
        self.requests: list[tuple[str, dict[str, str]]] = []

    async def post_form(self, url: str, data: Any) -> TransportResponse:
        self.requests.append((url, dict(data)))
        return TransportResponse(status=self.status, body=self.body)


class FakeClient:
    def __init__(self, platform: "FakePlatform", session: ClientSession):
        self.platform = platform
        self.session = session

    async def get_basic_info(self, video_id: str, client: str) -> Optional[VideoInfo]:
        self.platform.calls.append((video_id, client))
        if self.platform.error is not None:
            raise self.platform.error
        return self.platform.info


class FakePlatform:
    """Platform factory counting how often the shared client is created."""

    def __init__(self, info: Optional[VideoInfo] = None):
        self.info = info
        self.error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.created = 0
        self.calls: list[tuple[str, str]] = []

    async def create(self, transport: Optional[Transport]) -> FakeClient:
        if self.create_error is not None:
            raise self.create_error
        self.created += 1
        session = ClientSession(
            context={"client": {"hl": "en", "gl": "US"}},
            key="key",
            api_version="v1",
            account_index=0,
            player={},
            transport=transport or Transport(),
            cache=None,
        )
        return FakeClient(self, session)

    def from_session(self, session: ClientSession) -> FakeClient:
        return FakeClient(self, session)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def monotonic_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client_cache(monotonic_clock: FakeClock) -> SharedClientCache:
    return SharedClientCache(clock=monotonic_clock)


@pytest.fixture(autouse=True)
def _reset_singletons():
    yield
    SharedClientCache.reset()
    ProxyManager.reset()


@pytest.fixture
def make_transport():
    """Factory for transports with a canned token endpoint response."""
    return FakeTransport
