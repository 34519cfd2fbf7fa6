"""Interfaces of the platform client backing YouTube sessions."""

from typing import TYPE_CHECKING, Optional, Protocol

from .models import VideoInfo
from .transport import Transport

if TYPE_CHECKING:
    from .session import ClientSession

# Client personas passed to get_basic_info
CLIENT_ANDROID = "ANDROID"
CLIENT_IOS = "IOS"


class PlatformClient(Protocol):
    """A YouTube client bound to one session."""

    session: "ClientSession"

    async def get_basic_info(self, video_id: str, client: str) -> Optional[VideoInfo]:
        """Fetch metadata, playability and streams of a video.

        Args:
            video_id: YouTube video ID
            client: Client persona, CLIENT_ANDROID or CLIENT_IOS

        Raises:
            PlatformError: When YouTube refuses the request
        """
        ...


class PlatformFactory(Protocol):
    """Creates platform clients."""

    async def create(self, transport: Optional[Transport]) -> PlatformClient:
        """Create a warmed-up client with its own session."""
        ...

    def from_session(self, session: "ClientSession") -> PlatformClient:
        """Wrap an existing session in a client."""
        ...
