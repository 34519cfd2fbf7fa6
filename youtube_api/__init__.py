"""YouTube API client resolving videos into downloadable media plans.

This module turns a YouTube video ID into direct media URLs (audio only, or
video and audio to merge) with file metadata, using an OAuth session from
stored credentials when one is available.

Example:
    >>> from youtube_api import (
    ...     CookieStore, ResolveRequest, SessionManager, YouTubeClient, YtDlpPlatform,
    ... )
    >>>
    >>> manager = SessionManager(YtDlpPlatform(), CookieStore("cookies.json"))
    >>> client = YouTubeClient(manager, duration_limit=10800)
    >>> result = await client.resolve(ResolveRequest(id="dQw4w9WgXcQ", quality="max"))
    >>> result.to_dict()
    {'type': 'merge', 'urls': ['https://...', 'https://...'], ...}
"""

from .client import YouTubeClient, build_plan
from .cookies import Cookie, CookieStore, CredentialStore, MemoryCookieStore
from .exceptions import (
    ErrorKind,
    PlatformError,
    YouTubeAgeRestrictedError,
    YouTubeDecipherError,
    YouTubeEmptyError,
    YouTubeError,
    YouTubeFetchError,
    YouTubeLiveError,
    YouTubeLoginError,
    YouTubePrivateError,
    YouTubeRateLimitError,
    YouTubeRegionError,
    YouTubeTokenExpiredError,
    YouTubeUnavailableError,
    YouTubeVideoTooLongError,
)
from .models import (
    AudioTrack,
    ErrorResult,
    ErrorScreen,
    FileMetadata,
    FilenameAttributes,
    MediaPlan,
    PlayabilityStatus,
    ResolveRequest,
    StreamVariant,
    VideoInfo,
)
from .platform import PlatformClient, PlatformFactory
from .session import ClientSession, OAuthError, SessionManager, SharedClientCache
from .streams import StreamSelection, select_streams
from .transport import ProxyManager, Transport
from .ytdlp import YtDlpPlatform

__all__ = [
    # Client
    "YouTubeClient",
    "build_plan",
    "select_streams",
    "StreamSelection",
    # Sessions
    "SessionManager",
    "SharedClientCache",
    "ClientSession",
    "OAuthError",
    "PlatformClient",
    "PlatformFactory",
    "YtDlpPlatform",
    # Credentials
    "Cookie",
    "CookieStore",
    "CredentialStore",
    "MemoryCookieStore",
    # Network
    "Transport",
    "ProxyManager",
    # Models
    "AudioTrack",
    "ErrorResult",
    "ErrorScreen",
    "FileMetadata",
    "FilenameAttributes",
    "MediaPlan",
    "PlayabilityStatus",
    "ResolveRequest",
    "StreamVariant",
    "VideoInfo",
    # Exceptions
    "ErrorKind",
    "PlatformError",
    "YouTubeError",
    "YouTubeDecipherError",
    "YouTubeTokenExpiredError",
    "YouTubeLoginError",
    "YouTubeAgeRestrictedError",
    "YouTubePrivateError",
    "YouTubeUnavailableError",
    "YouTubeRegionError",
    "YouTubeLiveError",
    "YouTubeVideoTooLongError",
    "YouTubeRateLimitError",
    "YouTubeEmptyError",
    "YouTubeFetchError",
]
