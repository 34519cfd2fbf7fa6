"""YouTube API exception classes."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error codes reported to the download stage."""

    DECIPHER = "youtube.decipher"
    TOKEN_EXPIRED = "youtube.token_expired"
    LOGIN = "youtube.login"
    AGE = "content.video.age"
    PRIVATE = "content.video.private"
    UNAVAILABLE = "content.video.unavailable"
    REGION = "content.video.region"
    LIVE = "content.video.live"
    TOO_LONG = "content.too_long"
    RATE = "fetch.rate"
    EMPTY = "fetch.empty"
    FAIL = "fetch.fail"


class YouTubeError(Exception):
    """Base exception for YouTube resolution errors."""

    kind: ErrorKind = ErrorKind.FAIL

    def __init__(self, message: str = "", critical: bool = False):
        super().__init__(message or self.kind.value)
        self.critical = critical


class YouTubeDecipherError(YouTubeError):
    """Player signature/decipher algorithm could not be extracted."""

    kind = ErrorKind.DECIPHER


class YouTubeTokenExpiredError(YouTubeError):
    """Stored OAuth refresh token was rejected."""

    kind = ErrorKind.TOKEN_EXPIRED


class YouTubeLoginError(YouTubeError):
    """YouTube demands a signed-in session (bot check)."""

    kind = ErrorKind.LOGIN


class YouTubeAgeRestrictedError(YouTubeError):
    """Video is age restricted."""

    kind = ErrorKind.AGE


class YouTubePrivateError(YouTubeError):
    """Video is private and cannot be accessed."""

    kind = ErrorKind.PRIVATE


class YouTubeUnavailableError(YouTubeError):
    """Video is unavailable (removed, terminated account, etc.)."""

    kind = ErrorKind.UNAVAILABLE


class YouTubeRegionError(YouTubeError):
    """Video is not available in the server's region (geo-blocked)."""

    kind = ErrorKind.REGION


class YouTubeLiveError(YouTubeError):
    """Video is a live broadcast."""

    kind = ErrorKind.LIVE


class YouTubeVideoTooLongError(YouTubeError):
    """Video exceeds the maximum allowed duration."""

    kind = ErrorKind.TOO_LONG


class YouTubeRateLimitError(YouTubeError):
    """Too many requests - rate limited."""

    kind = ErrorKind.RATE


class YouTubeEmptyError(YouTubeError):
    """No usable streams for the requested format."""

    kind = ErrorKind.EMPTY


class YouTubeFetchError(YouTubeError):
    """Generic fetch failure.

    ``critical`` is set when YouTube answered with data for another video,
    which callers must not treat as an ordinary miss.
    """

    kind = ErrorKind.FAIL


_ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        YouTubeDecipherError,
        YouTubeTokenExpiredError,
        YouTubeLoginError,
        YouTubeAgeRestrictedError,
        YouTubePrivateError,
        YouTubeUnavailableError,
        YouTubeRegionError,
        YouTubeLiveError,
        YouTubeVideoTooLongError,
        YouTubeRateLimitError,
        YouTubeEmptyError,
        YouTubeFetchError,
    )
}


def error_for_kind(kind: ErrorKind, message: Optional[str] = None) -> YouTubeError:
    """Build the exception instance matching an error kind."""
    return _ERRORS_BY_KIND[ErrorKind(kind)](message or "")


class PlatformError(Exception):
    """Error raised by a platform client backend.

    Backends set ``kind`` when they already know what went wrong. Otherwise
    the fetcher falls back to the ``reason``/message text YouTube reported.
    """

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.kind = kind
