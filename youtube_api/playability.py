"""Playability checks on fetched video info."""

import logging
from typing import Optional

from .exceptions import (
    YouTubeAgeRestrictedError,
    YouTubeFetchError,
    YouTubeLiveError,
    YouTubeLoginError,
    YouTubePrivateError,
    YouTubeRateLimitError,
    YouTubeRegionError,
    YouTubeUnavailableError,
    YouTubeVideoTooLongError,
)
from .models import PlayabilityStatus, VideoInfo

logger = logging.getLogger(__name__)

PRIVATE_VIDEO_REASON = "Private video"


def _raise_for_status(playability: PlayabilityStatus) -> None:
    """Raise the error matching a non-OK playability status."""
    status = playability.status

    if status == "LOGIN_REQUIRED":
        if playability.reason_text.endswith("bot"):
            raise YouTubeLoginError(playability.reason_text)
        if playability.reason_text.endswith("age"):
            raise YouTubeAgeRestrictedError(playability.reason_text)
        if playability.error_reason == PRIVATE_VIDEO_REASON:
            raise YouTubePrivateError(playability.error_reason)

    elif status == "UNPLAYABLE":
        if playability.reason_text.endswith("request limit."):
            raise YouTubeRateLimitError(playability.reason_text)
        if playability.error_subreason.endswith("in your country"):
            raise YouTubeRegionError(playability.error_subreason)
        if playability.error_reason == PRIVATE_VIDEO_REASON:
            raise YouTubePrivateError(playability.error_reason)

    elif status == "AGE_VERIFICATION_REQUIRED":
        raise YouTubeAgeRestrictedError(playability.reason_text)

    if status != "OK":
        raise YouTubeUnavailableError(f"{status}: {playability.reason_text}")


def check_playability(
    info: VideoInfo, video_id: str, duration_limit: Optional[int] = None
) -> None:
    """Check that a fetched video can be downloaded.

    Args:
        info: Info returned by the platform client
        video_id: The ID that was requested
        duration_limit: Maximum duration in seconds (None or 0 = unlimited)

    Raises:
        YouTubeLoginError: YouTube wants a signed-in session (bot check)
        YouTubeAgeRestrictedError: Video is age restricted
        YouTubePrivateError: Video is private
        YouTubeRateLimitError: Request limit reached
        YouTubeRegionError: Video is geo-blocked
        YouTubeUnavailableError: Any other non-OK status
        YouTubeLiveError: Video is a live broadcast
        YouTubeVideoTooLongError: Video is longer than duration_limit
        YouTubeFetchError: YouTube answered for another video (critical)
    """
    _raise_for_status(info.playability_status)

    if info.is_live:
        raise YouTubeLiveError(f"Video {video_id} is a live broadcast")

    if duration_limit and info.duration and info.duration > duration_limit:
        raise YouTubeVideoTooLongError(
            f"Video is {info.duration // 60} minutes long, "
            f"max allowed is {duration_limit // 60} minutes"
        )

    # YouTube serves a "Video Not Available" stub under a different ID
    if info.id != video_id:
        logger.error(f"Requested video {video_id} but YouTube returned {info.id}")
        raise YouTubeFetchError(
            f"Requested video {video_id} but got {info.id}", critical=True
        )
