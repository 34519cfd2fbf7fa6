"""Tests for playability checks (youtube_api/playability.py)."""

from __future__ import annotations

from typing import Optional

import pytest

from youtube_api.exceptions import (
    ErrorKind,
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
from youtube_api.models import ErrorScreen, PlayabilityStatus, VideoInfo
from youtube_api.playability import check_playability


def _info(
    status: str = "OK",
    reason: Optional[str] = None,
    screen_reason: Optional[str] = None,
    screen_subreason: Optional[str] = None,
    *,
    video_id: str = "abc",
    duration: Optional[int] = 200,
    is_live: bool = False,
) -> VideoInfo:
    error_screen = None
    if screen_reason is not None or screen_subreason is not None:
        error_screen = ErrorScreen(reason=screen_reason, subreason=screen_subreason)
    return VideoInfo(
        id=video_id,
        title="Title",
        author="Author",
        duration=duration,
        is_live=is_live,
        playability_status=PlayabilityStatus(status=status, reason=reason, error_screen=error_screen),
    )


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("info", "error"),
        [
            (_info("LOGIN_REQUIRED", "Sign in to confirm you're not a bot"), YouTubeLoginError),
            (_info("LOGIN_REQUIRED", "Sign in to confirm your age"), YouTubeAgeRestrictedError),
            (_info("LOGIN_REQUIRED", "Sign in", "Private video"), YouTubePrivateError),
            (_info("UNPLAYABLE", "You have reached the request limit."), YouTubeRateLimitError),
            (
                _info("UNPLAYABLE", "Video unavailable", None,
                      "The uploader has not made this video available in your country"),
                YouTubeRegionError,
            ),
            (_info("UNPLAYABLE", "Video unavailable", "Private video"), YouTubePrivateError),
            (_info("AGE_VERIFICATION_REQUIRED"), YouTubeAgeRestrictedError),
            (_info("ERROR", "Video unavailable"), YouTubeUnavailableError),
            (_info("CONTENT_CHECK_REQUIRED"), YouTubeUnavailableError),
        ],
    )
    def test_status_to_error(self, info: VideoInfo, error: type) -> None:
        with pytest.raises(error):
            check_playability(info, "abc")

    def test_unmatched_login_required_is_unavailable(self) -> None:
        with pytest.raises(YouTubeUnavailableError):
            check_playability(_info("LOGIN_REQUIRED", "Sign in to continue"), "abc")

    def test_unmatched_unplayable_is_unavailable(self) -> None:
        with pytest.raises(YouTubeUnavailableError):
            check_playability(_info("UNPLAYABLE", "Something else"), "abc")

    def test_missing_reason_does_not_crash(self) -> None:
        with pytest.raises(YouTubeUnavailableError):
            check_playability(_info("LOGIN_REQUIRED", None), "abc")

    def test_bot_check_wins_over_private_screen(self) -> None:
        info = _info("LOGIN_REQUIRED", "confirm you're not a bot", "Private video")
        with pytest.raises(YouTubeLoginError) as exc_info:
            check_playability(info, "abc")
        assert exc_info.value.kind is ErrorKind.LOGIN


class TestOkChecks:
    def test_playable_video_passes(self) -> None:
        assert check_playability(_info(), "abc", duration_limit=300) is None

    def test_live_video(self) -> None:
        with pytest.raises(YouTubeLiveError):
            check_playability(_info(is_live=True), "abc")

    def test_live_checked_before_id(self) -> None:
        with pytest.raises(YouTubeLiveError):
            check_playability(_info(is_live=True, video_id="other"), "abc")

    def test_too_long(self) -> None:
        with pytest.raises(YouTubeVideoTooLongError):
            check_playability(_info(duration=3601), "abc", duration_limit=3600)

    def test_duration_at_limit_passes(self) -> None:
        check_playability(_info(duration=3600), "abc", duration_limit=3600)

    def test_no_limit(self) -> None:
        check_playability(_info(duration=10**6), "abc", duration_limit=None)

    def test_id_mismatch_is_critical(self) -> None:
        with pytest.raises(YouTubeFetchError) as exc_info:
            check_playability(_info(video_id="stub"), "abc")
        assert exc_info.value.critical is True
        assert exc_info.value.kind is ErrorKind.FAIL

    def test_status_checked_before_live(self) -> None:
        with pytest.raises(YouTubeAgeRestrictedError):
            check_playability(_info("AGE_VERIFICATION_REQUIRED", is_live=True), "abc")
