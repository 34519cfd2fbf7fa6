"""YouTube client resolving video IDs into downloadable media plans."""

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional, Union

from .exceptions import (
    PlatformError,
    YouTubeError,
    YouTubeFetchError,
    YouTubePrivateError,
    YouTubeUnavailableError,
    error_for_kind,
)
from .metadata import extract_file_metadata
from .models import (
    ErrorResult,
    FileMetadata,
    FilenameAttributes,
    MediaPlan,
    ResolveRequest,
    VideoInfo,
)
from .platform import CLIENT_ANDROID, CLIENT_IOS, PlatformClient
from .playability import check_playability
from .session import SessionManager, translate_session_error
from .streams import StreamSelection, select_streams
from .transport import Transport, strip_proxy_auth

if TYPE_CHECKING:
    from .transport import ProxyManager

logger = logging.getLogger(__name__)

PRIVATE_VIDEO_REASON = "This video is private"
UNAVAILABLE_VIDEO_MESSAGE = "This video is unavailable"


def build_plan(
    request: ResolveRequest,
    selection: StreamSelection,
    file_metadata: FileMetadata,
) -> MediaPlan:
    """Assemble the audio or merge plan for a stream selection."""
    filename_attributes = FilenameAttributes(
        id=request.id,
        title=file_metadata.title,
        author=file_metadata.artist,
        youtube_dub_name=request.dub_lang if selection.is_dubbed else False,
    )

    if request.is_audio_only:
        return MediaPlan(
            type="audio",
            urls=selection.audio.url,
            start_time=request.start_time,
            end_time=request.end_time,
            filename_attributes=filename_attributes,
            file_metadata=file_metadata,
            best_audio=selection.best_audio,
        )

    video = selection.video
    return MediaPlan(
        type="merge",
        urls=[video.url, selection.audio.url],
        start_time=request.start_time,
        end_time=request.end_time,
        watermark=request.watermark,
        filename_attributes=replace(
            filename_attributes,
            quality_label=video.quality_label,
            resolution=f"{video.width}x{video.height}",
            extension=selection.container,
            youtube_format=selection.format,
        ),
        file_metadata=file_metadata,
    )


class YouTubeClient:
    """Client for resolving YouTube videos into media plans.

    Each call gets a fresh client session from the session manager, fetches
    the video's basic info, checks playability and picks streams.

    Args:
        session_manager: Manager handing out per-request platform clients
        duration_limit: Maximum video duration in seconds (None = unlimited)
        transport: Base transport for requests (None = shared client's transport)
        proxy_manager: Optional ProxyManager; each request without an explicit
            proxy uses the next proxy in rotation

    Example:
        >>> client = YouTubeClient(SessionManager(YtDlpPlatform(), CookieStore("cookies.json")))
        >>> result = await client.resolve(ResolveRequest(id="dQw4w9WgXcQ", quality="720"))
        >>> result.to_dict()["type"]
        'merge'
    """

    def __init__(
        self,
        session_manager: SessionManager,
        duration_limit: Optional[int] = None,
        transport: Optional[Transport] = None,
        proxy_manager: Optional["ProxyManager"] = None,
    ):
        self.session_manager = session_manager
        self.duration_limit = duration_limit
        self.transport = transport
        self.proxy_manager = proxy_manager

    def _request_transport(self, request: ResolveRequest) -> Optional[Transport]:
        """Transport for one request: explicit proxy, rotated proxy or the default."""
        base = self.transport or Transport()
        if request.proxy is not None:
            return base.with_proxy(request.proxy)
        if self.proxy_manager is not None:
            return base.with_proxy(self.proxy_manager.get_next_proxy())
        return self.transport

    async def acquire(self, transport: Optional[Transport] = None) -> PlatformClient:
        """Get a platform client for one request.

        Raises:
            YouTubeDecipherError: Player decipher algorithm could not be extracted
            YouTubeTokenExpiredError: Stored OAuth token could not be refreshed
        """
        try:
            return await self.session_manager.acquire_client(transport)
        except Exception as e:
            error = translate_session_error(e)
            if error is None:
                raise
            logger.warning(f"Failed to create YouTube session: {e}")
            raise error from e

    async def fetch_info(self, client: PlatformClient, video_id: str) -> VideoInfo:
        """Fetch basic info of a video.

        Signed-in sessions use the Android persona, anonymous ones iOS.

        Raises:
            YouTubeError: Matching the platform's error, YouTubeFetchError otherwise
        """
        persona = CLIENT_ANDROID if client.session.logged_in else CLIENT_IOS
        logger.debug(f"Fetching info for {video_id} as {persona}")

        try:
            info = await client.get_basic_info(video_id, persona)
        except PlatformError as e:
            logger.warning(f"Failed to fetch info for {video_id}: {e}")
            raise self._map_platform_error(e) from e
        except Exception as e:
            logger.error(f"Unexpected error fetching info for {video_id}: {e}")
            raise YouTubeFetchError(f"Failed to fetch video info: {e}") from e

        if info is None:
            raise YouTubeFetchError(f"No info returned for {video_id}")
        return info

    @staticmethod
    def _map_platform_error(error: PlatformError) -> YouTubeError:
        if error.kind is not None:
            return error_for_kind(error.kind, error.message)
        if error.reason == PRIVATE_VIDEO_REASON:
            return YouTubePrivateError(error.reason)
        if error.message == UNAVAILABLE_VIDEO_MESSAGE:
            return YouTubeUnavailableError(error.message)
        return YouTubeFetchError(error.message)

    async def get_plan(self, request: ResolveRequest) -> MediaPlan:
        """Resolve a request into a media plan.

        Raises:
            YouTubeError: When the video cannot be resolved
        """
        transport = self._request_transport(request)
        logger.debug(
            f"Resolving {request.id} "
            f"via {strip_proxy_auth(transport.proxy if transport else None)}"
        )

        client = await self.acquire(transport)
        info = await self.fetch_info(client, request.id)

        check_playability(info, request.id, self.duration_limit)

        selection = select_streams(
            info.variants,
            format=request.format,
            quality=request.quality,
            dub_lang=request.dub_lang,
            audio_only=request.is_audio_only,
        )
        plan = build_plan(request, selection, extract_file_metadata(info))

        logger.info(
            f"Resolved {request.id}: {plan.type} "
            f"({selection.format}{', dubbed' if selection.is_dubbed else ''})"
        )
        return plan

    async def resolve(self, request: ResolveRequest) -> Union[MediaPlan, ErrorResult]:
        """Resolve a request, returning an ErrorResult for known failures.

        Errors that are not YouTubeError subclasses propagate unchanged.
        """
        try:
            return await self.get_plan(request)
        except YouTubeError as e:
            if e.critical:
                logger.error(f"Critical error resolving {request.id}: {e}")
            return ErrorResult.from_exception(e)
