"""yt-dlp backed platform client.

Blocking yt-dlp extraction runs in a shared thread pool. The shared client
holds the warm state reused by every request: the locale context, the
player cache of yt-dlp's YouTube extractor (deciphering functions) and the
on-disk cache directory. Per-request clients build their own YoutubeDL with
the request's proxy and OAuth token on top of it.
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import yt_dlp

from .exceptions import ErrorKind, PlatformError
from .models import AudioTrack, PlayabilityStatus, StreamVariant, VideoInfo
from .session import ClientSession
from .transport import Transport, strip_proxy_auth

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={}"

# yt-dlp's language_preference for the original audio track
ORIGINAL_LANGUAGE_PREFERENCE = 10

# Substrings of yt-dlp error messages, most specific first
_ERROR_SIGNALS: tuple[tuple[str, ErrorKind], ...] = (
    ("not a bot", ErrorKind.LOGIN),
    ("confirm your age", ErrorKind.AGE),
    ("age-restricted", ErrorKind.AGE),
    ("private video", ErrorKind.PRIVATE),
    ("this video is private", ErrorKind.PRIVATE),
    ("in your country", ErrorKind.REGION),
    ("geo restriction", ErrorKind.REGION),
    ("live event will begin", ErrorKind.LIVE),
    ("http error 429", ErrorKind.RATE),
    ("signature extraction failed", ErrorKind.DECIPHER),
    ("nsig extraction failed", ErrorKind.DECIPHER),
    ("video unavailable", ErrorKind.UNAVAILABLE),
    ("this video has been removed", ErrorKind.UNAVAILABLE),
)


def map_ytdlp_error(error: Exception) -> PlatformError:
    """Translate a yt-dlp error into a tagged PlatformError."""
    message = str(error)
    lowered = message.lower()
    for signal, kind in _ERROR_SIGNALS:
        if signal in lowered:
            reason = "This video is private" if kind is ErrorKind.PRIVATE else None
            return PlatformError(message, reason=reason, kind=kind)
    return PlatformError(message)


def _has_codec(codec: Optional[str]) -> bool:
    return bool(codec) and codec != "none"


def to_stream_variant(fmt: dict[str, Any]) -> Optional[StreamVariant]:
    """Convert a yt-dlp format dict. Returns None for storyboards and manifests."""
    url = fmt.get("url")
    vcodec, acodec = fmt.get("vcodec"), fmt.get("acodec")
    has_video, has_audio = _has_codec(vcodec), _has_codec(acodec)
    if not url or not (has_video or has_audio) or fmt.get("ext") == "mhtml":
        return None

    kind = "video" if has_video else "audio"
    codecs = ", ".join(c for c, present in ((vcodec, has_video), (acodec, has_audio)) if present)
    note = fmt.get("format_note") or ""

    quality_label = None
    if has_video:
        quality_label = note.split(",")[0].strip() or None
        if not quality_label and fmt.get("height"):
            quality_label = f"{fmt['height']}p"

    audio_track = None
    language = fmt.get("language")
    if has_audio and language and fmt.get("language_preference") is not None:
        audio_track = AudioTrack(
            id=language,
            display_name=note.split(",")[0].strip() or None,
            audio_is_default="default" in note.lower(),
        )

    return StreamVariant(
        url=url,
        mime_type=f'{kind}/{fmt.get("ext") or "mp4"}; codecs="{codecs}"',
        bitrate=int((fmt.get("tbr") or 0) * 1000),
        has_video=has_video,
        has_audio=has_audio,
        content_length=fmt.get("filesize"),
        quality_label=quality_label,
        width=fmt.get("width"),
        height=fmt.get("height"),
        language=language,
        is_original=(
            fmt.get("language_preference") == ORIGINAL_LANGUAGE_PREFERENCE
            or "original" in note.lower()
        ),
        audio_track=audio_track,
    )


def to_video_info(info: dict[str, Any]) -> VideoInfo:
    """Convert a yt-dlp info dict."""
    variants = [
        variant
        for variant in (to_stream_variant(f) for f in info.get("formats") or [])
        if variant is not None
    ]
    duration = info.get("duration")
    return VideoInfo(
        id=info.get("id") or "",
        title=info.get("title") or "",
        author=info.get("channel") or info.get("uploader") or "",
        duration=int(duration) if duration else None,
        is_live=bool(info.get("is_live")) or info.get("live_status") == "is_live",
        short_description=info.get("description"),
        playability_status=PlayabilityStatus(status="OK"),
        variants=variants,
    )


class YtDlpClient:
    """Platform client extracting basic info with yt-dlp."""

    def __init__(self, platform: "YtDlpPlatform", session: ClientSession):
        self.platform = platform
        self.session = session

    def _get_ydl_opts(self, persona: str) -> dict[str, Any]:
        session = self.session
        opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "extractor_args": {
                "youtube": {
                    "player_client": [persona.lower()],
                    "lang": [session.context["client"]["hl"]],
                }
            },
        }
        if session.transport.proxy:
            opts["proxy"] = session.transport.proxy
        if session.cache:
            opts["cachedir"] = session.cache
        if session.logged_in and session.oauth.authorization:
            opts["http_headers"] = {"Authorization": session.oauth.authorization}
        return opts

    def _extract_sync(self, video_id: str, persona: str) -> dict[str, Any]:
        opts = self._get_ydl_opts(persona)
        logger.debug(
            f"yt-dlp extracting {video_id} as {persona} "
            f"via {strip_proxy_auth(opts.get('proxy'))}"
        )
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ie = ydl.get_info_extractor("Youtube")
                # Share deciphering functions with every other request
                if hasattr(ie, "_player_cache") and self.session.player is not None:
                    ie._player_cache = self.session.player
                info = ydl.extract_info(WATCH_URL.format(video_id), download=False, process=False)
        except (yt_dlp.utils.DownloadError, yt_dlp.utils.ExtractorError) as e:
            raise map_ytdlp_error(e) from e

        if not isinstance(info, dict):
            raise PlatformError("yt-dlp returned no metadata")
        return info

    async def get_basic_info(self, video_id: str, client: str) -> Optional[VideoInfo]:
        info = await self.platform.run_sync(self._extract_sync, video_id, client)
        return to_video_info(info)


class YtDlpPlatform:
    """Creates yt-dlp backed clients.

    Args:
        hl: Interface language of the client context
        gl: Region of the client context
        cache_dir: yt-dlp cache directory (None = yt-dlp default)
    """

    _executor: Optional[ThreadPoolExecutor] = None
    _executor_lock = threading.Lock()
    _executor_size: int = 32

    def __init__(self, hl: str = "en", gl: str = "US", cache_dir: Optional[str] = None):
        self.hl = hl
        self.gl = gl
        self.cache_dir = cache_dir or None

    @classmethod
    def _get_executor(cls) -> ThreadPoolExecutor:
        """Get or create the shared ThreadPoolExecutor."""
        with cls._executor_lock:
            if cls._executor is None:
                cls._executor = ThreadPoolExecutor(
                    max_workers=cls._executor_size,
                    thread_name_prefix="youtube_sync_",
                )
                logger.info(f"Created yt-dlp executor with {cls._executor_size} workers")
            return cls._executor

    @classmethod
    def shutdown_executor(cls) -> None:
        """Shutdown the shared executor. Call on application shutdown."""
        with cls._executor_lock:
            if cls._executor is not None:
                cls._executor.shutdown(wait=False)
                cls._executor = None

    async def run_sync(self, func: Any, *args: Any) -> Any:
        """Run a blocking function in the shared executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._get_executor(), func, *args)

    async def create(self, transport: Optional[Transport]) -> YtDlpClient:
        session = ClientSession(
            context={"client": {"hl": self.hl, "gl": self.gl}},
            key=None,
            api_version="v1",
            account_index=0,
            player={},
            transport=transport or Transport(),
            cache=self.cache_dir,
        )
        logger.debug(f"Created yt-dlp client session (yt-dlp {yt_dlp.version.__version__})")
        return YtDlpClient(self, session)

    def from_session(self, session: ClientSession) -> YtDlpClient:
        return YtDlpClient(self, session)
