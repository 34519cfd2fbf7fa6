"""Data models for YouTube API responses and resolution results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .exceptions import ErrorKind, YouTubeError


@dataclass(frozen=True)
class AudioTrack:
    """Audio track descriptor attached to multi-language audio streams.

    Attributes:
        id: Track identifier (e.g. "es.3")
        display_name: Human readable track name
        audio_is_default: True if YouTube marks this track as the track's default
    """

    id: Optional[str] = None
    display_name: Optional[str] = None
    audio_is_default: bool = False


@dataclass(frozen=True)
class StreamVariant:
    """One encoded representation of a video (adaptive or progressive).

    Attributes:
        url: Direct media URL
        mime_type: Mime/codec string, e.g. 'video/mp4; codecs="avc1.640028"'
        bitrate: Bitrate in bits per second
        has_video: Stream carries video
        has_audio: Stream carries audio
        content_length: Size in bytes (None disqualifies the stream)
        quality_label: Quality label such as "1080p60" (video only)
        width: Frame width in pixels
        height: Frame height in pixels
        language: Audio language code
        is_original: Audio is the original recorded language
        audio_track: Audio track descriptor for multi-language videos
    """

    url: str
    mime_type: str
    bitrate: int = 0
    has_video: bool = False
    has_audio: bool = False
    content_length: Optional[int] = None
    quality_label: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    language: Optional[str] = None
    is_original: bool = False
    audio_track: Optional[AudioTrack] = None

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.has_video


@dataclass(frozen=True)
class ErrorScreen:
    """Reason texts from the player error screen."""

    reason: Optional[str] = None
    subreason: Optional[str] = None


@dataclass(frozen=True)
class PlayabilityStatus:
    """Playability status reported by the player endpoint."""

    status: str = "OK"
    reason: Optional[str] = None
    error_screen: Optional[ErrorScreen] = None

    @property
    def reason_text(self) -> str:
        return self.reason or ""

    @property
    def error_reason(self) -> str:
        """Error screen reason, empty string when absent."""
        if self.error_screen is None:
            return ""
        return self.error_screen.reason or ""

    @property
    def error_subreason(self) -> str:
        """Error screen subreason, empty string when absent."""
        if self.error_screen is None:
            return ""
        return self.error_screen.subreason or ""


@dataclass
class VideoInfo:
    """Basic info of a YouTube video as returned by the platform client.

    Attributes:
        id: Video ID YouTube actually answered for
        title: Raw video title
        author: Channel name
        duration: Duration in seconds
        is_live: True for live broadcasts
        short_description: Video description
        playability_status: Playability status of the video
        variants: Adaptive (and progressive) streams
    """

    id: str
    title: str = ""
    author: str = ""
    duration: Optional[int] = None
    is_live: bool = False
    short_description: Optional[str] = None
    playability_status: PlayabilityStatus = field(default_factory=PlayabilityStatus)
    variants: List[StreamVariant] = field(default_factory=list)


@dataclass
class ResolveRequest:
    """Parameters of a single resolution.

    Attributes:
        id: YouTube video ID
        format: Codec family - "h264", "av1" or "vp9"
        quality: Numeric quality ceiling ("720", "1080") or "max"
        dub_lang: Preferred dub language code, if any
        is_audio_only: Resolve audio only
        start_time: Passed through to the plan
        end_time: Passed through to the plan
        watermark: Passed through to merge plans
        proxy: Proxy URL for this request's transport (None = default)
    """

    id: str
    format: str = "h264"
    quality: str = "1080"
    dub_lang: Optional[str] = None
    is_audio_only: bool = False
    start_time: Optional[Union[int, float]] = None
    end_time: Optional[Union[int, float]] = None
    watermark: Any = None
    proxy: Optional[str] = None


@dataclass(frozen=True)
class FileMetadata:
    """Tags written into the downloaded file."""

    title: str
    artist: str
    album: Optional[str] = None
    copyright: Optional[str] = None
    date: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        data = {"title": self.title, "artist": self.artist}
        for key in ("album", "copyright", "date"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class FilenameAttributes:
    """Values the download stage uses to build the output filename."""

    id: str
    title: str
    author: str
    youtube_dub_name: Union[str, bool] = False
    service: str = "youtube"
    quality_label: Optional[str] = None
    resolution: Optional[str] = None
    extension: Optional[str] = None
    youtube_format: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "service": self.service,
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "youtubeDubName": self.youtube_dub_name,
        }
        optional = {
            "qualityLabel": self.quality_label,
            "resolution": self.resolution,
            "extension": self.extension,
            "youtubeFormat": self.youtube_format,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass(frozen=True)
class MediaPlan:
    """Downloadable plan: an audio stream, or a video and audio pair to merge.

    Attributes:
        type: "audio" or "merge"
        urls: Audio URL for audio plans, [video URL, audio URL] for merge plans
        filename_attributes: Filename descriptor
        file_metadata: File tags
        start_time: Requested start offset
        end_time: Requested end offset
        watermark: Requested watermark (merge plans only)
        best_audio: Audio container for audio plans ("m4a" or "opus")
    """

    type: str
    urls: Union[str, List[str]]
    filename_attributes: FilenameAttributes
    file_metadata: FileMetadata
    start_time: Optional[Union[int, float]] = None
    end_time: Optional[Union[int, float]] = None
    watermark: Any = None
    best_audio: Optional[str] = None

    @property
    def is_audio_only(self) -> bool:
        return self.type == "audio"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "urls": list(self.urls) if isinstance(self.urls, list) else self.urls,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "filenameAttributes": self.filename_attributes.to_dict(),
            "fileMetadata": self.file_metadata.to_dict(),
        }
        if self.is_audio_only:
            data["isAudioOnly"] = True
            data["bestAudio"] = self.best_audio
        else:
            data["watermark"] = self.watermark
        return data


@dataclass(frozen=True)
class ErrorResult:
    """Structured resolution failure."""

    error: ErrorKind
    critical: bool = False

    @classmethod
    def from_exception(cls, exc: YouTubeError) -> ErrorResult:
        return cls(error=exc.kind, critical=exc.critical)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.error.value}
        if self.critical:
            data["critical"] = True
        return data
