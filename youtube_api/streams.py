"""Stream selection: picks the audio and video variants of a download.

Pipeline:

1. **Filter** - keep variants of the requested codec family, highest
   bitrate first. AV1 and VP9 fall back to H.264 when nothing matches.
2. **Audio** - original-language track, overridden by a requested dub,
   else any audio-only track.
3. **Video** - the adaptive (video-only) variant at the requested quality,
   clamped to the best quality available.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .exceptions import YouTubeEmptyError, YouTubeFetchError
from .models import StreamVariant

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "h264"
MAX_QUALITY = "9000"


@dataclass(frozen=True)
class Codec:
    video_codec: str
    audio_codec: str
    container: str


CODECS = {
    "h264": Codec(video_codec="avc1", audio_codec="mp4a", container="mp4"),
    "av1": Codec(video_codec="av01", audio_codec="opus", container="webm"),
    "vp9": Codec(video_codec="vp9", audio_codec="opus", container="webm"),
}

FALLBACK_FORMATS = ("vp9", "av1")


@dataclass(frozen=True)
class StreamSelection:
    """Result of stream selection.

    Attributes:
        format: Codec family actually used (after fallback)
        audio: Selected audio-only variant
        video: Selected video-only variant (None for audio-only selections)
        is_dubbed: The audio is a dub track in the requested language
    """

    format: str
    audio: StreamVariant
    video: Optional[StreamVariant] = None
    is_dubbed: bool = False

    @property
    def container(self) -> str:
        return CODECS[self.format].container

    @property
    def best_audio(self) -> str:
        """Container of standalone audio for this codec family."""
        return "m4a" if self.format == "h264" else "opus"


def filter_by_codec(variants: Sequence[StreamVariant], format: str) -> list[StreamVariant]:
    """Variants matching a codec family, sorted by bitrate (highest first).

    A variant matches when its mime type contains the family's video codec
    or its audio codec. Equal bitrates keep their original order.
    """
    codec = CODECS[format]
    matching = [
        v
        for v in variants
        if codec.video_codec in v.mime_type or codec.audio_codec in v.mime_type
    ]
    return sorted(matching, key=lambda v: int(v.bitrate or 0), reverse=True)


def quality_of(variant: Optional[StreamVariant]) -> Optional[str]:
    """Numeric part of a quality label: "1080p60" -> "1080", "144s" -> "144"."""
    if variant is None or not variant.quality_label:
        return None
    return variant.quality_label.split("p", 1)[0].split("s", 1)[0]


def _to_number(value: Optional[str]) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def select_audio(
    variants: Sequence[StreamVariant], dub_lang: Optional[str] = None
) -> tuple[Optional[StreamVariant], bool]:
    """Pick the audio-only variant and whether it is a dub.

    The original-language track wins unless a dub language is requested and
    the first audio-only track in that language has track info and is not
    the video's default track. Without an original track the first
    audio-only variant is used.
    """
    audio = next((v for v in variants if v.is_audio_only and v.is_original), None)
    is_dubbed = False

    if dub_lang:
        dubbed = next(
            (
                v
                for v in variants
                if v.is_audio_only and v.language == dub_lang and v.audio_track
            ),
            None,
        )
        if dubbed and not dubbed.audio_track.audio_is_default:
            audio = dubbed
            is_dubbed = True

    if audio is None:
        audio = next((v for v in variants if v.is_audio_only), None)

    return audio, is_dubbed


def select_video(variants: Sequence[StreamVariant], quality: str) -> Optional[StreamVariant]:
    """Pick the video-only variant at the requested quality.

    Args:
        variants: Bitrate-sorted variants of one codec family
        quality: Numeric quality or "max"; qualities above the best available
            one are clamped down to it
    """
    best_video = next((v for v in variants if v.has_video and v.content_length), None)

    requested = MAX_QUALITY if quality == "max" else str(quality)
    best_quality = quality_of(best_video)

    requested_number = _to_number(requested)
    best_number = _to_number(best_quality)
    if requested_number is not None and best_number is not None and requested_number > best_number:
        requested = best_quality

    return next(
        (
            v
            for v in variants
            if quality_of(v) == requested and v.has_video and not v.has_audio
        ),
        None,
    )


def select_streams(
    variants: Sequence[StreamVariant],
    format: Optional[str] = None,
    quality: str = "1080",
    dub_lang: Optional[str] = None,
    audio_only: bool = False,
) -> StreamSelection:
    """Select the streams to download.

    Args:
        variants: All variants of the video
        format: Codec family ("h264", "av1", "vp9"); unknown values use h264
        quality: Quality ceiling for video, e.g. "720" or "max"
        dub_lang: Preferred dub language
        audio_only: Only audio is wanted

    Returns:
        StreamSelection with audio, plus video unless audio_only is set

    Raises:
        YouTubeEmptyError: No usable video (or audio, for audio_only) at all
        YouTubeFetchError: No variant matches the selection rules
    """
    format = format if format in CODECS else DEFAULT_FORMAT
    candidates = filter_by_codec(variants, format)

    if not candidates and format in FALLBACK_FORMATS:
        logger.debug(f"No {format} streams, falling back to {DEFAULT_FORMAT}")
        format = DEFAULT_FORMAT
        candidates = filter_by_codec(variants, format)

    has_video = any(v.has_video and v.content_length for v in candidates)
    has_audio = any(v.has_audio and v.content_length for v in candidates)

    if (not has_video and not audio_only) or (not has_audio and audio_only):
        raise YouTubeEmptyError(f"No usable {format} streams")

    audio, is_dubbed = select_audio(candidates, dub_lang)

    if audio_only:
        if audio is None:
            raise YouTubeFetchError("No audio-only stream")
        return StreamSelection(format=format, audio=audio, is_dubbed=is_dubbed)

    video = select_video(candidates, quality)
    if video is None or audio is None:
        # progressive (muxed) streams are never used as a fallback
        raise YouTubeFetchError(f"No {format} streams for quality {quality}")

    return StreamSelection(format=format, audio=audio, video=video, is_dubbed=is_dubbed)
