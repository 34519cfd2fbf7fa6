"""File metadata derived from video info."""

from typing import Callable

from misc.utils import clean_string

from .models import FileMetadata, VideoInfo

AUTO_GENERATED_PREFIX = "Provided to YouTube by"
RELEASE_DATE_PREFIX = "Released on:"


def extract_file_metadata(
    info: VideoInfo, clean: Callable[[str], str] = clean_string
) -> FileMetadata:
    """Build file tags from video info.

    Auto-generated music uploads ("Provided to YouTube by ...") describe the
    release in blank-line separated paragraphs::

        Provided to YouTube by <label>
        <title> · <artist>
        <album>
        <copyright>
        Released on: <date>

    Album, copyright and release date are taken from those paragraphs. Other
    descriptions only yield title and artist.
    """
    metadata = FileMetadata(
        title=clean(info.title.strip()),
        artist=clean(info.author.replace("- Topic", "", 1).strip()),
    )

    description = info.short_description or ""
    if not description.startswith(AUTO_GENERATED_PREFIX):
        return metadata

    paragraphs = description.split("\n\n")[:5]
    if len(paragraphs) != 5:
        return metadata

    date = None
    if paragraphs[4].startswith(RELEASE_DATE_PREFIX):
        date = paragraphs[4].replace(f"{RELEASE_DATE_PREFIX} ", "", 1).strip()

    return FileMetadata(
        title=metadata.title,
        artist=metadata.artist,
        album=paragraphs[2],
        copyright=paragraphs[3],
        date=date,
    )
