"""
MP3 tag extraction.

Reads ID3 tags and stream info from an in-memory MP3 using mutagen. The
first embedded picture (APIC frame) becomes the cover image.
"""

import io
import logging
from typing import List, Optional

from mutagen import MutagenError
from mutagen.mp3 import MP3

from audiovault.core.errors import MetadataExtractionError
from audiovault.models.audio import AudioMetadata, ExtractedCover, ExtractedMetadata

logger = logging.getLogger(__name__)


def _text(tags, frame_id: str) -> Optional[str]:
    frame = tags.get(frame_id)
    if frame is None or not getattr(frame, "text", None):
        return None
    value = str(frame.text[0]).strip()
    return value or None


def _year(tags) -> Optional[str]:
    # TDRC (ID3v2.4) holds an ID3TimeStamp; TYER is the v2.3 fallback
    for frame_id in ("TDRC", "TYER"):
        value = _text(tags, frame_id)
        if value:
            return value.split("-")[0]
    return None


def _genres(tags) -> Optional[List[str]]:
    frame = tags.get("TCON")
    if frame is None:
        return None
    genres = [g for g in frame.genres if g]
    return genres or None


def _cover(tags) -> Optional[ExtractedCover]:
    for key in tags.keys():
        if key.startswith("APIC"):
            picture = tags[key]
            return ExtractedCover(format=picture.mime or "image/jpeg", data=bytes(picture.data))
    return None


def extract_metadata(data: bytes, content_type: str = "audio/mpeg") -> ExtractedMetadata:
    """
    Extract tags and cover art from MP3 bytes.

    Args:
        data: Complete file content
        content_type: MIME type reported by the client (informational)

    Returns:
        ExtractedMetadata; ``tags`` is None when the file carries no tag or
        duration information at all

    Raises:
        MetadataExtractionError: If the bytes cannot be parsed as MP3
    """
    try:
        audio = MP3(io.BytesIO(data))
    except (MutagenError, ValueError, EOFError) as e:
        logger.warning("Metadata extraction failed (%s): %s", content_type, e)
        raise MetadataExtractionError(str(e)) from e

    duration = getattr(audio.info, "length", None)
    tags = audio.tags
    if tags is None:
        metadata = AudioMetadata(duration=duration)
        cover = None
    else:
        metadata = AudioMetadata(
            title=_text(tags, "TIT2"),
            artist=_text(tags, "TPE1"),
            album=_text(tags, "TALB"),
            year=_year(tags),
            genre=_genres(tags),
            duration=duration,
        )
        cover = _cover(tags)

    return ExtractedMetadata(
        tags=None if metadata.is_empty() else metadata,
        cover=cover,
    )
