"""Data models for audio files and projects."""
from audiovault.models.audio import (
    AudioMetadata,
    AudioRecord,
    CoverArt,
    ExtractedCover,
    ExtractedMetadata,
)
from audiovault.models.project import ProjectRecord

__all__ = [
    "AudioMetadata",
    "AudioRecord",
    "CoverArt",
    "ExtractedCover",
    "ExtractedMetadata",
    "ProjectRecord",
]
