"""Domain errors raised by the core; the API layer maps each to a status code."""
from audiovault.models.audio import AudioRecord


class AudioVaultError(Exception):
    """Base class for errors raised by core operations."""


class NotFoundError(AudioVaultError):
    """Record or blob does not exist."""


class DuplicateAudioError(AudioVaultError):
    """Uploaded bytes match an already stored audio record."""

    def __init__(self, existing: AudioRecord) -> None:
        super().__init__(f"Duplicate of audio {existing.id}")
        self.existing = existing


class RangeUnavailableError(AudioVaultError):
    """Range passed the bounds check but the blob store returned nothing."""


class MetadataExtractionError(AudioVaultError):
    """Tag parsing failed; the upload is aborted."""
