"""Audio record, embedded tags and cover art reference."""
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class AudioMetadata:
    """Tags extracted from the uploaded file."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[List[str]] = None
    duration: Optional[float] = None  # seconds

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.title, self.artist, self.album, self.year, self.genre, self.duration)
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "year": self.year,
            "genre": self.genre,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AudioMetadata":
        if not isinstance(data, dict):
            raise TypeError(f"metadata must be an object, got {type(data).__name__}")
        genre = data.get("genre")
        return cls(
            title=data.get("title"),
            artist=data.get("artist"),
            album=data.get("album"),
            year=data.get("year"),
            genre=list(genre) if genre is not None else None,
            duration=data.get("duration"),
        )


@dataclass
class CoverArt:
    """Reference to a cover image blob owned by an audio record."""
    id: str
    format: str  # MIME type, e.g. "image/jpeg"
    size: int

    @property
    def extension(self) -> str:
        """File extension used for the blob key; "jpg" when the MIME subtype is missing."""
        _, _, subtype = self.format.partition("/")
        return subtype or "jpg"

    @property
    def blob_key(self) -> str:
        return f"{self.id}.{self.extension}"

    def to_dict(self) -> dict:
        return {"id": self.id, "format": self.format, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict) -> "CoverArt":
        if not isinstance(data, dict):
            raise TypeError(f"coverArt must be an object, got {type(data).__name__}")
        return cls(id=data["id"], format=data["format"], size=int(data["size"]))


@dataclass
class AudioRecord:
    """Stored audio file: key-value entry `audio:{id}`, bytes at `{id}.mp3`."""
    id: str
    filename: str
    content_type: str
    size: int
    created_at: str
    file_hash: str
    metadata: Optional[AudioMetadata] = None
    cover_art: Optional[CoverArt] = None

    @property
    def blob_key(self) -> str:
        return f"{self.id}.mp3"

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "id": self.id,
            "filename": self.filename,
            "contentType": self.content_type,
            "size": self.size,
            "createdAt": self.created_at,
            "fileHash": self.file_hash,
        }
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        if self.cover_art is not None:
            out["coverArt"] = self.cover_art.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "AudioRecord":
        """Build from stored JSON. Raises KeyError/TypeError/ValueError on malformed input."""
        metadata = data.get("metadata")
        cover_art = data.get("coverArt")
        return cls(
            id=data["id"],
            filename=data["filename"],
            content_type=data["contentType"],
            size=int(data["size"]),
            created_at=data["createdAt"],
            file_hash=data["fileHash"],
            metadata=AudioMetadata.from_dict(metadata) if metadata else None,
            cover_art=CoverArt.from_dict(cover_art) if cover_art else None,
        )


@dataclass
class ExtractedCover:
    """Raw cover image pulled from embedded tags."""
    format: str
    data: bytes = field(repr=False)


@dataclass
class ExtractedMetadata:
    """Result of metadata extraction: tags (None if nothing found) and optional cover."""
    tags: Optional[AudioMetadata]
    cover: Optional[ExtractedCover] = None
