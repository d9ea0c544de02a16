"""Audio library: upload, update, delete and read paths over the blob and KV stores."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional, Tuple

from audiovault.core import audio_store, project_store
from audiovault.core.blob_store import BlobObject, BlobStore
from audiovault.core.dedup import find_file_by_hash, generate_file_hash
from audiovault.core.errors import DuplicateAudioError, NotFoundError, RangeUnavailableError
from audiovault.core.kv_store import KeyValueStore
from audiovault.core.metadata import extract_metadata
from audiovault.core.ranges import PartialContent, RangeResult, resolve_range
from audiovault.models.audio import AudioRecord, CoverArt, ExtractedMetadata
from audiovault.models.project import ProjectRecord

logger = logging.getLogger(__name__)

MetadataExtractor = Callable[[bytes, str], ExtractedMetadata]


def _blob_key(audio_id: str) -> str:
    return f"{audio_id}.mp3"


class AudioLibrary:
    """Coordinates the audio/cover blob stores with the audio/project KV stores.

    No cross-store transactions: a failure midway can leave a blob without a
    record (or the reverse). Two concurrent uploads of the same bytes can both
    pass the duplicate check, since neither sees the other's record yet.
    """

    def __init__(
        self,
        audio_kv: KeyValueStore,
        project_kv: KeyValueStore,
        audio_blobs: BlobStore,
        cover_blobs: BlobStore,
        extractor: MetadataExtractor = extract_metadata,
    ) -> None:
        self.audio_kv = audio_kv
        self.project_kv = project_kv
        self.audio_blobs = audio_blobs
        self.cover_blobs = cover_blobs
        self._extract = extractor

    # Records

    def list_audios(self) -> List[AudioRecord]:
        return audio_store.list_audios(self.audio_kv)

    def get_audio(self, audio_id: str) -> AudioRecord:
        record = audio_store.get_audio(self.audio_kv, audio_id)
        if record is None:
            raise NotFoundError(f"Audio {audio_id} not found")
        return record

    # Write paths

    def upload(self, data: bytes, filename: str, content_type: str) -> Tuple[AudioRecord, ProjectRecord]:
        """Store a new audio file and create its project.

        Raises:
            DuplicateAudioError: identical bytes are already stored; nothing is written
            MetadataExtractionError: tags could not be parsed; nothing is written
        """
        file_hash = generate_file_hash(data)
        existing = find_file_by_hash(self.audio_kv, file_hash)
        if existing is not None:
            logger.info("Duplicate upload %s matches audio %s", filename, existing.id)
            raise DuplicateAudioError(existing)

        extracted = self._extract(data, content_type)

        audio_id = str(uuid.uuid4())
        cover_art = None
        if extracted.cover is not None:
            cover_art = CoverArt(
                id=f"{audio_id}-cover",
                format=extracted.cover.format,
                size=len(extracted.cover.data),
            )
            self.cover_blobs.put(cover_art.blob_key, extracted.cover.data, cover_art.format)

        record = AudioRecord(
            id=audio_id,
            filename=filename,
            content_type=content_type,
            size=len(data),
            created_at=datetime.now(timezone.utc).isoformat(),
            file_hash=file_hash,
            metadata=extracted.tags,
            cover_art=cover_art,
        )
        self.audio_blobs.put(record.blob_key, data, content_type)
        audio_store.save_audio(self.audio_kv, record)
        project = project_store.create_project_for_audio(self.project_kv, record)
        logger.info("Uploaded audio %s (%d bytes) with project %s", audio_id, record.size, project.id)
        return record, project

    def replace(self, audio_id: str, data: bytes, filename: str, content_type: str) -> AudioRecord:
        """Overwrite stored bytes; hash, tags and cover art are kept from the original upload."""
        record = self.get_audio(audio_id)
        self.audio_blobs.put(record.blob_key, data, content_type)
        record.filename = filename
        record.content_type = content_type
        record.size = len(data)
        audio_store.save_audio(self.audio_kv, record)
        logger.info("Replaced audio %s (%d bytes)", audio_id, record.size)
        return record

    def delete(self, audio_id: str) -> None:
        """Remove audio blob, cover blob and record. Every delete is attempted; errors propagate."""
        record = audio_store.get_audio(self.audio_kv, audio_id)
        try:
            self.audio_blobs.delete(_blob_key(audio_id))
        finally:
            try:
                if record is not None and record.cover_art is not None:
                    self.cover_blobs.delete(record.cover_art.blob_key)
            finally:
                audio_store.delete_audio_record(self.audio_kv, audio_id)
        logger.info("Deleted audio %s", audio_id)

    # Read paths

    def resolve_playback(self, audio_id: str, range_header: Optional[str]) -> Tuple[RangeResult, str]:
        """Resolve a playback request against the stored blob size.

        Returns:
            (range result, content type)

        Raises:
            NotFoundError: blob does not exist
        """
        info = self.audio_blobs.head(_blob_key(audio_id))
        if info is None:
            raise NotFoundError(f"Audio file {audio_id} not found")
        return resolve_range(range_header, info.size), info.content_type

    def stream_full(self, audio_id: str) -> Iterator[bytes]:
        """Chunked reader over the whole audio blob.

        Raises:
            NotFoundError: blob does not exist
        """
        chunks = self.audio_blobs.iter_chunks(_blob_key(audio_id))
        if chunks is None:
            raise NotFoundError(f"Audio file {audio_id} not found")
        return chunks

    def read_range(self, audio_id: str, part: PartialContent) -> bytes:
        """Fetch exactly the bytes of a resolved partial range.

        Raises:
            RangeUnavailableError: the blob vanished or shrank after the size check
        """
        chunk = self.audio_blobs.get_range(_blob_key(audio_id), part.start, part.length)
        if chunk is None or len(chunk) != part.length:
            raise RangeUnavailableError(f"Range {part.start}-{part.end} of {audio_id} unavailable")
        return chunk

    def get_cover(self, audio_id: str) -> BlobObject:
        record = self.get_audio(audio_id)
        if record.cover_art is None:
            raise NotFoundError(f"Audio {audio_id} has no cover art")
        obj = self.cover_blobs.get(record.cover_art.blob_key)
        if obj is None:
            raise NotFoundError(f"Cover for {audio_id} not found")
        return obj
