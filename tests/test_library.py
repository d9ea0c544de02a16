import json

import pytest

from audiovault.core.dedup import generate_file_hash
from audiovault.core.errors import (
    DuplicateAudioError,
    MetadataExtractionError,
    NotFoundError,
    RangeUnavailableError,
)
from audiovault.core.library import AudioLibrary
from audiovault.core.ranges import FullBody, PartialContent, Unsatisfiable


def test_upload_stores_blob_record_cover_and_project(library, audio_kv, project_kv, audio_blobs, cover_blobs):
    record, project = library.upload(b"audio-bytes", "song.mp3", "audio/mpeg")

    assert audio_blobs.objects[f"{record.id}.mp3"] == (b"audio-bytes", "audio/mpeg")
    assert record.file_hash == generate_file_hash(b"audio-bytes")
    assert record.size == len(b"audio-bytes")
    assert record.metadata.title == "Song A"

    assert record.cover_art.id == f"{record.id}-cover"
    assert record.cover_art.format == "image/png"
    assert cover_blobs.objects[f"{record.id}-cover.png"] == (b"\x89PNG fake", "image/png")

    stored = json.loads(audio_kv.get(f"audio:{record.id}"))
    assert stored["fileHash"] == record.file_hash
    assert stored["coverArt"]["size"] == len(b"\x89PNG fake")

    assert project.audio_id == record.id
    assert project.name == "Song A"
    assert json.loads(project_kv.get(f"project:{project.id}"))["audioId"] == record.id


def test_second_identical_upload_is_duplicate(library, audio_kv, project_kv, audio_blobs, extractor):
    first, _ = library.upload(b"same", "a.mp3", "audio/mpeg")

    with pytest.raises(DuplicateAudioError) as exc_info:
        library.upload(b"same", "b.mp3", "audio/mpeg")

    assert exc_info.value.existing.id == first.id
    assert len(audio_kv.list("audio:")) == 1
    assert len(project_kv.list("project:")) == 1
    assert len(audio_blobs.objects) == 1
    # Duplicate check happens before extraction
    assert len(extractor.calls) == 1


def test_extraction_failure_writes_nothing(audio_kv, project_kv, audio_blobs, cover_blobs):
    def failing(data, content_type):
        raise MetadataExtractionError("bad tags")

    library = AudioLibrary(audio_kv, project_kv, audio_blobs, cover_blobs, extractor=failing)
    with pytest.raises(MetadataExtractionError):
        library.upload(b"x", "x.mp3", "audio/mpeg")

    assert audio_kv.data == {}
    assert project_kv.data == {}
    assert audio_blobs.objects == {}
    assert cover_blobs.objects == {}


def test_project_name_falls_back_to_filename(bare_library):
    record, project = bare_library.upload(b"x", "My Track.mp3", "audio/mpeg")
    assert record.metadata is None
    assert record.cover_art is None
    assert project.name == "My Track"


def test_replace_keeps_hash_and_cover(library, audio_blobs):
    record, _ = library.upload(b"original", "a.mp3", "audio/mpeg")

    updated = library.replace(record.id, b"new content!", "b.mp3", "audio/mp3")

    assert updated.filename == "b.mp3"
    assert updated.content_type == "audio/mp3"
    assert updated.size == len(b"new content!")
    assert updated.file_hash == record.file_hash
    assert updated.cover_art == record.cover_art
    assert updated.created_at == record.created_at
    assert audio_blobs.objects[f"{record.id}.mp3"][0] == b"new content!"


def test_replace_missing_raises(library):
    with pytest.raises(NotFoundError):
        library.replace("nope", b"x", "x.mp3", "audio/mpeg")


def test_delete_removes_blob_cover_and_record_but_not_project(library, audio_kv, project_kv, audio_blobs, cover_blobs):
    record, project = library.upload(b"bytes", "a.mp3", "audio/mpeg")

    library.delete(record.id)

    assert audio_kv.get(f"audio:{record.id}") is None
    assert audio_blobs.objects == {}
    assert cover_blobs.objects == {}
    assert project_kv.get(f"project:{project.id}") is not None


def test_delete_attempts_record_delete_when_blob_delete_fails(library, audio_kv, audio_blobs):
    record, _ = library.upload(b"bytes", "a.mp3", "audio/mpeg")

    def broken_delete(key):
        raise OSError("disk gone")

    audio_blobs.delete = broken_delete
    with pytest.raises(OSError):
        library.delete(record.id)
    assert audio_kv.get(f"audio:{record.id}") is None


def test_resolve_playback_uses_blob_size(library):
    record, _ = library.upload(bytes(range(256)) * 4, "a.mp3", "audio/mpeg")

    result, content_type = library.resolve_playback(record.id, None)
    assert isinstance(result, FullBody)
    assert result.total_size == 1024
    assert content_type == "audio/mpeg"

    result, _ = library.resolve_playback(record.id, "bytes=10-19")
    assert isinstance(result, PartialContent)
    assert library.read_range(record.id, result) == (bytes(range(256)) * 4)[10:20]

    result, _ = library.resolve_playback(record.id, "bytes=10-5000")
    assert isinstance(result, Unsatisfiable)


def test_resolve_playback_missing_blob(library):
    with pytest.raises(NotFoundError):
        library.resolve_playback("missing", None)


def test_read_range_after_blob_vanished(library, audio_blobs):
    record, _ = library.upload(b"0123456789", "a.mp3", "audio/mpeg")
    result, _ = library.resolve_playback(record.id, "bytes=2-4")
    audio_blobs.delete(f"{record.id}.mp3")

    with pytest.raises(RangeUnavailableError):
        library.read_range(record.id, result)


def test_get_cover_without_cover_art(bare_library):
    record, _ = bare_library.upload(b"x", "x.mp3", "audio/mpeg")
    with pytest.raises(NotFoundError):
        bare_library.get_cover(record.id)
