from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from mutagen.id3 import APIC, ID3, TALB, TCON, TDRC, TIT2, TPE1

from audiovault.api.app import app
from audiovault.api.state import AppState, get_state
from audiovault.core.blob_store import BlobInfo, BlobObject, BlobStore
from audiovault.core.kv_store import KeyValueStore
from audiovault.core.library import AudioLibrary
from audiovault.models.audio import AudioMetadata, ExtractedCover, ExtractedMetadata

# MPEG-1 Layer III, 128 kbit/s, 44.1 kHz, no padding: 417-byte frames
MP3_FRAME = b"\xff\xfb\x90\x00" + b"\x00" * 413


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def put(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def list(self, prefix=""):
        return sorted(k for k in self.data if k.startswith(prefix))


class MemoryBlobStore(BlobStore):
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.range_calls: list[tuple[str, int, int]] = []

    def put(self, key, data, content_type):
        self.objects[key] = (bytes(data), content_type)

    def get(self, key):
        if key not in self.objects:
            return None
        data, content_type = self.objects[key]
        return BlobObject(data=data, content_type=content_type)

    def get_range(self, key, offset, length):
        self.range_calls.append((key, offset, length))
        if key not in self.objects:
            return None
        return self.objects[key][0][offset:offset + length]

    def iter_chunks(self, key, chunk_size=4):
        if key not in self.objects:
            return None
        data = self.objects[key][0]
        return iter([data[i:i + chunk_size] for i in range(0, len(data), chunk_size)])

    def head(self, key):
        if key not in self.objects:
            return None
        data, content_type = self.objects[key]
        return BlobInfo(size=len(data), content_type=content_type)

    def delete(self, key):
        self.objects.pop(key, None)


class FakeExtractor:
    """Stands in for mutagen: returns canned tags and records calls."""

    def __init__(self, tags: AudioMetadata | None = None, cover: ExtractedCover | None = None):
        self.tags = tags
        self.cover = cover
        self.calls: list[tuple[int, str]] = []

    def __call__(self, data: bytes, content_type: str) -> ExtractedMetadata:
        self.calls.append((len(data), content_type))
        return ExtractedMetadata(tags=self.tags, cover=self.cover)


def make_mp3(path: Path, *, frames: int = 20, title: str | None = None, cover: bytes | None = None) -> bytes:
    """Write a tiny valid MP3 (silent frames) with optional ID3 tags; return its bytes."""
    path.write_bytes(MP3_FRAME * frames)
    if title is not None or cover is not None:
        tags = ID3()
        if title is not None:
            tags.add(TIT2(encoding=3, text=[title]))
            tags.add(TPE1(encoding=3, text=["Test Artist"]))
            tags.add(TALB(encoding=3, text=["Test Album"]))
            tags.add(TDRC(encoding=3, text=["2021-05-01"]))
            tags.add(TCON(encoding=3, text=["Rock", "Pop"]))
        if cover is not None:
            tags.add(APIC(encoding=3, mime="image/png", type=3, desc="Cover", data=cover))
        tags.save(str(path))
    return path.read_bytes()


@pytest.fixture()
def audio_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def project_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def audio_blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def cover_blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def extractor() -> FakeExtractor:
    return FakeExtractor(
        tags=AudioMetadata(title="Song A", artist="Artist", album="Album", year="2020", genre=["Rock"], duration=1.5),
        cover=ExtractedCover(format="image/png", data=b"\x89PNG fake"),
    )


@pytest.fixture()
def library(audio_kv, project_kv, audio_blobs, cover_blobs, extractor) -> AudioLibrary:
    return AudioLibrary(
        audio_kv=audio_kv,
        project_kv=project_kv,
        audio_blobs=audio_blobs,
        cover_blobs=cover_blobs,
        extractor=extractor,
    )


@pytest.fixture()
def client(library):
    state = AppState(library=library)
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def bare_library(audio_kv, project_kv, audio_blobs, cover_blobs) -> AudioLibrary:
    """Library whose extractor finds no tags and no cover."""
    return AudioLibrary(
        audio_kv=audio_kv,
        project_kv=project_kv,
        audio_blobs=audio_blobs,
        cover_blobs=cover_blobs,
        extractor=FakeExtractor(),
    )


@pytest.fixture()
def mp3_factory(tmp_path: Path):
    counter = {"n": 0}

    def _make(**kwargs) -> bytes:
        counter["n"] += 1
        return make_mp3(tmp_path / f"track{counter['n']}.mp3", **kwargs)

    return _make
