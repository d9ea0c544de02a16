"""Shared application state (injected into routes)."""
from audiovault.config import AUDIO_BUCKET, COVER_BUCKET, KV_DIR
from audiovault.core.blob_store import create_blob_store
from audiovault.core.kv_store import JsonFileKeyValueStore
from audiovault.core.library import AudioLibrary


class AppState:
    def __init__(self, library: AudioLibrary | None = None) -> None:
        self._library = library

    @property
    def library(self) -> AudioLibrary:
        if self._library is None:
            self._library = AudioLibrary(
                audio_kv=JsonFileKeyValueStore(KV_DIR / "audio.json"),
                project_kv=JsonFileKeyValueStore(KV_DIR / "project.json"),
                audio_blobs=create_blob_store(AUDIO_BUCKET),
                cover_blobs=create_blob_store(COVER_BUCKET),
            )
        return self._library


_state = AppState()


def get_state() -> AppState:
    return _state
