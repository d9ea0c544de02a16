"""Persist and load audio records (JSON values under `audio:{id}`)."""
import json
import logging
from typing import List, Optional

from audiovault.config import AUDIO_KEY_PREFIX
from audiovault.core.kv_store import KeyValueStore
from audiovault.models.audio import AudioRecord

logger = logging.getLogger(__name__)


def _key(audio_id: str) -> str:
    return f"{AUDIO_KEY_PREFIX}{audio_id}"


def _decode(key: str, raw: Optional[str]) -> Optional[AudioRecord]:
    if not raw:
        return None
    try:
        return AudioRecord.from_dict(json.loads(raw))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
        logger.warning("Unreadable audio record %s", key)
        return None


def get_audio(kv: KeyValueStore, audio_id: str) -> Optional[AudioRecord]:
    """Return audio record by id or None."""
    key = _key(audio_id)
    return _decode(key, kv.get(key))


def save_audio(kv: KeyValueStore, record: AudioRecord) -> None:
    kv.put(_key(record.id), json.dumps(record.to_dict()))


def delete_audio_record(kv: KeyValueStore, audio_id: str) -> None:
    kv.delete(_key(audio_id))


def list_audios(kv: KeyValueStore) -> List[AudioRecord]:
    """Load all audio records in key order; unreadable entries are left out."""
    out = []
    for key in kv.list(AUDIO_KEY_PREFIX):
        record = _decode(key, kv.get(key))
        if record is not None:
            out.append(record)
    return out
