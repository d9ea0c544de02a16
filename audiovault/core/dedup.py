"""Content hashing and duplicate lookup over stored audio records."""
import hashlib
import json
import logging
from typing import Optional

from audiovault.config import AUDIO_KEY_PREFIX
from audiovault.core.kv_store import KeyValueStore
from audiovault.models.audio import AudioRecord

logger = logging.getLogger(__name__)


def generate_file_hash(data: bytes) -> str:
    """SHA-256 of the file content as lowercase hex."""
    return hashlib.sha256(data).hexdigest()


def find_file_by_hash(kv: KeyValueStore, file_hash: str) -> Optional[AudioRecord]:
    """Return the first stored audio record whose fileHash matches, in listing order.

    Scans every key under the audio prefix (no index, O(n) per call). Records
    that are missing or fail to decode are skipped.
    """
    for key in kv.list(AUDIO_KEY_PREFIX):
        raw = kv.get(key)
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Skipping unreadable record %s", key)
            continue
        if not isinstance(data, dict) or data.get("fileHash") != file_hash:
            continue
        try:
            return AudioRecord.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Skipping malformed record %s with matching hash", key)
            continue
    return None
