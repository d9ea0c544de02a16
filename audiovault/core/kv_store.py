"""Key-value store interface and a JSON-file implementation.

Values are opaque strings (the callers store JSON text). ``list`` returns keys
in lexicographic order, matching how object-storage KV namespaces list.
"""
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String-keyed persistent store with prefix listing."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for key, or None if absent."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Create or overwrite key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; no error if it does not exist."""

    @abstractmethod
    def list(self, prefix: str = "") -> List[str]:
        """Return all keys starting with prefix, sorted."""


class JsonFileKeyValueStore(KeyValueStore):
    """Whole namespace kept in one JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def _read_entries(self) -> dict:
        """Raw entries on disk. Raises OSError or ValueError if the file cannot be read."""
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text())
        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, dict):
            raise ValueError(f"{self._path} has no entries object")
        return entries

    def _load(self) -> Dict[str, str]:
        # Reads degrade to empty; put/delete use _read_entries and raise instead
        try:
            entries = self._read_entries()
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", self._path, e)
            return {}
        return {k: v for k, v in entries.items() if isinstance(v, str)}

    def _save(self, entries: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps({"entries": entries}, indent=2))
        tmp.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            entries = self._read_entries()
            entries[key] = value
            self._save(entries)

    def delete(self, key: str) -> None:
        with self._lock:
            entries = self._read_entries()
            if entries.pop(key, None) is not None:
                self._save(entries)

    def list(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._load() if k.startswith(prefix))
