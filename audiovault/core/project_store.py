"""Persist and load project records (JSON values under `project:{id}`)."""
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import PurePath
from typing import List, Optional

from audiovault.config import PROJECT_KEY_PREFIX
from audiovault.core.kv_store import KeyValueStore
from audiovault.models.audio import AudioRecord
from audiovault.models.project import ProjectRecord

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Untitled"


def _key(project_id: str) -> str:
    return f"{PROJECT_KEY_PREFIX}{project_id}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode(key: str, raw: Optional[str]) -> Optional[ProjectRecord]:
    if not raw:
        return None
    try:
        return ProjectRecord.from_dict(json.loads(raw))
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError):
        logger.warning("Unreadable project record %s", key)
        return None


def save_project(kv: KeyValueStore, project: ProjectRecord) -> ProjectRecord:
    """Write project; updated_at is always refreshed here, never taken from the caller."""
    project.updated_at = _now()
    kv.put(_key(project.id), json.dumps(project.to_dict()))
    return project


def get_project(kv: KeyValueStore, project_id: str) -> Optional[ProjectRecord]:
    """Return project by id or None."""
    key = _key(project_id)
    return _decode(key, kv.get(key))


def list_projects(kv: KeyValueStore) -> List[ProjectRecord]:
    out = []
    for key in kv.list(PROJECT_KEY_PREFIX):
        project = _decode(key, kv.get(key))
        if project is not None:
            out.append(project)
    return out


def project_name_for(audio: AudioRecord) -> str:
    """Metadata title, else the filename without extension, else a default."""
    if audio.metadata and audio.metadata.title:
        return audio.metadata.title
    stem = PurePath(audio.filename).stem if audio.filename else ""
    return stem or DEFAULT_PROJECT_NAME


def create_project_for_audio(kv: KeyValueStore, audio: AudioRecord) -> ProjectRecord:
    """Create and save a new project referencing a freshly uploaded audio record."""
    now = _now()
    project = ProjectRecord(
        id=str(uuid.uuid4()),
        name=project_name_for(audio),
        created_at=now,
        updated_at=now,
        audio_id=audio.id,
    )
    return save_project(kv, project)


def update_project(
    kv: KeyValueStore,
    project_id: str,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    lyrics_id: Optional[str] = None,
    asset_ids: Optional[List[str]] = None,
) -> Optional[ProjectRecord]:
    """Apply the given fields and save. Returns updated project or None if missing."""
    project = get_project(kv, project_id)
    if project is None:
        return None
    if name is not None:
        project.name = name
    if description is not None:
        project.description = description
    if lyrics_id is not None:
        project.lyrics_id = lyrics_id
    if asset_ids is not None:
        project.asset_ids = list(asset_ids)
    return save_project(kv, project)
