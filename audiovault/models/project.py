"""Project record: groups one audio file with optional lyrics and assets."""
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ProjectRecord:
    """Stored project: key-value entry `project:{id}`."""
    id: str
    name: str
    created_at: str
    updated_at: str
    audio_id: str
    description: Optional[str] = None
    lyrics_id: Optional[str] = None
    asset_ids: Optional[List[str]] = None

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "audioId": self.audio_id,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.lyrics_id is not None:
            out["lyricsId"] = self.lyrics_id
        if self.asset_ids is not None:
            out["assetIds"] = list(self.asset_ids)
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectRecord":
        asset_ids = data.get("assetIds")
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=data["createdAt"],
            updated_at=data["updatedAt"],
            audio_id=data["audioId"],
            description=data.get("description"),
            lyrics_id=data.get("lyricsId"),
            asset_ids=list(asset_ids) if asset_ids is not None else None,
        )
