"""Project records created alongside uploads: list, fetch, update."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from audiovault.api.state import AppState, get_state
from audiovault.core.project_store import get_project, list_projects, update_project

router = APIRouter()


class UpdateProjectBody(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    lyrics_id: Optional[str] = Field(None, alias="lyricsId")
    asset_ids: Optional[List[str]] = Field(None, alias="assetIds")


@router.get("")
def list_all_projects(state: AppState = Depends(get_state)):
    """List all projects."""
    return {"projects": [p.to_dict() for p in list_projects(state.library.project_kv)]}


@router.get("/{project_id}")
def get_one_project(project_id: str, state: AppState = Depends(get_state)):
    project = get_project(state.library.project_kv, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project.to_dict()


@router.patch("/{project_id}")
def patch_project(
    project_id: str,
    body: UpdateProjectBody,
    state: AppState = Depends(get_state),
):
    """Update name, description, lyrics or assets. updatedAt is set by the server."""
    updated = update_project(
        state.library.project_kv,
        project_id,
        name=body.name,
        description=body.description,
        lyrics_id=body.lyrics_id,
        asset_ids=body.asset_ids,
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return updated.to_dict()
