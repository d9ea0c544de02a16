"""Audio upload, listing, metadata, range streaming, replace, delete and cover endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from audiovault.api.state import AppState, get_state
from audiovault.config import ALLOWED_AUDIO_TYPES
from audiovault.core.errors import (
    DuplicateAudioError,
    MetadataExtractionError,
    NotFoundError,
    RangeUnavailableError,
)
from audiovault.core.ranges import FullBody, PartialContent

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_AUDIO_TYPE = "audio/mpeg"


def _duplicate_response(e: DuplicateAudioError) -> JSONResponse:
    existing = e.existing
    return JSONResponse(
        status_code=400,
        content={
            "message": "Duplicate file",
            "existing": {
                "id": existing.id,
                "filename": existing.filename,
                "metadata": existing.metadata.to_dict() if existing.metadata else None,
            },
        },
    )


@router.post("/audio")
async def upload_audio(request: Request, state: AppState = Depends(get_state)):
    """Upload an MP3 (multipart field `audio`). Duplicates are rejected with 400."""
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise HTTPException(status_code=400, detail="Expected multipart/form-data")

    form = await request.form()
    file = form.get("audio")
    if file is None or isinstance(file, str):
        raise HTTPException(status_code=400, detail="No Audio uploaded")
    if file.content_type not in ALLOWED_AUDIO_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type")

    data = await file.read()
    try:
        record, project = await run_in_threadpool(
            state.library.upload, data, file.filename or "", file.content_type
        )
    except DuplicateAudioError as e:
        return _duplicate_response(e)
    except MetadataExtractionError as e:
        raise HTTPException(status_code=500, detail=f"Error extracting metadata: {e}")
    return {"message": "Uploaded", "id": record.id, "projectId": project.id}


@router.get("/audios")
def list_audios(state: AppState = Depends(get_state)):
    """List all audio records."""
    return {"audios": [r.to_dict() for r in state.library.list_audios()]}


@router.get("/audio/{audio_id}/meta")
def get_audio_meta(audio_id: str, state: AppState = Depends(get_state)):
    """Return one audio record."""
    try:
        return state.library.get_audio(audio_id).to_dict()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Not found")


@router.get("/audio/{audio_id}/cover")
def get_cover(audio_id: str, state: AppState = Depends(get_state)):
    """Serve the cover image extracted at upload."""
    try:
        obj = state.library.get_cover(audio_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Cover not found")
    return Response(content=obj.data, media_type=obj.content_type)


@router.get("/audio/{audio_id}")
def stream_audio(
    audio_id: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    state: AppState = Depends(get_state),
):
    """Serve audio bytes; honors a single `Range: bytes=start-end` for seeking."""
    try:
        result, content_type = state.library.resolve_playback(audio_id, range_header)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    media_type = content_type or DEFAULT_AUDIO_TYPE

    if isinstance(result, FullBody):
        try:
            chunks = state.library.stream_full(audio_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="File not found")
        return StreamingResponse(chunks, media_type=media_type, headers=result.headers)

    if isinstance(result, PartialContent):
        try:
            chunk = state.library.read_range(audio_id, result)
        except RangeUnavailableError:
            return PlainTextResponse("Range Not Satisfiable", status_code=416)
        return Response(
            content=chunk,
            status_code=result.status_code,
            media_type=media_type,
            headers=result.headers,
        )

    logger.debug("Unsatisfiable range %r for %s", range_header, audio_id)
    return Response(status_code=result.status_code, headers=result.headers)


@router.put("/audio/{audio_id}")
async def replace_audio(audio_id: str, request: Request, state: AppState = Depends(get_state)):
    """Replace stored bytes (multipart field `file`) and refresh filename, type and size."""
    try:
        await run_in_threadpool(state.library.get_audio, audio_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Not found")

    form = await request.form()
    file = form.get("file")
    if file is None or isinstance(file, str):
        raise HTTPException(status_code=400, detail="No file provided")

    data = await file.read()
    try:
        await run_in_threadpool(
            state.library.replace,
            audio_id,
            data,
            file.filename or "",
            file.content_type or DEFAULT_AUDIO_TYPE,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Not found")
    return {"message": "Updated", "id": audio_id}


@router.delete("/audio/{audio_id}")
def delete_audio(audio_id: str, state: AppState = Depends(get_state)):
    """Delete audio blob, cover and record. Not transactional; does not touch projects."""
    state.library.delete(audio_id)
    return {"message": "Deleted", "id": audio_id}
