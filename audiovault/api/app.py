"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging in the worker process (so upload/delete INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from audiovault.api.state import AppState, get_state
from audiovault.config import CORS_ORIGINS, STORAGE_BACKEND, ensure_data_dir

# Import routes after state to avoid circular imports
from audiovault.api.routes import audio, projects

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dir()
    logging.getLogger(__name__).info("Storage backend: %s", STORAGE_BACKEND)
    yield


app = FastAPI(
    title="AudioVault API",
    description="MP3 upload, dedup, metadata and range streaming for audio projects",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
)

app.include_router(audio.router, tags=["audio"])
app.include_router(projects.router, prefix="/projects", tags=["projects"])


@app.get("/health")
def health():
    return {"ok": True}
