"""Configuration: env, data paths, storage backend, R2 credentials."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of audiovault package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so R2_ACCOUNT_ID etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("AUDIOVAULT_DATA_DIR", str(BASE_DIR / "data")))
BLOB_DIR = DATA_DIR / "blobs"
KV_DIR = DATA_DIR / "kv"

# API
API_HOST = os.getenv("AUDIOVAULT_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("AUDIOVAULT_API_PORT", "8000"))
CORS_ORIGINS = [
    o.strip() for o in os.getenv("AUDIOVAULT_CORS_ORIGINS", "*").split(",") if o.strip()
]

# Storage: "local" (filesystem under DATA_DIR) or "r2" (Cloudflare R2 via boto3)
STORAGE_BACKEND = os.getenv("AUDIOVAULT_STORAGE", "local").lower()
AUDIO_BUCKET = os.getenv("AUDIOVAULT_AUDIO_BUCKET", "audio-files")
COVER_BUCKET = os.getenv("AUDIOVAULT_COVER_BUCKET", "cover-files")

R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID", "")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID", "")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY", "")

# Key-value namespaces and key layout
AUDIO_KEY_PREFIX = "audio:"
PROJECT_KEY_PREFIX = "project:"

# Uploads
ALLOWED_AUDIO_TYPES = ("audio/mpeg", "audio/mp3")


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
