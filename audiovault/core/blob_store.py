"""
Blob storage interface with local filesystem and Cloudflare R2 backends.

Blob stores hold raw bytes (audio files, cover images) under string keys and
support ranged reads for seeking. Missing keys are reported as None, never
raised; any other backend failure propagates to the caller.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import boto3
from botocore.exceptions import ClientError

from audiovault.config import (
    BLOB_DIR,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_SECRET_ACCESS_KEY,
    STORAGE_BACKEND,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
STREAM_CHUNK_SIZE = 64 * 1024


@dataclass
class BlobInfo:
    """Size and content type of a stored object."""
    size: int
    content_type: str


@dataclass
class BlobObject:
    """Stored object with its body."""
    data: bytes = field(repr=False)
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class BlobStore(ABC):
    """
    Abstract key-addressable byte storage.

    Implementations: LocalBlobStore (directory on disk) and R2BlobStore
    (S3-compatible API).
    """

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """
        Store data under key, replacing any existing object.

        Args:
            key: Object key
            data: Object body
            content_type: MIME type served back on reads
        """

    @abstractmethod
    def get(self, key: str) -> Optional[BlobObject]:
        """Return the full object, or None if key does not exist."""

    @abstractmethod
    def get_range(self, key: str, offset: int, length: int) -> Optional[bytes]:
        """
        Read length bytes starting at offset.

        Returns:
            The bytes read, or None if key does not exist
        """

    @abstractmethod
    def iter_chunks(self, key: str, chunk_size: int = STREAM_CHUNK_SIZE) -> Optional[Iterator[bytes]]:
        """
        Stream the whole object in chunks of at most chunk_size bytes.

        Returns:
            An iterator over the body, or None if key does not exist
        """

    @abstractmethod
    def head(self, key: str) -> Optional[BlobInfo]:
        """Return size and content type without the body, or None if missing."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; deleting a missing key is not an error."""


class LocalBlobStore(BlobStore):
    """
    Blob store backed by a local directory (one directory per bucket).

    Content type is kept in a JSON sidecar next to each object.
    """

    _META_SUFFIX = ".meta.json"

    def __init__(self, base_path: Path) -> None:
        self.base_path = Path(base_path).expanduser().absolute()
        self._lock = threading.Lock()

    def _get_path(self, key: str) -> Path:
        """Get absolute local path for a key, refusing keys that escape the bucket."""
        path = (self.base_path / key).resolve()
        if self.base_path.resolve() not in path.parents:
            raise ValueError(f"Invalid blob key: {key!r}")
        return path

    def _meta_path(self, path: Path) -> Path:
        return path.with_name(path.name + self._META_SUFFIX)

    def _content_type(self, path: Path) -> str:
        try:
            meta = json.loads(self._meta_path(path).read_text())
            return meta.get("content_type") or DEFAULT_CONTENT_TYPE
        except (OSError, json.JSONDecodeError, AttributeError):
            return DEFAULT_CONTENT_TYPE

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._get_path(key)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            self._meta_path(path).write_text(json.dumps({"content_type": content_type}))

    def get(self, key: str) -> Optional[BlobObject]:
        path = self._get_path(key)
        with self._lock:
            if not path.is_file():
                return None
            return BlobObject(data=path.read_bytes(), content_type=self._content_type(path))

    def get_range(self, key: str, offset: int, length: int) -> Optional[bytes]:
        path = self._get_path(key)
        with self._lock:
            if not path.is_file():
                return None
            with open(path, "rb") as f:
                f.seek(offset)
                return f.read(length)

    def iter_chunks(self, key: str, chunk_size: int = STREAM_CHUNK_SIZE) -> Optional[Iterator[bytes]]:
        path = self._get_path(key)
        if not path.is_file():
            return None

        def _read() -> Iterator[bytes]:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(chunk_size), b""):
                    yield chunk

        return _read()

    def head(self, key: str) -> Optional[BlobInfo]:
        path = self._get_path(key)
        with self._lock:
            if not path.is_file():
                return None
            return BlobInfo(size=path.stat().st_size, content_type=self._content_type(path))

    def delete(self, key: str) -> None:
        path = self._get_path(key)
        with self._lock:
            path.unlink(missing_ok=True)
            self._meta_path(path).unlink(missing_ok=True)


class R2BlobStore(BlobStore):
    """
    Cloudflare R2 bucket accessed through the boto3 S3 client.

    R2 is S3-compatible; ranged reads use the standard ``Range`` parameter
    of ``get_object``.
    """

    def __init__(self, bucket_name: str, s3_client=None) -> None:
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client(
            "s3",
            endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
            aws_access_key_id=R2_ACCESS_KEY_ID,
            aws_secret_access_key=R2_SECRET_ACCESS_KEY,
            region_name="auto",  # R2 uses 'auto' region
        )

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        code = error.response.get("Error", {}).get("Code", "")
        return code in ("NoSuchKey", "404", "NotFound")

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    def get(self, key: str) -> Optional[BlobObject]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise
        return BlobObject(
            data=response["Body"].read(),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )

    def get_range(self, key: str, offset: int, length: int) -> Optional[bytes]:
        if length <= 0:
            return b""
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=key,
                Range=f"bytes={offset}-{offset + length - 1}",
            )
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise
        return response["Body"].read()

    def iter_chunks(self, key: str, chunk_size: int = STREAM_CHUNK_SIZE) -> Optional[Iterator[bytes]]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise
        return response["Body"].iter_chunks(chunk_size)

    def head(self, key: str) -> Optional[BlobInfo]:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise
        return BlobInfo(
            size=int(response["ContentLength"]),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )

    def delete(self, key: str) -> None:
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)


def create_blob_store(bucket_name: str, backend: str = STORAGE_BACKEND) -> BlobStore:
    """
    Create the blob store for a bucket using the configured backend.

    Raises:
        ValueError: If the backend is not supported
    """
    if backend == "local":
        return LocalBlobStore(BLOB_DIR / bucket_name)
    elif backend == "r2":
        if not R2_ACCOUNT_ID:
            raise ValueError("R2_ACCOUNT_ID must be set for the r2 storage backend")
        return R2BlobStore(bucket_name)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
