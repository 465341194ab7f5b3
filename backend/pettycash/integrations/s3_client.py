"""File-system backed object storage with an S3-style interface.

Receipts are written under ``<root>/<bucket>/<key>`` and addressed by key;
``build_object_url`` yields the public URL stored on a spend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class S3ClientError(RuntimeError):
    """Raised when storage operations fail."""


@dataclass
class StoredObject:
    """Metadata for an object written through the client."""

    key: str
    path: Path
    size: int
    content_type: str
    cache_control: str | None = None
    tags: dict[str, str] = field(default_factory=dict)


class S3Client:
    """Tiny S3 facade for local deployments and tests."""

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str | None = None,
        root: Path | None = None,
        default_cache_seconds: int = 0,
    ) -> None:
        if not bucket:
            raise S3ClientError("S3 bucket is not configured")
        self.bucket = bucket
        self._endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self._root = (root or Path.cwd() / ".storage") / bucket
        self._root.mkdir(parents=True, exist_ok=True)
        self._default_cache_seconds = default_cache_seconds

    def _key(self, key: str) -> str:
        normalised = key.lstrip("/")
        if not normalised or ".." in Path(normalised).parts:
            raise S3ClientError(f"Invalid storage key: {key!r}")
        return normalised

    def _path_for(self, key: str) -> Path:
        path = self._root / self._key(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def put_object(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        cache_seconds: int | None = None,
        tags: dict[str, str] | None = None,
    ) -> StoredObject:
        """Write ``data`` under ``key`` and remember its metadata."""

        path = self._path_for(key)
        path.write_bytes(data)
        max_age = cache_seconds or self._default_cache_seconds
        stored = StoredObject(
            key=self._key(key),
            path=path,
            size=len(data),
            content_type=content_type,
            cache_control=f"private, max-age={max_age}" if max_age > 0 else None,
            tags=dict(tags or {}),
        )
        return stored

    def get_object_bytes(self, key: str) -> bytes:
        path = self._root / self._key(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise S3ClientError(f"Object {key} not found") from exc

    def build_object_url(self, key: str) -> str:
        normalised = self._key(key)
        if self._endpoint_url:
            return f"{self._endpoint_url}/{self.bucket}/{normalised}"
        return f"/{self.bucket}/{normalised}"


def build_s3_client(**overrides: Any) -> S3Client:
    """Build a client from application settings, honouring overrides."""

    from pettycash.core.config import get_settings

    settings = get_settings()
    bucket = overrides.get("bucket") or settings.s3_bucket
    if not bucket:
        raise S3ClientError("S3 bucket is not configured")
    root = overrides.get("root") or (Path(settings.s3_root) if settings.s3_root else None)
    return S3Client(
        bucket,
        endpoint_url=overrides.get("endpoint_url") or settings.s3_endpoint_url,
        root=root,
        default_cache_seconds=settings.s3_cache_seconds,
    )
