"""
Object storage on Supabase Storage (REST).

Objects are written under ``<entity id>/<ms timestamp>[-<index>].<ext>`` and only
their public URLs are kept on the rows. Removing replaced objects is best
effort: failures are logged and reported, never raised.
"""
import logging
import mimetypes
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlparse

import requests
from fastapi import UploadFile

from rentflow.core.config import settings
from rentflow.core.errors import ConfigurationError, GatewayError, RecordValidationError

logger = logging.getLogger(__name__)

MAX_PARALLEL_UPLOADS = 4


@dataclass
class FilePayload:
    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        if "." in self.filename:
            return self.filename.rsplit(".", 1)[-1].lower()
        guessed = mimetypes.guess_extension(self.content_type or "") or ".bin"
        return guessed.lstrip(".")


async def read_upload(file: UploadFile, allowed_prefixes: Optional[Sequence[str]] = None) -> FilePayload:
    """Read an uploaded file into memory, enforcing type and size limits."""
    content_type = file.content_type or mimetypes.guess_type(file.filename or "")[0] or "application/octet-stream"
    if allowed_prefixes and not any(content_type.startswith(p) for p in allowed_prefixes):
        raise RecordValidationError(
            f"Invalid file type: {content_type}. Allowed: {', '.join(allowed_prefixes)}",
            field="file",
        )

    data = await file.read()
    size_mb = len(data) / (1024 * 1024)
    if size_mb > settings.MAX_UPLOAD_MB:
        raise RecordValidationError(
            f"File too large: {size_mb:.1f} MB. Max size: {settings.MAX_UPLOAD_MB} MB.",
            field="file",
        )
    if not data:
        raise RecordValidationError(f"File {file.filename!r} is empty", field="file")
    return FilePayload(filename=file.filename or "upload", content_type=content_type, data=data)


def object_path(entity_id: str, payload: FilePayload, index: Optional[int] = None) -> str:
    stamp = int(time.time() * 1000)
    suffix = f"-{index}" if index is not None else ""
    return f"{entity_id}/{stamp}{suffix}.{payload.extension}"


class StorageClient:
    def __init__(self, base_url: str, service_key: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GatewayError(f"Storage request failed: {e}")
        if response.status_code >= 400:
            raise GatewayError(f"Storage error {response.status_code}: {response.text[:200]}")
        return response

    # --- Gateway primitives ---

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        headers = self._headers(content_type)
        headers["x-upsert"] = "true"
        self._request("POST", f"{self.base_url}/storage/v1/object/{bucket}/{path}", data=data, headers=headers)
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        if not paths:
            return
        self._request(
            "DELETE",
            f"{self.base_url}/storage/v1/object/{bucket}",
            json={"prefixes": list(paths)},
            headers=self._headers("application/json"),
        )

    def path_from_public_url(self, bucket: str, url: Optional[str]) -> Optional[str]:
        """Object path inside ``bucket`` for one of our public URLs, else None."""
        if not url:
            return None
        marker = f"/storage/v1/object/public/{bucket}/"
        path = urlparse(url).path
        if marker not in path:
            return None
        return unquote(path.split(marker, 1)[1]) or None

    # --- Entity helpers ---

    def upload_file(self, bucket: str, entity_id: str, payload: FilePayload, index: Optional[int] = None) -> str:
        path = self.upload(bucket, object_path(entity_id, payload, index), payload.data, payload.content_type)
        return self.public_url(bucket, path)

    def upload_many(self, bucket: str, entity_id: str, payloads: Sequence[FilePayload]) -> Tuple[List[Optional[str]], List[str]]:
        """
        Upload files concurrently.

        Returns one URL per payload (None where that upload failed) plus a
        warning per failure. One failure does not stop the others.
        """
        if not payloads:
            return [], []

        def _one(item: Tuple[int, FilePayload]) -> Tuple[Optional[str], Optional[str]]:
            index, payload = item
            try:
                return self.upload_file(bucket, entity_id, payload, index), None
            except GatewayError as e:
                logger.exception("Upload of %s to %s failed", payload.filename, bucket)
                return None, f"Could not upload {payload.filename}: {e.message}"

        with ThreadPoolExecutor(max_workers=min(MAX_PARALLEL_UPLOADS, len(payloads))) as pool:
            results = list(pool.map(_one, enumerate(payloads)))

        urls = [url for url, _ in results]
        warnings = [w for _, w in results if w]
        return urls, warnings

    def discard(self, bucket: str, urls: Sequence[Optional[str]]) -> List[str]:
        """Best-effort removal of objects behind public URLs. Returns warnings."""
        paths = [p for p in (self.path_from_public_url(bucket, u) for u in urls) if p]
        if not paths:
            return []
        try:
            self.remove(bucket, paths)
        except GatewayError as e:
            logger.exception("Could not remove %d old objects from %s", len(paths), bucket)
            return [f"Old file cleanup failed: {e.message}"]
        logger.info("Removed %d old objects from %s", len(paths), bucket)
        return []


def get_storage() -> StorageClient:
    """FastAPI dependency; storage writes need the service-role key."""
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY is not configured; file storage is unavailable.")
    return StorageClient(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def get_optional_storage() -> Optional[StorageClient]:
    """Like ``get_storage`` but None when unconfigured, for writes where files are optional."""
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        return None
    return StorageClient(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def require_storage(storage: Optional[StorageClient]) -> StorageClient:
    if storage is None:
        raise ConfigurationError("File storage is not configured; set SUPABASE_SERVICE_ROLE_KEY to upload files.")
    return storage
