import asyncio
from dataclasses import dataclass
from datetime import timedelta
from io import BytesIO
from typing import Iterable, List, Optional

from minio import Minio
from minio.commonconfig import CopySource
from minio.deleteobjects import DeleteObject
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError as TransportError

from locker.configs.settings import settings
from locker.core.exceptions import StorageUnavailable
from locker.utils import get_logger
from locker.utils.document_path import base_name

logger = get_logger(__name__)

_MISSING_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}
_STORAGE_ERRORS = (MinioException, TransportError, OSError)


@dataclass(frozen=True)
class StoredObject:
    path: str
    size: int

    @property
    def file_name(self) -> str:
        return base_name(self.path)


class StorageService:
    """Async wrapper around one bucket of the object store.

    The MinIO SDK is blocking, so every call is pushed to a worker thread.
    Transport failures surface as ``StorageUnavailable``; callers decide
    whether a given call is on the critical path.
    """

    def __init__(self, access_key: str, secret_key: str, bucket_name: Optional[str] = None):
        self.bucket_name = bucket_name or settings.MINIO_BUCKET
        self.client = Minio(
            endpoint=settings.MINIO_URL.replace("http://", "").replace("https://", ""),
            access_key=access_key,
            secret_key=secret_key,
            secure=settings.MINIO_SSL,
        )

    def _fail(self, action: str, target: str, error: Exception) -> StorageUnavailable:
        logger.error(f"[STORAGE] {action} failed - bucket: {self.bucket_name}, target: {target}, error: {error}")
        return StorageUnavailable(
            "Document storage is temporarily unavailable",
            details={"action": action, "target": target},
        )

    async def ensure_bucket(self) -> bool:
        """Create the bucket if it does not exist yet"""
        try:
            exists = await asyncio.to_thread(self.client.bucket_exists, self.bucket_name)
            if not exists:
                await asyncio.to_thread(self.client.make_bucket, self.bucket_name)
                logger.info(f"Created bucket '{self.bucket_name}'")
            return True
        except _STORAGE_ERRORS as e:
            raise self._fail("ensure_bucket", self.bucket_name, e)

    async def list_objects(self, prefix: str) -> List[StoredObject]:
        """Direct children of ``prefix``; nested prefixes come back as zero-size placeholders"""

        def _list():
            return [
                StoredObject(path=obj.object_name, size=obj.size or 0)
                for obj in self.client.list_objects(self.bucket_name, prefix=prefix, recursive=False)
            ]

        try:
            return await asyncio.to_thread(_list)
        except _STORAGE_ERRORS as e:
            raise self._fail("list", prefix, e)

    async def upload_bytes(self, object_name: str, data: bytes, content_type: str = "application/octet-stream") -> StoredObject:
        def _upload():
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type,
            )

        try:
            await asyncio.to_thread(_upload)
        except _STORAGE_ERRORS as e:
            raise self._fail("upload", object_name, e)
        logger.info(f"[STORAGE] Uploaded '{object_name}' ({len(data)} bytes)")
        return StoredObject(path=object_name, size=len(data))

    async def stat(self, object_name: str) -> Optional[StoredObject]:
        """Object metadata, or None when the key does not exist"""
        try:
            info = await asyncio.to_thread(self.client.stat_object, self.bucket_name, object_name)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return None
            raise self._fail("stat", object_name, e)
        except _STORAGE_ERRORS as e:
            raise self._fail("stat", object_name, e)
        return StoredObject(path=object_name, size=info.size or 0)

    async def presigned_url(
        self,
        object_name: str,
        download: bool = False,
        expires_minutes: Optional[int] = None,
    ) -> str:
        """Signed GET URL; ``download`` forces an attachment disposition"""
        response_headers = {}
        if download:
            response_headers["response-content-disposition"] = f'attachment; filename="{base_name(object_name)}"'
        expires = timedelta(minutes=expires_minutes or settings.MINIO_SIGNED_URL_MINUTES)

        def _get_url():
            return self.client.presigned_get_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                expires=expires,
                response_headers=response_headers or None,
            )

        try:
            return await asyncio.to_thread(_get_url)
        except _STORAGE_ERRORS as e:
            raise self._fail("sign", object_name, e)

    async def copy(self, source: str, destination: str) -> None:
        def _copy():
            self.client.copy_object(self.bucket_name, destination, CopySource(self.bucket_name, source))

        try:
            await asyncio.to_thread(_copy)
        except _STORAGE_ERRORS as e:
            raise self._fail("copy", f"{source} -> {destination}", e)

    async def remove(self, object_name: str) -> None:
        try:
            await asyncio.to_thread(self.client.remove_object, self.bucket_name, object_name)
        except _STORAGE_ERRORS as e:
            raise self._fail("remove", object_name, e)
        logger.info(f"[STORAGE] Removed '{object_name}'")

    async def remove_many(self, object_names: Iterable[str]) -> int:
        """Bulk removal; returns how many keys the store accepted"""
        names = list(object_names)
        if not names:
            return 0

        def _remove():
            # remove_objects is lazy: errors only appear while iterating
            errors = list(self.client.remove_objects(self.bucket_name, [DeleteObject(n) for n in names]))
            for error in errors:
                logger.warning(f"[STORAGE] Bulk removal error - object: {error.name}, message: {error.message}")
            return len(names) - len(errors)

        try:
            removed = await asyncio.to_thread(_remove)
        except _STORAGE_ERRORS as e:
            raise self._fail("remove_many", f"{len(names)} objects", e)
        logger.info(f"[STORAGE] Bulk removed {removed}/{len(names)} objects")
        return removed


def user_storage() -> StorageService:
    """Storage handle with the regular service credential"""
    return StorageService(access_key=settings.MINIO_ACCESS_KEY, secret_key=settings.MINIO_SECRET_KEY)


def admin_storage() -> StorageService:
    """Storage handle with the elevated credential; falls back to the regular one when unset"""
    return StorageService(
        access_key=settings.MINIO_ADMIN_ACCESS_KEY or settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_ADMIN_SECRET_KEY or settings.MINIO_SECRET_KEY,
    )
