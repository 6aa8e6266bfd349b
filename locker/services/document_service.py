"""
Document lifecycle reconciler.

Active documents are whatever the object store lists under the user's
prefixes, minus anything hidden by a deletion marker. Trash is the set of
markers. Category and privacy live in the object key itself, so renaming or
recategorising a document is a move of the object plus a rewrite of every
metadata row that points at the old key.
"""
from datetime import timedelta
from typing import List, Optional, Union

from pymongo.errors import DuplicateKeyError

from locker.configs.settings import settings
from locker.consts import UPLOAD_CATEGORIES
from locker.core.exceptions import (
    AppError,
    Conflict,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from locker.crud import deleted_document_crud, document_share_crud, folder_assignment_crud
from locker.schemas.document import (
    AccessUrl,
    ActiveDocument,
    CategoryUpdate,
    DeletedDocumentCreate,
    PermanentDeleteResult,
    PurgeResult,
    TrashedDocument,
)
from locker.schemas.response import OperationResult
from locker.services.storage_service import StorageService, StoredObject, admin_storage, user_storage
from locker.utils import get_logger
from locker.utils.base import as_utc, utcnow
from locker.utils.document_path import (
    base_name,
    belongs_to,
    build_object_path,
    is_listable,
    is_private_path,
    parse_object_name,
    resolve_category,
    split_extension,
    user_prefix,
    with_category,
    with_display_name,
)
from locker.utils.verify_token import CurrentUser

logger = get_logger(__name__)


def require_private_access(user: CurrentUser, path: str) -> None:
    """Private keys need a biometric step-up on the current session"""
    if is_private_path(user.user_id, path) and not user.private_unlocked:
        logger.warning(f"[PRIVATE] Step-up missing - user_id: {user.user_id}, path: {path}")
        raise PermissionDenied(
            "Biometric verification is required to access private documents",
            code="step_up_required",
        )


class DocumentService:
    def __init__(
        self,
        storage: Optional[StorageService] = None,
        admin: Optional[StorageService] = None,
        crud=None,
        assignment_crud=None,
        share_crud=None,
    ):
        self.storage = storage or user_storage()
        self.admin = admin or admin_storage()
        self.crud = crud or deleted_document_crud
        self.assignment_crud = assignment_crud or folder_assignment_crud
        self.share_crud = share_crud or document_share_crud

    # ---- helpers ----

    def _ensure_owned(self, user_id: str, path: str) -> None:
        if not belongs_to(user_id, path):
            # Foreign paths answer exactly like missing ones
            raise NotFound("Document not found", code="document_not_found")

    async def _require_object(self, path: str) -> StoredObject:
        obj = await self.storage.stat(path)
        if obj is None:
            raise NotFound("Document not found", code="document_not_found")
        return obj

    async def _to_active(self, user_id: str, obj: StoredObject) -> ActiveDocument:
        private = is_private_path(user_id, obj.path)
        _, display_name = parse_object_name(obj.file_name)
        url = None if private else await self.storage.presigned_url(obj.path)
        return ActiveDocument(
            name=display_name,
            path=obj.path,
            file_name=obj.file_name,
            url=url,
            size=obj.size,
            category=resolve_category(user_id, obj.path),
            is_private=private,
        )

    def _trash_location(self, user_id: str, marker) -> str:
        if belongs_to(user_id, marker.document_path):
            return marker.document_path
        return f"{user_id}/{marker.document_name}"

    async def _to_trashed(self, user_id: str, marker) -> TrashedDocument:
        path = self._trash_location(user_id, marker)
        url, size = None, 0
        try:
            obj = await self.storage.stat(path)
            if obj is not None:
                size = obj.size
                url = await self.storage.presigned_url(path)
        except AppError as e:
            logger.warning(f"[TRASH] Could not resolve object for marker {marker.id}: {e.message}")
        _, display_name = parse_object_name(marker.document_name)
        return TrashedDocument(
            id=str(marker.id),
            name=display_name,
            path=path,
            url=url,
            size=size,
            deleted_at=as_utc(marker.deleted_at),
        )

    async def _rewrite_references(self, user_id: str, old_path: str, new_path: str, outcome: OperationResult) -> None:
        for operation, crud in (("rewrite_assignments", self.assignment_crud), ("rewrite_shares", self.share_crud)):
            try:
                await crud.rewrite_path(user_id, old_path, new_path)
            except Exception as e:
                logger.warning(f"[MOVE] {operation} failed - user_id: {user_id}, path: {old_path}, error: {e}")
                outcome.advise(operation, e)

    async def _drop_references(self, user_id: str, path: str, outcome: OperationResult) -> None:
        try:
            await self.assignment_crud.delete_for_path(user_id, path)
        except Exception as e:
            logger.warning(f"[DELETE] Assignment cleanup failed - path: {path}, error: {e}")
            outcome.advise("remove_assignment", e)
        try:
            await self.share_crud.delete_many({"user_id": user_id, "document_path": path})
        except Exception as e:
            logger.warning(f"[DELETE] Share cleanup failed - path: {path}, error: {e}")
            outcome.advise("remove_shares", e)

    async def _move(self, user_id: str, old_path: str, new_path: str) -> OperationResult[ActiveDocument]:
        self._ensure_owned(user_id, old_path)
        if await self.crud.get_by_path(user_id, old_path):
            raise Conflict("Restore the document from trash before changing it", code="document_trashed")
        source = await self._require_object(old_path)
        if new_path == old_path:
            return OperationResult(result=await self._to_active(user_id, source))
        if await self.storage.stat(new_path) is not None:
            raise Conflict("A document with that name already exists", code="document_exists")

        logger.info(f"[MOVE] Moving document - user_id: {user_id}, from: {old_path}, to: {new_path}")
        await self.storage.copy(old_path, new_path)
        try:
            await self.storage.remove(old_path)
        except AppError:
            # Keep exactly one copy visible
            await self.storage.remove(new_path)
            raise

        outcome = OperationResult(result=await self._to_active(user_id, StoredObject(path=new_path, size=source.size)))
        await self._rewrite_references(user_id, old_path, new_path, outcome)
        logger.info(f"[MOVE] Completed - user_id: {user_id}, path: {new_path}, advisories: {len(outcome.advisories)}")
        return outcome

    # ---- active documents ----

    async def list_active(self, user_id: str, category: Optional[str] = None) -> List[ActiveDocument]:
        objects = await self.storage.list_objects(user_prefix(user_id))
        objects += await self.storage.list_objects(user_prefix(user_id, private=True))
        trashed = await self.crud.deleted_names(user_id)

        documents = []
        for obj in objects:
            if not is_listable(obj.file_name, obj.size) or obj.file_name in trashed:
                continue
            document = await self._to_active(user_id, obj)
            if category and document.category != category:
                continue
            documents.append(document)
        return documents

    async def upload(
        self,
        user_id: str,
        data: bytes,
        file_name: str,
        category: str,
        name: Optional[str] = None,
        private: bool = False,
        content_type: str = "application/octet-stream",
    ) -> ActiveDocument:
        if not data:
            raise ValidationFailed("File is empty", field="file")
        stem, ext = split_extension(file_name or "")
        if not ext:
            raise ValidationFailed("File must have an extension", field="file")
        if category not in UPLOAD_CATEGORIES:
            raise ValidationFailed(f"Unknown category '{category}'", field="category")

        path = build_object_path(user_id, name or stem, category, ext, private=private)
        logger.info(f"[UPLOAD] Storing document - user_id: {user_id}, path: {path}, size: {len(data)}")
        stored = await self.storage.upload_bytes(path, data, content_type=content_type)
        return await self._to_active(user_id, stored)

    async def get_access_url(self, user: CurrentUser, path: str, download: bool = False) -> AccessUrl:
        """Signed URL for viewing, downloading or printing a document"""
        self._ensure_owned(user.user_id, path)
        require_private_access(user, path)
        await self._require_object(path)
        url = await self.storage.presigned_url(path, download=download)
        return AccessUrl(
            path=path,
            url=url,
            disposition="download" if download else "view",
            expires_in_minutes=settings.MINIO_SIGNED_URL_MINUTES,
        )

    async def rename(self, user: CurrentUser, path: str, new_name: str) -> OperationResult[ActiveDocument]:
        require_private_access(user, path)
        return await self._move(user.user_id, path, with_display_name(path, new_name))

    async def change_category(self, user_id: str, path: str, category: str) -> OperationResult[ActiveDocument]:
        if is_private_path(user_id, path):
            raise ValidationFailed("Private documents cannot be recategorised", field="path", code="private_document")
        if category not in UPLOAD_CATEGORIES:
            raise ValidationFailed(f"Unknown category '{category}'", field="category")
        return await self._move(user_id, path, with_category(path, category))

    async def apply_category_updates(self, user_id: str, updates: List[CategoryUpdate]) -> OperationResult[List[ActiveDocument]]:
        """Apply each update in turn; a failing item becomes an advisory"""
        outcome: OperationResult[List[ActiveDocument]] = OperationResult(result=[])
        for update in updates:
            try:
                moved = await self.change_category(user_id, update.path, update.category)
            except AppError as e:
                logger.warning(f"[CATEGORY] Update failed - path: {update.path}, error: {e.message}")
                outcome.advise(f"category:{update.path}", e.message)
                continue
            outcome.result.append(moved.result)
            outcome.advisories.extend(moved.advisories)
        return outcome

    async def delete(self, user: CurrentUser, path: str) -> Union[TrashedDocument, OperationResult[PermanentDeleteResult]]:
        """Private documents are removed for good; everything else goes to trash"""
        if is_private_path(user.user_id, path):
            return await self.delete_private(user, path)
        return await self.move_to_trash(user.user_id, path)

    async def delete_private(self, user: CurrentUser, path: str) -> OperationResult[PermanentDeleteResult]:
        self._ensure_owned(user.user_id, path)
        if not is_private_path(user.user_id, path):
            raise ValidationFailed("Only private documents skip the trash", field="path")
        require_private_access(user, path)
        await self._require_object(path)

        logger.info(f"[PRIVATE_DELETE] Removing private document - user_id: {user.user_id}, path: {path}")
        await self.admin.remove(path)
        outcome = OperationResult(result=PermanentDeleteResult(path=path, marker_removed=False, storage_removed=True))
        await self._drop_references(user.user_id, path, outcome)
        return outcome

    # ---- trash ----

    async def list_trash(self, user_id: str) -> List[TrashedDocument]:
        markers = await self.crud.list_for_user(user_id)
        return [await self._to_trashed(user_id, marker) for marker in markers]

    async def move_to_trash(self, user_id: str, path: str) -> TrashedDocument:
        self._ensure_owned(user_id, path)
        if is_private_path(user_id, path):
            raise ValidationFailed("Private documents are deleted permanently, not trashed", field="path", code="private_document")
        if await self.crud.get_by_path(user_id, path):
            raise Conflict("Document is already in trash", code="already_trashed")
        await self._require_object(path)

        logger.info(f"[TRASH] Marking document deleted - user_id: {user_id}, path: {path}")
        try:
            marker = await self.crud.create(DeletedDocumentCreate(
                user_id=user_id,
                document_path=path,
                document_name=base_name(path),
                deleted_at=utcnow(),
            ))
        except DuplicateKeyError:
            raise Conflict("Document is already in trash", code="already_trashed")
        return await self._to_trashed(user_id, marker)

    async def restore(self, user_id: str, marker_id: str) -> ActiveDocument:
        marker = await self.crud.get_owned(user_id, marker_id)
        if not marker:
            raise NotFound("Trash entry not found", code="trash_entry_not_found")
        await self.crud.delete(marker)
        logger.info(f"[TRASH] Restored - user_id: {user_id}, path: {marker.document_path}")

        path = self._trash_location(user_id, marker)
        _, display_name = parse_object_name(marker.document_name)
        return ActiveDocument(
            name=display_name,
            path=path,
            file_name=base_name(path),
            category=resolve_category(user_id, path),
            is_private=is_private_path(user_id, path),
        )

    async def delete_permanent(self, user_id: str, marker_id: str) -> OperationResult[PermanentDeleteResult]:
        """The marker is authoritative; object removal is best-effort"""
        marker = await self.crud.get_owned(user_id, marker_id)
        if not marker:
            raise NotFound("Trash entry not found", code="trash_entry_not_found")

        path = self._trash_location(user_id, marker)
        logger.info(f"[PERMANENT_DELETE] Starting - user_id: {user_id}, marker: {marker_id}, path: {path}")
        await self.crud.delete(marker)

        outcome = OperationResult(result=PermanentDeleteResult(path=path, marker_removed=True, storage_removed=False))
        try:
            await self.admin.remove(path)
            outcome.result.storage_removed = True
        except AppError as e:
            logger.warning(f"[PERMANENT_DELETE] Storage removal failed - path: {path}, error: {e.message}")
            outcome.advise("remove_object", e.message)
        await self._drop_references(user_id, path, outcome)

        logger.info(f"[PERMANENT_DELETE] Completed - path: {path}, storage_removed: {outcome.result.storage_removed}")
        return outcome

    async def purge_old_trash(self, user_id: str, days: Optional[int] = None) -> OperationResult[PurgeResult]:
        retention = settings.TRASH_RETENTION_DAYS if days is None else days
        if retention < 0:
            raise ValidationFailed("Retention days must not be negative", field="days")
        threshold = utcnow() - timedelta(days=retention)

        markers = await self.crud.list_for_user(user_id)
        expired = [m for m in markers if as_utc(m.deleted_at) < threshold]
        paths = [self._trash_location(user_id, m) for m in expired]
        logger.info(f"[PURGE] user_id: {user_id}, threshold: {threshold.isoformat()}, candidates: {len(expired)}")

        outcome = OperationResult(result=PurgeResult(purged_markers=0, removed_objects=0, threshold=threshold))
        if not expired:
            return outcome

        try:
            outcome.result.removed_objects = await self.admin.remove_many(paths)
        except AppError as e:
            logger.warning(f"[PURGE] Bulk storage removal failed - user_id: {user_id}, error: {e.message}")
            outcome.advise("remove_objects", e.message)

        for marker, path in zip(expired, paths):
            await self.crud.delete(marker)
            outcome.result.purged_markers += 1
            await self._drop_references(user_id, path, outcome)
        return outcome
