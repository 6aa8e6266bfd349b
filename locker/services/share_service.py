from datetime import timedelta
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from locker.configs.settings import settings
from locker.consts import is_private_category
from locker.core.exceptions import AppError, NotFound, PermissionDenied, ShareExpired, ValidationFailed
from locker.crud import deleted_document_crud, document_share_crud
from locker.schemas.share import (
    DocumentShareCreate,
    ShareResponse,
    ShareSettingsIn,
    SharedDocumentView,
    ShareState,
)
from locker.services.storage_service import StorageService, user_storage
from locker.utils import generate_secret_key, get_logger
from locker.utils.base import as_utc, utcnow
from locker.utils.document_path import base_name, belongs_to, candidate_paths, parse_object_name, resolve_category
from locker.utils.password import hash_password, verify_password
from starlette.status import HTTP_401_UNAUTHORIZED

logger = get_logger(__name__)


def share_url(token: str) -> str:
    return f"{settings.SHARE_BASE_URL.rstrip('/')}/shared/{token}"


class ShareService:
    """Public share links: create, list, revoke and resolve by token"""

    def __init__(self, storage: Optional[StorageService] = None, crud=None, deleted_crud=None):
        self.storage = storage or user_storage()
        self.crud = crud or document_share_crud
        self.deleted_crud = deleted_crud or deleted_document_crud

    @staticmethod
    def _to_response(share) -> ShareResponse:
        return ShareResponse(
            id=str(share.id),
            document_path=share.document_path,
            share_token=share.share_token,
            url=share_url(share.share_token),
            is_public=share.is_public,
            expires_at=as_utc(share.expires_at) if share.expires_at else None,
            password_protected=bool(share.password_hash),
            allow_download=share.allow_download,
            access_count=share.access_count,
            created_at=share.created_at,
        )

    async def create_share(self, user_id: str, path: str, options: ShareSettingsIn) -> ShareResponse:
        if is_private_category(resolve_category(user_id, path)):
            logger.warning(f"[SHARE] Refused private document - user_id: {user_id}, path: {path}")
            raise PermissionDenied("Private documents cannot be shared", code="private_document")
        if options.requires_password and not (options.password or "").strip():
            raise ValidationFailed("A password is required for a protected link", field="password")
        if not belongs_to(user_id, path) or await self.storage.stat(path) is None:
            raise NotFound("Document not found", code="document_not_found")

        expires_at = utcnow() + timedelta(hours=options.expires_in) if options.expires_in > 0 else None
        payload = DocumentShareCreate(
            user_id=user_id,
            document_path=path,
            share_token=generate_secret_key(settings.SHARE_TOKEN_BYTES),
            is_public=options.is_public,
            expires_at=expires_at,
            password_hash=hash_password(options.password) if options.requires_password else None,
            allow_download=options.allow_download,
        )
        try:
            share = await self.crud.create(payload)
        except DuplicateKeyError:
            # Token collision
            raise AppError("Could not create share link, try again", code="share_token_collision")

        logger.info(
            f"[SHARE] Created - user_id: {user_id}, path: {path}, "
            f"expires_at: {expires_at.isoformat() if expires_at else 'never'}, protected: {bool(payload.password_hash)}"
        )
        return self._to_response(share)

    async def list_shares(self, user_id: str, path: Optional[str] = None) -> List[ShareResponse]:
        shares = await self.crud.list_for_user(user_id, path)
        return [self._to_response(s) for s in shares]

    async def delete_share(self, user_id: str, share_id: str) -> bool:
        share = await self.crud.get_owned(user_id, share_id)
        if not share:
            raise NotFound("Share not found", code="share_not_found")
        await self.crud.delete(share)
        logger.info(f"[SHARE] Revoked - user_id: {user_id}, share_id: {share_id}")
        return True

    async def _locate_document(self, share) -> str:
        for candidate in candidate_paths(share.user_id, share.document_path):
            if await self.storage.stat(candidate) is not None:
                return candidate
        raise NotFound("The shared document is no longer available", code="document_unavailable")

    async def resolve(self, token: str, password: Optional[str] = None) -> SharedDocumentView:
        """Fail closed: not found, not public, expired, then the password gate"""
        share = await self.crud.get_by_token(token)
        if not share:
            raise NotFound("Share link not found", code="share_not_found")
        if not share.is_public:
            raise PermissionDenied("This share link is not public", code="share_not_public")
        if share.expires_at and as_utc(share.expires_at) < utcnow():
            raise ShareExpired()

        expires_at = as_utc(share.expires_at) if share.expires_at else None
        _, document_name = parse_object_name(base_name(share.document_path))

        if share.password_hash:
            if password is None:
                return SharedDocumentView(
                    state=ShareState.LOCKED,
                    token=token,
                    document_name=document_name,
                    expires_at=expires_at,
                    allow_download=share.allow_download,
                )
            if not verify_password(password, share.password_hash):
                logger.info(f"[SHARE] Wrong password - token: {token[:6]}...")
                raise AppError("Incorrect password", status_code=HTTP_401_UNAUTHORIZED, code="share_password_invalid")

        path = await self._locate_document(share)
        # Markers are keyed on the normalized key, not on the legacy form the share may hold
        if await self.deleted_crud.get_by_path(share.user_id, path):
            raise NotFound("The shared document is no longer available", code="document_unavailable")

        view_url = await self.storage.presigned_url(path)
        download_url = await self.storage.presigned_url(path, download=True) if share.allow_download else None

        access_count = share.access_count
        try:
            await self.crud.increment_access_count(share)
            access_count += 1
        except Exception as e:
            logger.warning(f"[SHARE] Access count increment failed - share_id: {share.id}, error: {e}")

        return SharedDocumentView(
            state=ShareState.RESOLVED,
            token=token,
            document_name=document_name,
            expires_at=expires_at,
            allow_download=share.allow_download,
            view_url=view_url,
            download_url=download_url,
            access_count=access_count,
        )

    async def unlock(self, token: str, password: str) -> SharedDocumentView:
        if not password:
            raise ValidationFailed("Password is required", field="password")
        return await self.resolve(token, password=password)
