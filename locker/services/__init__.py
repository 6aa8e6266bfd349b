from locker.services.storage_service import StorageService, StoredObject, user_storage, admin_storage
from locker.services.document_service import DocumentService
from locker.services.share_service import ShareService
from locker.services.categorization_service import CategorizationService
from locker.services.folder_service import FolderService

__all__ = [
    "StorageService",
    "StoredObject",
    "user_storage",
    "admin_storage",
    "DocumentService",
    "ShareService",
    "CategorizationService",
    "FolderService",
]
