from locker.models.time_mixin import TimeMixin
from locker.models.deleted_document import DeletedDocument
from locker.models.smart_folder import SmartFolder
from locker.models.folder_assignment import FolderAssignment
from locker.models.document_share import DocumentShare

__all__ = [
    "TimeMixin",
    "DeletedDocument",
    "SmartFolder",
    "FolderAssignment",
    "DocumentShare",
]

# List of all document models for Beanie initialization
DOCUMENT_MODELS = [
    DeletedDocument,
    SmartFolder,
    FolderAssignment,
    DocumentShare,
]
