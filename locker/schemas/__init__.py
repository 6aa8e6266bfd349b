from locker.schemas.response import ApiResponse, ApiError, ErrorDetail, Advisory, OperationResult
from locker.schemas.document import (
    ActiveDocument, TrashedDocument, DeletedDocumentCreate, RenameRequest, CategoryUpdate,
    BulkCategoryUpdateRequest, AccessUrl, PermanentDeleteResult, PurgeResult
)
from locker.schemas.share import (
    ShareSettingsIn, ShareCreateRequest, DocumentShareCreate, ShareResponse, ShareState,
    SharedDocumentView, UnlockRequest
)
from locker.schemas.folder import (
    SmartFolderIn, SmartFolderCreate, SmartFolderUpdate, SmartFolderResponse, AssignRequest,
    AssignmentResponse, AutoAssignRequest, AutoAssignResult, FolderWithDocuments, OrganizeResult
)
from locker.schemas.categorization import (
    CategorySuggestion, FolderCandidate, FolderMatch, FolderDecision, CategorizeRequest,
    BulkCategorizeItem, BulkCategorizeRequest
)

__all__ = [
    "ApiResponse",
    "ApiError",
    "ErrorDetail",
    "Advisory",
    "OperationResult",
    # Document schemas
    "ActiveDocument",
    "TrashedDocument",
    "DeletedDocumentCreate",
    "RenameRequest",
    "CategoryUpdate",
    "BulkCategoryUpdateRequest",
    "AccessUrl",
    "PermanentDeleteResult",
    "PurgeResult",
    # Share schemas
    "ShareSettingsIn",
    "ShareCreateRequest",
    "DocumentShareCreate",
    "ShareResponse",
    "ShareState",
    "SharedDocumentView",
    "UnlockRequest",
    # Folder schemas
    "SmartFolderIn",
    "SmartFolderCreate",
    "SmartFolderUpdate",
    "SmartFolderResponse",
    "AssignRequest",
    "AssignmentResponse",
    "AutoAssignRequest",
    "AutoAssignResult",
    "FolderWithDocuments",
    "OrganizeResult",
    # Categorization schemas
    "CategorySuggestion",
    "FolderCandidate",
    "FolderMatch",
    "FolderDecision",
    "CategorizeRequest",
    "BulkCategorizeItem",
    "BulkCategorizeRequest",
]
