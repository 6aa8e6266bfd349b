from locker.api.documents import router as documents_router
from locker.api.trash import router as trash_router
from locker.api.shares import router as shares_router
from locker.api.shared import router as shared_router
from locker.api.folders import router as folders_router
from locker.api.categorize import router as categorize_router

__all__ = ["documents_router", "trash_router", "shares_router", "shared_router", "folders_router", "categorize_router"]
