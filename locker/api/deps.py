from typing import Optional

from fastapi import Depends

from locker.services import CategorizationService, DocumentService, FolderService, ShareService

# One AI client per process; closed by the app lifespan
_categorizer: Optional[CategorizationService] = None


def get_document_service() -> DocumentService:
    return DocumentService()


def get_share_service() -> ShareService:
    return ShareService()


def get_categorization_service() -> CategorizationService:
    global _categorizer
    if _categorizer is None:
        _categorizer = CategorizationService()
    return _categorizer


async def close_categorization_service() -> None:
    global _categorizer
    if _categorizer is not None:
        await _categorizer.aclose()
        _categorizer = None


def get_folder_service(
    documents: DocumentService = Depends(get_document_service),
    categorizer: CategorizationService = Depends(get_categorization_service),
) -> FolderService:
    return FolderService(documents=documents, categorizer=categorizer)
