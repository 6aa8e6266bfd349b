from typing import List

from fastapi import APIRouter, Depends

from locker.api.deps import get_categorization_service, get_document_service
from locker.schemas.categorization import BulkCategorizeItem, BulkCategorizeRequest, CategorizeRequest, CategorySuggestion
from locker.schemas.response import ApiError, ApiResponse
from locker.services import CategorizationService, DocumentService
from locker.utils.api_response import ok
from locker.utils.verify_token import CurrentUser, verify_token

router = APIRouter(
    tags=["Categorization"],
    responses={401: {"model": ApiError, "description": "Unauthorized"}},
)


@router.post("", response_model=ApiResponse[CategorySuggestion], summary="Suggest Category")
async def categorize(
    request: CategorizeRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: CategorizationService = Depends(get_categorization_service),
):
    suggestion = await service.categorize_document(request.file_name, request.content_preview)
    return ok(data=suggestion, message="Category suggested")


@router.post("/bulk", response_model=ApiResponse[List[BulkCategorizeItem]], summary="Suggest Categories In Bulk")
async def categorize_bulk(
    request: BulkCategorizeRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: CategorizationService = Depends(get_categorization_service),
    documents: DocumentService = Depends(get_document_service),
):
    active = [d for d in await documents.list_active(current_user.user_id) if not d.is_private]
    if request.paths is not None:
        wanted = set(request.paths)
        active = [d for d in active if d.path in wanted]
    items = await service.bulk_categorize(active)
    return ok(data=items, message=f"Analyzed {len(items)} documents")
