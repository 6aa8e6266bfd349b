from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from locker.api.deps import get_document_service
from locker.schemas.document import ActiveDocument, PermanentDeleteResult, PurgeResult, TrashedDocument
from locker.schemas.response import ApiError, ApiResponse, OperationResult
from locker.services import DocumentService
from locker.utils.api_response import ok
from locker.utils.verify_token import CurrentUser, verify_token

router = APIRouter(
    tags=["Trash"],
    responses={
        401: {"model": ApiError, "description": "Unauthorized"},
        404: {"model": ApiError, "description": "Not Found"},
        502: {"model": ApiError, "description": "Storage Unavailable"},
    }
)


@router.get("", response_model=ApiResponse[List[TrashedDocument]], summary="List Trash")
async def list_trash(
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    return ok(data=await service.list_trash(current_user.user_id), message="Trash retrieved successfully")


@router.post("/{marker_id}/restore", response_model=ApiResponse[ActiveDocument], summary="Restore Document")
async def restore_document(
    marker_id: str = Path(...),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    document = await service.restore(current_user.user_id, marker_id)
    return ok(data=document, message="Document restored successfully")


@router.delete("/{marker_id}", response_model=ApiResponse[OperationResult[PermanentDeleteResult]], summary="Delete Permanently")
async def delete_permanently(
    marker_id: str = Path(...),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    outcome = await service.delete_permanent(current_user.user_id, marker_id)
    return ok(data=outcome, message="Document deleted permanently")


@router.post("/purge", response_model=ApiResponse[OperationResult[PurgeResult]], summary="Purge Old Trash")
async def purge_trash(
    days: Optional[int] = Query(None, ge=0, description="Defaults to the configured retention"),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    outcome = await service.purge_old_trash(current_user.user_id, days)
    return ok(data=outcome, message=f"Purged {outcome.result.purged_markers} documents")
