from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from locker.api.deps import get_document_service, get_folder_service
from locker.core.exceptions import AppError
from locker.schemas.document import (
    AccessUrl,
    ActiveDocument,
    BulkCategoryUpdateRequest,
    CategoryUpdate,
    RenameRequest,
)
from locker.schemas.response import ApiError, ApiResponse, OperationResult
from locker.services import DocumentService, FolderService
from locker.utils import get_logger
from locker.utils.api_response import created, ok
from locker.utils.verify_token import CurrentUser, verify_token

logger = get_logger(__name__)

router = APIRouter(
    tags=["Documents"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        403: {"model": ApiError, "description": "Forbidden"},
        404: {"model": ApiError, "description": "Not Found"},
        422: {"model": ApiError, "description": "Validation Error"},
        502: {"model": ApiError, "description": "Storage Unavailable"},
    }
)


@router.get(
    "",
    response_model=ApiResponse[List[ActiveDocument]],
    summary="List Documents",
    description="Active documents of the caller, private ones included without URLs",
)
async def list_documents(
    category: Optional[str] = Query(None, description="Only documents of this category"),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    documents = await service.list_active(current_user.user_id, category=category)
    return ok(data=documents, message="Documents retrieved successfully")


@router.post(
    "",
    response_model=ApiResponse[OperationResult[ActiveDocument]],
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
)
async def upload_document(
    file: UploadFile = File(...),
    category: str = Form(...),
    name: Optional[str] = Form(None),
    private: bool = Form(False),
    auto_assign: bool = Form(False, description="File the document into a smart folder after upload"),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
    folders: FolderService = Depends(get_folder_service),
):
    data = await file.read()
    document = await service.upload(
        current_user.user_id,
        data,
        file.filename or "",
        category=category,
        name=name,
        private=private,
        content_type=file.content_type or "application/octet-stream",
    )

    outcome = OperationResult(result=document)
    if auto_assign and not document.is_private:
        try:
            await folders.auto_assign(current_user.user_id, document.path, file.content_type or "application/octet-stream")
        except AppError as e:
            logger.warning(f"[UPLOAD] Auto-assign failed - path: {document.path}, error: {e.message}")
            outcome.advise("auto_assign", e.message)
    return created(outcome, message="Document uploaded successfully")


@router.get(
    "/url",
    response_model=ApiResponse[AccessUrl],
    summary="Get Document URL",
    description="Time-limited URL to view, download or print a document; private documents need a biometric step-up",
)
async def get_document_url(
    path: str = Query(..., min_length=1),
    disposition: Literal["view", "download"] = Query("view"),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    access = await service.get_access_url(current_user, path, download=disposition == "download")
    return ok(data=access, message="URL generated successfully")


@router.put("/rename", response_model=ApiResponse[OperationResult[ActiveDocument]], summary="Rename Document")
async def rename_document(
    request: RenameRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    outcome = await service.rename(current_user, request.path, request.new_name)
    return ok(data=outcome, message="Document renamed successfully")


@router.put("/category", response_model=ApiResponse[OperationResult[ActiveDocument]], summary="Change Category")
async def change_category(
    request: CategoryUpdate,
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    outcome = await service.change_category(current_user.user_id, request.path, request.category)
    return ok(data=outcome, message="Category updated successfully")


@router.put("/categories", response_model=ApiResponse[OperationResult[List[ActiveDocument]]], summary="Apply Category Updates")
async def apply_category_updates(
    request: BulkCategoryUpdateRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    outcome = await service.apply_category_updates(current_user.user_id, request.updates)
    return ok(data=outcome, message=f"Updated {len(outcome.result)} of {len(request.updates)} documents")


@router.delete(
    "",
    summary="Delete Document",
    description="Regular documents move to trash; private documents are removed permanently",
)
async def delete_document(
    path: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(verify_token),
    service: DocumentService = Depends(get_document_service),
):
    result = await service.delete(current_user, path)
    if isinstance(result, OperationResult):
        return ok(data=result, message="Document deleted permanently")
    return ok(data=result, message="Document moved to trash")
