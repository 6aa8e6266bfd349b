from typing import List

from fastapi import APIRouter, Depends, Path, Query

from locker.api.deps import get_folder_service
from locker.schemas.folder import (
    AssignmentResponse,
    AssignRequest,
    AutoAssignRequest,
    AutoAssignResult,
    FolderWithDocuments,
    OrganizeResult,
    SmartFolderIn,
    SmartFolderResponse,
    SmartFolderUpdate,
)
from locker.schemas.response import ApiError, ApiResponse, OperationResult
from locker.services import FolderService
from locker.utils.api_response import created, ok
from locker.utils.verify_token import CurrentUser, verify_token

router = APIRouter(
    tags=["Smart Folders"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        404: {"model": ApiError, "description": "Not Found"},
        409: {"model": ApiError, "description": "Conflict"},
    }
)


@router.post("", response_model=ApiResponse[SmartFolderResponse], status_code=201, summary="Create Folder")
async def create_folder(
    request: SmartFolderIn,
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    folder = await service.create_folder(current_user.user_id, request)
    return created(folder, message="Folder created successfully")


@router.get("", response_model=ApiResponse[List[SmartFolderResponse]], summary="List Folders")
async def list_folders(
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    return ok(data=await service.list_folders(current_user.user_id), message="Folders listed successfully")


@router.get("/view", response_model=ApiResponse[List[FolderWithDocuments]], summary="Folders With Documents")
async def folder_view(
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    return ok(data=await service.folder_view(current_user.user_id), message="Folders listed successfully")


@router.get("/assignments", response_model=ApiResponse[List[AssignmentResponse]], summary="List Assignments")
async def list_assignments(
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    return ok(data=await service.list_assignments(current_user.user_id), message="Assignments listed successfully")


@router.post("/assign", response_model=ApiResponse[AssignmentResponse], summary="Assign Document")
async def assign_document(
    request: AssignRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    assignment = await service.assign(current_user.user_id, request.path, request.folder_id)
    return ok(data=assignment, message="Document assigned successfully")


@router.delete("/assign", response_model=ApiResponse[bool], summary="Unassign Document")
async def unassign_document(
    path: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    await service.unassign(current_user.user_id, path)
    return ok(data=True, message="Document removed from folder")


@router.post("/auto-assign", response_model=ApiResponse[AutoAssignResult], summary="Auto-assign Document")
async def auto_assign(
    request: AutoAssignRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    result = await service.auto_assign(current_user.user_id, request.path, request.file_type)
    return ok(data=result, message=f"Document filed in '{result.folder_name}'")


@router.post("/organize", response_model=ApiResponse[OperationResult[OrganizeResult]], summary="Organize Documents")
async def organize(
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    outcome = await service.organize(current_user.user_id)
    return ok(data=outcome, message=f"Organized {outcome.result.assigned} documents")


@router.put("/{folder_id}", response_model=ApiResponse[SmartFolderResponse], summary="Update Folder")
async def update_folder(
    request: SmartFolderUpdate,
    folder_id: str = Path(...),
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    folder = await service.update_folder(current_user.user_id, folder_id, request)
    return ok(data=folder, message="Folder updated successfully")


@router.delete("/{folder_id}", response_model=ApiResponse[int], summary="Delete Folder")
async def delete_folder(
    folder_id: str = Path(...),
    current_user: CurrentUser = Depends(verify_token),
    service: FolderService = Depends(get_folder_service),
):
    removed = await service.delete_folder(current_user.user_id, folder_id)
    return ok(data=removed, message="Folder deleted successfully")
