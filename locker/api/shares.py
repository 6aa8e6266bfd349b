from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from locker.api.deps import get_share_service
from locker.schemas.response import ApiError, ApiResponse
from locker.schemas.share import ShareCreateRequest, ShareResponse
from locker.services import ShareService
from locker.utils.api_response import created, ok
from locker.utils.verify_token import CurrentUser, verify_token

router = APIRouter(
    tags=["Shares"],
    responses={
        400: {"model": ApiError, "description": "Bad Request"},
        401: {"model": ApiError, "description": "Unauthorized"},
        403: {"model": ApiError, "description": "Forbidden"},
        404: {"model": ApiError, "description": "Not Found"},
    }
)


@router.post("", response_model=ApiResponse[ShareResponse], status_code=201, summary="Create Share Link")
async def create_share(
    request: ShareCreateRequest,
    current_user: CurrentUser = Depends(verify_token),
    service: ShareService = Depends(get_share_service),
):
    share = await service.create_share(current_user.user_id, request.path, request)
    return created(share, message="Share link created successfully")


@router.get("", response_model=ApiResponse[List[ShareResponse]], summary="List Share Links")
async def list_shares(
    path: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(verify_token),
    service: ShareService = Depends(get_share_service),
):
    return ok(data=await service.list_shares(current_user.user_id, path), message="Shares retrieved successfully")


@router.delete("/{share_id}", response_model=ApiResponse[bool], summary="Revoke Share Link")
async def delete_share(
    share_id: str = Path(...),
    current_user: CurrentUser = Depends(verify_token),
    service: ShareService = Depends(get_share_service),
):
    await service.delete_share(current_user.user_id, share_id)
    return ok(data=True, message="Share link revoked")
