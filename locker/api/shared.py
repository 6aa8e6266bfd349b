from fastapi import APIRouter, Depends, Path

from locker.api.deps import get_share_service
from locker.schemas.response import ApiError, ApiResponse
from locker.schemas.share import SharedDocumentView, ShareState, UnlockRequest
from locker.services import ShareService
from locker.utils.api_response import ok

# Public: no bearer token on these routes
router = APIRouter(
    tags=["Shared"],
    responses={
        401: {"model": ApiError, "description": "Wrong password"},
        403: {"model": ApiError, "description": "Share is not public"},
        404: {"model": ApiError, "description": "Not Found"},
        410: {"model": ApiError, "description": "Share expired"},
    }
)


@router.get("/{token}", response_model=ApiResponse[SharedDocumentView], summary="Open Shared Document")
async def open_shared(
    token: str = Path(..., min_length=1),
    service: ShareService = Depends(get_share_service),
):
    view = await service.resolve(token)
    message = "Password required" if view.state is ShareState.LOCKED else "Shared document resolved"
    return ok(data=view, message=message)


@router.post("/{token}/unlock", response_model=ApiResponse[SharedDocumentView], summary="Unlock Shared Document")
async def unlock_shared(
    request: UnlockRequest,
    token: str = Path(..., min_length=1),
    service: ShareService = Depends(get_share_service),
):
    view = await service.unlock(token, request.password)
    return ok(data=view, message="Shared document resolved")
