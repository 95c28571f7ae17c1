"""
Users API - presence and profile endpoints.

``/api/users`` is public; everything under ``/api/protected/`` goes through
the authentication gate first.
"""

import structlog
from fastapi import APIRouter, Depends

from formation_api.api.deps import get_current_identity, get_users_service
from formation_api.core.identity import Identity
from formation_api.schemas.common import ApiResponse
from formation_api.schemas.user import UserStatusUpdate
from formation_api.services.user_service import UsersService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Users"])


@router.get("/users")
async def find_connected_users(service: UsersService = Depends(get_users_service)):
    """Users currently online."""
    users = await service.list_connected()
    return ApiResponse.success(
        "Connected users retrieved successfully",
        [user.public_dict() for user in users],
    )


@router.get("/protected/getUserInfo")
async def get_user_data(
    identity: Identity = Depends(get_current_identity),
    service: UsersService = Depends(get_users_service),
):
    """Profile of the authenticated user."""
    user_info = await service.get_user_info_by_email(identity.email)
    return ApiResponse.success("User information retrieved successfully", user_info)


@router.get("/protected/getUserInfo/{user_id}")
async def get_user_info(user_id: str, service: UsersService = Depends(get_users_service)):
    user_info = await service.get_user_info_by_id(user_id)
    return ApiResponse.success("User information retrieved successfully", user_info)


@router.get("/protected/verifyUser")
async def verify_user(identity: Identity = Depends(get_current_identity)):
    """Cheap check that the caller's token is still accepted."""
    return ApiResponse.success("User verification successful", {"success": True})


@router.put("/protected/userStatus")
async def update_user_status(
    body: UserStatusUpdate,
    service: UsersService = Depends(get_users_service),
):
    """Mark a user online."""
    user = await service.mark_online(body.user_id)
    logger.info("user_online", user_id=user.id)
    return ApiResponse.success("User status updated successfully", user.public_dict())


@router.post("/protected/disconnect")
async def disconnect(
    identity: Identity = Depends(get_current_identity),
    service: UsersService = Depends(get_users_service),
):
    """Mark the caller offline. Nothing happens for an unknown account."""
    user = await service.mark_offline(identity.email)
    if user is None:
        return ApiResponse.success("Nothing to disconnect", None)
    logger.info("user_offline", user_id=user.id)
    return ApiResponse.success("User disconnected successfully", user.public_dict())
