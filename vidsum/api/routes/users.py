"""
User profile endpoints for the authenticated caller.
"""

import logging

from fastapi import APIRouter, status

from ..dependencies import CurrentUserId, UserServiceDep
from ..schemas import ApiResponse, UpdateUserRequest, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/me",
    response_model=ApiResponse[UserProfile],
    status_code=status.HTTP_200_OK,
    summary="Get my profile",
)
async def get_me(user_id: CurrentUserId, users: UserServiceDep) -> ApiResponse[UserProfile]:
    user = await users.get_user(user_id)
    return ApiResponse(data=UserProfile.from_domain(user))


@router.patch(
    "/me",
    response_model=ApiResponse[UserProfile],
    status_code=status.HTTP_200_OK,
    summary="Update my profile",
    description="Change first and/or last name. At least one field is required.",
)
async def update_me(
    body: UpdateUserRequest,
    user_id: CurrentUserId,
    users: UserServiceDep,
) -> ApiResponse[UserProfile]:
    user = await users.update_user(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return ApiResponse(
        data=UserProfile.from_domain(user),
        message="Profile updated successfully",
    )
