"""
Profile endpoints for API v1.

Profile pictures travel as ``{"bufferData": "<base64>"}`` in both
directions.  ``GET /profile/picture`` answers with an empty string
when the user has not uploaded a picture.

Experience is only awarded in-process through
``ProfileService.calculate_experience_gain``; clients have no route to it.
"""

from fastapi import APIRouter, Depends

from farm_platform_api.app.api.deps import get_profile_service
from farm_platform_api.app.core.security import get_bearer_token, get_current_username
from farm_platform_api.app.schemas.common import SuccessMessage
from farm_platform_api.app.schemas.profile import EncodedBuffer, UserProfile
from farm_platform_api.app.services.profile_service import ProfileService


router = APIRouter()


@router.get("", response_model=UserProfile)
async def get_profile(
    token: str = Depends(get_bearer_token),
    service: ProfileService = Depends(get_profile_service),
) -> UserProfile:
    return await service.get_profile(token)


@router.post("/picture", response_model=SuccessMessage)
async def upload_profile_picture(
    body: EncodedBuffer,
    token: str = Depends(get_bearer_token),
    service: ProfileService = Depends(get_profile_service),
) -> SuccessMessage:
    """Replace the authenticated user's profile picture."""
    return await service.upload_profile_pic(token, body.to_buffer())


@router.get("/picture", response_model=EncodedBuffer)
async def get_profile_picture(
    username: str = Depends(get_current_username),
    service: ProfileService = Depends(get_profile_service),
) -> EncodedBuffer:
    buffer = await service.get_profile_picture(username)
    return EncodedBuffer.from_buffer(buffer)
