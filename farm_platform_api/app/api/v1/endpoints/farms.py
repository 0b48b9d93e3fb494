"""
Farm endpoints for API v1.

Thin handlers: take the bearer token from the ``Authorization`` header,
hand it to ``FarmService`` together with the request data and return
the result.  Token verification and ownership checks happen in the
service.
"""

from typing import List

from fastapi import APIRouter, Depends

from farm_platform_api.app.api.deps import get_farm_service
from farm_platform_api.app.core.security import get_bearer_token
from farm_platform_api.app.schemas.common import SuccessMessage
from farm_platform_api.app.schemas.farm import FarmCreate, FarmDetail, FarmSummary, FarmUpdate
from farm_platform_api.app.services.farm_service import FarmService


router = APIRouter()


@router.post("/create/farm", response_model=SuccessMessage)
async def create_farm(
    farm: FarmCreate,
    token: str = Depends(get_bearer_token),
    service: FarmService = Depends(get_farm_service),
) -> SuccessMessage:
    """Create a farm owned by the authenticated user."""
    return await service.create_farm(token, farm)


@router.get("/list/farm", response_model=List[FarmSummary])
async def list_farms(
    token: str = Depends(get_bearer_token),
    service: FarmService = Depends(get_farm_service),
) -> List[FarmSummary]:
    """List the authenticated user's farms, newest first."""
    return await service.get_farm_list(token)


@router.get("/data/farm/{farm_id}", response_model=FarmDetail, response_model_exclude_none=True)
async def get_farm_data(
    farm_id: str,
    token: str = Depends(get_bearer_token),
    service: FarmService = Depends(get_farm_service),
) -> FarmDetail:
    """Return one farm.

    Responds with an empty object (not 404) when the farm does not
    exist or belongs to another user.
    """
    return await service.get_farm_data(token, farm_id)


@router.post("/update/farm", response_model=SuccessMessage)
async def update_farm(
    farm: FarmUpdate,
    token: str = Depends(get_bearer_token),
    service: FarmService = Depends(get_farm_service),
) -> SuccessMessage:
    """Change name, crop type and description of a farm."""
    return await service.update_farm(token, farm)


@router.post("/delete/farm/{farm_id}", response_model=SuccessMessage)
async def delete_farm(
    farm_id: str,
    token: str = Depends(get_bearer_token),
    service: FarmService = Depends(get_farm_service),
) -> SuccessMessage:
    """Delete a farm and all of its relationships."""
    return await service.delete_farm(token, farm_id)
