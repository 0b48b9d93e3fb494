"""
Soil analysis endpoints for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends

from farm_platform_api.app.api.deps import get_soil_service
from farm_platform_api.app.core.security import get_bearer_token
from farm_platform_api.app.schemas.common import SuccessMessage
from farm_platform_api.app.schemas.soil import SensorReading, SensorReadingCreate
from farm_platform_api.app.services.soil_service import SoilService


router = APIRouter()


@router.post("/data", response_model=SuccessMessage)
async def save_sensor_data(
    reading: SensorReadingCreate,
    token: str = Depends(get_bearer_token),
    service: SoilService = Depends(get_soil_service),
) -> SuccessMessage:
    """Store a sensor reading and its interpretation."""
    return await service.save_sensor_data(token, reading)


@router.get("/data/{farm_name}", response_model=List[SensorReading])
async def get_sensor_data(
    farm_name: str,
    token: str = Depends(get_bearer_token),
    service: SoilService = Depends(get_soil_service),
) -> List[SensorReading]:
    """All readings for one of the user's farms, newest first."""
    return await service.get_sensor_data(token, farm_name)
