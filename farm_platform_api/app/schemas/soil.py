"""
Pydantic models for soil sensor readings.

A reading is submitted by (or on behalf of) a sensor installed on one
of the user's farms.  ``createdAt`` is the time the sensor took the
measurement; the server stamps ``submittedAt`` on arrival.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SensorReadingCreate(BaseModel):
    farmName: str = Field(..., min_length=1, examples=["North Field"])
    sensorId: str = Field(..., min_length=1, examples=["npk-0042"])
    fertility: float = Field(..., examples=[312.0])
    moisture: float = Field(..., examples=[41.5])
    ph: float = Field(..., ge=0, le=14, examples=[6.4])
    temperature: float = Field(..., examples=[27.3])
    sunlight: float = Field(..., examples=[860.0])
    humidity: float = Field(..., examples=[72.0])
    cropType: str = Field(..., min_length=1, examples=["rice"])
    createdAt: Optional[datetime] = None
    interpretation: str = Field(..., examples=["Slightly acidic soil, adequate moisture."])


class SensorReading(BaseModel):
    id: str
    farmName: str
    sensorId: str
    fertility: float
    moisture: float
    ph: float
    temperature: float
    sunlight: float
    humidity: float
    cropType: Optional[str] = None
    createdAt: datetime
    submittedAt: datetime
    interpretation: Optional[str] = None
