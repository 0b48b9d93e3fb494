"""
Pydantic models for farm records.

``FarmCreate`` and ``FarmUpdate`` describe request bodies.
``FarmSummary`` is one entry of the farm list and ``FarmDetail`` the
full record.  Both response models carry the timestamps twice: as
datetimes and as human readable strings (``"March 5, 2025"``) ready
for display.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Location(BaseModel):
    lat: float = Field(..., ge=-90, le=90, examples=[14.5995])
    lng: float = Field(..., ge=-180, le=180, examples=[120.9842])


class FarmCreate(BaseModel):
    """Schema for creating a farm."""

    farmName: str = Field(..., min_length=1, examples=["North Field"])
    cropType: str = Field(..., min_length=1, examples=["rice"])
    description: Optional[str] = Field(None, examples=["Irrigated paddy next to the river"])
    location: Optional[Location] = None
    # Image reference (URL or base64 data URI) as sent by the client.
    image: Optional[str] = None


class FarmUpdate(BaseModel):
    """Schema for updating a farm.

    Only the name, crop type and description can change.  The owner is
    fixed at creation time.
    """

    id: str = Field(..., min_length=1)
    farmName: str = Field(..., min_length=1)
    cropType: str = Field(..., min_length=1)
    description: Optional[str] = None


class FarmSummary(BaseModel):
    id: str
    farmName: str
    cropType: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime
    formattedCreatedAt: str
    formattedUpdatedAt: str


class FarmDetail(BaseModel):
    """Full farm record.

    Every field is optional: a farm that does not exist (or is owned by
    someone else) is returned as an empty record.
    """

    id: Optional[str] = None
    farmName: Optional[str] = None
    cropType: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    location: Optional[Location] = None
    image: Optional[str] = None
    formattedCreatedAt: Optional[str] = None
    formattedUpdatedAt: Optional[str] = None

    def is_empty(self) -> bool:
        return self.id is None
