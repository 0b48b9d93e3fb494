"""Schemas shared by several domains."""

from pydantic import BaseModel, Field


class SuccessMessage(BaseModel):
    """Acknowledgement returned by mutating operations."""

    success: str = Field(..., examples=["Farm created successfully"])
