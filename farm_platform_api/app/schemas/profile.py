"""
Pydantic models for user profiles, profile pictures and leveling.
"""

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import ValidationFailed


class UserProfile(BaseModel):
    """Properties of the ``User`` node.

    Extra properties written by other services (e-mail, display name,
    wallet address ...) are passed through unchanged.
    """

    model_config = ConfigDict(extra="allow")

    username: str
    level: int = 1
    experience: int = 0


class BufferData(BaseModel):
    """In-memory image buffer.  Empty when the user has no picture."""

    bufferData: bytes = b""


class EncodedBuffer(BaseModel):
    """JSON transport form of ``BufferData`` (base64 text)."""

    bufferData: str = Field("", examples=["iVBORw0KGgo..."])

    def to_buffer(self) -> BufferData:
        try:
            raw = base64.b64decode(self.bufferData, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationFailed("bufferData is not valid base64") from e
        return BufferData(bufferData=raw)

    @classmethod
    def from_buffer(cls, buffer: BufferData) -> "EncodedBuffer":
        return cls(bufferData=base64.b64encode(buffer.bufferData).decode("ascii"))


class LevelUpResult(BaseModel):
    newLevel: int
    remainingExperience: int
    experienceGained: int
