"""
Business logic for user profiles.

Covers reading the profile, replacing and retrieving the profile
picture and the experience/leveling system.  The leveling arithmetic
lives in plain functions (``required_experience``, ``experience_gain``,
``apply_experience``) so it can be reasoned about without a database.
"""

import logging
import math
import time
import uuid
from typing import Optional

from ..core import queries
from ..core.exceptions import NotFound, PlatformError, ValidationFailed
from ..core.graph import GraphStore, GraphTransaction
from ..core.security import TokenService
from ..schemas.common import SuccessMessage
from ..schemas.profile import BufferData, LevelUpResult, UserProfile

logger = logging.getLogger(__name__)

# Magic numbers of the image formats clients upload.
_IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)


def detect_image_format(data: bytes) -> str:
    for signature, name in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return name
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return "bin"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def required_experience(level: int) -> int:
    """Experience needed to advance from ``level`` to ``level + 1``."""
    return _round_half_up(level ** 1.8 + level * 4)


def experience_gain(level: int, accuracy: float) -> int:
    """Experience earned for one round played at ``level``.

    ``accuracy`` is the fraction of correct answers (0.0 - 1.0).  It is
    multiplied by 100 before scaling the base gain, so the raw value is
    almost always far above the cap; the clamp to 5%-20% of the level's
    requirement is what effectively decides the gain.
    """
    if math.isnan(accuracy) or not 0 <= accuracy <= 1:
        raise ValidationFailed(f"accuracy must be between 0 and 1, got {accuracy}")
    required = required_experience(level)
    base_gain = math.floor(10 * level ** 1.8)
    raw_gain = base_gain * (accuracy * 100)
    min_gain = math.floor(required * 0.05)
    max_gain = math.floor(required * 0.2)
    return math.floor(max(min_gain, min(max_gain, raw_gain)))


def apply_experience(level: int, experience: int, gained: int) -> LevelUpResult:
    """Add ``gained`` experience and level up as many times as it allows.

    The remainder after the last level-up is carried over.
    """
    current_level = max(1, level)
    current_experience = experience + gained
    while True:
        required = required_experience(current_level)
        if current_experience < required:
            break
        current_experience -= required
        current_level += 1
        logger.debug(
            "Level up: level=%s required=%s remaining=%s",
            current_level, required, current_experience,
        )
    return LevelUpResult(
        newLevel=current_level,
        remainingExperience=current_experience,
        experienceGained=gained,
    )


class ProfileService:
    """Profile data, profile pictures and experience for one user."""

    def __init__(self, store: GraphStore, tokens: Optional[TokenService] = None) -> None:
        self.store = store
        self.tokens = tokens or TokenService()

    async def get_profile(self, token: str) -> UserProfile:
        """Return the properties of the caller's ``User`` node.

        Raises ``NotFound`` if the user has never been written to the
        graph.
        """
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.read(queries.GET_USER, username=username)
            if not rows:
                raise NotFound("User not found")
            return UserProfile(**rows[0]["u"])
        except PlatformError:
            logger.exception("Error getting profile")
            raise

    async def upload_profile_pic(self, token: str, buffer: BufferData) -> SuccessMessage:
        """Replace the caller's profile picture.

        The old ``ProfilePic`` node is deleted and a new one created in
        the same write transaction, so a user never ends up with two
        pictures or with none after a failed upload.
        """
        try:
            username = self.tokens.verify_username(token)
            image = buffer.bufferData
            if not image:
                raise ValidationFailed("Profile picture is empty")

            def replace(tx: GraphTransaction) -> None:
                tx.query(queries.DELETE_PROFILE_PIC, username=username)
                tx.query(
                    queries.CREATE_PROFILE_PIC,
                    username=username,
                    id=uuid.uuid4().hex,
                    image=image,
                    uploadedAt=int(time.time() * 1000),
                    fileFormat=detect_image_format(image),
                    fileSize=len(image),
                )

            self.store.write_transaction(replace)
            logger.info("Profile picture of %s replaced (%d bytes)", username, len(image))
            return SuccessMessage(success="Profile picture upload successful")
        except PlatformError:
            logger.exception("Error updating profile picture")
            raise

    async def get_profile_picture(self, username: str) -> BufferData:
        """Return the user's picture, or an empty buffer if there is none."""
        try:
            rows = self.store.read(queries.GET_PROFILE_PIC, username=username)
        except PlatformError:
            logger.exception("Error retrieving profile picture")
            raise
        if rows and rows[0].get("image"):
            return BufferData(bufferData=bytes(rows[0]["image"]))
        return BufferData()

    async def calculate_experience_gain(self, username: str, accuracy: float) -> LevelUpResult:
        """Award experience for a round and persist the new level.

        Reading the current stats, computing the gain and writing the
        result happen in one write transaction.  The first statement
        locks the user node, so concurrent calls for the same user are
        serialized instead of overwriting each other.
        """
        try:
            # Validate before opening a transaction.
            experience_gain(1, accuracy)

            def level_up(tx: GraphTransaction) -> LevelUpResult:
                rows = tx.query(queries.LOCK_USER_STATS, username=username)
                if not rows:
                    raise NotFound(f"User with username '{username}' not found.")
                level = int(rows[0]["level"])
                experience = int(rows[0]["experience"])
                result = apply_experience(level, experience, experience_gain(max(1, level), accuracy))
                tx.query(
                    queries.SAVE_USER_STATS,
                    username=username,
                    level=result.newLevel,
                    experience=result.remainingExperience,
                )
                return result

            result = self.store.write_transaction(level_up)
            logger.info(
                "User %s gained %d experience (level %d, %d remaining)",
                username, result.experienceGained, result.newLevel, result.remainingExperience,
            )
            return result
        except PlatformError:
            logger.exception("Error calculating experience gain")
            raise
