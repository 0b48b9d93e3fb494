"""
Business logic for farm records.

Every operation takes the caller's bearer token, resolves it to a
username and only matches farms connected to that user through an
``OWNS`` edge, so users never see or modify each other's farms.
Failures are logged and re-raised to the route handler.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from ..core import queries
from ..core.exceptions import NotFound, PlatformError
from ..core.graph import GraphStore
from ..core.security import TokenService
from ..schemas.common import SuccessMessage
from ..schemas.farm import FarmCreate, FarmDetail, FarmSummary, FarmUpdate, Location

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Convert a stored timestamp (ISO string or neo4j DateTime) to ``datetime``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if hasattr(value, "to_native"):
        return value.to_native()
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_date(value: datetime) -> str:
    """Human readable date, e.g. ``March 5, 2025``."""
    return f"{value:%B} {value.day}, {value.year}"


class FarmService:
    """Create, list, read, update and delete the caller's farms."""

    def __init__(self, store: GraphStore, tokens: Optional[TokenService] = None) -> None:
        self.store = store
        self.tokens = tokens or TokenService()

    async def create_farm(self, token: str, farm: FarmCreate) -> SuccessMessage:
        """Create a farm owned by the token's user.

        The ``User`` node is merged, so a user's first farm also creates
        the user.  ``createdAt`` and ``updatedAt`` start out equal.
        """
        try:
            username = self.tokens.verify_username(token)
            now = utc_now().isoformat()
            farm_id = uuid.uuid4().hex
            self.store.write(
                queries.CREATE_FARM,
                username=username,
                id=farm_id,
                farmName=farm.farmName,
                cropType=farm.cropType,
                description=farm.description,
                createdAt=now,
                updatedAt=now,
                lat=farm.location.lat if farm.location else None,
                lng=farm.location.lng if farm.location else None,
                image=farm.image,
            )
            logger.info("User %s created farm %s", username, farm_id)
            return SuccessMessage(success="Farm created successfully")
        except PlatformError:
            logger.exception("Error creating farm")
            raise

    async def get_farm_list(self, token: str) -> List[FarmSummary]:
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.read(queries.LIST_FARMS, username=username)
            farms: List[FarmSummary] = []
            for row in rows:
                created_at = parse_timestamp(row.get("createdAt")) or utc_now()
                updated_at = parse_timestamp(row.get("updatedAt")) or created_at
                farms.append(
                    FarmSummary(
                        id=row["id"],
                        farmName=row["farmName"],
                        cropType=row.get("cropType"),
                        createdAt=created_at,
                        updatedAt=updated_at,
                        formattedCreatedAt=format_date(created_at),
                        formattedUpdatedAt=format_date(updated_at),
                    )
                )
            return farms
        except PlatformError:
            logger.exception("Error fetching farm list")
            raise

    async def get_farm_data(self, token: str, farm_id: str) -> FarmDetail:
        """Return the full farm record.

        An unknown id, or the id of a farm owned by somebody else, yields
        an empty ``FarmDetail`` instead of an error; existing clients
        rely on that.
        """
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.read(queries.GET_FARM, username=username, id=farm_id)
            if not rows:
                return FarmDetail()
            props = dict(rows[0]["f"])
            created_at = parse_timestamp(props.get("createdAt")) or utc_now()
            updated_at = parse_timestamp(props.get("updatedAt")) or utc_now()
            lat, lng = props.pop("lat", None), props.pop("lng", None)
            return FarmDetail(
                id=props.get("id"),
                farmName=props.get("farmName"),
                cropType=props.get("cropType"),
                description=props.get("description"),
                owner=props.get("owner"),
                createdAt=created_at,
                updatedAt=updated_at,
                location=Location(lat=lat, lng=lng) if lat is not None and lng is not None else None,
                image=props.get("image"),
                formattedCreatedAt=format_date(created_at),
                formattedUpdatedAt=format_date(updated_at),
            )
        except PlatformError:
            logger.exception("Error fetching farm data")
            raise

    async def update_farm(self, token: str, farm: FarmUpdate) -> SuccessMessage:
        """Update name, crop type and description of an owned farm.

        Raises ``NotFound`` when the caller owns no farm with that id.
        """
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.write(
                queries.UPDATE_FARM,
                username=username,
                id=farm.id,
                farmName=farm.farmName,
                cropType=farm.cropType,
                description=farm.description,
                updatedAt=utc_now().isoformat(),
            )
            if not rows:
                raise NotFound(f"Farm {farm.id} not found")
            return SuccessMessage(success="Farm updated successfully")
        except PlatformError:
            logger.exception("Error updating farm")
            raise

    async def delete_farm(self, token: str, farm_id: str) -> SuccessMessage:
        """Delete an owned farm together with all of its relationships."""
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.write(queries.DELETE_FARM, username=username, id=farm_id)
            if not rows:
                raise NotFound(f"Farm {farm_id} not found")
            logger.info("User %s deleted farm %s", username, farm_id)
            return SuccessMessage(success="Farm deleted successfully")
        except PlatformError:
            logger.exception("Error deleting farm")
            raise
