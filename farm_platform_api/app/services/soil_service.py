"""
Soil analysis: storing and reading sensor measurements.

A submission creates an immutable ``Reading`` and its
``Interpretation``, hanging off the sensor that produced it:

    (User)-[:OWNS]->(Farm)-[:HAS_SENSOR]->(Sensor)
        -[:HAS_READING]->(Reading)-[:INTERPRETED_AS]->(Interpretation)

The user and sensor are merged, so the first reading of a new sensor
creates it.  A farm name the user has not registered yet gets a new
farm; a name shared by several of the user's farms resolves to the
oldest of them.  Once a reading is stored the owner receives a
``SOIL_ANALYSIS_SAVED`` notification.
"""

import logging
import uuid
from typing import List, Optional

from ..core import queries
from ..core.exceptions import PlatformError
from ..core.graph import GraphStore
from ..core.security import TokenService
from ..schemas.common import SuccessMessage
from ..schemas.notification import NotificationPayload, NotificationType
from ..schemas.soil import SensorReading, SensorReadingCreate
from .farm_service import parse_timestamp, utc_now
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class SoilService:
    def __init__(
        self,
        store: GraphStore,
        notifications: NotificationService,
        tokens: Optional[TokenService] = None,
    ) -> None:
        self.store = store
        self.notifications = notifications
        self.tokens = tokens or TokenService()

    async def save_sensor_data(self, token: str, reading: SensorReadingCreate) -> SuccessMessage:
        """Store one sensor reading with its interpretation.

        Farm lookup, the optional farm creation and the reading itself
        share one write transaction.  When the user owns several farms
        with the same name the reading goes to the oldest one.
        """
        try:
            username = self.tokens.verify_username(token)
            submitted_at = utc_now()
            created_at = reading.createdAt or submitted_at
            reading_id = uuid.uuid4().hex

            def save(tx):
                rows = tx.query(queries.FIND_SENSOR_FARM, username=username, farmName=reading.farmName)
                farm_id = rows[0]["id"] if rows else None
                if farm_id is None:
                    farm_id = uuid.uuid4().hex
                    tx.query(
                        queries.CREATE_SENSOR_FARM,
                        username=username,
                        farmId=farm_id,
                        farmName=reading.farmName,
                        cropType=reading.cropType,
                        submittedAt=submitted_at.isoformat(),
                    )
                return tx.query(
                    queries.SAVE_SENSOR_DATA,
                    username=username,
                    farmId=farm_id,
                    sensorId=reading.sensorId,
                    id=reading_id,
                    fertility=reading.fertility,
                    moisture=reading.moisture,
                    ph=reading.ph,
                    temperature=reading.temperature,
                    sunlight=reading.sunlight,
                    humidity=reading.humidity,
                    cropType=reading.cropType,
                    createdAt=created_at.isoformat(),
                    submittedAt=submitted_at.isoformat(),
                    interpretation=reading.interpretation,
                )

            self.store.write_transaction(save)
            logger.info("Stored reading %s from sensor %s", reading_id, reading.sensorId)
        except PlatformError:
            logger.exception("Error saving sensor data")
            raise

        await self.notifications.send_real_time_notification(
            username,
            NotificationPayload(
                type=NotificationType.SOIL_ANALYSIS_SAVED,
                title="Soil analysis saved",
                message=f"New reading from sensor {reading.sensorId} on {reading.farmName}",
                metadata={"farmName": reading.farmName, "sensorId": reading.sensorId},
            ),
        )
        return SuccessMessage(success="Sensor data saved successfully")

    async def get_sensor_data(self, token: str, farm_name: str) -> List[SensorReading]:
        """Readings of every sensor on the caller's farm, newest first."""
        try:
            username = self.tokens.verify_username(token)
            rows = self.store.read(
                queries.GET_SENSOR_DATA_BY_FARM, username=username, farmName=farm_name
            )
            readings = []
            for row in rows:
                props = row["reading"]
                submitted_at = parse_timestamp(props.get("submittedAt"))
                created_at = parse_timestamp(props.get("createdAt")) or submitted_at
                readings.append(
                    SensorReading(
                        id=props["id"],
                        farmName=row["farmName"],
                        sensorId=row["sensorId"],
                        fertility=props["fertility"],
                        moisture=props["moisture"],
                        ph=props["ph"],
                        temperature=props["temperature"],
                        sunlight=props["sunlight"],
                        humidity=props["humidity"],
                        cropType=props.get("cropType"),
                        createdAt=created_at,
                        submittedAt=submitted_at or created_at,
                        interpretation=row.get("interpretation"),
                    )
                )
            return readings
        except PlatformError:
            logger.exception("Error fetching sensor data")
            raise
