"""Sensor data ingestion."""

from __future__ import annotations

from typing import List

import structlog

from autosentience.exceptions import WorkflowInputError
from autosentience.schemas import SensorReadingInput, SensorSnapshot
from autosentience.store.base import Store

logger = structlog.get_logger(__name__)


class IngestService:
    def __init__(self, store: Store) -> None:
        self.store = store

    def ingest(self, reading: SensorReadingInput) -> SensorSnapshot:
        snapshot = self.store.insert_snapshot(reading)
        present = sum(1 for v in reading.readings().values() if v is not None)
        logger.info(
            "sensor_data_ingested",
            vehicle_id=snapshot.vehicle_id,
            sensor_reading_id=snapshot.id,
            readings=present,
        )
        return snapshot

    def recent(self, vehicle_id: str, limit: int = 10) -> List[SensorSnapshot]:
        if not vehicle_id:
            raise WorkflowInputError("vehicle_id parameter is required")
        return self.store.recent_snapshots(vehicle_id, limit=limit)
