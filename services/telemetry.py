"""Request-scoped voltage telemetry reads over a snapshot store."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Optional

from app.schemas import (
    HistoryRecord,
    VoltageAverages,
    VoltageExtremes,
    VoltageReading,
    VoltageStats,
)
from datastore.factory import build_default_store
from datastore.snapshot_store import SnapshotStore, join_path
from models.records import VOLTAGE_FIELDS
from services.aggregator import VoltageAggregator, parse_voltage, sample_from_voltages
from services.errors import ComputeFailed, FetchFailed, NotFound
from settings import get_settings

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000
DEFAULT_HISTORY_HOURS = 24.0

# Field names used by the device for the live snapshot.
_CURRENT_FIELDS = {"voltage1": "Voltage", "voltage2": "Voltage2", "voltage3": "Voltage3"}


def _stored_value(value: Any) -> Optional[str | int | float]:
    """Pass stored strings and numbers through; anything else is dropped."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return value


def _coerce_timestamp(value: Any) -> Optional[float | int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


class TelemetryService:
    """Reads voltage snapshots and shapes them into API responses."""

    def __init__(
        self,
        store: SnapshotStore,
        aggregator: VoltageAggregator,
        readings_path: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.readings_path = join_path(readings_path)
        self.history_path = join_path(readings_path, "history")
        self.clock = clock

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    def current_readings(self) -> VoltageReading:
        """Return the live voltages with their total."""
        data = self._fetch(self.readings_path, "failed to fetch voltages")
        if data is None:
            raise NotFound("no data found")
        if not isinstance(data, Mapping):
            logger.error(
                "Malformed voltage snapshot",
                extra={"path": self.readings_path, "reason": type(data).__name__},
            )
            raise FetchFailed("failed to fetch voltages")

        raw = {name: _stored_value(data.get(key)) or "0" for name, key in _CURRENT_FIELDS.items()}
        return VoltageReading(
            **raw,
            total=sum(parse_voltage(value) for value in raw.values()),
            timestamp=self.now_ms(),
        )

    def history(self, hours: float = DEFAULT_HISTORY_HOURS) -> list[HistoryRecord]:
        """Return entries newer than ``hours`` ago, oldest first."""
        time_limit = self.now_ms() - hours * MS_PER_HOUR
        data = self._fetch(self.history_path, "failed to fetch history")
        if data is None:
            return []

        entries = self._entries(data, self.history_path, "failed to fetch history")
        records: list[HistoryRecord] = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            timestamp = _coerce_timestamp(entry.get("timestamp"))
            if timestamp is None or not timestamp > time_limit:
                continue
            voltages = entry.get("voltages")
            if not isinstance(voltages, Mapping):
                voltages = {}
            records.append(
                HistoryRecord(
                    timestamp=timestamp,
                    **{name: _stored_value(voltages.get(name)) for name in VOLTAGE_FIELDS},
                )
            )

        records.sort(key=lambda record: record.timestamp)
        logger.debug(
            "History window served",
            extra={"path": self.history_path, "hours": hours, "entry_count": len(records)},
        )
        return records

    def stats(self) -> VoltageStats:
        """Return averages and extremes over the most recent history entries."""
        data = self._fetch(self.history_path, "failed to compute statistics")
        if data is None:
            raise NotFound("no historical data found")

        entries = self._entries(data, self.history_path, "failed to compute statistics")
        try:
            samples = [
                sample_from_voltages(entry.get("voltages") if isinstance(entry, Mapping) else None)
                for entry in entries
            ]
            summary = self.aggregator.aggregate(samples)
            return VoltageStats(
                averages=VoltageAverages(**summary.averages),
                max=VoltageExtremes(**summary.max_values),
                min=VoltageExtremes(**summary.min_values),
                timestamp=self.now_ms(),
            )
        except (TypeError, ValueError, ArithmeticError) as exc:
            logger.exception("Could not compute voltage statistics", extra={"path": self.history_path})
            raise ComputeFailed("failed to compute statistics") from exc

    def _fetch(self, path: str, failure_message: str) -> Optional[Any]:
        try:
            return self.store.fetch(path)
        except Exception as exc:
            logger.exception("Snapshot fetch failed", extra={"path": path})
            raise FetchFailed(failure_message) from exc

    @staticmethod
    def _entries(snapshot: Any, path: str, failure_message: str) -> list[Any]:
        """Child values in store order; sequential keys may come back as a list."""
        if isinstance(snapshot, Mapping):
            return list(snapshot.values())
        if isinstance(snapshot, list):
            return [entry for entry in snapshot if entry is not None]
        logger.error(
            "Malformed history snapshot",
            extra={"path": path, "reason": type(snapshot).__name__},
        )
        raise FetchFailed(failure_message)


@lru_cache
def build_default_service() -> TelemetryService:
    """Factory that wires the service with the configured store."""
    settings = get_settings()
    store = build_default_store()
    return TelemetryService(
        store=store,
        aggregator=VoltageAggregator(),
        readings_path=settings.readings_path,
    )
