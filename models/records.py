"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass

VOLTAGE_FIELDS = ("voltage1", "voltage2", "voltage3")


@dataclass(slots=True)
class VoltageSample:
    """One history entry with every phase parsed to a number."""

    voltage1: float = 0.0
    voltage2: float = 0.0
    voltage3: float = 0.0

    def value(self, field: str) -> float:
        return getattr(self, field)
