"""Aggregation logic for voltage samples."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from models.records import VOLTAGE_FIELDS, VoltageSample


# Leading decimal prefix; trailing text such as a unit suffix is ignored.
_LEADING_DECIMAL = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_voltage(value: Any) -> float:
    """Parse the leading decimal of a stored voltage; anything else counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_DECIMAL.match(value)
        if match is None:
            return 0.0
        number = float(match.group().strip())
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_average(total: float, count: int) -> str:
    if count == 0:
        return "0.00"
    return f"{total / count:.2f}"


def sample_from_voltages(voltages: Any) -> VoltageSample:
    """Build a sample from a stored ``voltages`` object; missing fields become 0."""
    if not isinstance(voltages, Mapping):
        voltages = {}
    return VoltageSample(
        **{name: parse_voltage(voltages.get(name)) for name in VOLTAGE_FIELDS}
    )


@dataclass
class VoltageSummary:
    """Per-phase statistics for a batch of voltage samples."""

    sample_count: int = 0
    averages: Dict[str, str] = field(default_factory=dict)
    max_values: Dict[str, Optional[float]] = field(default_factory=dict)
    min_values: Dict[str, Optional[float]] = field(default_factory=dict)


class VoltageAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def __init__(self, window: int = 100) -> None:
        if window <= 0:
            raise ValueError("Aggregation window must be positive.")
        self.window = window

    def recent(self, samples: Iterable[VoltageSample]) -> list[VoltageSample]:
        """Keep the last ``window`` samples in the order they were given."""
        return list(samples)[-self.window:]

    def aggregate(self, samples: Iterable[VoltageSample]) -> VoltageSummary:
        recent = self.recent(samples)
        summary = VoltageSummary(sample_count=len(recent))
        totals = {name: 0.0 for name in VOLTAGE_FIELDS}

        for name in VOLTAGE_FIELDS:
            summary.max_values[name] = None
            summary.min_values[name] = None

        for sample in recent:
            for name in VOLTAGE_FIELDS:
                value = sample.value(name)
                totals[name] += value

                current_max = summary.max_values[name]
                if current_max is None or value > current_max:
                    summary.max_values[name] = value
                current_min = summary.min_values[name]
                if current_min is None or value < current_min:
                    summary.min_values[name] = value

        for name in VOLTAGE_FIELDS:
            summary.averages[name] = format_average(totals[name], summary.sample_count)

        return summary
