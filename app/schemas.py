"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

# Stored voltages arrive either as decimal strings or as numbers.
VoltageValue = Union[StrictStr, StrictInt, StrictFloat]
Timestamp = Union[int, float]


class VoltageReading(BaseModel):
    """Current per-phase voltages and their sum."""

    voltage1: VoltageValue = "0"
    voltage2: VoltageValue = "0"
    voltage3: VoltageValue = "0"
    total: float = Field(..., description="Sum of the three phases parsed as decimals.")
    timestamp: int = Field(..., description="Response generation time in epoch milliseconds.")


class HistoryRecord(BaseModel):
    """A stored history entry flattened to the top level."""

    timestamp: Timestamp = Field(..., description="Sample time in epoch milliseconds.")
    voltage1: Optional[VoltageValue] = None
    voltage2: Optional[VoltageValue] = None
    voltage3: Optional[VoltageValue] = None


class VoltageAverages(BaseModel):
    voltage1: str
    voltage2: str
    voltage3: str


class VoltageExtremes(BaseModel):
    voltage1: Optional[float] = None
    voltage2: Optional[float] = None
    voltage3: Optional[float] = None


class VoltageStats(BaseModel):
    """Aggregates over the most recent history entries."""

    averages: VoltageAverages
    max: VoltageExtremes
    min: VoltageExtremes
    timestamp: int = Field(..., description="Response generation time in epoch milliseconds.")


class HealthStatus(BaseModel):
    status: str = "OK"
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
