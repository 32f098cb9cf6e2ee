from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Reading:
    temperature: float
    humidity: float
    soil_moisture: float

    def as_dict(self) -> dict:
        return {"temp": self.temperature, "humidity": self.humidity, "soil": self.soil_moisture}


@dataclass(frozen=True)
class ActuatorState:
    pump_on: bool


@dataclass(frozen=True)
class Bounds:
    min: float
    max: float


@dataclass(frozen=True)
class ThresholdConfig:
    temperature: Bounds
    humidity: Bounds
    soil_moisture: Bounds

    def as_dict(self) -> dict:
        return {
            "temp": {"min": self.temperature.min, "max": self.temperature.max},
            "humidity": {"min": self.humidity.min, "max": self.humidity.max},
            "soil": {"min": self.soil_moisture.min, "max": self.soil_moisture.max},
        }


@dataclass(frozen=True)
class DeviceState:
    last_reading: Reading = field(default_factory=lambda: Reading(0.0, 0.0, 0.0))
    pump_on: bool = False


@dataclass(frozen=True)
class PumpCommandState:
    last_commanded_on: Optional[bool] = None
    last_command_time: Optional[datetime] = None


@dataclass(frozen=True)
class PumpCommand:
    on: bool
    payload: bytes


@dataclass(frozen=True)
class PumpDecision:
    """Outcome of one pass through the controller; no side effects applied yet."""
    state: PumpCommandState
    command: Optional[PumpCommand]
    messages: tuple[str, ...] = ()


@dataclass(frozen=True)
class Alert:
    quantity: str  # "temp" | "hum" | "soil"
    direction: str  # "below" | "above"
    value: float

    @property
    def message(self) -> str:
        return f"Alert: {self.quantity} {self.direction} {self.value}"


@dataclass(frozen=True)
class LogEntry:
    time: datetime
    msg: str
