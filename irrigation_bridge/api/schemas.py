from __future__ import annotations
from typing import Any

from pydantic import BaseModel, model_validator

from ..domain.models import Bounds, ThresholdConfig


class BoundsIn(BaseModel):
    min: float
    max: float

    @model_validator(mode="after")
    def _ordered(self) -> "BoundsIn":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    def to_domain(self) -> Bounds:
        return Bounds(min=self.min, max=self.max)


class ThresholdIn(BaseModel):
    temp: BoundsIn
    humidity: BoundsIn
    soil: BoundsIn

    def to_domain(self) -> ThresholdConfig:
        return ThresholdConfig(
            temperature=self.temp.to_domain(),
            humidity=self.humidity.to_domain(),
            soil_moisture=self.soil.to_domain(),
        )


class PumpRequest(BaseModel):
    value: Any = None

    def is_on(self) -> bool:
        # Only the number 1 means ON; true, "1", missing etc. mean OFF.
        v = self.value
        return isinstance(v, (int, float)) and not isinstance(v, bool) and v == 1


class StateOut(BaseModel):
    temp: float
    humidity: float
    soil: float
    pump: bool


class LogEntryOut(BaseModel):
    time: str
    msg: str
