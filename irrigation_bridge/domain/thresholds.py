from __future__ import annotations

from .models import Alert, Bounds, Reading, ThresholdConfig


def default_thresholds() -> ThresholdConfig:
    return ThresholdConfig(
        temperature=Bounds(min=20, max=50),
        humidity=Bounds(min=60, max=95),
        soil_moisture=Bounds(min=30, max=80),
    )


def _check(name: str, value: float, bounds: Bounds) -> list[Alert]:
    # Values exactly on a bound are in range.
    out = []
    if value < bounds.min:
        out.append(Alert(name, "below", value))
    if value > bounds.max:
        out.append(Alert(name, "above", value))
    return out


def evaluate(reading: Reading, config: ThresholdConfig) -> list[Alert]:
    """Check each quantity against its bounds independently.

    No hysteresis: every out-of-range reading raises its alert again.
    """
    return (
        _check("temp", reading.temperature, config.temperature)
        + _check("hum", reading.humidity, config.humidity)
        + _check("soil", reading.soil_moisture, config.soil_moisture)
    )
