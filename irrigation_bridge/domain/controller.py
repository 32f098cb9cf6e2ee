from __future__ import annotations
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from .codec import encode_pump_command
from .models import PumpCommand, PumpCommandState, PumpDecision, Reading, ThresholdConfig
from ..core.timeutil import Clock, now_utc

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = timedelta(milliseconds=1000)
DEFAULT_TARGET_OFFSET = 5.0


def plan_auto(
    reading: Reading,
    actuator_is_on: bool,
    config: ThresholdConfig,
    target_offset: float = DEFAULT_TARGET_OFFSET,
) -> tuple[Optional[bool], list[str]]:
    """Pick the desired pump state from soil moisture. First matching rule wins.

    Returns (desired, messages); desired is None when nothing should change.
    """
    soil = reading.soil_moisture
    band = config.soil_moisture

    if soil > band.max:
        return False, [f"AUTO: soil above max → pump OFF {soil}"]

    if soil < band.min:
        return True, [f"AUTO: soil below min → pump ON {soil}"]

    if actuator_is_on:
        target = band.max - target_offset
        if soil >= target:
            return False, [f"AUTO: reached target → pump OFF {soil}"]
        return None, [f"AUTO: pumping until target {soil}"]

    return None, [f"AUTO: soil within range {soil}"]


def gate_command(
    desired: Optional[bool],
    state: PumpCommandState,
    now: datetime,
    debounce: timedelta = DEFAULT_DEBOUNCE,
) -> PumpDecision:
    """Debounce gate: suppress repeats and commands inside the debounce window."""
    if desired is None:
        return PumpDecision(state=state, command=None)

    if state.last_commanded_on == desired:
        logger.debug("pump %s suppressed: already commanded", desired)
        return PumpDecision(state=state, command=None)

    # A clock stepping backwards lands here too, so last_command_time never decreases.
    if state.last_command_time is not None and now - state.last_command_time < debounce:
        logger.debug("pump %s suppressed: inside debounce window", desired)
        return PumpDecision(state=state, command=None)

    new_state = replace(state, last_commanded_on=desired, last_command_time=now)
    command = PumpCommand(on=desired, payload=encode_pump_command(desired))
    return PumpDecision(
        state=new_state,
        command=command,
        messages=(f"CMD: Pump → {'ON' if desired else 'OFF'}",),
    )


class PumpController:
    """Holds the pump command state; everything else is delegated to the pure helpers."""

    def __init__(
        self,
        debounce: timedelta = DEFAULT_DEBOUNCE,
        target_offset: float = DEFAULT_TARGET_OFFSET,
        clock: Clock = now_utc,
    ) -> None:
        self.debounce = debounce
        self.target_offset = target_offset
        self._clock = clock
        self.state = PumpCommandState()

    def decide(
        self,
        reading: Reading,
        actuator_is_on: bool,
        config: ThresholdConfig,
    ) -> PumpDecision:
        desired, messages = plan_auto(reading, actuator_is_on, config, self.target_offset)
        gated = gate_command(desired, self.state, self._clock(), self.debounce)
        self.state = gated.state
        return replace(gated, messages=tuple(messages) + gated.messages)

    def request(self, on: bool) -> PumpDecision:
        """Manual override: skip the soil rules, keep the debounce gate."""
        gated = gate_command(on, self.state, self._clock(), self.debounce)
        self.state = gated.state
        manual = f"MANUAL: pump {'ON' if on else 'OFF'} requested"
        return replace(gated, messages=(manual,) + gated.messages)
