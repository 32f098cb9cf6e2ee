from __future__ import annotations
import json
import logging
from dataclasses import replace
from threading import RLock
from typing import Optional

from ..domain.activity_log import ActivityLog
from ..domain.codec import (
    READING_PACKET_SIZE,
    STATUS_PACKET_SIZE,
    decode_actuator_status,
    decode_reading,
)
from ..domain.controller import PumpController
from ..domain.interfaces import CommandPublisher
from ..domain.models import DeviceState, PumpDecision, ThresholdConfig
from ..domain.thresholds import default_thresholds, evaluate
from ..domain.topics import DeviceTopics

logger = logging.getLogger(__name__)


def _compact_json(obj) -> str:
    """JSON as the dashboard log shows it: no spaces, whole numbers without '.0'."""
    def norm(v):
        if isinstance(v, dict):
            return {k: norm(x) for k, x in v.items()}
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v
    return json.dumps(norm(obj), separators=(",", ":"))


class DeviceBridge:
    """Owns the device state, thresholds, pump controller and activity log.

    Inbound packets, manual overrides and API reads all go through one lock so
    a decode → alert → control cycle never interleaves with another caller.
    """

    def __init__(
        self,
        topics: DeviceTopics,
        controller: Optional[PumpController] = None,
        log: Optional[ActivityLog] = None,
        thresholds: Optional[ThresholdConfig] = None,
        publisher: Optional[CommandPublisher] = None,
    ) -> None:
        self.topics = topics
        self.controller = controller if controller is not None else PumpController()
        self.log = log if log is not None else ActivityLog()
        self._thresholds = thresholds or default_thresholds()
        self._state = DeviceState()
        self._publisher = publisher
        self._lock = RLock()

    def attach_publisher(self, publisher: CommandPublisher) -> None:
        self._publisher = publisher

    # --- reads ---

    def snapshot(self) -> DeviceState:
        with self._lock:
            return self._state

    def thresholds(self) -> ThresholdConfig:
        with self._lock:
            return self._thresholds

    # --- inbound ---

    def handle_message(self, topic: str, payload: bytes) -> None:
        with self._lock:
            if topic == self.topics.data and len(payload) == READING_PACKET_SIZE:
                reading = decode_reading(payload)
                self._state = replace(self._state, last_reading=reading)
                self.log.add(f"Sensor: {_compact_json(reading.as_dict())}")

                for alert in evaluate(reading, self._thresholds):
                    self.log.add(alert.message)

                decision = self.controller.decide(reading, self._state.pump_on, self._thresholds)
                self._apply(decision)
                return

            if topic == self.topics.status and len(payload) == STATUS_PACKET_SIZE:
                status = decode_actuator_status(payload)
                self._state = replace(self._state, pump_on=status.pump_on)
                self.log.add(f"Status: {_compact_json({'pump': status.pump_on})}")
                return

            logger.debug("unrecognised packet on %s", topic)
            self.log.add(f"Unknown MQTT packet {len(payload)}")

    def on_connected(self) -> list[str]:
        self.log.add("MQTT connected")
        return self.topics.subscriptions()

    def on_transport_error(self, exc: BaseException) -> None:
        self.log.add(f"MQTT error: {exc}")

    # --- API-driven ---

    def replace_thresholds(self, config: ThresholdConfig) -> None:
        with self._lock:
            self._thresholds = config
            self.log.add(f"Threshold updated {_compact_json(config.as_dict())}")

    def manual_pump(self, on: bool) -> bool:
        """True when the debounce gate let a command through."""
        with self._lock:
            decision = self.controller.request(on)
            self._apply(decision)
            return decision.command is not None

    # --- effects ---

    def _apply(self, decision: PumpDecision) -> None:
        for msg in decision.messages:
            self.log.add(msg)
        if decision.command is not None:
            self._publish(decision.command.payload)

    def _publish(self, payload: bytes) -> None:
        if self._publisher is None or not self._publisher.connected:
            self.log.add("MQTT disconnected, command dropped")
            return
        try:
            self._publisher.publish(self.topics.command, payload)
        except Exception as e:
            logger.warning("Command publish failed: %s", e, exc_info=True)
            self.log.add(f"Command publish failed: {e}")
