from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from irrigation_bridge.domain.activity_log import ActivityLog
from irrigation_bridge.domain.controller import PumpController
from irrigation_bridge.domain.topics import DeviceTopics
from irrigation_bridge.services.bridge import DeviceBridge


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += timedelta(milliseconds=ms)


class FakePublisher:
    def __init__(self, connected: bool = True) -> None:
        self.connected = connected
        self.sent: list[tuple[str, bytes]] = []

    def publish(self, topic: str, payload: bytes) -> None:
        self.sent.append((topic, payload))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def topics() -> DeviceTopics:
    return DeviceTopics.for_device("dev1")


@pytest.fixture
def bridge(clock, publisher, topics) -> DeviceBridge:
    return DeviceBridge(
        topics=topics,
        controller=PumpController(clock=clock),
        log=ActivityLog(capacity=100, clock=clock),
        publisher=publisher,
    )


@pytest.fixture
def log_messages(bridge):
    def _read() -> list[str]:
        return [e.msg for e in bridge.log.entries()]
    return _read
