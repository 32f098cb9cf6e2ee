from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class DeviceTopics:
    data: str
    status: str
    command: str

    @classmethod
    def for_device(cls, device_id: str) -> "DeviceTopics":
        base = f"devices/{device_id}"
        return cls(data=f"{base}/data", status=f"{base}/status", command=f"{base}/command")

    def subscriptions(self) -> list[str]:
        return [self.data, self.status]
