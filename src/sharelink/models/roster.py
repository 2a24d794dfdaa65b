from __future__ import annotations

from dataclasses import dataclass, field

from sharelink.models.device import Device


@dataclass
class RosterState:
    """Connection flag and device list shared by the bridge components."""

    connected: bool = False
    devices: list[Device] = field(default_factory=list)

    def reset(self) -> None:
        self.connected = False
        self.devices = []

    def set_connected(self, connected: bool) -> None:
        self.connected = connected
        if not connected:
            self.devices = []

    def replace(self, devices: list[Device]) -> None:
        # a device list implies a responsive companion; lists are never merged
        self.connected = True
        self.devices = list(devices)

    def find(self, device_id: str) -> Device | None:
        for device in self.devices:
            if device.id == device_id:
                return device
        return None
