"""sharelink - browser-side bridge to a device-sharing companion process."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import (
    Bridge,
    BroadcastHub,
    ChannelSupervisor,
    MessageRelay,
    UIStateProjector,
)
from .errors import BridgeError, FailureKind
from .models import Action, Device, RosterState

__all__ = [
    "Action",
    "Bridge",
    "BridgeError",
    "BroadcastHub",
    "ChannelSupervisor",
    "Device",
    "FailureKind",
    "MessageRelay",
    "RosterState",
    "Settings",
    "UIStateProjector",
    "__version__",
    "get_settings",
]

__version__ = version("sharelink")
