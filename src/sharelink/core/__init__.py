from __future__ import annotations

from .bridge import Bridge, native_opener
from .manifest import find_host_command, manifest_dirs
from .mock_companion import MockCompanion, parse_device_spec, run_mock_companion
from .projector import (
    UIStateProjector,
    build_menu_items,
    is_internal_url,
    parse_menu_item_id,
    share_request_from_click,
)
from .relay import BroadcastHub, MessageRelay
from .supervisor import ChannelSupervisor, InboundFrame, ReconnectSchedule
from .transport import ChannelState, NativeChannel, open_native_channel

__all__ = [
    "Bridge",
    "BroadcastHub",
    "ChannelState",
    "ChannelSupervisor",
    "InboundFrame",
    "MessageRelay",
    "MockCompanion",
    "NativeChannel",
    "ReconnectSchedule",
    "UIStateProjector",
    "build_menu_items",
    "find_host_command",
    "is_internal_url",
    "manifest_dirs",
    "native_opener",
    "open_native_channel",
    "parse_device_spec",
    "parse_menu_item_id",
    "run_mock_companion",
    "share_request_from_click",
]
