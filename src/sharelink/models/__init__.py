"""Data models for sharelink."""

from sharelink.models.device import MENU_ID_DELIMITER, Action, Device
from sharelink.models.messages import (
    ConnectedMessage,
    DevicesMessage,
    DevicesRequest,
    InboundMessage,
    OutboundMessage,
    SharePayload,
    ShareRequest,
    UnknownMessage,
    parse_inbound,
    parse_outbound,
    to_wire,
)
from sharelink.models.roster import RosterState
from sharelink.models.ui import (
    BADGE_CLEAR,
    BADGE_DISCONNECTED,
    MENU_CONTEXTS,
    MULTIPLE_DEVICES_MENU_ID,
    Badge,
    MenuClick,
    MenuItem,
    Sender,
    Tab,
)

__all__ = [
    "BADGE_CLEAR",
    "BADGE_DISCONNECTED",
    "MENU_CONTEXTS",
    "MENU_ID_DELIMITER",
    "MULTIPLE_DEVICES_MENU_ID",
    "Action",
    "Badge",
    "ConnectedMessage",
    "Device",
    "DevicesMessage",
    "DevicesRequest",
    "InboundMessage",
    "MenuClick",
    "MenuItem",
    "OutboundMessage",
    "RosterState",
    "Sender",
    "SharePayload",
    "ShareRequest",
    "Tab",
    "UnknownMessage",
    "parse_inbound",
    "parse_outbound",
    "to_wire",
]
