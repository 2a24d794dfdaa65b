from __future__ import annotations

import logging
from enum import Enum

# Raised when the channel drops while a write is still racing it.
BENIGN_TRANSPORT_ERRORS = (
    "Could not establish connection. Receiving end does not exist.",
    "The message port closed before a response was received.",
)


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    MALFORMED_MESSAGE = "malformed_message"
    NOT_CONNECTED = "not_connected"
    UNTRUSTED_ORIGIN = "untrusted_origin"
    INSPECTION = "inspection"
    INVALID_DEVICE = "invalid_device"
    UI_SURFACE = "ui_surface"


class BridgeError(Exception):
    kind: FailureKind = FailureKind.TRANSPORT

    def __init__(self, message: str, kind: FailureKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class TransportError(BridgeError):
    kind = FailureKind.TRANSPORT


class MalformedMessageError(BridgeError):
    kind = FailureKind.MALFORMED_MESSAGE


class InspectionError(BridgeError):
    kind = FailureKind.INSPECTION


def log_failure(logger: logging.Logger, exc: BaseException) -> None:
    """Log an error unless it is one of the known disconnect races."""
    if str(exc) in BENIGN_TRANSPORT_ERRORS:
        return
    logger.error("%s", exc)
