"""Messages exchanged with the companion process.

Inbound frames are parsed into a closed set of message kinds. Anything with a
``type`` that is not understood becomes an ``UnknownMessage`` and is forwarded
to the UI untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from sharelink.errors import MalformedMessageError
from sharelink.models.device import Action, Device

logger = logging.getLogger(__name__)


class ConnectedMessage(BaseModel):
    type: Literal["connected"] = "connected"
    data: bool


class DevicesMessage(BaseModel):
    type: Literal["devices"] = "devices"
    data: list[Device] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _drop_invalid_devices(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value

        devices: list[Device] = []
        seen: set[str] = set()
        for entry in value:
            try:
                device = Device.model_validate(entry)
            except ValidationError as exc:
                logger.warning("Dropping invalid device %r: %s", entry, exc)
                continue
            if device.id in seen:
                logger.warning("Dropping duplicate device id %r", device.id)
                continue
            seen.add(device.id)
            devices.append(device)
        return devices


class UnknownMessage(BaseModel):
    model_config = {"extra": "allow"}

    type: str
    data: Any = None


class DevicesRequest(BaseModel):
    type: Literal["devices"] = "devices"


class SharePayload(BaseModel):
    device: str
    url: str
    action: Action


class ShareRequest(BaseModel):
    type: Literal["share"] = "share"
    data: SharePayload


InboundMessage = Union[ConnectedMessage, DevicesMessage, UnknownMessage]
OutboundMessage = Union[DevicesRequest, ShareRequest]

_INBOUND: dict[str, type[BaseModel]] = {
    "connected": ConnectedMessage,
    "devices": DevicesMessage,
}

_OUTBOUND: dict[str, type[BaseModel]] = {
    "devices": DevicesRequest,
    "share": ShareRequest,
}


def _message_type(raw: Any) -> str:
    if not isinstance(raw, dict):
        raise MalformedMessageError(f"Expected an object, got {type(raw).__name__}")
    mtype = raw.get("type")
    if not isinstance(mtype, str) or not mtype:
        raise MalformedMessageError("Message has no 'type'")
    return mtype


def parse_inbound(raw: Any) -> InboundMessage:
    mtype = _message_type(raw)
    model = _INBOUND.get(mtype, UnknownMessage)
    try:
        return model.model_validate(raw)  # type: ignore[return-value]
    except ValidationError as exc:
        raise MalformedMessageError(f"Invalid '{mtype}' message: {exc}") from exc


def parse_outbound(raw: Any) -> OutboundMessage:
    if isinstance(raw, (DevicesRequest, ShareRequest)):
        return raw
    mtype = _message_type(raw)
    model = _OUTBOUND.get(mtype)
    if model is None:
        raise MalformedMessageError(f"Unrecognized outbound message type '{mtype}'")
    try:
        return model.model_validate(raw)  # type: ignore[return-value]
    except ValidationError as exc:
        raise MalformedMessageError(f"Invalid '{mtype}' message: {exc}") from exc


def to_wire(message: BaseModel) -> dict[str, Any]:
    return message.model_dump(mode="json")
