from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from sharelink.core.transport import read_frame, write_frame
from sharelink.errors import TransportError
from sharelink.models import Action, Device, SharePayload

logger = logging.getLogger(__name__)


def parse_device_spec(spec: str) -> Device:
    """Parse ``ID:NAME[:CAPS]`` where CAPS is a comma list of actions."""
    parts = spec.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Expected ID:NAME[:CAPS], got {spec!r}")

    caps = {Action.SHARE.value, Action.TELEPHONY.value}
    if len(parts) > 2:
        caps = {cap.strip().lower() for cap in parts[2].split(",") if cap.strip()}
        unknown = caps - {action.value for action in Action} - {"none"}
        if unknown:
            raise ValueError(f"Unknown capabilities: {', '.join(sorted(unknown))}")

    return Device(
        id=parts[0],
        name=parts[1],
        share=Action.SHARE.value in caps,
        telephony=Action.TELEPHONY.value in caps,
    )


@dataclass
class MockCompanion:
    """Fake companion process answering on a native-messaging stream."""

    devices: list[Device] = field(default_factory=list)
    announce: bool = True
    shared: list[SharePayload] = field(default_factory=list)

    def devices_message(self) -> dict[str, Any]:
        return {
            "type": "devices",
            "data": [device.model_dump(mode="json") for device in self.devices],
        }

    def handle(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        mtype = message.get("type")
        logger.debug("Received '%s' message", mtype)

        if mtype == "devices":
            return [self.devices_message()]
        if mtype == "share":
            try:
                payload = SharePayload.model_validate(message.get("data"))
            except ValidationError as exc:
                logger.warning("Invalid share request: %s", exc)
                return []
            self.shared.append(payload)
            logger.info(
                "Sharing %s to '%s' via %s",
                payload.url,
                payload.device,
                payload.action.value,
            )
            return []

        logger.warning("Unhandled message type %r", mtype)
        return []

    async def serve(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        if self.announce:
            await write_frame(writer, {"type": "connected", "data": True})

        while True:
            try:
                message = await read_frame(reader)
            except TransportError as exc:
                logger.warning("Bad frame from bridge: %s", exc)
                break
            if message is None:
                break
            for reply in self.handle(message):
                await write_frame(writer, reply)

        logger.info("Bridge closed the channel")


async def _stdio_streams() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(
        lambda: asyncio.StreamReaderProtocol(reader), sys.stdin.buffer
    )
    transport, protocol = await loop.connect_write_pipe(
        asyncio.streams.FlowControlMixin, sys.stdout.buffer
    )
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer


async def run_mock_companion(devices: list[Device], announce: bool = True) -> None:
    companion = MockCompanion(devices=devices, announce=announce)
    reader, writer = await _stdio_streams()
    try:
        await companion.serve(reader, writer)
    finally:
        writer.close()
