"""Native-messaging channel to the companion process.

Frames are a 4-byte little-endian length followed by a UTF-8 JSON object,
both directions, over the child process' stdin/stdout.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import struct
from collections.abc import AsyncIterator, Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

from sharelink.errors import TransportError

logger = logging.getLogger(__name__)

MAX_OUTBOUND_FRAME_BYTES = 1024 * 1024
MAX_INBOUND_FRAME_BYTES = 8_000_000


class ChannelState(str, Enum):
    ABSENT = "absent"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class Channel(Protocol):
    last_error: str | None

    async def send(self, message: dict[str, Any]) -> None: ...

    def messages(self) -> AsyncIterator[dict[str, Any]]: ...

    async def close(self) -> None: ...


ChannelOpener = Callable[[], Awaitable[Channel]]


def encode_frame(message: dict[str, Any]) -> bytes:
    raw = json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )
    if len(raw) > MAX_OUTBOUND_FRAME_BYTES:
        raise TransportError(f"Message too large: {len(raw)} bytes")
    return struct.pack("<I", len(raw)) + raw


async def read_frame(reader: asyncio.StreamReader) -> dict[str, Any] | None:
    """Read one frame, returning None at end of stream."""
    try:
        header = await reader.readexactly(4)
    except asyncio.IncompleteReadError as exc:
        if exc.partial:
            raise TransportError("Truncated frame header") from exc
        return None

    (length,) = struct.unpack("<I", header)
    if length > MAX_INBOUND_FRAME_BYTES:
        raise TransportError(f"Frame too large: {length} bytes")

    try:
        raw = await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise TransportError("Truncated frame body") from exc

    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError(f"Invalid frame payload: {exc}") from exc
    if not isinstance(obj, dict):
        raise TransportError("Frame payload is not an object")
    return obj


async def write_frame(writer: asyncio.StreamWriter, message: dict[str, Any]) -> None:
    writer.write(encode_frame(message))
    await writer.drain()


class NativeChannel:
    """Channel backed by a companion subprocess."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self._process = process
        self.last_error: str | None = None

    async def send(self, message: dict[str, Any]) -> None:
        stdin = self._process.stdin
        if stdin is None or stdin.is_closing():
            raise TransportError(
                "The message port closed before a response was received."
            )
        try:
            await write_frame(stdin, message)
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise TransportError(
                "The message port closed before a response was received."
            ) from exc

    async def messages(self) -> AsyncIterator[dict[str, Any]]:
        stdout = self._process.stdout
        if stdout is None:
            return
        while True:
            try:
                message = await read_frame(stdout)
            except TransportError as exc:
                self.last_error = str(exc)
                return
            if message is None:
                self.last_error = "Native host has exited."
                return
            yield message

    async def close(self) -> None:
        if self._process.returncode is not None:
            return
        if self._process.stdin is not None:
            self._process.stdin.close()
        try:
            await asyncio.wait_for(self._process.wait(), timeout=2.0)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                self._process.kill()
            await self._process.wait()


async def open_native_channel(command: list[str], origin: str) -> NativeChannel:
    """Launch the companion process the way a browser launches a native host."""
    if not command:
        raise TransportError("Specified native messaging host not found.")

    logger.debug("Launching companion: %s", " ".join(command))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            origin,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise TransportError(f"Failed to start native messaging host: {exc}") from exc
    return NativeChannel(process)
