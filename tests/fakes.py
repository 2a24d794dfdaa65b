"""Test doubles for the companion channel."""

from __future__ import annotations

import asyncio
from typing import Any

from sharelink.core import MockCompanion
from sharelink.errors import TransportError


class FakeChannel:
    def __init__(self, companion: MockCompanion | None = None) -> None:
        self.companion = companion
        self.sent: list[dict[str, Any]] = []
        self.last_error: str | None = None
        self.closed = False
        self.fail_with: str | None = None
        self._frames: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    async def send(self, message: dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise TransportError(self.fail_with)
        self.sent.append(message)
        if self.companion is not None:
            for reply in self.companion.handle(message):
                self.push(reply)

    async def messages(self):
        while True:
            frame = await self._frames.get()
            if frame is None:
                return
            yield frame

    async def close(self) -> None:
        self.closed = True
        self._frames.put_nowait(None)

    def push(self, frame: dict[str, Any]) -> None:
        self._frames.put_nowait(frame)

    def drop(self, reason: str = "Native host has exited") -> None:
        self.last_error = reason
        self._frames.put_nowait(None)


class FakeOpener:
    def __init__(self, companion: MockCompanion | None = None) -> None:
        self.companion = companion
        self.channels: list[FakeChannel] = []
        self.fail = False
        self.error: Exception | None = None
        self.attempts = 0

    async def __call__(self) -> FakeChannel:
        self.attempts += 1
        if self.error is not None:
            raise self.error
        if self.fail:
            raise TransportError("Specified native messaging host not found.")
        channel = FakeChannel(self.companion)
        self.channels.append(channel)
        return channel

    @property
    def last(self) -> FakeChannel:
        return self.channels[-1]


class StreamWriterStub:
    def __init__(self) -> None:
        self.buffer = bytearray()

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        return None


async def settle(rounds: int = 5) -> None:
    """Let scheduled callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
