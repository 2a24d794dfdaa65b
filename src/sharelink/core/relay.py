"""Forwarding between the companion process and the UI surfaces."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import TYPE_CHECKING, Any

from sharelink.errors import FailureKind, MalformedMessageError
from sharelink.models import (
    ConnectedMessage,
    DevicesMessage,
    DevicesRequest,
    RosterState,
    Sender,
    parse_inbound,
)

if TYPE_CHECKING:
    from sharelink.core.projector import UIStateProjector

logger = logging.getLogger(__name__)

SendFn = Callable[[Any], Awaitable["FailureKind | None"]]


class BroadcastHub:
    """Fan-out of messages to every listening UI surface.

    Each listener owns a bounded queue. Nothing is kept for listeners that
    subscribe later, and a full queue drops the message for that listener.
    """

    def __init__(self, maxsize: int = 100) -> None:
        self._maxsize = maxsize
        self._listeners: set[asyncio.Queue[dict[str, Any]]] = set()

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(self._maxsize)
        self._listeners.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        self._listeners.discard(queue)

    @contextlib.contextmanager
    def listen(self) -> Iterator[asyncio.Queue[dict[str, Any]]]:
        queue = self.subscribe()
        try:
            yield queue
        finally:
            self.unsubscribe(queue)

    def publish(self, message: dict[str, Any]) -> int:
        delivered = 0
        for queue in list(self._listeners):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.debug(
                    "UI listener queue full, dropping '%s'", message.get("type")
                )
        return delivered


class MessageRelay:
    def __init__(
        self,
        roster: RosterState,
        send: SendFn,
        hub: BroadcastHub,
        projector: UIStateProjector,
        trusted_origin: str,
    ) -> None:
        self._roster = roster
        self._send = send
        self._hub = hub
        self._projector = projector
        self._trusted_origin = trusted_origin

    def is_trusted(self, sender: Sender | None) -> bool:
        return bool(sender and sender.url and self._trusted_origin in sender.url)

    async def forward_inbound(self, raw: Any) -> FailureKind | None:
        """Apply a companion message to the roster and rebroadcast it."""
        try:
            message = parse_inbound(raw)
        except MalformedMessageError as exc:
            logger.warning("Dropping companion message: %s", exc)
            return exc.kind

        if isinstance(message, ConnectedMessage):
            self._roster.set_connected(message.data)
            if message.data:
                await self._send(DevicesRequest())
        elif isinstance(message, DevicesMessage):
            self._roster.replace(message.data)
            logger.debug("Roster updated: %d devices", len(message.data))

        self._hub.publish(raw)
        await self._projector.refresh()
        return None

    async def forward_outbound(
        self, message: Any, sender: Sender | None
    ) -> FailureKind | None:
        if not self.is_trusted(sender):
            logger.debug("Ignoring message from untrusted sender %s", sender)
            return FailureKind.UNTRUSTED_ORIGIN
        return await self._send(message)
