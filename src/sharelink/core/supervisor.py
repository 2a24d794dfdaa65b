"""Ownership of the single channel to the companion process."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from sharelink.config import ReconnectConfig
from sharelink.core.projector import UIStateProjector
from sharelink.core.relay import BroadcastHub
from sharelink.core.transport import Channel, ChannelOpener, ChannelState
from sharelink.errors import (
    BridgeError,
    FailureKind,
    MalformedMessageError,
    log_failure,
)
from sharelink.models import DevicesRequest, RosterState, parse_outbound, to_wire

logger = logging.getLogger(__name__)

DISCONNECTED_MESSAGE = {"type": "connected", "data": False}


class InboundFrame(NamedTuple):
    """A companion frame tagged with its channel. ``None`` marks end of stream."""

    channel: Channel
    message: dict[str, Any] | None


@dataclass
class ReconnectSchedule:
    """Exponential backoff between reconnect attempts, in milliseconds."""

    base_ms: int = 100
    max_ms: int = 0
    delay_ms: int = field(init=False)

    def __post_init__(self) -> None:
        self.delay_ms = self.base_ms

    @classmethod
    def from_config(cls, config: ReconnectConfig) -> ReconnectSchedule:
        return cls(base_ms=config.base_delay_ms, max_ms=config.max_delay_ms)

    def backoff(self) -> None:
        self.delay_ms *= 2
        if self.max_ms:
            self.delay_ms = min(self.delay_ms, self.max_ms)

    def reset(self) -> None:
        self.delay_ms = self.base_ms


class ChannelSupervisor:
    """Open, watch and reopen the companion channel.

    Inbound frames are pushed onto ``inbound`` in arrival order, followed by
    an end-of-stream marker when the channel ends. The consumer passes each
    one through :meth:`accept`, so a dropped channel is handled only after
    its earlier frames, and frames from a replaced channel are dropped. A
    dropped channel resets the roster, shows the disconnected badge, tells the UI and
    schedules a reconnect after the current backoff delay. If a channel stays
    open for ``stabilize_ratio`` of that delay the backoff returns to its base.
    """

    def __init__(
        self,
        roster: RosterState,
        opener: ChannelOpener,
        inbound: asyncio.Queue[InboundFrame],
        hub: BroadcastHub,
        projector: UIStateProjector,
        config: ReconnectConfig,
    ) -> None:
        self._roster = roster
        self._opener = opener
        self._inbound = inbound
        self._hub = hub
        self._projector = projector
        self._stabilize_ratio = config.stabilize_ratio
        self.schedule = ReconnectSchedule.from_config(config)

        self._state = ChannelState.ABSENT
        self._channel: Channel | None = None
        self._reader: asyncio.Task[None] | None = None
        self._reconnect_timer: asyncio.TimerHandle | None = None
        self._stabilize_timer: asyncio.TimerHandle | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._stopped = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def delay_ms(self) -> int:
        return self.schedule.delay_ms

    @property
    def timers_armed(self) -> int:
        return sum(
            1
            for timer in (self._reconnect_timer, self._stabilize_timer)
            if timer is not None and not timer.cancelled()
        )

    async def connect(self) -> None:
        if self._state is not ChannelState.ABSENT:
            logger.debug("Connect ignored, channel is %s", self._state.value)
            return

        self._stopped = False
        self._state = ChannelState.CONNECTING
        try:
            channel = await self._opener()
        except BridgeError as exc:
            self._state = ChannelState.ABSENT
            await self.on_disconnect(str(exc))
            return
        except Exception as exc:
            logger.exception("Failed to open companion channel")
            self._state = ChannelState.ABSENT
            await self.on_disconnect(str(exc) or type(exc).__name__)
            return

        if self._stopped:
            await self._close(channel)
            self._state = ChannelState.ABSENT
            return

        self._channel = channel
        self._state = ChannelState.OPEN
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None
        logger.info("Connected to companion")

        await self._projector.show_connected()
        self._arm_stabilization()
        self._reader = asyncio.create_task(self._read(channel))
        await self.send(DevicesRequest())

    async def on_disconnect(self, reason: str | None = None) -> None:
        self._roster.reset()
        channel, self._channel = self._channel, None
        if channel is not None:
            self._state = ChannelState.CLOSING
            await self._close(channel)
        self._state = ChannelState.ABSENT

        await self._projector.show_disconnected()
        self._hub.publish(dict(DISCONNECTED_MESSAGE))
        self._cancel_timers()

        if reason:
            logger.warning("Disconnected: %s", reason)
        if self._stopped:
            return

        loop = asyncio.get_running_loop()
        self._reconnect_timer = loop.call_later(
            self.schedule.delay_ms / 1000, self._reconnect
        )
        logger.debug("Reconnecting in %d ms", self.schedule.delay_ms)
        self.schedule.backoff()

    async def send(self, message: Any) -> FailureKind | None:
        try:
            outbound = parse_outbound(message)
        except MalformedMessageError as exc:
            logger.warning("Dropping outbound message: %s", exc)
            return exc.kind

        channel = self._channel
        if channel is None or self._state is not ChannelState.OPEN:
            logger.warning("Not connected, dropping '%s' message", outbound.type)
            return FailureKind.NOT_CONNECTED

        try:
            await channel.send(to_wire(outbound))
        except BridgeError as exc:
            log_failure(logger, exc)
            return exc.kind
        return None

    async def stop(self) -> None:
        self._stopped = True
        self._cancel_timers()
        reader, self._reader = self._reader, None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
        for task in list(self._pending):
            task.cancel()

        channel, self._channel = self._channel, None
        if channel is not None:
            self._state = ChannelState.CLOSING
            await self._close(channel)
        self._state = ChannelState.ABSENT
        self._roster.reset()

    async def accept(self, frame: InboundFrame) -> dict[str, Any] | None:
        """Return the frame's message if it came from the open channel.

        The end-of-stream marker of the open channel runs the disconnect path.
        """
        if frame.channel is not self._channel:
            logger.debug("Dropping frame from a closed channel")
            return None
        if frame.message is None:
            self._reader = None
            await self.on_disconnect(frame.channel.last_error)
            return None
        return frame.message

    async def _read(self, channel: Channel) -> None:
        try:
            async for message in channel.messages():
                await self._inbound.put(InboundFrame(channel, message))
        except BridgeError as exc:
            channel.last_error = str(exc)
        await self._inbound.put(InboundFrame(channel, None))

    async def _close(self, channel: Channel) -> None:
        try:
            await channel.close()
        except (BridgeError, OSError) as exc:
            logger.debug("Error closing channel: %s", exc)

    def _arm_stabilization(self) -> None:
        loop = asyncio.get_running_loop()
        delay = self.schedule.delay_ms * self._stabilize_ratio / 1000
        self._stabilize_timer = loop.call_later(delay, self._stabilized)

    def _stabilized(self) -> None:
        self._stabilize_timer = None
        logger.debug("Channel stable, resetting backoff")
        self.schedule.reset()

    def _reconnect(self) -> None:
        self._reconnect_timer = None
        task = asyncio.create_task(self.connect())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _cancel_timers(self) -> None:
        for timer in (self._stabilize_timer, self._reconnect_timer):
            if timer is not None:
                timer.cancel()
        self._stabilize_timer = None
        self._reconnect_timer = None
