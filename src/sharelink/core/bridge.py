"""Wiring of supervisor, relay and projector behind browser event handlers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from sharelink.config import Settings
from sharelink.core.manifest import find_host_command
from sharelink.core.projector import (
    ContextMenu,
    Tabs,
    Toolbar,
    UIStateProjector,
    share_request_from_click,
)
from sharelink.core.relay import BroadcastHub, MessageRelay
from sharelink.core.supervisor import ChannelSupervisor, InboundFrame
from sharelink.core.transport import Channel, ChannelOpener, open_native_channel
from sharelink.errors import BridgeError, FailureKind, log_failure
from sharelink.models import MenuClick, RosterState, Sender, Tab

logger = logging.getLogger(__name__)


def native_opener(settings: Settings) -> ChannelOpener:
    """Build an opener that launches the configured companion process."""
    companion = settings.companion

    async def _open() -> Channel:
        command = list(companion.command) or find_host_command(companion.host_name)
        return await open_native_channel(command, companion.origin)

    return _open


class Bridge:
    """The browser-side bridge process.

    Companion frames flow supervisor -> ``inbound`` queue -> relay, one at a
    time in arrival order. The end of a channel travels the same queue, so
    the disconnect is handled after the frames that preceded it.
    UI surfaces listen on ``hub``.
    """

    def __init__(
        self,
        settings: Settings,
        toolbar: Toolbar,
        menu: ContextMenu,
        tabs: Tabs,
        opener: ChannelOpener | None = None,
        hub: BroadcastHub | None = None,
    ) -> None:
        self.settings = settings
        self.roster = RosterState()
        self.hub = hub or BroadcastHub()
        self.inbound: asyncio.Queue[InboundFrame] = asyncio.Queue()

        self.projector = UIStateProjector(
            self.roster, toolbar, menu, tabs, settings.ui, settings.menu
        )
        self.supervisor = ChannelSupervisor(
            self.roster,
            opener or native_opener(settings),
            self.inbound,
            self.hub,
            self.projector,
            settings.reconnect,
        )
        self.relay = MessageRelay(
            self.roster,
            self.supervisor.send,
            self.hub,
            self.projector,
            settings.ui.trusted_origin,
        )
        self._consumer: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(self._consume())
        await self.projector.toggle_action(await self.projector.active_tab())
        await self.supervisor.connect()

    async def stop(self) -> None:
        await self.supervisor.stop()
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer

    async def run_forever(self) -> None:
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    async def drain(self) -> None:
        """Wait until every queued companion frame has been handled."""
        await self.inbound.join()

    async def on_tab_activated(self, tab: Tab | None) -> None:
        await self.projector.toggle_action(tab)
        await self.projector.build_context_menu(tab)

    async def on_tab_updated(self, tab: Tab | None, url_changed: bool) -> None:
        if not url_changed:
            return
        await self.on_tab_activated(tab)

    async def on_ui_message(
        self, message: Any, sender: Sender | None
    ) -> FailureKind | None:
        return await self.relay.forward_outbound(message, sender)

    async def on_menu_clicked(self, click: MenuClick) -> FailureKind | None:
        request = share_request_from_click(click)
        if request is None:
            logger.debug("Menu item %r is not actionable", click.menu_item_id)
            return FailureKind.MALFORMED_MESSAGE
        return await self.supervisor.send(request)

    async def _consume(self) -> None:
        while True:
            frame = await self.inbound.get()
            try:
                message = await self.supervisor.accept(frame)
                if message is not None:
                    await self.relay.forward_inbound(message)
            except BridgeError as exc:
                log_failure(logger, exc)
            finally:
                self.inbound.task_done()
