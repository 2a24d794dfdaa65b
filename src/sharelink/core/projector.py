"""Toolbar and context-menu state derived from the device roster."""

from __future__ import annotations

import logging
from typing import Protocol

from sharelink.config import MenuStrings, UiConfig
from sharelink.errors import BridgeError, InspectionError, log_failure
from sharelink.models import (
    BADGE_CLEAR,
    BADGE_DISCONNECTED,
    MENU_ID_DELIMITER,
    MULTIPLE_DEVICES_MENU_ID,
    Action,
    Badge,
    Device,
    MenuClick,
    MenuItem,
    RosterState,
    SharePayload,
    ShareRequest,
    Tab,
)

logger = logging.getLogger(__name__)


class Toolbar(Protocol):
    async def enable(self, tab_id: int | None) -> None: ...

    async def disable(self, tab_id: int | None = None) -> None: ...

    async def set_badge(self, badge: Badge) -> None: ...


class ContextMenu(Protocol):
    async def remove_all(self) -> None: ...

    async def create(self, item: MenuItem) -> None: ...


class Tabs(Protocol):
    async def active_tab(self) -> Tab | None:
        """Return the focused tab; raise InspectionError if it can't be read."""
        ...


def is_internal_url(url: str | None, prefixes: list[str]) -> bool:
    if not url:
        return False
    return any(url.startswith(prefix) for prefix in prefixes)


def menu_item_id(device: Device, action: Action) -> str:
    return f"{device.id}{MENU_ID_DELIMITER}{action.value}"


def parse_menu_item_id(item_id: str) -> tuple[str, Action] | None:
    """Split an actionable menu id into device id and action.

    Grouping entries (the multi-device root and per-device submenus) carry no
    action and yield None.
    """
    device_id, sep, action = item_id.partition(MENU_ID_DELIMITER)
    if not sep or not device_id:
        return None
    try:
        return device_id, Action(action)
    except ValueError:
        return None


def share_request_from_click(click: MenuClick) -> ShareRequest | None:
    parsed = parse_menu_item_id(click.menu_item_id)
    url = click.target_url
    if parsed is None or not url:
        return None
    device_id, action = parsed
    return ShareRequest(data=SharePayload(device=device_id, url=url, action=action))


def _action_title(action: Action, strings: MenuStrings) -> str:
    if action is Action.SHARE:
        return strings.share
    return strings.telephony


def _device_items(
    device: Device, strings: MenuStrings, parent_id: str | None
) -> list[MenuItem]:
    actions = device.actions
    if not actions:
        return []

    if len(actions) == 1:
        action = actions[0]
        title = strings.single_plugin.format(
            device=device.name, plugin=_action_title(action, strings)
        )
        return [
            MenuItem(id=menu_item_id(device, action), title=title, parent_id=parent_id)
        ]

    items = [MenuItem(id=device.id, title=device.name, parent_id=parent_id)]
    for action in actions:
        items.append(
            MenuItem(
                id=menu_item_id(device, action),
                title=_action_title(action, strings),
                parent_id=device.id,
            )
        )
    return items


def build_menu_items(devices: list[Device], strings: MenuStrings) -> list[MenuItem]:
    """Lay out the context menu for a roster, parents before children."""
    if not devices:
        return []
    if len(devices) == 1:
        return _device_items(devices[0], strings, parent_id=None)

    items = [MenuItem(id=MULTIPLE_DEVICES_MENU_ID, title=strings.multiple_devices)]
    for device in devices:
        items.extend(_device_items(device, strings, parent_id=MULTIPLE_DEVICES_MENU_ID))
    return items


class UIStateProjector:
    def __init__(
        self,
        roster: RosterState,
        toolbar: Toolbar,
        menu: ContextMenu,
        tabs: Tabs,
        ui: UiConfig,
        strings: MenuStrings,
    ) -> None:
        self._roster = roster
        self._toolbar = toolbar
        self._menu = menu
        self._tabs = tabs
        self._ui = ui
        self._strings = strings

    def is_internal(self, tab: Tab) -> bool:
        return is_internal_url(tab.url, self._ui.internal_url_prefixes)

    async def active_tab(self) -> Tab | None:
        try:
            return await self._tabs.active_tab()
        except InspectionError as exc:
            logger.debug("Cannot inspect active tab: %s", exc)
            return None

    async def toggle_action(self, tab: Tab | None) -> bool:
        """Enable the toolbar control for ``tab``; returns the resulting state."""
        try:
            if tab is None:
                raise InspectionError("No active tab")
            if self.is_internal(tab):
                await self._toolbar.disable(tab.id)
                return False
            await self._toolbar.enable(tab.id)
            return True
        except BridgeError as exc:
            logger.debug("Disabling toolbar: %s", exc)

        try:
            await self._toolbar.disable()
        except BridgeError as exc:
            log_failure(logger, exc)
        return False

    async def build_context_menu(self, tab: Tab | None) -> list[MenuItem]:
        """Rebuild the context menu from scratch and return what was created."""
        created: list[MenuItem] = []
        try:
            await self._menu.remove_all()
            if tab is None or self.is_internal(tab):
                return created

            for item in build_menu_items(self._roster.devices, self._strings):
                await self._menu.create(item)
                created.append(item)
        except BridgeError as exc:
            log_failure(logger, exc)
        return created

    async def refresh(self) -> list[MenuItem]:
        return await self.build_context_menu(await self.active_tab())

    async def show_connected(self) -> None:
        await self._set_badge(BADGE_CLEAR)

    async def show_disconnected(self) -> None:
        await self._set_badge(BADGE_DISCONNECTED)
        try:
            await self._menu.remove_all()
        except BridgeError as exc:
            log_failure(logger, exc)

    async def _set_badge(self, badge: Badge) -> None:
        try:
            await self._toolbar.set_badge(badge)
        except BridgeError as exc:
            log_failure(logger, exc)
