"""In-process UI surfaces.

These stand in for the browser's toolbar, context-menu and tab APIs when the
bridge runs from the command line, and record what the bridge asked for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sharelink.errors import BridgeError, FailureKind, InspectionError
from sharelink.models import BADGE_CLEAR, Badge, MenuItem, Tab

logger = logging.getLogger(__name__)


@dataclass
class MemoryToolbar:
    enabled: bool = True
    tabs: dict[int, bool] = field(default_factory=dict)
    badge: Badge = BADGE_CLEAR

    async def enable(self, tab_id: int | None) -> None:
        if tab_id is None:
            self.enabled = True
        else:
            self.tabs[tab_id] = True

    async def disable(self, tab_id: int | None = None) -> None:
        if tab_id is None:
            self.enabled = False
        else:
            self.tabs[tab_id] = False
        logger.debug("Toolbar disabled for %s", tab_id or "all tabs")

    async def set_badge(self, badge: Badge) -> None:
        self.badge = badge

    def is_enabled(self, tab_id: int | None) -> bool:
        if tab_id is None:
            return self.enabled
        return self.tabs.get(tab_id, self.enabled)


@dataclass
class MemoryContextMenu:
    items: list[MenuItem] = field(default_factory=list)

    async def remove_all(self) -> None:
        self.items = []

    async def create(self, item: MenuItem) -> None:
        ids = {existing.id for existing in self.items}
        if item.id in ids:
            raise BridgeError(
                f"Duplicate menu item id: {item.id}", FailureKind.UI_SURFACE
            )
        if item.parent_id is not None and item.parent_id not in ids:
            raise BridgeError(
                f"Unknown parent menu item: {item.parent_id}", FailureKind.UI_SURFACE
            )
        self.items.append(item)

    def children(self, parent_id: str | None) -> list[MenuItem]:
        return [item for item in self.items if item.parent_id == parent_id]


@dataclass
class StaticTabs:
    tab: Tab | None = None

    async def active_tab(self) -> Tab | None:
        if self.tab is None:
            raise InspectionError("No active tab")
        return self.tab
