"""Browser-side values handed to the bridge by the UI surfaces."""

from __future__ import annotations

from dataclasses import dataclass

MENU_CONTEXTS = ("audio", "page", "frame", "link", "image", "video")
MULTIPLE_DEVICES_MENU_ID = "contextMenuMultipleDevices"


@dataclass(frozen=True)
class Tab:
    id: int | None
    url: str | None = None


@dataclass(frozen=True)
class Sender:
    """Origin of a message posted from a UI surface."""

    url: str | None = None


@dataclass(frozen=True)
class MenuItem:
    id: str
    title: str
    parent_id: str | None = None
    contexts: tuple[str, ...] = MENU_CONTEXTS


@dataclass(frozen=True)
class MenuClick:
    menu_item_id: str
    page_url: str | None = None
    link_url: str | None = None
    src_url: str | None = None
    frame_url: str | None = None

    @property
    def target_url(self) -> str | None:
        return self.link_url or self.src_url or self.frame_url or self.page_url


@dataclass(frozen=True)
class Badge:
    text: str
    color: tuple[int, int, int, int] = (0, 0, 0, 0)


BADGE_CLEAR = Badge(text="", color=(0, 0, 0, 0))
BADGE_DISCONNECTED = Badge(text="⛔", color=(198, 40, 40, 255))
