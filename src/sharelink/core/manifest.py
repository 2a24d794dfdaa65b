"""Lookup of native-messaging host manifests."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def manifest_dirs(platform: str | None = None, home: Path | None = None) -> list[Path]:
    platform = platform or sys.platform
    home = home or Path.home()

    if platform == "darwin":
        base = home / "Library" / "Application Support"
        return [
            base / "Google" / "Chrome" / "NativeMessagingHosts",
            base / "Chromium" / "NativeMessagingHosts",
            base / "BraveSoftware" / "Brave-Browser" / "NativeMessagingHosts",
            base / "Microsoft Edge" / "NativeMessagingHosts",
            base / "Mozilla" / "NativeMessagingHosts",
        ]
    if platform.startswith("linux"):
        cfg = home / ".config"
        return [
            cfg / "google-chrome" / "NativeMessagingHosts",
            cfg / "chromium" / "NativeMessagingHosts",
            cfg / "BraveSoftware" / "Brave-Browser" / "NativeMessagingHosts",
            cfg / "microsoft-edge" / "NativeMessagingHosts",
            home / ".mozilla" / "native-messaging-hosts",
            Path("/etc/opt/chrome/native-messaging-hosts"),
            Path("/etc/chromium/native-messaging-hosts"),
            Path("/usr/lib/mozilla/native-messaging-hosts"),
        ]
    return []


def find_host_command(host_name: str, dirs: list[Path] | None = None) -> list[str]:
    """Return the executable registered for ``host_name``, or [] if none is."""
    for directory in dirs if dirs is not None else manifest_dirs():
        path = directory / f"{host_name}.json"
        try:
            if not path.is_file():
                continue
            manifest = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable manifest %s: %s", path, exc)
            continue

        executable = manifest.get("path") if isinstance(manifest, dict) else None
        if not isinstance(executable, str) or not executable:
            logger.warning("Manifest %s has no 'path'", path)
            continue
        logger.debug("Using native host manifest %s", path)
        return [executable]
    return []
