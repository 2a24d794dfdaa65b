"""Tests for native-messaging framing and host lookup."""

from __future__ import annotations

import asyncio
import json
import struct
import sys
from pathlib import Path

import pytest

from sharelink.config import CompanionConfig, Settings
from sharelink.core import Bridge
from sharelink.core.manifest import find_host_command, manifest_dirs
from sharelink.core.transport import (
    MAX_INBOUND_FRAME_BYTES,
    encode_frame,
    open_native_channel,
    read_frame,
)
from sharelink.errors import TransportError
from sharelink.models import Tab
from sharelink.surfaces import MemoryContextMenu, MemoryToolbar, StaticTabs


def _read(data: bytes):
    async def _run():
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        frames = []
        while (frame := await read_frame(reader)) is not None:
            frames.append(frame)
        return frames

    return asyncio.run(_run())


def test_frame_layout():
    frame = encode_frame({"type": "devices"})
    (length,) = struct.unpack("<I", frame[:4])
    assert length == len(frame) - 4
    assert json.loads(frame[4:]) == {"type": "devices"}


def test_reads_consecutive_frames():
    data = encode_frame({"type": "connected", "data": True}) + encode_frame(
        {"type": "devices", "data": [{"id": "é", "name": "Téléphone"}]}
    )

    frames = _read(data)

    assert frames[0] == {"type": "connected", "data": True}
    assert frames[1]["data"][0]["name"] == "Téléphone"


def test_clean_end_of_stream():
    assert _read(b"") == []


def test_truncated_body_is_an_error():
    frame = encode_frame({"type": "devices"})
    with pytest.raises(TransportError):
        _read(frame[:-2])


def test_oversized_frame_is_rejected():
    with pytest.raises(TransportError):
        _read(struct.pack("<I", MAX_INBOUND_FRAME_BYTES + 1))


def test_non_object_payload_is_rejected():
    raw = b"[1, 2]"
    with pytest.raises(TransportError):
        _read(struct.pack("<I", len(raw)) + raw)


def test_outbound_size_limit():
    with pytest.raises(TransportError):
        encode_frame({"type": "share", "data": "x" * (1024 * 1024)})


def test_open_without_command_fails():
    with pytest.raises(TransportError):
        asyncio.run(open_native_channel([], "chrome-extension://x/"))


def test_open_missing_executable_fails(tmp_path):
    missing = str(tmp_path / "no-such-host")
    with pytest.raises(TransportError):
        asyncio.run(open_native_channel([missing], "chrome-extension://x/"))


def test_find_host_command(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "org.example.host.json").write_text("{not json")
    (second / "org.example.host.json").write_text(
        json.dumps({"name": "org.example.host", "path": "/usr/bin/example-host"})
    )

    assert find_host_command("org.example.host", [first, second]) == [
        "/usr/bin/example-host"
    ]
    assert find_host_command("org.missing.host", [first, second]) == []


def test_find_host_command_skips_unreadable_dirs(tmp_path, monkeypatch):
    locked = tmp_path / "locked"
    usable = tmp_path / "usable"
    usable.mkdir()
    (usable / "org.example.host.json").write_text(
        json.dumps({"name": "org.example.host", "path": "/usr/bin/example-host"})
    )
    is_file = Path.is_file

    def _is_file(path: Path) -> bool:
        if path.parent == locked:
            raise PermissionError(13, "Permission denied", str(path))
        return is_file(path)

    monkeypatch.setattr(Path, "is_file", _is_file)

    assert find_host_command("org.example.host", [locked, usable]) == [
        "/usr/bin/example-host"
    ]


def test_manifest_dirs_by_platform(tmp_path):
    linux = manifest_dirs("linux", tmp_path)
    assert tmp_path / ".mozilla" / "native-messaging-hosts" in linux
    assert tmp_path / ".config" / "chromium" / "NativeMessagingHosts" in linux
    assert manifest_dirs("win32", tmp_path) == []


def test_bridge_talks_to_companion_process():
    command = [
        sys.executable,
        "-m",
        "sharelink",
        "mock-companion",
        "--device",
        "p1:Pixel:share",
    ]
    settings = Settings(companion=CompanionConfig(command=command))
    menu = MemoryContextMenu()

    async def _run():
        bridge = Bridge(
            settings,
            MemoryToolbar(),
            menu,
            StaticTabs(Tab(id=1, url="https://example.com/")),
        )
        with bridge.hub.listen() as queue:
            await bridge.start()
            try:
                while True:
                    message = await asyncio.wait_for(queue.get(), timeout=20)
                    if message["type"] == "devices":
                        break
                await bridge.drain()
                return [device.id for device in bridge.roster.devices]
            finally:
                await bridge.stop()

    assert asyncio.run(_run()) == ["p1"]
    assert [item.id for item in menu.items] == ["p1:share"]
