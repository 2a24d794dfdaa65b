from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "SHARELINK_CONFIG"

DEFAULT_HOST_NAME = "org.gnome.shell.extensions.gsconnect"


class CompanionConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    host_name: str = DEFAULT_HOST_NAME
    # Passed to the companion as its only argument, like a browser does.
    origin: str = "chrome-extension://sharelink/"
    # Overrides manifest lookup when set.
    command: list[str] = Field(default_factory=list)


class ReconnectConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    base_delay_ms: int = Field(default=100, gt=0)
    # 0 keeps the backoff unbounded.
    max_delay_ms: int = Field(default=60_000, ge=0)
    stabilize_ratio: float = Field(default=0.9, gt=0, le=1)


class UiConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    trusted_origin: str = "/popup.html"
    internal_url_prefixes: list[str] = Field(
        default_factory=lambda: ["chrome:", "about:"]
    )


class MenuStrings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    share: str = "Share"
    telephony: str = "Send SMS"
    multiple_devices: str = "Send To Mobile Device"
    single_plugin: str = "{device} ({plugin})"


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    companion: CompanionConfig = Field(default_factory=CompanionConfig)
    reconnect: ReconnectConfig = Field(default_factory=ReconnectConfig)
    ui: UiConfig = Field(default_factory=UiConfig)
    menu: MenuStrings = Field(default_factory=MenuStrings)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_value(value: object) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    companion = settings.companion
    reconnect = settings.reconnect
    ui = settings.ui
    menu = settings.menu
    lines = [
        "# sharelink configuration",
        "",
        "[companion]",
        f"host_name = {_toml_value(companion.host_name)}",
        f"origin = {_toml_value(companion.origin)}",
        f"command = {_toml_value(companion.command)}",
        "",
        "[reconnect]",
        f"base_delay_ms = {reconnect.base_delay_ms}",
        f"max_delay_ms = {reconnect.max_delay_ms}",
        f"stabilize_ratio = {reconnect.stabilize_ratio}",
        "",
        "[ui]",
        f"trusted_origin = {_toml_value(ui.trusted_origin)}",
        f"internal_url_prefixes = {_toml_value(ui.internal_url_prefixes)}",
        "",
        "[menu]",
        f"share = {_toml_value(menu.share)}",
        f"telephony = {_toml_value(menu.telephony)}",
        f"multiple_devices = {_toml_value(menu.multiple_devices)}",
        f"single_plugin = {_toml_value(menu.single_plugin)}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
