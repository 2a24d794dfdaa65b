"""Device models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, field_validator

MENU_ID_DELIMITER = ":"


class Action(str, Enum):
    """Command a device accepts from the context menu."""

    SHARE = "share"
    TELEPHONY = "telephony"


class Device(BaseModel):
    """Paired remote device as reported by the companion process."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: str
    name: str
    share: bool = False
    telephony: bool = False

    @field_validator("id")
    @classmethod
    def _reject_delimiter(cls, value: str) -> str:
        # menu identifiers are "<id>:<action>" and get split on the delimiter
        if not value:
            raise ValueError("device id must not be empty")
        if MENU_ID_DELIMITER in value:
            raise ValueError(
                f"device id {value!r} must not contain {MENU_ID_DELIMITER!r}"
            )
        return value

    @property
    def actions(self) -> list[Action]:
        actions = []
        if self.share:
            actions.append(Action.SHARE)
        if self.telephony:
            actions.append(Action.TELEPHONY)
        return actions
