"""Tests for message and roster models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sharelink.errors import MalformedMessageError
from sharelink.models import (
    Action,
    ConnectedMessage,
    Device,
    DevicesMessage,
    DevicesRequest,
    RosterState,
    ShareRequest,
    UnknownMessage,
    parse_inbound,
    parse_outbound,
    to_wire,
)


def test_device_id_must_not_contain_delimiter():
    with pytest.raises(ValidationError):
        Device(id="abc:def", name="Phone")


def test_device_actions_follow_capabilities():
    assert Device(id="a", name="A", share=True, telephony=True).actions == [
        Action.SHARE,
        Action.TELEPHONY,
    ]
    assert Device(id="b", name="B", telephony=True).actions == [Action.TELEPHONY]
    assert Device(id="c", name="C").actions == []


def test_devices_message_drops_invalid_entries():
    message = parse_inbound(
        {
            "type": "devices",
            "data": [
                {"id": "good", "name": "Phone", "share": True},
                {"id": "bad:id", "name": "Broken", "share": True},
                {"name": "No id"},
            ],
        }
    )

    assert isinstance(message, DevicesMessage)
    assert [device.id for device in message.data] == ["good"]


def test_devices_message_ignores_extra_device_fields():
    message = parse_inbound(
        {
            "type": "devices",
            "data": [{"id": "p1", "name": "Pixel", "telephony": True, "type": "phone"}],
        }
    )

    assert isinstance(message, DevicesMessage)
    assert message.data[0].telephony is True


def test_parse_inbound_connected():
    message = parse_inbound({"type": "connected", "data": True})
    assert isinstance(message, ConnectedMessage)
    assert message.data is True


def test_parse_inbound_unknown_type_is_kept():
    message = parse_inbound({"type": "battery", "data": {"level": 40}, "extra": 1})
    assert isinstance(message, UnknownMessage)
    assert message.type == "battery"
    assert message.data == {"level": 40}


@pytest.mark.parametrize("raw", [{}, {"type": ""}, {"data": 1}, ["devices"], None])
def test_parse_inbound_rejects_missing_type(raw):
    with pytest.raises(MalformedMessageError):
        parse_inbound(raw)


def test_parse_inbound_rejects_bad_connected_payload():
    with pytest.raises(MalformedMessageError):
        parse_inbound({"type": "connected", "data": "maybe"})


def test_parse_outbound_share():
    message = parse_outbound(
        {
            "type": "share",
            "data": {"device": "p1", "url": "https://example.com", "action": "share"},
        }
    )
    assert isinstance(message, ShareRequest)
    assert message.data.action is Action.SHARE


def test_parse_outbound_rejects_unrecognized_type():
    with pytest.raises(MalformedMessageError):
        parse_outbound({"type": "connected", "data": True})


def test_devices_request_wire_format():
    assert to_wire(DevicesRequest()) == {"type": "devices"}


def test_roster_replace_and_reset():
    roster = RosterState()
    roster.replace([Device(id="a", name="A", share=True)])
    assert roster.connected is True
    assert roster.find("a") is not None

    roster.replace([Device(id="b", name="B")])
    assert [device.id for device in roster.devices] == ["b"]

    roster.set_connected(False)
    assert roster.connected is False
    assert roster.devices == []


def test_devices_message_drops_duplicate_ids():
    message = parse_inbound(
        {
            "type": "devices",
            "data": [
                {"id": "p1", "name": "Pixel", "share": True},
                {"id": "p1", "name": "Pixel again", "telephony": True},
                {"id": "t1", "name": "Tablet", "share": True},
            ],
        }
    )

    assert [device.name for device in message.data] == ["Pixel", "Tablet"]
