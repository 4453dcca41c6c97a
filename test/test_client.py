"""Tests for the PowerView hub HTTP client.

(C) 2025 Stephen Jenkins
"""

import json

import pytest
import requests
from unittest.mock import patch

from powerview.client import (
    PowerViewHub,
    motionPayload,
    parsePosition,
    positionPayload,
)
from powerview.exceptions import (
    HubConnectionError,
    HubResponseError,
    MalformedResponseError,
)


class TestPayloads:
    """Tests for the command payload builders."""

    @pytest.mark.parametrize("motion", ["jog", "calibrate", "stop"])
    def test_motion_payload(self, motion):
        assert motionPayload(motion) == {"shade": {"motion": motion}}

    def test_motion_payload_rejects_unknown(self):
        with pytest.raises(ValueError):
            motionPayload("spin")

    def test_position_payload(self):
        assert positionPayload(24247) == {
            "shade": {"positions": {"posKind1": 1, "position1": 24247}}
        }


class TestParsePosition:
    """Tests for structural parsing of the shade GET response."""

    def test_reads_shade_positions(self):
        data = {"shade": {"id": 12345, "name": "U2hhZGU=", "batteryStrength": 180,
                          "positions": {"posKind1": 1, "position1": 30000}}}

        assert parsePosition(data) == 30000

    def test_reads_top_level_positions(self):
        assert parsePosition({"positions": {"position1": 65535}}) == 65535

    @pytest.mark.parametrize("data", [
        {"shade": {"id": 12345}},
        {"shade": {"positions": {"posKind1": 1}}},
        {"shade": {"positions": {"position1": "12"}}},
        {"shade": {"positions": {"position1": True}}},
        {"shade": {"positions": {"position1": 70000}}},
        {"shade": {"positions": {"position1": -1}}},
        {"shade": "closed"},
        [1, 2, 3],
    ])
    def test_malformed(self, data):
        with pytest.raises(MalformedResponseError):
            parsePosition(data)


class TestPowerViewHubPut:
    """Tests for PowerViewHub.put / sendCommand."""

    @patch("powerview.client.requests.put")
    def test_send_position_wire_format(self, mock_put, response):
        mock_put.return_value = response(200, b'{"shade": {}}')
        hub = PowerViewHub(timeout=5)

        hub.sendPosition("192.168.1.20", "12345", 24247)

        args, kwargs = mock_put.call_args
        assert args[0] == "http://192.168.1.20/api/shades/12345"
        assert kwargs["data"] == '{"shade":{"positions":{"posKind1":1,"position1":24247}}}'
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] == 5

    @patch("powerview.client.requests.put")
    def test_send_motion(self, mock_put, response):
        mock_put.return_value = response(200)

        PowerViewHub().sendMotion("hub.local", "7", "stop")

        assert json.loads(mock_put.call_args.kwargs["data"]) == {"shade": {"motion": "stop"}}

    @patch("powerview.client.requests.put")
    def test_connection_error_is_recoverable(self, mock_put):
        mock_put.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(HubConnectionError):
            PowerViewHub().sendMotion("10.0.0.9", "7", "jog")

    @patch("powerview.client.requests.put")
    def test_timeout_is_recoverable(self, mock_put):
        mock_put.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(HubConnectionError):
            PowerViewHub().sendPosition("10.0.0.9", "7", 0)

    @patch("powerview.client.requests.put")
    def test_bad_status(self, mock_put, response):
        mock_put.return_value = response(500, b'')

        with pytest.raises(HubResponseError) as exc:
            PowerViewHub().sendPosition("10.0.0.9", "7", 0)

        assert exc.value.status_code == 500


class TestPowerViewHubGet:
    """Tests for PowerViewHub.getPosition."""

    @patch("powerview.client.requests.get")
    def test_get_position_forces_refresh(self, mock_get, response):
        body = {"shade": {"positions": {"posKind1": 1, "position1": 32767}}}
        mock_get.return_value = response(200, json.dumps(body).encode())

        result = PowerViewHub().getPosition("192.168.1.20", "12345")

        assert result == 32767
        assert mock_get.call_args.args[0] == "http://192.168.1.20/api/shades/12345?refresh=true"

    @patch("powerview.client.requests.get")
    def test_get_position_invalid_json(self, mock_get, response):
        mock_get.return_value = response(200, b'position1: 300')

        with pytest.raises(MalformedResponseError):
            PowerViewHub().getPosition("192.168.1.20", "12345")

    @patch("powerview.client.requests.get")
    def test_get_position_not_found(self, mock_get, response):
        mock_get.return_value = response(404, b'')

        with pytest.raises(HubResponseError):
            PowerViewHub().getPosition("192.168.1.20", "99")

    @patch("powerview.client.requests.get")
    def test_get_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("no route")

        with pytest.raises(HubConnectionError):
            PowerViewHub().getPosition("192.168.1.20", "12345")
