"""HTTP client for the Hunter Douglas PowerView Gen 1/2 hub.

The hub exposes an unauthenticated LAN API. Only two calls are needed per
shade: a PUT carrying a motion or position command, and a GET that asks the
hub to re-read the shade's position.

(C) 2025 Stephen Jenkins
"""

# std libraries
import json

# external libraries
import requests
import udi_interface

# personal libraries
from powerview.exceptions import (
    HubConnectionError,
    HubResponseError,
    MalformedResponseError,
)
from powerview.model import NATIVE_MAX

LOGGER = udi_interface.LOGGER


"""
HunterDouglas PowerView G2 url's
from api file: [[https://github.com/sejgit/indigo-powerview/blob/master/PowerView%20API.md]]
"""
URL_G2_SHADE = 'http://{g}/api/shades/{id}'
URL_G2_SHADE_REFRESH = 'http://{g}/api/shades/{id}?refresh=true'

DEFAULT_TIMEOUT = 10.0

MOTION_JOG = 'jog'
MOTION_CALIBRATE = 'calibrate'
MOTION_STOP = 'stop'
MOTIONS = (MOTION_JOG, MOTION_CALIBRATE, MOTION_STOP)

POS_KIND_PRIMARY = 1


def motionPayload(motion):
    """Builds the body of a motion command.

    Args:
        motion (str): one of 'jog', 'calibrate' or 'stop'.

    Returns:
        dict: {"shade": {"motion": motion}}
    """
    if motion not in MOTIONS:
        raise ValueError(f"unknown motion {motion!r}")
    return {'shade': {'motion': motion}}


def positionPayload(native):
    """Builds the body of a primary position command.

    Args:
        native (int): target position on the hub's 0-65535 scale.

    Returns:
        dict: {"shade": {"positions": {"posKind1": 1, "position1": native}}}
    """
    return {
        'shade': {
            'positions': {
                'posKind1': POS_KIND_PRIMARY,
                'position1': int(native),
            }
        }
    }


def parsePosition(data):
    """Extracts the primary native position from a shade GET response.

    The position is expected at shade.positions.position1; a bare
    positions object at the top level is also accepted. Any other fields
    are ignored.

    Args:
        data (dict): decoded JSON body.

    Returns:
        int: position on the 0-65535 scale.

    Raises:
        MalformedResponseError: the position is missing, not an integer
            or out of range.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")

    shade = data.get('shade', data)
    positions = shade.get('positions') if isinstance(shade, dict) else None
    if not isinstance(positions, dict):
        raise MalformedResponseError("no positions in shade response")

    pos_kind = positions.get('posKind1')
    if pos_kind not in (None, POS_KIND_PRIMARY):
        LOGGER.warning(f"posKind1={pos_kind} is not primary, reading position1 anyway")

    position = positions.get('position1')
    # bool is an int subclass; True is not a position
    if isinstance(position, bool) or not isinstance(position, int):
        raise MalformedResponseError(f"position1 missing or not an integer: {position!r}")
    if not 0 <= position <= NATIVE_MAX:
        raise MalformedResponseError(f"position1 out of range: {position}")
    return position


class PowerViewHub:
    """Blocking transport to one or more PowerView Gen 1/2 hubs.

    The hub address is passed per call, each shade carries its own.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT):
        self.timeout = timeout

    def put(self, url: str, data: dict) -> requests.Response:
        """Performs an HTTP PUT of a JSON command.

        Args:
            url (str): the shade url.
            data (dict): the command payload.

        Returns:
            requests.Response: the hub's response; the body is not used.

        Raises:
            HubConnectionError: the request did not complete.
            HubResponseError: the hub answered with a non-2xx status.
        """
        body = json.dumps(data, separators=(',', ':'))
        headers = {
            'Content-Type': 'application/json',
            'accept': 'application/json',
        }
        try:
            res = requests.put(url, data=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            LOGGER.error(f"Error in put {url} with data {body}: {e}")
            raise HubConnectionError(f"put {url} failed: {e}") from e

        if not res.ok:
            LOGGER.error(f"Unexpected response in put {url}: {res.status_code}")
            LOGGER.debug(f"Response body: {res.text}")
            raise HubResponseError(url, res.status_code)

        LOGGER.debug(f"Put to '{url}' succeeded with status {res.status_code}, body {body}")
        return res

    def get(self, url: str) -> requests.Response:
        """Performs an HTTP GET.

        Raises:
            HubConnectionError: the request did not complete.
            HubResponseError: the hub answered with a non-2xx status.
        """
        try:
            res = requests.get(url, headers={'accept': 'application/json'}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            LOGGER.error(f"Error fetching {url}: {e}")
            raise HubConnectionError(f"get {url} failed: {e}") from e

        if res.status_code == 404:
            LOGGER.error(f"Shade or hub wrong {url}: {res.status_code}")
            raise HubResponseError(url, res.status_code)

        if not res.ok:
            LOGGER.error(f"Unexpected response fetching {url}: {res.status_code}")
            raise HubResponseError(url, res.status_code)

        LOGGER.debug(f"Get from '{url}' returned {res.status_code}, response body '{res.text}'")
        return res

    def sendCommand(self, hubAddress, shadeID, payload):
        """PUTs a command payload to a shade."""
        url = URL_G2_SHADE.format(g=hubAddress, id=shadeID)
        LOGGER.info(f"sendCommand = {url} , {payload}")
        return self.put(url, payload)

    def sendMotion(self, hubAddress, shadeID, motion):
        return self.sendCommand(hubAddress, shadeID, motionPayload(motion))

    def sendPosition(self, hubAddress, shadeID, native):
        return self.sendCommand(hubAddress, shadeID, positionPayload(native))

    def getPosition(self, hubAddress, shadeID):
        """Asks the hub to re-read a shade and returns its native position.

        Raises:
            HubConnectionError, HubResponseError: transport failures.
            MalformedResponseError: the body is not JSON or has no position.
        """
        url = URL_G2_SHADE_REFRESH.format(g=hubAddress, id=shadeID)
        res = self.get(url)
        try:
            data = res.json()
        except ValueError as e:
            LOGGER.error(f"Invalid JSON response from {url}")
            raise MalformedResponseError(f"invalid JSON from {url}") from e
        return parsePosition(data)
