"""Shade entity and position scale for PowerView Gen 1/2 hubs.

The hub reports and accepts shade positions on a native 0-65535 scale,
0 being fully closed. The home-automation side works in whole percent.
Both conversions floor, so a percent value sent to the hub and read back
can come back one lower than it went out:

    toPercent(fromPercent(37)) == 36

The round trip is exact at 0 and 100 and never more than 1 below the input.

(C) 2025 Stephen Jenkins
"""

# std libraries
from enum import IntEnum


NATIVE_MAX = 65535
LEVEL_MIN = 0
LEVEL_MAX = 100


class ShadeState(IntEnum):
    """windowShade state; the values are the ST driver index."""
    CLOSED = 0
    OPEN = 1
    UNKNOWN = 2


def fromPercent(pct):
    """Converts a 0-100 percent to the hub's native 0-65535 position."""
    return int(pct) * NATIVE_MAX // LEVEL_MAX


def toPercent(native):
    """Converts a native 0-65535 hub position to a 0-100 percent."""
    return int(native) * LEVEL_MAX // NATIVE_MAX


def clampLevel(pct):
    """Constrains a percent to [0, 100].

    Args:
        pct (int or str or float): requested level.

    Returns:
        int: the level, clamped.

    Raises:
        ValueError: pct is not a number.
        OverflowError: pct is infinite.
    """
    return max(LEVEL_MIN, min(LEVEL_MAX, int(float(pct))))


def stateForLevel(level):
    return ShadeState.CLOSED if level == 0 else ShadeState.OPEN


class PowerViewShade:
    """Last known state of one physical shade.

    Attributes:
        address (str): local identity of the shade (the node address).
        hubAddress (str): host or IP of the hub driving the shade.
        shadeID (str): identifier the hub assigned to the shade.
        level (int): last known position, 0-100.
        state (ShadeState): closed iff level is 0, otherwise open; unknown
            until the first command or position read.
    """

    def __init__(self, address, hubAddress=None, shadeID=None):
        self.address = address
        self.hubAddress = hubAddress
        self.shadeID = shadeID
        self.level = 0
        self.state = ShadeState.UNKNOWN

    def setLevel(self, level):
        self.level = level
        self.state = stateForLevel(level)

    def reset(self):
        self.level = 0
        self.state = ShadeState.UNKNOWN

    def __repr__(self):
        return (f"PowerViewShade({self.address!r}, hub={self.hubAddress!r}, "
                f"id={self.shadeID!r}, level={self.level}, state={self.state.name})")
