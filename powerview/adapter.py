"""ShadeAdapter: shade commands in, hub requests and state events out.

(C) 2025 Stephen Jenkins
"""

# external libraries
import udi_interface

# personal libraries
from powerview.client import (
    MOTION_CALIBRATE,
    MOTION_JOG,
    MOTION_STOP,
    PowerViewHub,
)
from powerview.exceptions import ShadeConfigError
from powerview.model import (
    LEVEL_MAX,
    LEVEL_MIN,
    clampLevel,
    fromPercent,
    toPercent,
)

LOGGER = udi_interface.LOGGER

EVENT_LEVEL = 'shadeLevel'
EVENT_STATE = 'windowShade'


class ShadeAdapter:
    """Translates the shade command vocabulary into hub requests.

    Every command blocks until the hub has accepted it; the mechanical
    movement is not awaited. After each change of the cached position two
    events are emitted, level first, then state.

    Errors from the hub are raised as PowerViewError subclasses and leave the
    cached level and state untouched.

    Args:
        hub (PowerViewHub): transport to the hub.
        emit (callable, optional): sink called as emit(shade, event, value)
            with event EVENT_LEVEL or EVENT_STATE.
    """

    def __init__(self, hub=None, emit=None):
        self.hub = hub if hub is not None else PowerViewHub()
        self.emit = emit

    def _target(self, shade):
        if not shade.hubAddress:
            raise ShadeConfigError(f"{shade.address}: hubAddress not configured")
        if not shade.shadeID:
            raise ShadeConfigError(f"{shade.address}: shadeID not configured")
        return shade.hubAddress, shade.shadeID

    def report(self, shade):
        """Emits the shade's cached level and state."""
        LOGGER.debug(f"report {shade}")
        if self.emit is None:
            return
        self.emit(shade, EVENT_LEVEL, shade.level)
        self.emit(shade, EVENT_STATE, shade.state)

    def open(self, shade):
        return self.setLevel(shade, LEVEL_MAX)

    def close(self, shade):
        return self.setLevel(shade, LEVEL_MIN)

    def setLevel(self, shade, pct):
        """Moves the shade to a percent position.

        Args:
            shade (PowerViewShade): the shade to move.
            pct (int): target level; values outside 0-100 are clamped.

        Returns:
            int: the level that was sent.
        """
        level = clampLevel(pct)
        if level != float(pct):
            LOGGER.warning(f"{shade.address}: level {pct} constrained to {level}")
        hubAddress, shadeID = self._target(shade)
        self.hub.sendPosition(hubAddress, shadeID, fromPercent(level))
        shade.setLevel(level)
        self.report(shade)
        return level

    def pause(self, shade):
        """Stops the shade, then reads where it came to rest."""
        hubAddress, shadeID = self._target(shade)
        self.hub.sendMotion(hubAddress, shadeID, MOTION_STOP)
        return self.refreshPosition(shade)

    def jog(self, shade):
        """Nudges the shade so it can be identified.

        The shade returns to where it was, so the cached level and state
        are kept and nothing is emitted.
        """
        hubAddress, shadeID = self._target(shade)
        self.hub.sendMotion(hubAddress, shadeID, MOTION_JOG)

    def calibrate(self, shade):
        hubAddress, shadeID = self._target(shade)
        self.hub.sendMotion(hubAddress, shadeID, MOTION_CALIBRATE)
        return self.refreshPosition(shade)

    def refreshPosition(self, shade):
        """Reads the shade position from the hub and updates the cache.

        Returns:
            int: the refreshed level.

        Raises:
            MalformedResponseError: no usable position in the response; the
                cached level and state are unchanged.
        """
        hubAddress, shadeID = self._target(shade)
        native = self.hub.getPosition(hubAddress, shadeID)
        level = toPercent(native)
        LOGGER.info(f"{shade.address}: position1={native} level={level}")
        shade.setLevel(level)
        self.report(shade)
        return level

    def createShade(self, registry):
        """Creates a new shade through the owning registry.

        Raises:
            ShadeCreateError: the host did not accept the new shade.
        """
        return registry.createShade()
