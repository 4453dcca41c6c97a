"""Module for the Hunter Douglas PowerView Shade node in a Polyglot v3 NodeServer.

This module defines the Shade class, one node per physical shade driven by a
PowerView Gen 1/2 hub. The node receives lifecycle callbacks and capability
commands from Polyglot, hands them to a ShadeAdapter, and reports the
resulting level and open/closed state back as drivers.

(C) 2025 Stephen Jenkins
"""

# external libraries
import udi_interface

# personal libraries
from powerview.adapter import ShadeAdapter, EVENT_LEVEL, EVENT_STATE
from powerview.capabilities import SHADE_COMMANDS, buildCommands
from powerview.exceptions import PowerViewError
from powerview.model import PowerViewShade

LOGGER = udi_interface.LOGGER


class Shade(udi_interface.Node):
    """Polyglot v3 NodeServer node for a PowerView Gen 1/2 Shade.

    The shade's hub address and hub shade id are not stored on the node;
    they are read from the controller's custom parameters before every
    command so that edits in the dashboard apply immediately.

    Attributes:
        id (str): The Polyglot node ID for this shade type.
        shade (PowerViewShade): last known level and state.
        adapter (ShadeAdapter): sends commands to the hub.
        new (bool): True until the first start of a node created by the
            registry, which then runs deviceAdded.
    """
    id = 'pvshadeid'

    def __init__(self, poly, primary, address, name, new=False):
        """Initializes the Shade node.

        Args:
            poly: The Polyglot interface object.
            primary: The address of the primary controller node.
            address: The address of this shade node.
            name: The name of this shade node.
            new (bool): the node was just created, not restored from the db.
        """
        super().__init__(poly, primary, address, name)
        self.poly = poly
        self.primary = primary
        self.controller = poly.getNode(self.primary)
        self.address = address
        self.name = name
        self.new = new

        self.lpfx = f'{address}:{name}'
        self.shade = PowerViewShade(address)
        self.adapter = ShadeAdapter(self.controller.hub, emit=self.emitEvent)

        self.poly.subscribe(self.poly.START, self.start, address)


    def start(self):
        """Handles the init lifecycle, called once Polyglot has added the node."""
        LOGGER.info(f"{self.lpfx}> INITIALIZING")
        self.loadConfig()
        if self.new:
            self.deviceAdded()
        LOGGER.debug(f"Exit {self.lpfx}")


    def deviceAdded(self):
        """Handles the added lifecycle of a freshly created shade.

        Seeds the shade's parameters so they show up in the dashboard, and
        reports the shade as unknown at level 0.
        """
        LOGGER.info(f"{self.lpfx}> ADDED")
        self.new = False
        self.controller.add_shade_config(self.address)
        self.shade.reset()
        self.adapter.report(self.shade)


    def infoChanged(self):
        """Handles a change of the shade's parameters in the dashboard."""
        LOGGER.debug(f"Info changed {self.lpfx}")
        self.loadConfig()


    def removed(self):
        """Handles removal of the node by the user; nothing follows."""
        LOGGER.warning(f"{self.lpfx}> removed")


    def loadConfig(self):
        """Reads hubAddress and shadeID from the controller parameters.

        Returns:
            bool: True if both are set.
        """
        hub, sid = self.controller.get_shade_config(self.address)
        changed = (hub, sid) != (self.shade.hubAddress, self.shade.shadeID)
        self.shade.hubAddress = hub
        self.shade.shadeID = sid
        if changed:
            LOGGER.info(f"{self.lpfx} hubAddress={hub} shadeID={sid}")
            self.setDriver('GV0', int(sid) if str(sid).isdigit() else 0, report=True, force=True)
        return bool(hub and sid)


    def emitEvent(self, shade, event, value):
        """Reports an adapter event as a driver."""
        if event == EVENT_LEVEL:
            self.setDriver('GV2', value, report=True, force=True)
        elif event == EVENT_STATE:
            self.setDriver('ST', int(value), report=True, force=True)
        else:
            LOGGER.error(f"unknown event {event}={value} {self.lpfx}")


    def _run(self, label, action, *args):
        """Runs an adapter operation, turning hub errors into a notice.

        Returns:
            bool: True if the operation completed.
        """
        self.loadConfig()
        try:
            action(self.shade, *args)
        except PowerViewError as ex:
            LOGGER.error(f"cmd Shade {label} failed {self.lpfx}: {ex}")
            self.controller.Notices[self.address] = f"{self.name}: {label} failed ({ex})"
            return False
        self.controller.Notices.delete(self.address)
        return True


    def refresh(self):
        """Reads the position from the hub; used by query and longPoll."""
        return self._run('Refresh', self.adapter.refreshPosition)


    def cmdOpen(self, command = None):
        """Handles windowShade.open."""
        LOGGER.info(f'cmd Shade Open {self.lpfx}, {command}')
        if self._run('Open', self.adapter.open):
            self.reportCmd("OPEN", 2)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdClose(self, command = None):
        """Handles windowShade.close."""
        LOGGER.info(f'cmd Shade Close {self.lpfx}, {command}')
        if self._run('Close', self.adapter.close):
            self.reportCmd("CLOSE", 2)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdPause(self, command = None):
        """Handles windowShade.pause: stop, then read the resting position."""
        LOGGER.info(f'cmd Shade Pause {self.lpfx}, {command}')
        if self._run('Pause', self.adapter.pause):
            self.reportCmd("STOP", 2)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdSetLevel(self, command = None):
        """Handles windowShadeLevel.setShadeLevel.

        Args:
            command (dict, optional): The command payload from Polyglot, the
                level in 'value' or in query['SETLVL.uom51'].
        """
        LOGGER.info(f'cmdSetLevel {self.lpfx}, {command}')

        if not command:
            LOGGER.error("No level given")
            return

        value = command.get('value')
        if value is None:
            value = command.get('query', {}).get('SETLVL.uom51')
        if value is None:
            LOGGER.error(f"Shade SetLevel --nothing to set-- {self.lpfx}")
            return

        try:
            ok = self._run('SetLevel', self.adapter.setLevel, value)
        except (ValueError, OverflowError) as ex:
            LOGGER.error(f"Shade SetLevel bad level {value!r} {self.lpfx}: {ex}")
            return
        if ok:
            self.reportCmd("SETLVL", self.shade.level, 51)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdJog(self, command = None):
        """Handles jog.push; level and state are left as they were."""
        LOGGER.info(f'cmd Shade Jog {self.lpfx}, {command}')
        if self._run('Jog', self.adapter.jog):
            self.reportCmd("JOG", 2)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdCalibrate(self, command = None):
        """Handles calibrate.push: calibrate, then read the position."""
        LOGGER.info(f'cmd Shade CALIBRATE {self.lpfx}, {command}')
        if self._run('Calibrate', self.adapter.calibrate):
            self.reportCmd("CALIBRATE", 2)
        LOGGER.debug(f"Exit {self.lpfx}")


    def cmdCreateAnother(self, command = None):
        """Handles createAnotherDevice.push: always adds a new shade node."""
        LOGGER.info(f'cmd Shade Create another {self.lpfx}, {command}')
        try:
            node = self.adapter.createShade(self.controller.registry)
            LOGGER.info(f"created {node.address}")
        except PowerViewError as ex:
            LOGGER.error(f"cmd Shade Create another failed {self.lpfx}: {ex}")
            self.controller.Notices['create'] = f"Could not create a new shade ({ex})"
        LOGGER.debug(f"Exit {self.lpfx}")


    def query(self, command = None):
        """Refreshes the position and reports all drivers to the ISY."""
        LOGGER.info(f'cmd Query {self.lpfx}, {command}')
        self.refresh()
        self.reportDrivers()
        LOGGER.debug(f"Exit {self.lpfx}")


    # UOMs:
    # 25: index
    # 51: percent
    # 56: raw value
    #
    # Driver controls:
    # ST: Status (windowShade: 0 closed, 1 open, 2 unknown)
    # GV0: Custom Control 0 (Shade Id on the hub)
    # GV2: Custom Control 2 (Shade Level)
    drivers = [
        {'driver': 'ST', 'value': 2, 'uom': 25, 'name': "Shade State"},
        {'driver': 'GV0', 'value': 0, 'uom': 56, 'name': "Shade Id"},
        {'driver': 'GV2', 'value': 0, 'uom': 51, 'name': "Shade Level"},
        ]


"""
Commands that this node can handle.
Should match the 'accepts' section of the nodedef file.
"""
Shade.commands = buildCommands(Shade, SHADE_COMMANDS)
