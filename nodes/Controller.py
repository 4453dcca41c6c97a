"""Module for the PowerView Shade Controller node in a Polyglot v3 NodeServer.

This module defines the Controller class, the primary node of the plugin. It
holds the user configuration (default hub, timeout, per shade hub address and
shade id), owns the shade registry, runs discovery, and polls the shades.

(C) 2025 Stephen Jenkins
"""


# std libraries
import logging, re, socket

# external libraries
from udi_interface import Node, LOGGER, Custom, LOG_HANDLER

# personal libraries
from powerview.client import PowerViewHub, DEFAULT_TIMEOUT
from powerview.exceptions import PowerViewError

# Nodes
from nodes.Registry import ShadeRegistry

VERSION = '1.0.0'

PARAM_HUB = 'hubaddress'
PARAM_TIMEOUT = 'timeout'
SUFFIX_HUB = '_hubAddress'
SUFFIX_SHADE = '_shadeID'

_HOSTNAME = re.compile(r'^(?=.{1,253}$)[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?'
                       r'(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$')


def goodhost(host):
    """Checks a hub address is a dotted IPv4 address or a hostname.

    Args:
        host (str): The address to check.

    Returns:
        bool: True if the address has a valid form.
    """
    if not host:
        return False
    try:
        socket.inet_aton(host)
        return host.count('.') == 3
    except OSError:  # OSError is the modern base for socket.error
        pass
    # all-numeric labels that failed inet_aton are bad IPs, not hostnames
    if host.replace('.', '').isdigit():
        return False
    return bool(_HOSTNAME.match(host))


class Controller(Node):
    """Polyglot v3 NodeServer node for PowerView Gen 1/2 shades.

    This class represents the main controller node. It handles user
    configuration, creates and restores shade nodes, reports the number
    of shades, and refreshes shade positions on the long poll.
    """
    id = 'pvctrl'

    def __init__(self, poly, primary, address, name):
        """Initializes the Controller node.

        Args:
            poly: An instance of the Polyglot interface.
            primary: The address of the primary node.
            address: The address of this node.
            name: The name of this node.
        """
        super(Controller, self).__init__(poly, primary, address, name)
        # importand flags, timers, vars
        self.poly = poly
        self.address = address
        self.name = name
        self.hb = 0 # heartbeat
        self.hubAddress = None
        self.numNodes = 0

        # hub transport shared by all shades, and the shade registry
        self.hub = PowerViewHub()
        self.registry = ShadeRegistry(poly, address)

        # Create data storage classes
        self.Notices         = Custom(self.poly, 'notices')
        self.Parameters      = Custom(self.poly, 'customparams')
        self.Data            = Custom(self.poly, 'customdata')

        # startup completion flags
        self.handler_params_st = False
        self.handler_data_st = False

        # Subscribe to various events from the Interface class.
        # The START event is unique in that you can subscribe to
        # the start event for each node you define.

        self.poly.subscribe(self.poly.START,             self.start, address)
        self.poly.subscribe(self.poly.POLL,              self.poll)
        self.poly.subscribe(self.poly.LOGLEVEL,          self.handleLevelChange)
        self.poly.subscribe(self.poly.CONFIGDONE,        self.config_done)
        self.poly.subscribe(self.poly.CUSTOMPARAMS,      self.parameterHandler)
        self.poly.subscribe(self.poly.CUSTOMDATA,        self.dataHandler)
        self.poly.subscribe(self.poly.STOP,              self.stop)
        self.poly.subscribe(self.poly.DELETE,            self.delete)
        self.poly.subscribe(self.poly.DISCOVER,          self.discover_cmd)
        self.poly.subscribe(self.poly.ADDNODEDONE,       self.registry.node_queue)
        self.poly.subscribe(self.poly.DELNODEDONE,       self.node_removed)

        # Tell the interface we have subscribed to all the events we need.
        # Once we call ready(), the interface will start publishing data.
        self.poly.ready()

        # Tell the interface we exist.
        self.poly.addNode(self, conn_status='ST')


    def start(self):
        """Handles the startup sequence for the node.

        This method is called once by Polyglot at startup. It pushes the
        profile, restores the shade nodes kept from a previous run (their
        init lifecycle), and runs discovery.
        """
        LOGGER.info(f"Started PowerView Shade PG3 NodeServer {VERSION}")
        self.Notices.clear()
        self.Notices['hello'] = 'Plugin Start-up'
        self.setDriver('ST', 1, report = True, force = True)

        # Send the profile files to the ISY if neccessary or version changed.
        self.poly.updateProfile()

        # Send the default custom parameters documentation file to Polyglot
        self.poly.setCustomParamsDoc()

        # Initializing heartbeat
        self.heartbeat()

        self.check_driver_switched()

        restored = self.registry.restore()
        LOGGER.info(f"restored {restored} shades")

        self.discover()

        # clear inital start-up message
        if self.Notices.get('hello'):
            self.Notices.delete('hello')

        LOGGER.info(f'exit {self.name}')


    def check_driver_switched(self):
        """Detects the plugin was upgraded or switched since the last run.

        Returns:
            bool: True if the stored version differs from the running one.
        """
        previous = self.Data.get('version')
        self.Data['version'] = VERSION
        if previous is None or previous == VERSION:
            return False
        LOGGER.info(f"*** Driver changed *** {previous} -> {VERSION}")
        self.poly.updateProfile()
        return True


    def config_done(self):
        """Handles doConfigure, once Polyglot has loaded the configuration."""
        LOGGER.info('Device doConfigure lifecycle invoked')
        self.poly.addLogLevel('DEBUG_MODULES',9,'Debug + Modules')
        LOGGER.debug(f'exit')


    def dataHandler(self,data):
        """Handles the loading of custom data from Polyglot.

        Args:
            data (dict): A dictionary containing the custom data.
        """
        LOGGER.debug(f'enter: Loading data {data}')
        if data is None:
            LOGGER.warning("No custom data")
        else:
            self.Data.load(data)
            LOGGER.info(f"Custom data:{self.Data}")
        self.handler_data_st = True


    def parameterHandler(self, params):
        """Handles updates to custom parameters from the Polyglot dashboard.

        The shade nodes are told their info changed so they pick up new
        hub addresses and shade ids.

        Args:
            params (dict): A dictionary of the custom parameters.
        """
        LOGGER.debug('Loading parameters now')
        if params:
            self.Parameters.load(params)

        defaults = {PARAM_HUB: '', PARAM_TIMEOUT: str(int(DEFAULT_TIMEOUT))}
        for param, default_value in defaults.items():
            if self.Parameters.get(param) is None:
                self.Parameters[param] = default_value
        self.handler_params_st = self.checkParams()

        for address in self.registry.addresses():
            self.registry.get(address).infoChanged()


    def handleLevelChange(self, level):
        """Handles a change in the log level.

        Args:
            level (dict): A dictionary containing the new log level.
        """
        LOGGER.info(f'enter: level={level}')
        if level['level'] < 10:
            LOGGER.info("Setting basic config to DEBUG...")
            LOG_HANDLER.set_basic_config(True,logging.DEBUG)
        else:
            LOGGER.info("Setting basic config to INFO...")
            LOG_HANDLER.set_basic_config(True,logging.INFO)
        LOGGER.info(f'exit: level={level}')


    def checkParams(self):
        """Validates the default hub address and the request timeout.

        Returns:
            bool: True if parameters are valid, False otherwise.
        """
        self.Notices.delete('hubaddress')
        self.Notices.delete('timeout')
        good = True

        hub = (self.Parameters.get(PARAM_HUB) or '').strip()
        if not hub:
            self.hubAddress = None
            LOGGER.info('Default hub not defined in customParams, each shade needs its own')
        elif goodhost(hub):
            self.hubAddress = hub
            LOGGER.info(f'default hub: {hub}')
        else:
            self.hubAddress = None
            LOGGER.error(f'we have a bad hub address {hub}')
            self.Notices['hubaddress'] = 'Please note bad hub address check hubaddress in customParams'
            good = False

        try:
            timeout = float(self.Parameters.get(PARAM_TIMEOUT))
            if timeout <= 0:
                raise ValueError(timeout)
        except (TypeError, ValueError):
            LOGGER.error(f"bad timeout {self.Parameters.get(PARAM_TIMEOUT)}, using {DEFAULT_TIMEOUT}")
            self.Notices['timeout'] = f'Bad timeout in customParams, using {int(DEFAULT_TIMEOUT)}s'
            timeout = DEFAULT_TIMEOUT
            good = False
        self.hub.timeout = timeout

        return good


    def get_shade_config(self, address):
        """Returns the hub address and hub shade id configured for a shade.

        The shade's own hub address wins over the default one.

        Args:
            address (str): the shade node address.

        Returns:
            tuple: (hubAddress, shadeID), either may be None.
        """
        hub = (self.Parameters.get(address + SUFFIX_HUB) or '').strip() or self.hubAddress
        sid = (self.Parameters.get(address + SUFFIX_SHADE) or '').strip() or None
        return hub, sid


    def add_shade_config(self, address):
        """Seeds the dashboard parameters of a new shade."""
        if self.Parameters.get(address + SUFFIX_HUB) is None:
            self.Parameters[address + SUFFIX_HUB] = self.hubAddress or ''
        if self.Parameters.get(address + SUFFIX_SHADE) is None:
            self.Parameters[address + SUFFIX_SHADE] = ''
        self.Notices[address + '_config'] = f'Set {address}{SUFFIX_SHADE} in customParams'


    def remove_shade_config(self, address):
        for key in (address + SUFFIX_HUB, address + SUFFIX_SHADE):
            if self.Parameters.get(key) is not None:
                self.Parameters.delete(key)
        self.Notices.delete(address + '_config')
        self.Notices.delete(address)


    def node_removed(self, data):
        """Handles DELNODEDONE, sent after the user deletes a node.

        Args:
            data (dict): The data payload from the DELNODEDONE event,
                         containing the node's address.
        """
        address = (data or {}).get('address')
        LOGGER.info(f"enter: node removed {address}")
        if not address or address == self.address:
            return
        self.registry.removed(address)
        self.remove_shade_config(address)
        self.updateNumNodes()
        LOGGER.debug(f"Exit")


    def poll(self, flag):
        """Handles polling requests from Polyglot.

        - Short polls send the heartbeat and notice removed shades.
        - Long polls refresh the position of every shade.

        Args:
            flag (str): A string indicating the type of poll ('shortPoll' or 'longPoll').
        """
        LOGGER.debug('enter')
        if 'shortPoll' in flag:
            LOGGER.debug(f"shortPoll controller")
            self.heartbeat()
            for address in self.registry.check_removed():
                self.remove_shade_config(address)
            self.updateNumNodes()

        if 'longPoll' in flag:
            self.refreshAll()

        LOGGER.debug(f'exit')


    def refreshAll(self):
        """Refreshes every shade; one failing shade does not stop the rest.

        Returns:
            int: number of shades refreshed.
        """
        count = 0
        for address in self.registry.addresses():
            node = self.registry.get(address)
            if not node.loadConfig():
                LOGGER.debug(f"skip unconfigured shade {address}")
                continue
            if node.refresh():
                count += 1
        LOGGER.info(f"refreshed {count} of {len(self.registry.addresses())} shades")
        return count


    def query(self, command = None):
        """Refreshes all shades and reports every node's drivers.

        Args:
            command (dict, optional): The command payload from Polyglot.
                                      Defaults to None.
        """
        LOGGER.info(f"Enter {command}")
        self.refreshAll()
        nodes = self.poly.getNodes()
        for node in nodes:
            nodes[node].reportDrivers()
        LOGGER.debug(f"Exit")


    def updateProfile(self,command = None):
        """Initiates a profile update in Polyglot.

        Args:
            command (dict, optional): The command payload from Polyglot.
                                      Defaults to None.

        Returns:
            bool: The result of the profile update operation.
        """
        LOGGER.info(f"Enter {command}")
        st = self.poly.updateProfile()
        LOGGER.debug(f"Exit")
        return st


    def discover_cmd(self, command = None):
        """Handles the 'Discover' command from Polyglot.

        Args:
            command (dict, optional): The command payload from Polyglot.
                                      Defaults to None.
        """
        LOGGER.info(f"Enter {command}")
        if self.discover():
            LOGGER.info(f"Success")
        else:
            LOGGER.error(f"Failure")
        LOGGER.debug(f"Exit")


    def discover(self, registry = None):
        """Creates the first shade if the registry has none yet.

        Args:
            registry (ShadeRegistry, optional): defaults to this controller's.

        Returns:
            bool: True unless creating the shade failed.
        """
        registry = registry or self.registry
        LOGGER.info("Device discovery invoked")
        success = True
        try:
            node = registry.autoCreate()
            if node is not None:
                LOGGER.info(f"auto-created {node.address}")
        except PowerViewError as ex:
            LOGGER.error(f"Discovery Failure: {ex}")
            self.Notices['create'] = f"Could not create a shade ({ex})"
            success = False
        self.updateNumNodes()
        LOGGER.debug("Exiting discovery")
        return success


    def cmdCreateShade(self, command = None):
        """Handles the 'Create' command: always adds a new shade node."""
        LOGGER.info(f"Enter {command}")
        try:
            node = self.registry.createShade()
            LOGGER.info(f"created {node.address}")
            self.Notices.delete('create')
        except PowerViewError as ex:
            LOGGER.error(f"Create shade failed: {ex}")
            self.Notices['create'] = f"Could not create a shade ({ex})"
        self.updateNumNodes()
        LOGGER.debug(f"Exit")


    def updateNumNodes(self):
        self.numNodes = len(self.registry.addresses())
        self.setDriver('GV0', self.numNodes)


    def delete(self):
        """Handles deletion of the NodeServer from Polyglot."""
        self.setDriver('ST', 0, report = True, force = True)
        LOGGER.info('bye bye ... deleted.')


    def stop(self):
        """Handles the shutdown sequence for the node."""
        self.setDriver('ST', 0, report = True, force = True)
        self.Notices.clear()
        LOGGER.info('NodeServer stopped.')


    def heartbeat(self):
        """Sends a heartbeat signal to the ISY.

        This method alternates sending 'DON' and 'DOF' commands to the controller
        node, allowing ISY programs to monitor the NodeServer's status.
        """
        LOGGER.debug(f'heartbeat: hb={self.hb}')
        command = "DOF" if self.hb else "DON"
        self.reportCmd(command, 2)
        self.hb = not self.hb
        LOGGER.debug("Exit")


    def removeNoticesAll(self, command = None):
        """Removes all custom notices from the Polyglot dashboard.

        Args:
            command (dict, optional): The command payload from Polyglot.
                                      Defaults to None.
        """
        LOGGER.info(f"remove_notices_all: notices={self.Notices} , {command}")
        # Remove all existing notices
        self.Notices.clear()
        LOGGER.debug(f"Exit")


    # UOMs of interest:
    # 25: index
    # 107: Raw 1-byte unsigned value
    #
    # Driver controls of interest:
    # ST: Status
    # GV0: Custom Control 0
    drivers = [
        {'driver': 'ST', 'value': 1, 'uom': 25, 'name': "Controller Status"},
        {'driver': 'GV0', 'value': 0, 'uom': 107, 'name': "NumberOfShades"},
    ]


    # Commands that this node can handle.  Should match the
    # 'accepts' section of the nodedef file.
    commands = {
        'QUERY': query,
        'DISCOVER': discover_cmd,
        'CREATE': cmdCreateShade,
        'UPDATE_PROFILE': updateProfile,
        'REMOVE_NOTICES_ALL': removeNoticesAll,
    }
