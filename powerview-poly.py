#!/usr/bin/env python3
"""
This is a Plugin/NodeServer for Polyglot v3 written in Python3
It is an interface between HunterDouglas PowerView Gen 1/2 Shades and
Polyglot for EISY/Polisy

udi-powerview-shade-pg3 NodeServer/Plugin for EISY/Polisy

(C) 2025 Stephen Jenkins

main loop
"""

# std libraries
import sys

# external libraries
from udi_interface import Interface, LOGGER
from nodes import Controller
from nodes.Controller import VERSION

"""
1.0.0
DONE open / close / pause / set level / jog / calibrate per shade over the G2 hub api
DONE create shades from discovery (once) and from the Create command
DONE per shade hubAddress / shadeID in customParams, default hub, request timeout
DONE longPoll position refresh, hub errors reported as notices
"""


def main():
    polyglot = None
    try:
        """
        Instantiates the Interface to Polyglot.
        """
        polyglot = Interface([])
        """
        Starts MQTT and connects to Polyglot.
        """
        polyglot.start(VERSION)

        """
        Creates the Controller Node and passes in the Interface, the node's
        parent address, node's address, and name/title
        """
        control = Controller(polyglot, 'pvctrl', 'pvctrl', 'PowerView Shades')
        LOGGER.debug(f'Controller:{control}')

        """
        Sits around and does nothing forever, keeping your program running.
        """
        polyglot.runForever()
    except (KeyboardInterrupt, SystemExit):
        LOGGER.warning("Received interrupt or exit...")
        """
        Catch SIGTERM or Control-C and exit cleanly.
        """
        if polyglot is not None:
            polyglot.stop()
        sys.exit(0)
    except Exception as err:
        LOGGER.error(f'Excption: {err}', exc_info=True)
        sys.exit(0)


if __name__ == "__main__":
    main()
