"""Module for the shade node registry of the PowerView Polyglot v3 NodeServer.

The registry owns the shade nodes of one controller: it restores nodes kept
in the Polyglot db, creates new ones, and notices when the user removed one.
It also carries the one-shot auto-create state used by discovery, so two
controllers never share it.

(C) 2025 Stephen Jenkins
"""

# std libraries
import time
from threading import Condition

# external libraries
import udi_interface

# personal libraries
from powerview.exceptions import ShadeCreateError
from utils.node_funcs import get_valid_node_name, time_node_address

# Nodes
from nodes.Shade import Shade

LOGGER = udi_interface.LOGGER

VEND_LABEL = 'PowerView Shade'
NODE_DONE_TIMEOUT = 30.0


class ShadeRegistry:
    """Shade nodes managed by one controller.

    Attributes:
        poly: The Polyglot interface object.
        primary (str): address of the controller owning the shades.
        shades (dict): address -> Shade node.
        auto_created (bool): discovery already created a shade this run.
    """

    def __init__(self, poly, primary, timeout=NODE_DONE_TIMEOUT):
        self.poly = poly
        self.primary = primary
        self.timeout = timeout
        self.shades = {}
        self.auto_created = False

        self.n_queue = []
        self.queue_condition = Condition()


    def node_queue(self, data):
        """Queues a node address to signify its creation is complete.

        This method, used in conjunction with wait_for_node_done(), provides a
        mechanism to synchronize node creation, as the addNode operation is
        asynchronous.

        Args:
            data (dict): The data payload from the ADDNODEDONE event,
                         containing the node's address.
        """
        address = data.get('address')
        if address:
            with self.queue_condition:
                self.n_queue.append(address)
                self.queue_condition.notify_all()


    def wait_for_node_done(self, address):
        """Waits for Polyglot to acknowledge a node.

        Returns:
            bool: True if the node was acknowledged before the timeout.
        """
        deadline = time.monotonic() + self.timeout
        with self.queue_condition:
            while address not in self.n_queue:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self.queue_condition.wait(timeout = min(remaining, 0.2))
            self.n_queue.remove(address)
        return True


    def addresses(self):
        return list(self.shades.keys())


    def get(self, address):
        return self.shades.get(address)


    def _add(self, node):
        try:
            self.poly.addNode(node)
        except Exception as ex:
            raise ShadeCreateError(f"Polyglot rejected node {node.address}: {ex}") from ex
        if not self.wait_for_node_done(node.address):
            raise ShadeCreateError(f"Polyglot did not confirm node {node.address}")
        self.shades[node.address] = node


    def restore(self):
        """Re-adds the shade nodes Polyglot kept from a previous run.

        Returns:
            int: number of shades restored.
        """
        count = 0
        for node in self.poly.getNodesFromDb() or []:
            address = node.get('address')
            if node.get('nodeDefId') != Shade.id or address in self.shades:
                continue
            LOGGER.info(f"restore shade {address}:{node.get('name')}")
            try:
                self._add(Shade(self.poly, self.primary, address, node.get('name', VEND_LABEL)))
                count += 1
            except ShadeCreateError as ex:
                LOGGER.error(f"restore shade {address} failed: {ex}")
        return count


    def _new_address(self):
        address = time_node_address()
        # two creations in the same millisecond
        while address in self.shades or self.poly.getNode(address):
            time.sleep(0.001)
            address = time_node_address()
        return address


    def createShade(self):
        """Creates and registers a new shade node.

        Returns:
            Shade: the new node.

        Raises:
            ShadeCreateError: Polyglot rejected or never confirmed the node.
        """
        address = self._new_address()
        name = get_valid_node_name(f"{VEND_LABEL} {len(self.shades) + 1}")
        LOGGER.info(f"Creating new device: label=<{name}>, id=<{address}>")
        node = Shade(self.poly, self.primary, address, name, new=True)
        self._add(node)
        return node


    def autoCreate(self):
        """Creates the first shade on discovery.

        At most one shade is created this way per registry, and none if a
        shade already exists.

        Returns:
            Shade or None: the new node, or None if nothing was created.
        """
        if self.auto_created or self.shades:
            LOGGER.debug(f"no auto-create, auto_created={self.auto_created}, shades={len(self.shades)}")
            return None
        node = self.createShade()
        self.auto_created = True
        return node


    def removed(self, address):
        """Forgets a shade the user removed.

        Returns:
            Shade or None: the removed node, if it was known.
        """
        node = self.shades.pop(address, None)
        if node is not None:
            node.removed()
        if not self.shades:
            LOGGER.warning('All shades removed')
        return node


    def check_removed(self):
        """Finds shades that are no longer in Polyglot.

        Returns:
            list[str]: addresses that were removed.
        """
        current = self.poly.getNodes() or {}
        gone = [address for address in self.shades if address not in current]
        for address in gone:
            self.removed(address)
        return gone
