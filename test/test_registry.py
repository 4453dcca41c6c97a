"""Tests for the shade node registry.

(C) 2025 Stephen Jenkins
"""

import pytest
from unittest.mock import Mock

from nodes.Registry import ShadeRegistry
from nodes.Shade import Shade
from powerview.exceptions import ShadeCreateError


@pytest.fixture
def poly(fake_custom):
    """Polyglot mock that acknowledges every added node."""
    poly = Mock()
    poly.START = "START"
    poly.db_getNodeDrivers = Mock(return_value=[])
    poly.getNodesFromDb = Mock(return_value=[])

    controller = Mock()
    controller.Notices = fake_custom()
    controller.get_shade_config = Mock(return_value=(None, None))
    poly.getNode = Mock(side_effect=lambda address: controller if address == "pvctrl" else None)
    poly.controller = controller
    return poly


@pytest.fixture
def registry(poly):
    registry = ShadeRegistry(poly, "pvctrl", timeout=0.5)
    poly.addNode = Mock(side_effect=lambda node: registry.node_queue({'address': node.address}))
    return registry


class TestNodeQueue:
    """Tests for the ADDNODEDONE handshake."""

    def test_wait_returns_after_ack(self, registry):
        registry.node_queue({'address': 'pvs1'})

        assert registry.wait_for_node_done('pvs1') is True
        assert registry.n_queue == []

    def test_wait_times_out(self, poly):
        registry = ShadeRegistry(poly, "pvctrl", timeout=0.05)

        assert registry.wait_for_node_done('pvs1') is False

    def test_queue_ignores_missing_address(self, registry):
        registry.node_queue({})

        assert registry.n_queue == []


class TestCreateShade:
    """Tests for createShade."""

    def test_creates_and_registers(self, registry, poly):
        node = registry.createShade()

        assert isinstance(node, Shade)
        assert node.new is True
        assert node.address.startswith("pvs")
        assert len(node.address) <= 14
        assert registry.get(node.address) is node
        poly.addNode.assert_called_once_with(node)

    def test_always_creates_another(self, registry):
        first = registry.createShade()
        second = registry.createShade()

        assert first.address != second.address
        assert sorted(registry.addresses()) == sorted([first.address, second.address])
        assert second.name == "PowerView Shade 2"

    def test_rejected_node_raises(self, registry, poly):
        poly.addNode.side_effect = RuntimeError("db locked")

        with pytest.raises(ShadeCreateError):
            registry.createShade()

        assert registry.addresses() == []

    def test_unconfirmed_node_raises(self, poly):
        registry = ShadeRegistry(poly, "pvctrl", timeout=0.05)
        poly.addNode = Mock()

        with pytest.raises(ShadeCreateError):
            registry.createShade()

        assert registry.addresses() == []


class TestAutoCreate:
    """Tests for the one-shot discovery creation."""

    def test_creates_exactly_one(self, registry):
        node = registry.autoCreate()

        assert node is not None
        assert registry.auto_created is True
        assert registry.autoCreate() is None
        assert registry.addresses() == [node.address]

    def test_skipped_when_shades_exist(self, registry):
        registry.createShade()

        assert registry.autoCreate() is None
        assert registry.auto_created is False
        assert len(registry.addresses()) == 1

    def test_not_repeated_after_removal(self, registry):
        node = registry.autoCreate()
        registry.removed(node.address)

        assert registry.autoCreate() is None

    def test_failure_allows_retry(self, registry, poly):
        poly.addNode.side_effect = RuntimeError("db locked")

        with pytest.raises(ShadeCreateError):
            registry.autoCreate()

        assert registry.auto_created is False

    def test_flag_is_per_registry(self, registry, poly):
        registry.autoCreate()
        other = ShadeRegistry(poly, "pvctrl", timeout=0.5)

        assert other.auto_created is False


class TestRestore:
    """Tests for restoring nodes kept by Polyglot."""

    def test_restores_shade_nodes_only(self, registry, poly):
        poly.getNodesFromDb.return_value = [
            {'address': 'pvctrl', 'nodeDefId': 'pvctrl', 'name': 'PowerView Shades'},
            {'address': 'pvs1', 'nodeDefId': Shade.id, 'name': 'Den'},
            {'address': 'pvs2', 'nodeDefId': Shade.id, 'name': 'Kitchen'},
        ]

        assert registry.restore() == 2
        assert sorted(registry.addresses()) == ['pvs1', 'pvs2']
        assert registry.get('pvs1').name == 'Den'
        assert registry.get('pvs1').new is False

    def test_restore_is_idempotent(self, registry, poly):
        poly.getNodesFromDb.return_value = [{'address': 'pvs1', 'nodeDefId': Shade.id, 'name': 'Den'}]

        registry.restore()

        assert registry.restore() == 0

    def test_restore_failure_is_logged(self, registry, poly):
        poly.getNodesFromDb.return_value = [{'address': 'pvs1', 'nodeDefId': Shade.id, 'name': 'Den'}]
        poly.addNode.side_effect = RuntimeError("db locked")

        assert registry.restore() == 0
        assert registry.addresses() == []


class TestRemoved:
    """Tests for removed and check_removed."""

    def test_removed_forgets_node(self, registry):
        node = registry.createShade()

        assert registry.removed(node.address) is node
        assert registry.get(node.address) is None

    def test_removed_unknown(self, registry):
        assert registry.removed('pvs404') is None

    def test_check_removed(self, registry, poly):
        first = registry.createShade()
        second = registry.createShade()
        poly.getNodes = Mock(return_value={'pvctrl': poly.controller, second.address: second})

        assert registry.check_removed() == [first.address]
        assert registry.addresses() == [second.address]

    def test_check_removed_nothing_gone(self, registry, poly):
        node = registry.createShade()
        poly.getNodes = Mock(return_value={node.address: node})

        assert registry.check_removed() == []
