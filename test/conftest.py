"""Shared fixtures for the PowerView Shade tests.

(C) 2025 Stephen Jenkins
"""

import pytest
import requests


class FakeCustom(dict):
    """Stands in for udi_interface.Custom: a dict with load/delete."""

    def load(self, data):
        self.update(data)

    def delete(self, key):
        self.pop(key, None)


def make_response(status=200, body=b'{}'):
    """Builds a requests.Response the way the hub would answer."""
    res = requests.Response()
    res.status_code = status
    res._content = body
    return res


@pytest.fixture
def fake_custom():
    return FakeCustom


@pytest.fixture
def response():
    return make_response
