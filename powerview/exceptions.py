"""Exceptions raised while talking to a PowerView hub.

(C) 2025 Stephen Jenkins
"""


class PowerViewError(Exception):
    """Base class for all recoverable PowerView errors."""


class HubConnectionError(PowerViewError):
    """The hub could not be reached (refused, timed out, bad host)."""


class HubResponseError(PowerViewError):
    """The hub answered with a non-success HTTP status."""

    def __init__(self, url, status_code):
        super().__init__(f"unexpected status {status_code} from {url}")
        self.url = url
        self.status_code = status_code


class MalformedResponseError(PowerViewError):
    """The hub answered but the body did not carry a usable position."""


class ShadeConfigError(PowerViewError):
    """hubAddress or shadeID is not configured for the shade."""


class ShadeCreateError(PowerViewError):
    """The host refused, or never acknowledged, a new shade node."""
