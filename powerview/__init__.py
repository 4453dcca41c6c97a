"""Hunter Douglas PowerView Gen 1/2 shade hub client and adapter."""

from .exceptions import (
    PowerViewError,
    HubConnectionError,
    HubResponseError,
    MalformedResponseError,
    ShadeConfigError,
    ShadeCreateError,
)
from .model import PowerViewShade, ShadeState, fromPercent, toPercent
from .client import PowerViewHub
from .adapter import ShadeAdapter, EVENT_LEVEL, EVENT_STATE

__all__ = [
    "PowerViewError",
    "HubConnectionError",
    "HubResponseError",
    "MalformedResponseError",
    "ShadeConfigError",
    "ShadeCreateError",
    "PowerViewShade",
    "ShadeState",
    "fromPercent",
    "toPercent",
    "PowerViewHub",
    "ShadeAdapter",
    "EVENT_LEVEL",
    "EVENT_STATE",
]
