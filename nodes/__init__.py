"""Node classes used by the PowerView Shade Node Server."""

from .Shade import Shade
from .Registry import ShadeRegistry
from .Controller import Controller

__all__ = [
    "Shade",
    "ShadeRegistry",
    "Controller",
]
