"""Protocol helper utilities for dtxclient."""

from .objects import NSError, Object, fault_description, is_object, to_object
from .protocol import Selector, Service
from . import objects, protocol, structures

__all__ = [
    "NSError",
    "Object",
    "Selector",
    "Service",
    "fault_description",
    "is_object",
    "objects",
    "protocol",
    "structures",
    "to_object",
]
