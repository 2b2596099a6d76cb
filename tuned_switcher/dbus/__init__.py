#!/usr/bin/env python3
"""
D-Bus client support for tuned-switcher.

This package holds the only code that talks to the bus: a session wrapping a
dasbus proxy of the com.redhat.tuned.control interface.
"""

from .constants import (
    TUNED_BUS_NAME,
    TUNED_OBJECT_PATH,
    TUNED_INTERFACE,
)

__all__ = [
    "TUNED_BUS_NAME",
    "TUNED_OBJECT_PATH",
    "TUNED_INTERFACE",
]
