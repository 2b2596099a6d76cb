#!/usr/bin/env python3
"""
D-Bus constants for the tuned daemon control interface.

tuned registers com.redhat.tuned on the system bus and exports its control
interface on a single object.
"""

# D-Bus service identification
TUNED_BUS_NAME = "com.redhat.tuned"
TUNED_OBJECT_PATH = "/Tuned"
TUNED_INTERFACE = "com.redhat.tuned.control"

# Methods and signals used by tuned-switcher
METHOD_ACTIVE_PROFILE = "active_profile"
METHOD_PROFILES = "profiles"
METHOD_SWITCH_PROFILE = "switch_profile"
SIGNAL_PROFILE_CHANGED = "profile_changed"
