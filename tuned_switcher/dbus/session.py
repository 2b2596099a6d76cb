#!/usr/bin/env python3
"""
Client session for the tuned control interface.

A TunedSession owns one system bus connection and one proxy of
com.redhat.tuned.control. Every dasbus/GLib failure is translated into the
tuned-switcher exception hierarchy here, and every reply is checked for the
shape the controller relies on.
"""

import logging
from typing import Callable, List, Optional

from dasbus.connection import SystemMessageBus
from dasbus.error import DBusError
from gi.repository import GLib

from tuned_switcher.errors import ConnectionFailed, MalformedResponse, RemoteCallFailed
from tuned_switcher.globals import DBUS_TIMEOUT_MS
from tuned_switcher.signals import Subscription
from .constants import (
    TUNED_BUS_NAME,
    TUNED_OBJECT_PATH,
    TUNED_INTERFACE,
    METHOD_ACTIVE_PROFILE,
    METHOD_PROFILES,
    METHOD_SWITCH_PROFILE,
    SIGNAL_PROFILE_CHANGED,
)

log = logging.getLogger(__name__)

# errors raised by dasbus proxies for transport problems, remote exceptions and timeouts
TRANSPORT_ERRORS = (DBusError, GLib.Error, TimeoutError)


class TunedSession:
    """
    Live connection to the tuned daemon.

    The bus is created lazily by open(); close() disconnects it and makes the
    session unusable. A controller replaces a failed session with a fresh one
    instead of reopening it.
    """

    def __init__(self, timeout: int = DBUS_TIMEOUT_MS, bus=None):
        """
        Initialize the session.

        Args:
            timeout: Timeout in milliseconds applied to every method call
            bus: Message bus to use instead of a new SystemMessageBus (tests)
        """
        self._timeout = timeout
        self._bus = bus
        self._proxy = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._proxy is not None and not self._closed

    def open(self):
        """
        Connect to the system bus and introspect the tuned control object.

        Raises:
            ConnectionFailed: If the bus is unreachable, tuned is not running
                or it does not export the expected interface
        """
        if self._closed:
            raise ConnectionFailed("session was closed, create a new one")
        if self._proxy is not None:
            return

        log.debug(f"Connecting to {TUNED_BUS_NAME} at {TUNED_OBJECT_PATH}")
        try:
            if self._bus is None:
                self._bus = SystemMessageBus()
            proxy = self._bus.get_proxy(
                TUNED_BUS_NAME,
                TUNED_OBJECT_PATH,
                interface_name=TUNED_INTERFACE,
            )
            # the first member access introspects the remote object, which is
            # the handshake proving that tuned is there
            getattr(proxy, SIGNAL_PROFILE_CHANGED)
        except TRANSPORT_ERRORS as e:
            raise ConnectionFailed(f"cannot reach {TUNED_BUS_NAME}: {e}") from e
        except AttributeError as e:
            raise ConnectionFailed(f"{TUNED_BUS_NAME} does not provide {TUNED_INTERFACE}: {e}") from e

        self._proxy = proxy
        log.info(f"Connected to {TUNED_BUS_NAME}")

    def close(self):
        """Disconnect from the bus. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._proxy = None
        if self._bus is not None:
            try:
                self._bus.disconnect()
            except TRANSPORT_ERRORS as e:
                log.error(f"Error disconnecting from D-Bus: {e}")
            self._bus = None

    def _call(self, method: str, *args):
        if not self.is_open:
            raise RemoteCallFailed(method, "session is not open")
        try:
            return getattr(self._proxy, method)(*args, timeout=self._timeout)
        except TRANSPORT_ERRORS as e:
            raise RemoteCallFailed(method, str(e)) from e

    # ==================== Remote Methods ====================

    def active_profile(self) -> str:
        """
        Name of the profile tuned currently applies.

        Returns:
            The profile name, empty when tuned has no active profile
        """
        reply = self._call(METHOD_ACTIVE_PROFILE)
        if not isinstance(reply, str):
            raise MalformedResponse(METHOD_ACTIVE_PROFILE, reply)
        return reply

    def profiles(self) -> List[str]:
        """
        All profiles known to tuned, in the order tuned lists them.

        Raises:
            MalformedResponse: If the reply is not a list of non-empty strings
        """
        reply = self._call(METHOD_PROFILES)
        if not isinstance(reply, (list, tuple)) or not all(isinstance(p, str) and p for p in reply):
            raise MalformedResponse(METHOD_PROFILES, reply)
        return list(reply)

    def switch_profile(self, name: str):
        """
        Ask tuned to apply a profile.

        tuned answers with a (success, message) pair; an unsuccessful answer
        is reported the same way as a failed call.

        Args:
            name: Profile to switch to

        Raises:
            RemoteCallFailed: If the call fails or tuned rejects the profile
            MalformedResponse: If the reply is not a (bool, str) pair
        """
        reply = self._call(METHOD_SWITCH_PROFILE, name)
        if not isinstance(reply, (list, tuple)) or len(reply) != 2 or not isinstance(reply[0], bool):
            raise MalformedResponse(METHOD_SWITCH_PROFILE, reply)

        success, message = reply
        if not success:
            raise RemoteCallFailed(METHOD_SWITCH_PROFILE, message or f"tuned rejected profile {name}", rejected=True)
        log.info(f"Switched tuned profile to {name}")

    # ==================== Signals ====================

    def subscribe_profile_changed(self, callback: Callable[[], None]) -> Subscription:
        """
        Call back whenever tuned emits profile_changed.

        The signal payload is ignored; subscribers re-read the state instead.

        Returns:
            Subscription that disconnects the handler when released
        """
        if not self.is_open:
            raise RemoteCallFailed(SIGNAL_PROFILE_CHANGED, "session is not open")

        signal = getattr(self._proxy, SIGNAL_PROFILE_CHANGED)

        def on_profile_changed(*args):
            log.debug(f"Received {SIGNAL_PROFILE_CHANGED}{args}")
            callback()

        signal.connect(on_profile_changed)
        return Subscription(lambda: self._disconnect_signal(signal, on_profile_changed))

    def _disconnect_signal(self, signal, handler: Optional[Callable]):
        try:
            signal.disconnect(handler)
        except TRANSPORT_ERRORS as e:
            log.error(f"Error disconnecting {SIGNAL_PROFILE_CHANGED} handler: {e}")
