"""
Exceptions raised by tuned-switcher.

Transport errors coming from dasbus or GLib never leave the D-Bus session
module untranslated; callers only need to handle the classes below.
"""


class TunedSwitcherError(RuntimeError):
    """Base exception for all tuned-switcher failures."""


class NotConnected(TunedSwitcherError):
    """Raised when an operation needs a live session and there is none."""

    def __init__(self, message: str = "not connected to the tuned service") -> None:
        super().__init__(message)


class ConnectionFailed(TunedSwitcherError):
    """Raised when the tuned service is unreachable or the handshake fails."""


class RemoteCallFailed(TunedSwitcherError):
    """
    Raised when a remote call errors, times out or is rejected by tuned.

    rejected is set when tuned answered but refused the request, in which
    case the session itself is still usable.
    """

    def __init__(self, method: str, reason: str, rejected: bool = False) -> None:
        super().__init__(f"{method}: {reason}")
        self.method = method
        self.reason = reason
        self.rejected = rejected


class MalformedResponse(TunedSwitcherError):
    """Raised when tuned answers with a reply of an unexpected shape."""

    def __init__(self, method: str, reply: object) -> None:
        super().__init__(f"{method}: unexpected reply {reply!r}")
        self.method = method
        self.reply = reply


class ConfigurationParseError(TunedSwitcherError):
    """A configuration value could not be parsed. Always recovered locally."""
