import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from tuned_switcher.errors import (
    ConnectionFailed,
    MalformedResponse,
    NotConnected,
    RemoteCallFailed,
    TunedSwitcherError,
)
from tuned_switcher.signals import Listeners, Subscription
from tuned_switcher.types import ControllerState

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileEntry:
    name: str
    is_active: bool


@dataclass(frozen=True)
class ProfileSnapshot:
    """Everything the presentation layer shows, captured in one synchronization."""
    active_profile: str = ""
    catalog: Tuple[str, ...] = ()
    visible_profiles: Tuple[ProfileEntry, ...] = ()
    icons: Dict[str, str] = field(default_factory=dict)
    show_profile_name: bool = False

    @property
    def visible_names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.visible_profiles)


EMPTY_SNAPSHOT = ProfileSnapshot()


def filter_profiles(catalog: Sequence[str], visible: Iterable[str]) -> List[str]:
    """
    Restrict the catalog to the profiles the user enabled.

    :param catalog: profiles in the order tuned lists them
    :param visible: enabled profiles, empty to show everything
    :return: catalog entries that are enabled, in catalog order
    """
    allowed = set(visible)
    if not allowed: return list(catalog)
    return [profile for profile in catalog if profile in allowed]


def mark_active(profiles: Sequence[str], active: str) -> Tuple[ProfileEntry, ...]:
    return tuple(ProfileEntry(name=profile, is_active=profile == active) for profile in profiles)


def next_profile(visible: Sequence[str], active: str) -> Optional[str]:
    """
    Profile that follows the active one, wrapping around at the end.

    An active profile that is not visible counts as index -1, so the first
    visible profile is chosen.

    :return: the next profile name, None when nothing is visible
    """
    if not visible: return None
    try: current = list(visible).index(active)
    except ValueError: current = -1
    return visible[(current + 1) % len(visible)]


class ProfileController:
    """
    Keeps a synchronized view of tuned's profiles and mediates switches.

    The controller owns at most one session at a time. State is published as
    immutable ProfileSnapshot values which are replaced as a whole, so readers
    never see a half updated profile list. Synchronizations and switches are
    serialized by a re-entrant lock: overlapping requests run in the order
    they acquired the lock, and the last one to finish defines the state.
    """

    def __init__(self, session_factory: Callable[[], object], config) -> None:
        """
        :param session_factory: returns a new unopened session for every connect
        :param config: configuration store providing the user preferences
        """
        self._session_factory = session_factory
        self._config = config
        self._session = None
        self._subscriptions: List[Subscription] = []
        self._listeners = Listeners()
        self._lock = threading.RLock()

        self._state = ControllerState.UNINITIALIZED
        self._snapshot = EMPTY_SNAPSHOT
        self._last_error: Optional[TunedSwitcherError] = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def snapshot(self) -> ProfileSnapshot:
        return self._snapshot

    @property
    def last_error(self) -> Optional[TunedSwitcherError]:
        return self._last_error

    @property
    def is_connected(self) -> bool:
        return self._state is ControllerState.CONNECTED

    def subscribe(self, callback: Callable[["ProfileController"], None]) -> Subscription:
        """
        Get notified after every state or snapshot change.

        :param callback: called with the controller
        :return: subscription that removes the callback when released
        """
        return self._listeners.listen(callback)

    def _set_state(self, state: ControllerState) -> None:
        if state is not self._state:
            log.debug("Controller state %s -> %s", self._state.value, state.value)
            self._state = state

    def _notify(self) -> None:
        self._listeners.emit(self)

    # ==================== Connection ====================

    def connect(self) -> None:
        """
        Open a session to tuned and load the profile state.

        From ERROR this is the explicit retry: the failed session is released
        and replaced. Connecting an already connected controller does nothing.

        :raises ConnectionFailed: tuned is unreachable or the handshake failed
        """
        with self._lock:
            if self._state is ControllerState.CONNECTED: return
            self._release_session()
            self._set_state(ControllerState.CONNECTING)

            session = self._session_factory()
            try:
                session.open()
                self._subscriptions.append(session.subscribe_profile_changed(self._on_profile_changed))
            except TunedSwitcherError as e:
                self._close_session(session)
                self._release_subscriptions()
                error = e if isinstance(e, ConnectionFailed) else ConnectionFailed(str(e))
                self._fail(error)
                raise error from e

            self._session = session
            self._subscriptions.append(self._config.connect(self._on_config_changed))
            self._set_state(ControllerState.CONNECTED)
            self._last_error = None
            log.info("Connected to the tuned service")

            try:
                self.synchronize()
            except TunedSwitcherError as e:
                log.warning("Initial synchronization failed: %s", e)

    def teardown(self) -> None:
        """Drop the session and all subscriptions. Safe to call at any time."""
        with self._lock:
            if self._state is ControllerState.UNINITIALIZED and self._session is None and not self._subscriptions:
                return
            self._release_session()
            self._snapshot = EMPTY_SNAPSHOT
            self._last_error = None
            self._set_state(ControllerState.UNINITIALIZED)
            log.info("Disconnected from the tuned service")
        self._notify()

    def refresh(self) -> None:
        """
        Reconnect when needed, otherwise re-synchronize.

        Used when the profile menu is opened: a controller stuck in ERROR gets
        a fresh session instead of rejecting the request.
        """
        with self._lock:
            if self._state is ControllerState.CONNECTED: self.synchronize()
            else: self.connect()

    def _release_subscriptions(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.release()

    def _release_session(self) -> None:
        self._release_subscriptions()
        session, self._session = self._session, None
        if session is not None: self._close_session(session)

    @staticmethod
    def _close_session(session) -> None:
        try: session.close()
        except TunedSwitcherError as e: log.error("Error closing session: %s", e)

    def _require_session(self):
        if self._state is not ControllerState.CONNECTED or self._session is None:
            raise NotConnected()
        return self._session

    def _fail(self, error: TunedSwitcherError) -> None:
        self._last_error = error
        if not isinstance(error, MalformedResponse):
            self._set_state(ControllerState.ERROR)
        self._notify()

    # ==================== Synchronization ====================

    def synchronize(self) -> ProfileSnapshot:
        """
        Re-read the active profile and the catalog and apply the user filter.

        The new snapshot replaces the old one only when every step succeeded;
        on failure the previous snapshot stays in place and the error is raised.

        :raises NotConnected: the controller is not connected
        :raises RemoteCallFailed: a remote call failed; the controller enters ERROR
        :raises MalformedResponse: tuned answered with an unexpected reply
        :return: the new snapshot
        """
        with self._lock:
            session = self._require_session()
            try:
                active = session.active_profile()
                catalog = session.profiles()
            except TunedSwitcherError as e:
                log.error("Failed to synchronize profiles: %s", e)
                self._fail(e)
                raise

            visible = filter_profiles(catalog, self._config.get_visible_profiles())
            self._snapshot = ProfileSnapshot(
                active_profile=active,
                catalog=tuple(catalog),
                visible_profiles=mark_active(visible, active),
                icons=self._config.get_profile_icons(),
                show_profile_name=self._config.get_show_profile_name(),
            )
            self._last_error = None
            log.debug("Synchronized: active=%r visible=%r", active, visible)
            snapshot = self._snapshot
        self._notify()
        return snapshot

    def _resync_from_event(self, source: str) -> None:
        if not self.is_connected:
            log.debug("Ignoring %s while %s", source, self._state.value)
            return
        try: self.synchronize()
        except TunedSwitcherError as e:
            log.warning("Re-synchronization after %s failed: %s", source, e)

    def _on_profile_changed(self) -> None:
        self._resync_from_event("profile change")

    def _on_config_changed(self, config) -> None:
        self._resync_from_event("configuration change")

    # ==================== Switching ====================

    def switch_profile(self, target: str) -> ProfileSnapshot:
        """
        Ask tuned to apply a profile and re-read the resulting state.

        The target is not checked against the catalog; tuned rejects unknown
        names. When the switch succeeded but the follow-up synchronization
        fails, the snapshot shows the target as active until the next
        successful synchronization, and the synchronization error is raised.

        :param target: profile name to apply
        :raises NotConnected: the controller is not connected
        :raises RemoteCallFailed: the call failed or tuned rejected the profile
        :raises MalformedResponse: tuned answered with an unexpected reply
        """
        with self._lock:
            session = self._require_session()
            log.info("Switching profile to %s", target)
            try: session.switch_profile(target)
            except TunedSwitcherError as e:
                log.error("Failed to switch profile to %s: %s", target, e)
                if isinstance(e, RemoteCallFailed) and e.rejected:
                    # tuned refused the profile, the session itself is fine
                    self._last_error = e
                    self._notify()
                else:
                    self._fail(e)
                raise

            try: return self.synchronize()
            except TunedSwitcherError:
                self._snapshot = replace(
                    self._snapshot,
                    active_profile=target,
                    visible_profiles=mark_active(self._snapshot.visible_names, target),
                )
                self._notify()
                raise

    def cycle_profile(self) -> Optional[str]:
        """
        Switch to the visible profile after the active one.

        :return: the requested profile, None when no profile is visible
        """
        with self._lock:
            self._require_session()
            snapshot = self._snapshot
            target = next_profile(snapshot.visible_names, snapshot.active_profile)
            if target is None:
                log.debug("No visible profiles, nothing to cycle")
                return None
            self.switch_profile(target)
            return target
