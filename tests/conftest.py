from typing import Dict, List, Optional

import pytest

from tuned_switcher.errors import ConnectionFailed, MalformedResponse, RemoteCallFailed
from tuned_switcher.modules.controller import ProfileController
from tuned_switcher.signals import Listeners, Subscription

CATALOG = ["performance", "balanced", "powersave"]


class FakeTuned:
    """State of the pretend tuned daemon, shared by every session it hands out."""

    def __init__(self, active: str = "balanced", profiles: Optional[List[str]] = None) -> None:
        self.active = active
        self.profiles = list(CATALOG if profiles is None else profiles)
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.replies: Dict[str, object] = {}
        self.reachable = True
        self.sessions: List["FakeSession"] = []
        self.signal = Listeners()

    def session_factory(self) -> "FakeSession":
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def emit_profile_changed(self) -> None:
        self.signal.emit()

    def fail(self, method: str, error: Optional[Exception] = None) -> None:
        self.failures[method] = error or RemoteCallFailed(method, "timed out")


class FakeSession:
    def __init__(self, tuned: FakeTuned) -> None:
        self.tuned = tuned
        self.opened = False
        self.closed = 0

    def open(self) -> None:
        if not self.tuned.reachable:
            raise ConnectionFailed("cannot reach com.redhat.tuned")
        self.opened = True

    def close(self) -> None:
        self.closed += 1

    def _call(self, method: str, *args):
        self.tuned.calls.append(":".join((method,) + args))
        if method in self.tuned.failures:
            raise self.tuned.failures[method]
        return self.tuned.replies.get(method)

    def active_profile(self) -> str:
        reply = self._call("active_profile")
        return self.tuned.active if reply is None else reply

    def profiles(self) -> List[str]:
        reply = self._call("profiles")
        if reply is not None: raise MalformedResponse("profiles", reply)
        return list(self.tuned.profiles)

    def switch_profile(self, name: str) -> None:
        self._call("switch_profile", name)
        if name not in self.tuned.profiles:
            raise RemoteCallFailed("switch_profile", f"Requested profile '{name}' doesn't exist.", rejected=True)
        self.tuned.active = name

    def subscribe_profile_changed(self, callback) -> Subscription:
        return self.tuned.signal.listen(callback)


class FakeConfig:
    def __init__(self, visible=(), icons=None, show_profile_name=False) -> None:
        self.visible = list(visible)
        self.icons = dict(icons or {})
        self.show_profile_name = show_profile_name
        self.listeners = Listeners()

    def get_visible_profiles(self) -> List[str]:
        return list(self.visible)

    def get_profile_icons(self) -> Dict[str, str]:
        return dict(self.icons)

    def get_show_profile_name(self) -> bool:
        return self.show_profile_name

    def connect(self, callback, key=None) -> Subscription:
        return self.listeners.listen(callback, key)

    def change(self, **values) -> None:
        for name, value in values.items(): setattr(self, name, value)
        self.listeners.emit(self, keys=list(values))


@pytest.fixture
def tuned() -> FakeTuned:
    return FakeTuned()


@pytest.fixture
def fake_config() -> FakeConfig:
    return FakeConfig()


@pytest.fixture
def controller(tuned: FakeTuned, fake_config: FakeConfig):
    controller = ProfileController(tuned.session_factory, fake_config)
    yield controller
    controller.teardown()


@pytest.fixture
def connected(controller: ProfileController, tuned: FakeTuned) -> ProfileController:
    controller.connect()
    tuned.calls.clear()
    return controller
