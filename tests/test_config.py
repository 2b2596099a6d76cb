from pathlib import Path

import pytest

from tuned_switcher.config import config as config_module
from tuned_switcher.config.config import (
    PROFILE_ICONS,
    SHOW_PROFILE_NAME,
    VISIBLE_PROFILES,
    ConfigStore,
    find_config_file,
)
from tuned_switcher.globals import DBUS_TIMEOUT_MS


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def conf_path(tmp_path: Path) -> Path:
    return tmp_path / "tuned-switcher" / "tuned-switcher.conf"


def test_missing_file_gives_defaults(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)

    assert not store.has_config()
    assert store.get_visible_profiles() == []
    assert store.get_profile_icons() == {}
    assert store.get_show_profile_name() is False
    assert store.get_timeout() == DBUS_TIMEOUT_MS


def test_reads_preferences(conf_path: Path) -> None:
    _write(
        conf_path,
        "[profiles]\n"
        "visible-profiles = balanced, powersave,balanced\n"
        'profile-icons = {"powersave": "🔋"}\n'
        "show-profile-name = yes\n"
        "[dbus]\n"
        "timeout = 250\n",
    )
    store = ConfigStore(str(conf_path), watch=False)

    assert store.get_visible_profiles() == ["balanced", "powersave"]
    assert store.get_profile_icons() == {"powersave": "🔋"}
    assert store.get_show_profile_name() is True
    assert store.get_timeout() == 250


def test_broken_values_fall_back(conf_path: Path) -> None:
    _write(
        conf_path,
        "[profiles]\n"
        "profile-icons = {broken\n"
        "show-profile-name = maybe\n"
        "[dbus]\n"
        "timeout = soon\n",
    )
    store = ConfigStore(str(conf_path), watch=False)

    assert store.get_profile_icons() == {}
    assert store.get_show_profile_name() is False
    assert store.get_timeout() == DBUS_TIMEOUT_MS


def test_writes_create_the_file(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)

    store.set_profile_visible("powersave", True)
    store.set_profile_visible("balanced", True)
    store.set_profile_visible("powersave", True)
    store.set_profile_icon("powersave", "🔋")
    store.set_show_profile_name(True)

    reloaded = ConfigStore(str(conf_path), watch=False)
    assert reloaded.get_visible_profiles() == ["powersave", "balanced"]
    assert reloaded.get_profile_icons() == {"powersave": "🔋"}
    assert reloaded.get_show_profile_name() is True


def test_hide_and_reset_icon(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)
    store.set_visible_profiles(["balanced", "powersave"])
    store.set_profile_icon("balanced", "cpu-symbolic")

    store.set_profile_visible("balanced", False)
    store.set_profile_icon("balanced", "  ")

    assert store.get_visible_profiles() == ["powersave"]
    assert store.get_profile_icons() == {}


def test_set_icon_replaces_unparsable_blob(conf_path: Path) -> None:
    _write(conf_path, "[profiles]\nprofile-icons = [1, 2\n")
    store = ConfigStore(str(conf_path), watch=False)

    store.set_profile_icon("balanced", "🔋")

    assert store.get_profile_icons() == {"balanced": "🔋"}


def test_subscribers_get_changed_keys_only(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)
    every, icons_only = [], []
    store.connect(lambda s: every.append(s.get_visible_profiles()))
    store.connect(lambda s: icons_only.append(s.get_profile_icons()), key=PROFILE_ICONS)

    store.set_profile_visible("balanced", True)
    store.set_profile_icon("balanced", "🔋")
    # same value again: nothing changed, nobody is notified
    store.set_profile_icon("balanced", "🔋")

    assert every == [["balanced"], ["balanced"]]
    assert icons_only == [{"balanced": "🔋"}]


def test_external_edit_is_picked_up_on_reload(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)
    changes = []
    store.connect(lambda s: changes.append(s.get_show_profile_name()), key=SHOW_PROFILE_NAME)

    _write(conf_path, "[profiles]\nshow-profile-name = true\n")
    store.update_config()

    assert changes == [True]


def test_released_subscription_is_silent(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)
    changes = []
    subscription = store.connect(lambda s: changes.append(s), key=VISIBLE_PROFILES)

    subscription.release()
    subscription.release()
    store.set_profile_visible("balanced", True)

    assert changes == []


def test_unknown_key_subscription_is_rejected(conf_path: Path) -> None:
    store = ConfigStore(str(conf_path), watch=False)

    with pytest.raises(KeyError):
        store.connect(lambda s: None, key="profile-colors")


def test_find_config_file_order(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_file = tmp_path / "user.conf"
    system_file = tmp_path / "system.conf"
    monkeypatch.setattr(config_module, "USER_CONFIG_FILE", str(user_file))
    monkeypatch.setattr(config_module, "SYSTEM_CONFIG_FILE", str(system_file))

    assert find_config_file(None) == str(user_file)
    _write(system_file, "")
    assert find_config_file(None) == str(system_file)
    _write(user_file, "")
    assert find_config_file(None) == str(user_file)

    explicit = tmp_path / "explicit.conf"
    _write(explicit, "")
    assert find_config_file(str(explicit)) == str(explicit)


def test_find_config_file_missing_argument_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        find_config_file(str(tmp_path / "nope.conf"))

    assert excinfo.value.code == 1


def test_undecodable_file_keeps_last_values(conf_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write(conf_path, "[profiles]\nvisible-profiles = balanced\n")
    store = ConfigStore(str(conf_path), watch=False)
    changes = []
    store.connect(lambda s: changes.append(s))

    conf_path.write_bytes(b"[profiles]\nvisible-profiles = bal\xffanced\n")
    store.update_config()

    assert store.get_visible_profiles() == ["balanced"]
    assert changes == []
    assert "parsing the config file" in caplog.text


def test_undecodable_file_at_startup_gives_defaults(conf_path: Path) -> None:
    conf_path.parent.mkdir(parents=True)
    conf_path.write_bytes(b"\xff")

    store = ConfigStore(str(conf_path), watch=False)

    assert store.get_visible_profiles() == []
    assert store.get_show_profile_name() is False


def test_write_replaces_file_without_section_header(conf_path: Path) -> None:
    _write(conf_path, "visible-profiles = balanced\n")
    store = ConfigStore(str(conf_path), watch=False)

    store.set_show_profile_name(True)

    assert store.get_show_profile_name() is True
    assert ConfigStore(str(conf_path), watch=False).get_show_profile_name() is True


def test_write_keeps_last_parsed_values_of_broken_file(conf_path: Path) -> None:
    _write(conf_path, "[profiles]\nvisible-profiles = balanced, powersave\n")
    store = ConfigStore(str(conf_path), watch=False)
    conf_path.write_bytes(b"\xff")
    store.update_config()

    store.set_profile_icon("balanced", "🔋")

    reloaded = ConfigStore(str(conf_path), watch=False)
    assert reloaded.get_visible_profiles() == ["balanced", "powersave"]
    assert reloaded.get_profile_icons() == {"balanced": "🔋"}
