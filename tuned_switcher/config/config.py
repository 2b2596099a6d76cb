from configparser import ConfigParser, Error as ConfigParserError
import logging
import os
import sys
import threading
from typing import Callable, Dict, List, Optional

import pyinotify

from tuned_switcher.config.config_event_handler import ConfigEventHandler
from tuned_switcher.globals import DBUS_TIMEOUT_MS, SYSTEM_CONFIG_FILE, USER_CONFIG_FILE
from tuned_switcher.icons import parse_icon_map, serialize_icon_map
from tuned_switcher.prints import print_error
from tuned_switcher.signals import Listeners, Subscription

log = logging.getLogger(__name__)

PROFILES_SECTION = "profiles"
DBUS_SECTION = "dbus"

VISIBLE_PROFILES = "visible-profiles"
PROFILE_ICONS = "profile-icons"
SHOW_PROFILE_NAME = "show-profile-name"
KEYS = (VISIBLE_PROFILES, PROFILE_ICONS, SHOW_PROFILE_NAME)

# a broken file is logged and the last parsed copy stays in use
READ_ERRORS = (ConfigParserError, UnicodeDecodeError, OSError)


def find_config_file(args_config_file) -> str:
    """
    Find the config file to use.

    Look for a config file in the following priorization order:
    1. Command line argument
    2. User config file
    3. System config file
    When neither 2 nor 3 exists the user config file is returned; it is
    created on the first write.

    :param args_config_file: Path to the config file provided as a command line argument
    :return: The path to the config file to use
    """
    if args_config_file is not None:                                    # (1) Command line argument was specified
        if os.path.isfile(args_config_file): return args_config_file
        print_error(f"Config file specified with '--config {args_config_file}' not found.")
        sys.exit(1)
    elif os.path.isfile(USER_CONFIG_FILE): return USER_CONFIG_FILE      # (2) User config file
    elif os.path.isfile(SYSTEM_CONFIG_FILE): return SYSTEM_CONFIG_FILE  # (3) System config file
    return USER_CONFIG_FILE


def _split_profiles(value: str) -> List[str]:
    names = []
    for name in value.replace("\n", ",").split(","):
        name = name.strip()
        if name and name not in names: names.append(name)
    return names


class ConfigStore:
    """
    Persisted user preferences, reloaded whenever the file changes on disk.

    Values are always read from the last parsed copy of the file. Every reload
    compares the three preference keys with the previous values and notifies
    subscribers of the keys that changed.
    """

    def __init__(self, path: str = "", watch: bool = True) -> None:
        self.path: str = ""
        self._config: ConfigParser = ConfigParser(interpolation=None)
        self._listeners = Listeners()
        self._lock = threading.RLock()
        self._values: Dict[str, object] = self._snapshot_values()
        self.watch = watch
        self._watched = False
        if watch:
            self.watch_manager: pyinotify.WatchManager = pyinotify.WatchManager()
            self.config_handler = ConfigEventHandler(self)
            # check for file changes using threading
            self.notifier: pyinotify.ThreadedNotifier = pyinotify.ThreadedNotifier(self.watch_manager, self.config_handler)
        if path: self.set_path(path)

    def set_path(self, path: str) -> None:
        self.path = path
        self._add_watch()
        self.update_config()

    def _add_watch(self) -> None:
        if not self.watch or self._watched: return
        directory = os.path.dirname(self.path)
        if not os.path.isdir(directory):
            log.debug("Not watching %s: directory does not exist yet", directory)
            return
        mask = pyinotify.IN_CREATE | pyinotify.IN_DELETE | pyinotify.IN_MODIFY | pyinotify.IN_MOVED_FROM | pyinotify.IN_MOVED_TO
        self.watch_manager.add_watch(directory, mask=mask)
        self._watched = True

    def has_config(self) -> bool:
        return os.path.isfile(self.path)

    def start(self) -> None:
        if self.watch: self.notifier.start()

    def stop(self) -> None:
        if self.watch and self.notifier.is_alive(): self.notifier.stop()

    def update_config(self) -> None:
        """Re-read the file and notify subscribers about changed keys."""
        with self._lock:
            # create new ConfigParser to prevent old data from remaining
            config = ConfigParser(interpolation=None)
            try: config.read(self.path, encoding="utf-8")
            except READ_ERRORS as e:
                log.error("The following error occured while parsing the config file: %s", e)
                return
            self._config = config
            values = self._snapshot_values()
            changed = [key for key in KEYS if values[key] != self._values.get(key)]
            self._values = values

        if changed:
            log.debug("Configuration changed: %s", ", ".join(changed))
            self._listeners.emit(self, keys=changed)

    def connect(self, callback: Callable[["ConfigStore"], None], key: Optional[str] = None) -> Subscription:
        """
        Subscribe to configuration changes.

        :param callback: called with the store after a reload changed something
        :param key: restrict notifications to a single preference key
        :return: subscription that disconnects the callback when released
        """
        if key is not None and key not in KEYS: raise KeyError(key)
        return self._listeners.listen(callback, key)

    def _snapshot_values(self) -> Dict[str, object]:
        return {
            VISIBLE_PROFILES: tuple(self.get_visible_profiles()),
            PROFILE_ICONS: self.get_profile_icons(),
            SHOW_PROFILE_NAME: self.get_show_profile_name(),
        }

    def _get(self, key: str, fallback: str = "") -> str:
        return self._config.get(PROFILES_SECTION, key, fallback=fallback)

    def get_visible_profiles(self) -> List[str]:
        return _split_profiles(self._get(VISIBLE_PROFILES))

    def get_profile_icons(self) -> Dict[str, str]:
        return parse_icon_map(self._get(PROFILE_ICONS))

    def get_show_profile_name(self) -> bool:
        try: return self._config.getboolean(PROFILES_SECTION, SHOW_PROFILE_NAME, fallback=False)
        except ValueError:
            log.warning("Invalid boolean for %s: %r, using false", SHOW_PROFILE_NAME, self._get(SHOW_PROFILE_NAME))
            return False

    def get_timeout(self) -> int:
        try: timeout = self._config.getint(DBUS_SECTION, "timeout", fallback=DBUS_TIMEOUT_MS)
        except ValueError:
            log.warning("Invalid D-Bus timeout, using %d ms", DBUS_TIMEOUT_MS)
            return DBUS_TIMEOUT_MS
        return timeout if timeout > 0 else DBUS_TIMEOUT_MS

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            config = ConfigParser(interpolation=None)
            try: config.read(self.path, encoding="utf-8")
            except READ_ERRORS as e:
                # rewrite the file from the last values that could be parsed
                log.warning("Replacing unreadable config file %s: %s", self.path, e)
                config = ConfigParser(interpolation=None)
                config.read_dict(self._config)
            if not config.has_section(PROFILES_SECTION): config.add_section(PROFILES_SECTION)
            config.set(PROFILES_SECTION, key, value)

            directory = os.path.dirname(self.path)
            if directory: os.makedirs(directory, exist_ok=True)
            self._add_watch()
            with open(self.path, "w", encoding="utf-8") as f: config.write(f)
        self.update_config()

    def set_visible_profiles(self, profiles: List[str]) -> None:
        self._set(VISIBLE_PROFILES, ", ".join(_split_profiles(",".join(profiles))))

    def set_profile_visible(self, profile: str, visible: bool) -> None:
        current = self.get_visible_profiles()
        if visible:
            if profile not in current: current.append(profile)
        else: current = [p for p in current if p != profile]
        self.set_visible_profiles(current)

    def set_profile_icon(self, profile: str, icon: str) -> None:
        icons = self.get_profile_icons()
        icon = icon.strip()
        if icon: icons[profile] = icon
        else: icons.pop(profile, None)
        self._set(PROFILE_ICONS, serialize_icon_map(icons))

    def set_show_profile_name(self, show: bool) -> None:
        self._set(SHOW_PROFILE_NAME, "true" if show else "false")
