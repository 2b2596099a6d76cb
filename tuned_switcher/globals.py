from os import getenv, path

APP_NAME = "tuned-switcher"
APP_VERSION = "1.0.0"

DEFAULT_ICON = "power-profile-balanced-symbolic"
SYMBOLIC_SUFFIX = "-symbolic"

USER_CONFIG_DIR = getenv("XDG_CONFIG_HOME", default=path.join(path.expanduser("~"), ".config"))
USER_CONFIG_FILE = path.join(USER_CONFIG_DIR, APP_NAME, APP_NAME+".conf")
SYSTEM_CONFIG_FILE = "/etc/"+APP_NAME+".conf"

USER_STATE_DIR = getenv("XDG_STATE_HOME", default=path.join(path.expanduser("~"), ".local", "state"))
LOG_DIR = path.join(USER_STATE_DIR, APP_NAME)
LOG_FILE = path.join(LOG_DIR, APP_NAME+".log")

DBUS_TIMEOUT_MS = 5000
