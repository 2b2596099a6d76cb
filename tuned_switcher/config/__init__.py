from .config import (
    ConfigStore,
    find_config_file,
    PROFILE_ICONS,
    SHOW_PROFILE_NAME,
    VISIBLE_PROFILES,
)

__all__ = [
    "ConfigStore",
    "find_config_file",
    "PROFILE_ICONS",
    "SHOW_PROFILE_NAME",
    "VISIBLE_PROFILES",
]
