import json
import logging
from typing import Dict, Mapping

from tuned_switcher.errors import ConfigurationParseError
from tuned_switcher.globals import DEFAULT_ICON, SYMBOLIC_SUFFIX
from tuned_switcher.types import IconKind

log = logging.getLogger(__name__)

CUSTOM_PRESET_ID = "emoji-custom"

# (icon id, label) pairs offered when picking a profile icon; the last entry
# switches to a free text glyph
ICON_PRESETS = (
    ("power-profile-performance-symbolic", "Performance"),
    ("power-profile-balanced-symbolic", "Balanced"),
    ("power-profile-power-saver-symbolic", "Power Saver"),
    ("thunderbolt-symbolic", "Thunderbolt"),
    ("battery-full-symbolic", "Battery"),
    ("speedometer-symbolic", "Speedometer"),
    (CUSTOM_PRESET_ID, "Custom (Emoji/Text)"),
)


def classify_icon(specifier: str, suffix: str = SYMBOLIC_SUFFIX) -> IconKind:
    """
    Decide whether an icon specifier is a themed icon name or literal text.

    A specifier is literal only when it lacks the symbolic suffix and contains
    at least one character outside 7-bit ASCII, so plain names such as
    "cpu" still resolve through the icon theme.

    :param specifier: icon name or glyph text
    :param suffix: suffix marking themed icon names
    :return: IconKind.LITERAL or IconKind.SYMBOLIC
    """
    if specifier and not specifier.endswith(suffix) and any(ord(c) > 0x7F for c in specifier):
        return IconKind.LITERAL
    return IconKind.SYMBOLIC


def is_literal_icon(specifier: str) -> bool: return classify_icon(specifier) is IconKind.LITERAL


def _decode_icon_map(blob: str) -> Dict[str, str]:
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise ConfigurationParseError(f"profile-icons is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationParseError(f"profile-icons must be a JSON object, got {type(data).__name__}")

    icons = {}
    for profile, icon in data.items():
        if profile and isinstance(icon, str) and icon:
            icons[profile] = icon
        else:
            log.warning("Ignoring icon entry %r: %r, profile and icon must be non-empty strings", profile, icon)
    return icons


def parse_icon_map(blob) -> Dict[str, str]:
    """
    Parse the serialized profile icon mapping.

    Never raises: anything that is not a JSON object of strings yields an empty
    mapping (or drops the offending entries) and a warning in the log.
    """
    if blob is None or not str(blob).strip(): return {}
    try:
        return _decode_icon_map(blob)
    except ConfigurationParseError as e:
        log.warning("Falling back to default icons: %s", e)
        return {}


def serialize_icon_map(icons: Mapping[str, str]) -> str:
    return json.dumps(dict(icons), ensure_ascii=False, separators=(",", ":"))


def lookup_icon(icons: Mapping[str, str], profile: str) -> str:
    return icons.get(profile) or DEFAULT_ICON


def preset_index(specifier: str) -> int:
    """
    Position of an icon in ICON_PRESETS.

    :return: index of the matching preset, or the index of the custom entry
        when the specifier is not one of the presets
    """
    for index, (icon_id, _label) in enumerate(ICON_PRESETS[:-1]):
        if icon_id == specifier: return index
    return len(ICON_PRESETS) - 1
