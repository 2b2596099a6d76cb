from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from tuned_switcher.globals import DEFAULT_ICON
from tuned_switcher.icons import CUSTOM_PRESET_ID, ICON_PRESETS, is_literal_icon, lookup_icon, preset_index
from tuned_switcher.modules.controller import ProfileController, ProfileSnapshot
from tuned_switcher.types import ControllerState

MENU_TITLE = "Tuned Profile"
ERROR_TITLE = "Error loading profiles"
ERROR_HINT = "Make sure tuned service is running"
CONNECTING_TITLE = "Connecting to tuned…"


@dataclass(frozen=True)
class IndicatorView:
    icon_name: str
    label: str
    title: str
    subtitle: str


@dataclass(frozen=True)
class MenuRow:
    label: str
    icon_name: Optional[str] = None
    profile: Optional[str] = None
    checked: bool = False
    sensitive: bool = True
    hint: str = ""


@dataclass(frozen=True)
class PreferenceRow:
    profile: str
    enabled: bool
    icon: str
    preset: int

    @property
    def is_custom(self) -> bool:
        return ICON_PRESETS[self.preset][0] == CUSTOM_PRESET_ID


def _split_icon(icons: Mapping[str, str], profile: str) -> Tuple[str, str]:
    """Return (themed icon name, glyph) for a profile; exactly one is meaningful."""
    icon = lookup_icon(icons, profile)
    if is_literal_icon(icon): return DEFAULT_ICON, icon
    return icon, ""


def build_indicator(snapshot: ProfileSnapshot) -> IndicatorView:
    """
    Panel icon and label for the active profile.

    Glyph icons cannot be shown as themed icons, so the panel keeps the
    default icon and the glyph moves into the text.
    """
    active = snapshot.active_profile
    if not active:
        return IndicatorView(icon_name=DEFAULT_ICON, label="", title=MENU_TITLE, subtitle="")

    icon_name, glyph = _split_icon(snapshot.icons, active)
    subtitle = f"{glyph} {active}" if glyph else active
    if snapshot.show_profile_name: label = subtitle
    else: label = glyph
    return IndicatorView(icon_name=icon_name, label=label, title=MENU_TITLE, subtitle=subtitle)


def build_profile_rows(snapshot: ProfileSnapshot) -> List[MenuRow]:
    rows = []
    for entry in snapshot.visible_profiles:
        icon_name, glyph = _split_icon(snapshot.icons, entry.name)
        rows.append(MenuRow(
            label=f"{glyph}  {entry.name}" if glyph else entry.name,
            icon_name=None if glyph else icon_name,
            profile=entry.name,
            checked=entry.is_active,
        ))
    return rows


def build_menu(controller: ProfileController) -> List[MenuRow]:
    """
    Rows of the profile menu for the controller's current state.

    A controller in ERROR that never loaded any profile shows one
    non-interactive error row; otherwise the last good snapshot is kept.
    """
    snapshot = controller.snapshot
    state = controller.state

    if state is ControllerState.CONNECTING:
        return [MenuRow(label=CONNECTING_TITLE, sensitive=False)]
    if not snapshot.catalog and (state is not ControllerState.CONNECTED or controller.last_error is not None):
        hint = str(controller.last_error) if controller.last_error else ERROR_HINT
        return [MenuRow(label=ERROR_TITLE, sensitive=False, hint=hint)]
    return build_profile_rows(snapshot)


def build_preference_rows(catalog: Sequence[str], visible: Sequence[str], icons: Mapping[str, str]) -> List[PreferenceRow]:
    """One row per known profile with its visibility switch and icon choice."""
    rows = []
    for profile in catalog:
        icon = lookup_icon(icons, profile)
        rows.append(PreferenceRow(profile=profile, enabled=profile in visible, icon=icon, preset=preset_index(icon)))
    return rows
