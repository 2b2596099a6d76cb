#!/usr/bin/env python3
#
# tuned-switcher - View and switch tuned performance profiles
#
import sys

import click

from tuned_switcher.config.config import ConfigStore, find_config_file
from tuned_switcher.dbus.session import TunedSession
from tuned_switcher.errors import TunedSwitcherError
from tuned_switcher.globals import APP_NAME, APP_VERSION
from tuned_switcher.icons import ICON_PRESETS
from tuned_switcher.modules.controller import ProfileController
from tuned_switcher.modules.menu import build_indicator, build_menu, build_preference_rows
from tuned_switcher.prints import print_block, print_error, print_info, profile_line
from tuned_switcher.tools import setup_logger


def build_controller(store: ConfigStore) -> ProfileController:
    return ProfileController(lambda: TunedSession(timeout=store.get_timeout()), store)


def print_status(controller: ProfileController) -> None:
    indicator = build_indicator(controller.snapshot)
    lines = [f"Active profile: {indicator.subtitle or '(none)'}", ""]
    for row in build_menu(controller):
        if not row.sensitive:
            lines.append(f"  {row.label}" + (f" ({row.hint})" if row.hint else ""))
            continue
        lines.append(profile_line(row.label, row.checked))
    print_block(indicator.title, *lines)


def print_preferences(controller: ProfileController, store: ConfigStore) -> None:
    visible = store.get_visible_profiles()
    lines = []
    for row in build_preference_rows(controller.snapshot.catalog, visible, store.get_profile_icons()):
        icon = row.icon if row.is_custom else f"{row.icon} ({ICON_PRESETS[row.preset][1]})"
        lines.append(f"[{'x' if row.enabled else ' '}] {row.profile}: {icon}")
    if not visible: lines.append("(no profile enabled, all profiles are shown)")
    lines.append(f"Show profile name: {'yes' if store.get_show_profile_name() else 'no'}")
    print_block("Preferences", *lines)


def parse_icon_option(value: str):
    profile, sep, icon = value.partition("=")
    if not sep or not profile.strip():
        raise click.BadParameter("expected PROFILE=ICON", param_hint="--icon")
    return profile.strip(), icon


def watch(controller: ProfileController, store: ConfigStore) -> None:
    from dasbus.loop import EventLoop

    loop = EventLoop()
    controller.subscribe(print_status)
    store.start()
    try: loop.run()
    except KeyboardInterrupt: pass
    finally: store.stop()


@click.command()
@click.option("--status", is_flag=True, help="Show the active profile and the visible profiles (default)")
@click.option("--list", "list_", is_flag=True, help="List all profiles with their visibility and icon")
@click.option("--switch", "switch", metavar="PROFILE", help="Switch to PROFILE")
@click.option("--cycle", is_flag=True, help="Switch to the next visible profile")
@click.option("--show", "show", metavar="PROFILE", multiple=True, help="Enable PROFILE in the profile menu")
@click.option("--hide", "hide", metavar="PROFILE", multiple=True, help="Remove PROFILE from the profile menu")
@click.option("--icon", "icons", metavar="PROFILE=ICON", multiple=True, help="Use ICON (icon name or emoji) for PROFILE, empty ICON resets it")
@click.option("--show-name/--hide-name", default=None, help="Show the profile name next to the panel icon")
@click.option("--watch", "watch_", is_flag=True, help="Keep running and print every profile change")
@click.option("--config", is_flag=False, required=False, help="Use config file at defined path")
@click.option("--debug", is_flag=True, help="Show debug info")
@click.option("--version", is_flag=True, help="Show currently installed version")
def main(status, list_, switch, cycle, show, hide, icons, show_name, watch_, config, debug, version):
    if version:
        print(f"{APP_NAME} version: {APP_VERSION}")
        return

    setup_logger(debug)
    store = ConfigStore(find_config_file(config), watch=watch_)

    # preference changes do not need tuned
    for profile in show: store.set_profile_visible(profile, True)
    for profile in hide: store.set_profile_visible(profile, False)
    for value in icons: store.set_profile_icon(*parse_icon_option(value))
    if show_name is not None: store.set_show_profile_name(show_name)
    edited = bool(show or hide or icons or show_name is not None)

    controller = build_controller(store)
    try:
        controller.connect()
        if switch:
            controller.switch_profile(switch)
            print_info(f"Switched to {switch}")
        elif cycle:
            target = controller.cycle_profile()
            if target is None: print_info("No visible profiles to cycle through")
            else: print_info(f"Switched to {target}")
        if controller.last_error is not None: raise controller.last_error

        if list_ or edited: print_preferences(controller, store)
        if status or not (list_ or edited or switch or cycle) or watch_: print_status(controller)
        if watch_: watch(controller, store)
    except TunedSwitcherError as e:
        print_error(e)
        sys.exit(1)
    finally:
        controller.teardown()


if __name__ == "__main__": main()
