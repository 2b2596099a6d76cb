#!/usr/bin/env python3
import gi
gi.require_version("Gtk", "3.0")
from gi.repository import Gtk, GLib

import click
import logging

from tuned_switcher.bin.tuned_switcher import build_controller
from tuned_switcher.config.config import ConfigStore, find_config_file
from tuned_switcher.errors import TunedSwitcherError
from tuned_switcher.gui.tray import TunedTray
from tuned_switcher.tools import setup_logger


@click.command()
@click.option("--config", is_flag=False, required=False, help="Use config file at defined path")
@click.option("--debug", is_flag=True, help="Show debug info")
def main(config, debug):
    setup_logger(debug)
    GLib.set_prgname("tuned-switcher")
    store = ConfigStore(find_config_file(config))
    controller = build_controller(store)
    tray = TunedTray(controller, store)
    store.start()
    # a failed start leaves the tray showing the error row until "Refresh"
    try: controller.connect()
    except TunedSwitcherError as e: logging.warning("tuned is not available: %s", e)
    try: Gtk.main()
    except KeyboardInterrupt: tray.quit()


if __name__ == "__main__": main()
