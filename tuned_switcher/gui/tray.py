import gi
gi.require_version("Gtk", "3.0")
gi.require_version("AppIndicator3", "0.1")
from gi.repository import GLib, Gtk, AppIndicator3 as appindicator

import logging
from threading import Thread

from tuned_switcher.errors import TunedSwitcherError
from tuned_switcher.modules.controller import ProfileController
from tuned_switcher.modules.menu import build_indicator, build_menu, build_preference_rows

log = logging.getLogger(__name__)


class TunedTray:
    """
    Panel indicator listing the visible profiles.

    Remote calls run in worker threads; every widget update is pushed back to
    the GTK main loop with GLib.idle_add.
    """

    def __init__(self, controller: ProfileController, store):
        self.controller = controller
        self.store = store
        self._refresh = None
        self.indicator = appindicator.Indicator.new("tuned-switcher-tray", build_indicator(controller.snapshot).icon_name, appindicator.IndicatorCategory.APPLICATION_STATUS)
        self.indicator.set_status(appindicator.IndicatorStatus.ACTIVE)
        self.subscription = controller.subscribe(lambda _controller: GLib.idle_add(self.render))
        self.render()

    def render(self):
        view = build_indicator(self.controller.snapshot)
        self.indicator.set_icon_full(view.icon_name, view.subtitle or view.title)
        self.indicator.set_label(view.label, "")
        self.indicator.set_title(view.subtitle or view.title)
        self.indicator.set_menu(self.build_menu())
        return False

    def build_menu(self):
        menu = Gtk.Menu()
        menu.connect("show", self.on_menu_show)

        for row in build_menu(self.controller):
            if row.profile is None:
                item = Gtk.MenuItem(label=row.label)
                if row.hint: item.set_tooltip_text(row.hint)
            else:
                item = Gtk.CheckMenuItem(label=row.label)
                item.set_draw_as_radio(True)
                item.set_active(row.checked)
                if row.icon_name: item.set_tooltip_text(row.icon_name)
                item.connect("activate", self.on_profile_activate, row.profile, row.checked)
            item.set_sensitive(row.sensitive)
            menu.append(item)

        menu.append(Gtk.SeparatorMenuItem())

        cycle = Gtk.MenuItem(label="Next profile")
        cycle.connect("activate", lambda _item: self.run_in_thread(self.controller.cycle_profile))
        menu.append(cycle)

        refresh = Gtk.MenuItem(label="Refresh")
        refresh.connect("activate", lambda _item: self.run_in_thread(self.controller.refresh))
        menu.append(refresh)

        menu.append(self.build_visibility_menu())

        show_name = Gtk.CheckMenuItem(label="Show profile name")
        show_name.set_active(self.controller.snapshot.show_profile_name)
        show_name.connect("toggled", lambda item: self.store.set_show_profile_name(item.get_active()))
        menu.append(show_name)

        _quit = Gtk.MenuItem(label="Quit")
        _quit.connect("activate", self.quit)
        menu.append(_quit)
        menu.show_all()
        return menu

    def build_visibility_menu(self):
        item = Gtk.MenuItem(label="Visible profiles")
        submenu = Gtk.Menu()
        snapshot = self.controller.snapshot
        for row in build_preference_rows(snapshot.catalog, self.store.get_visible_profiles(), snapshot.icons):
            toggle = Gtk.CheckMenuItem(label=row.profile)
            toggle.set_active(row.enabled)
            toggle.connect("toggled", self.on_visibility_toggled, row.profile)
            submenu.append(toggle)
        item.set_submenu(submenu)
        item.set_sensitive(bool(snapshot.catalog))
        return item

    def on_menu_show(self, _menu):
        # opening the menu re-reads tuned, one refresh at a time
        if self._refresh is not None and self._refresh.is_alive(): return
        self._refresh = self.run_in_thread(self.controller.refresh)

    def on_visibility_toggled(self, item, profile):
        self.store.set_profile_visible(profile, item.get_active())

    def on_profile_activate(self, item, profile, was_active):
        # set_active() while rendering emits activate as well
        if was_active or not item.get_active(): return
        self.run_in_thread(self.controller.switch_profile, profile)

    def run_in_thread(self, action, *args):
        def run():
            try: action(*args)
            except TunedSwitcherError as e: log.error("%s failed: %s", action.__name__, e)
        thread = Thread(target=run, daemon=True)
        thread.start()
        return thread

    def quit(self, _item=None):
        self.subscription.release()
        self.controller.teardown()
        self.store.stop()
        Gtk.main_quit()
