from pathlib import Path

import pytest

pytest.importorskip("gi")
pytest.importorskip("dasbus")

from click.testing import CliRunner

from tuned_switcher.bin import tuned_switcher as cli
from tuned_switcher.config.config import ConfigStore

from conftest import FakeTuned


@pytest.fixture
def tuned(monkeypatch: pytest.MonkeyPatch) -> FakeTuned:
    tuned = FakeTuned()
    monkeypatch.setattr(cli, "TunedSession", lambda timeout: tuned.session_factory())
    monkeypatch.setattr(cli, "setup_logger", lambda debug: None)
    return tuned


@pytest.fixture
def conf_file(tmp_path: Path) -> Path:
    path = tmp_path / "tuned-switcher.conf"
    path.write_text("[profiles]\n", encoding="utf-8")
    return path


def _run(conf_file: Path, *args: str):
    return CliRunner().invoke(cli.main, ["--config", str(conf_file), *args])


def test_status_is_the_default(tuned: FakeTuned, conf_file: Path) -> None:
    result = _run(conf_file)

    assert result.exit_code == 0, result.output
    assert "Active profile: balanced" in result.output
    assert "* balanced" in result.output
    assert "  powersave" in result.output
    assert tuned.sessions[0].closed == 1


def test_switch(tuned: FakeTuned, conf_file: Path) -> None:
    result = _run(conf_file, "--switch", "powersave")

    assert result.exit_code == 0, result.output
    assert "Switched to powersave" in result.output
    assert tuned.active == "powersave"


def test_cycle_respects_visible_profiles(tuned: FakeTuned, conf_file: Path) -> None:
    conf_file.write_text("[profiles]\nvisible-profiles = balanced, powersave\n", encoding="utf-8")
    tuned.active = "powersave"

    result = _run(conf_file, "--cycle")

    assert result.exit_code == 0, result.output
    assert tuned.active == "balanced"


def test_rejected_switch_exits_with_error(tuned: FakeTuned, conf_file: Path) -> None:
    result = _run(conf_file, "--switch", "turbo")

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "doesn't exist" in result.output


def test_unreachable_tuned_exits_with_error(tuned: FakeTuned, conf_file: Path) -> None:
    tuned.reachable = False

    result = _run(conf_file)

    assert result.exit_code == 1
    assert "cannot reach com.redhat.tuned" in result.output


def test_preference_edits_are_saved(tuned: FakeTuned, conf_file: Path) -> None:
    result = _run(conf_file, "--show", "balanced", "--show", "powersave", "--icon", "powersave=🔋", "--show-name")

    assert result.exit_code == 0, result.output
    assert "[x] powersave: 🔋" in result.output
    assert "[ ] performance" in result.output
    store = ConfigStore(str(conf_file), watch=False)
    assert store.get_visible_profiles() == ["balanced", "powersave"]
    assert store.get_profile_icons() == {"powersave": "🔋"}
    assert store.get_show_profile_name() is True


def test_bad_icon_option(tuned: FakeTuned, conf_file: Path) -> None:
    result = _run(conf_file, "--icon", "powersave")

    assert result.exit_code == 2
    assert "PROFILE=ICON" in result.output


def test_version(conf_file: Path) -> None:
    result = CliRunner().invoke(cli.main, ["--version"])

    assert result.exit_code == 0
    assert "tuned-switcher version" in result.output


def test_preference_edit_repairs_file_without_section(tuned: FakeTuned, conf_file: Path) -> None:
    conf_file.write_text("visible-profiles = balanced\n", encoding="utf-8")

    result = _run(conf_file, "--show-name")

    assert result.exit_code == 0, result.output
    assert "Show profile name: yes" in result.output
