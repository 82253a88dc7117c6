import textwrap

import pytest

from stillpoint.managers.config_manager import ConfigManager
from stillpoint.models.enums import LogLevel, WakeLockBackend


def write(path, text):
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def defaults(tmp_path):
    return write(tmp_path / "factory_defaults.yaml", """
        session:
          default_duration_minutes: 15
        api:
          enabled: false
    """)


def test_packaged_config_loads():
    app = ConfigManager().load()

    assert app.timer.tick_interval_ms == 250
    assert app.timer.cue_lead_ms == 1000
    assert app.session.preset_minutes == [5, 10, 15, 20]
    assert app.session.default_scene == "rain"
    assert app.audio.completion_fade_s == 8.0
    assert app.wake_lock.backend is WakeLockBackend.NULL
    assert app.logging.level is LogLevel.INFO


def test_include_files_are_merged(tmp_path, defaults):
    write(tmp_path / "timer.yaml", """
        timer:
          tick_interval_ms: 100
    """)
    write(tmp_path / "system.yaml", """
        wake_lock:
          backend: systemd
        logging:
          level: debug
          colors: false
    """)
    config = write(tmp_path / "config.yaml", """
        include:
          - timer.yaml
          - system.yaml
    """)

    app = ConfigManager(config, defaults).load()

    assert app.timer.tick_interval_ms == 100
    assert app.timer.cue_lead_ms == 1000
    assert app.wake_lock.backend is WakeLockBackend.SYSTEMD
    assert app.logging.level is LogLevel.DEBUG
    assert app.logging.colors is False


def test_monolithic_config(tmp_path, defaults):
    config = write(tmp_path / "config.yaml", """
        audio:
          enabled: false
          cue_duration_s: 3.0
        unknown_section:
          foo: 1
    """)

    app = ConfigManager(config, defaults).load()

    assert app.audio.enabled is False
    assert app.audio.cue_duration_s == 3.0


def test_missing_include_falls_back_to_factory_defaults(tmp_path, defaults):
    config = write(tmp_path / "config.yaml", """
        include:
          - missing.yaml
    """)

    app = ConfigManager(config, defaults).load()

    assert app.session.default_duration_minutes == 15
    assert app.api.enabled is False


def test_unknown_enum_values_use_defaults(tmp_path, defaults):
    config = write(tmp_path / "config.yaml", """
        wake_lock:
          backend: dbus
        logging:
          level: loud
    """)

    app = ConfigManager(config, defaults).load()

    assert app.wake_lock.backend is WakeLockBackend.NULL
    assert app.logging.level is LogLevel.INFO


def test_invalid_values_are_corrected(tmp_path, defaults):
    config = write(tmp_path / "config.yaml", """
        timer:
          tick_interval_ms: 0
          cue_lead_ms: -5
        session:
          min_duration_minutes: 5
          max_duration_minutes: 60
          default_duration_minutes: 90
          preset_minutes: [1, 10, 30, 120]
          scenes: [forest, ocean]
          default_scene: rain
    """)

    app = ConfigManager(config, defaults).load()

    assert app.timer.tick_interval_ms == 250
    assert app.timer.cue_lead_ms == 1000
    assert app.session.preset_minutes == [10, 30]
    assert app.session.default_duration_minutes == 5
    assert app.session.default_scene == "forest"


def test_inverted_duration_bounds_reset(tmp_path, defaults):
    config = write(tmp_path / "config.yaml", """
        session:
          min_duration_minutes: 30
          max_duration_minutes: 10
    """)

    app = ConfigManager(config, defaults).load()

    assert app.session.min_duration_minutes == 1
    assert app.session.max_duration_minutes == 180
