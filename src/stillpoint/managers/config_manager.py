"""
Config Manager

Loads config/config.yaml (with include: support) and builds the typed
AppConfig sections the rest of the application consumes.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from stillpoint.models.config import (
    AppConfig,
    TimerConfig,
    SessionConfig,
    AudioConfig,
    WakeLockConfig,
    APIConfig,
    LoggingConfig,
    section_from_dict,
)
from stillpoint.models.enums import LogCategory, LogLevel, WakeLockBackend
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)

CONFIG_DIR = Path(__file__).parent.parent / "config"


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes the include: directive to merge modular
    YAML files. Falls back to factory_defaults.yaml if the main configuration
    cannot be read.

    Example:
        config = ConfigManager()
        config.load()

        config.app.timer.tick_interval_ms   # 250
        config.app.session.preset_minutes   # [5, 10, 15, 20]
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        defaults_path: Optional[Path] = None
    ):
        """
        Args:
            config_path: Main config file (default: packaged config/config.yaml)
            defaults_path: Factory defaults fallback (default: packaged factory_defaults.yaml)
        """
        self.config_path = Path(config_path) if config_path else CONFIG_DIR / "config.yaml"
        self.factory_defaults_path = Path(defaults_path) if defaults_path else CONFIG_DIR / "factory_defaults.yaml"
        self.data: Dict[str, Any] = {}
        self.app = AppConfig()

    def load(self) -> AppConfig:
        """
        Load YAML configuration

        Process:
        1. Load main config.yaml
        2. If it has an 'include:' list, load and merge those files
        3. Otherwise treat it as a monolithic config
        4. Fall back to factory defaults on failure
        5. Build typed sections

        Returns:
            AppConfig
        """
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f) or {}

            if "include" in main_config:
                log.info("Using include-based configuration", path=str(self.config_path))
                self.data = self._load_with_includes(main_config["include"], self.config_path.parent)
            else:
                log.info("Using monolithic configuration", path=str(self.config_path))
                self.data = main_config

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            with open(self.factory_defaults_path, "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}

        self.app = self._build(self.data)
        return self.app

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict[str, Any]:
        """
        Load and merge YAML files from the include list

        Later files override top-level keys of earlier ones.
        """
        merged: Dict[str, Any] = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    file_data = yaml.safe_load(f)
                    if file_data:
                        merged.update(file_data)
                        log.debug(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())))
        return merged

    # ===== Typed sections =====

    def _build(self, data: Dict[str, Any]) -> AppConfig:
        timer = section_from_dict(TimerConfig, data.get("timer"))
        session = section_from_dict(SessionConfig, data.get("session"))
        audio = section_from_dict(AudioConfig, data.get("audio"))
        api = section_from_dict(APIConfig, data.get("api"))

        wake_lock_data = dict(data.get("wake_lock") or {})
        wake_lock_data["backend"] = self._parse_enum(
            WakeLockBackend, wake_lock_data.get("backend"), WakeLockBackend.NULL, by_value=True
        )
        wake_lock = section_from_dict(WakeLockConfig, wake_lock_data)

        logging_data = dict(data.get("logging") or {})
        logging_data["level"] = self._parse_enum(LogLevel, logging_data.get("level"), LogLevel.INFO)
        logging_cfg = section_from_dict(LoggingConfig, logging_data)

        self._validate_timer(timer)
        self._validate_session(session)

        return AppConfig(
            timer=timer,
            session=session,
            audio=audio,
            wake_lock=wake_lock,
            api=api,
            logging=logging_cfg,
        )

    @staticmethod
    def _parse_enum(enum_cls, raw, default, by_value: bool = False):
        if raw is None:
            return default
        try:
            if by_value:
                return enum_cls(str(raw).lower())
            return enum_cls[str(raw).upper()]
        except (KeyError, ValueError):
            log.warn(f"Unknown {enum_cls.__name__} '{raw}', using {default.name}")
            return default

    @staticmethod
    def _validate_timer(timer: TimerConfig) -> None:
        defaults = TimerConfig()
        if timer.tick_interval_ms <= 0:
            log.warn("tick_interval_ms must be positive", value=timer.tick_interval_ms)
            timer.tick_interval_ms = defaults.tick_interval_ms
        if timer.cue_lead_ms < 0:
            log.warn("cue_lead_ms must not be negative", value=timer.cue_lead_ms)
            timer.cue_lead_ms = defaults.cue_lead_ms

    @staticmethod
    def _validate_session(session: SessionConfig) -> None:
        defaults = SessionConfig()
        if not 0 < session.min_duration_minutes <= session.max_duration_minutes:
            log.warn(
                "Invalid duration bounds, using defaults",
                min=session.min_duration_minutes,
                max=session.max_duration_minutes
            )
            session.min_duration_minutes = defaults.min_duration_minutes
            session.max_duration_minutes = defaults.max_duration_minutes

        in_range = [
            m for m in session.preset_minutes
            if session.min_duration_minutes <= m <= session.max_duration_minutes
        ]
        if len(in_range) != len(session.preset_minutes):
            log.warn("Dropping out-of-range presets", presets=session.preset_minutes)
        session.preset_minutes = in_range

        if not session.min_duration_minutes <= session.default_duration_minutes <= session.max_duration_minutes:
            log.warn("default_duration_minutes out of range", value=session.default_duration_minutes)
            session.default_duration_minutes = session.min_duration_minutes

        if not session.scenes:
            session.scenes = list(defaults.scenes)
        if session.default_scene not in session.scenes:
            log.warn("default_scene not in scenes", value=session.default_scene)
            session.default_scene = session.scenes[0]
