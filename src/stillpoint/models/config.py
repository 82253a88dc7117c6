"""
Configuration models

Plain dataclasses mirroring the sections of config.yaml. ConfigManager builds
them from the merged YAML data; missing keys fall back to these defaults.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

from stillpoint.models.enums import LogLevel, WakeLockBackend


@dataclass
class TimerConfig:
    tick_interval_ms: int = 250
    cue_lead_ms: int = 1000


@dataclass
class SessionConfig:
    default_duration_minutes: int = 10
    min_duration_minutes: int = 1
    max_duration_minutes: int = 180
    preset_minutes: List[int] = field(default_factory=lambda: [5, 10, 15, 20])
    default_scene: str = "rain"
    scenes: List[str] = field(default_factory=lambda: ["rain", "forest", "ocean"])


@dataclass
class AudioConfig:
    enabled: bool = True
    fast_fade_s: float = 1.5
    completion_fade_s: float = 8.0
    cue_fade_s: float = 2.0
    cue_duration_s: float = 6.0


@dataclass
class WakeLockConfig:
    backend: WakeLockBackend = WakeLockBackend.NULL


@dataclass
class APIConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class LoggingConfig:
    level: LogLevel = LogLevel.INFO
    colors: bool = True


@dataclass
class AppConfig:
    timer: TimerConfig = field(default_factory=TimerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    wake_lock: WakeLockConfig = field(default_factory=WakeLockConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def section_from_dict(cls, data: Dict[str, Any] | None):
    """Build a config section dataclass, ignoring unknown keys."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})
