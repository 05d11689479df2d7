# tweenr/core/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any
from PySide6.QtCore import QSettings
from app_config import apply_qsettings_org, DEFAULTS
from tweenr.core.logging import get_logger

_log = get_logger(__name__)


@dataclass(frozen=True)
class TimelineSettings:
    duration_s: float
    fps: int
    update_interval_ms: int
    easing: str


class Settings:
    """
    Thin wrapper over QSettings with defaults and simple dict-like get/set.
    QSettings hands back strings on some platforms, so the typed getters coerce.
    """
    def __init__(self, qsettings: QSettings | None = None):
        if qsettings is None:
            apply_qsettings_org()
            qsettings = QSettings()
        self._qs = qsettings

    @staticmethod
    def default_for(key: str, fallback: Any = None) -> Any:
        group, _, name = key.partition("/")
        values = DEFAULTS.get(group)
        if isinstance(values, dict) and name in values:
            return values[name]
        return fallback

    def get(self, key: str, default: Any = None) -> Any:
        if default is None:
            default = self.default_for(key)
        val = self._qs.value(key, default)
        return val if val is not None else default

    def set(self, key: str, value: Any) -> None:
        self._qs.setValue(key, value)
        self._qs.sync()

    def get_float(self, key: str, default: float | None = None) -> float:
        fallback = float(default if default is not None else self.default_for(key, 0.0))
        try:
            return float(self.get(key, fallback))
        except (TypeError, ValueError):
            _log.debug("Setting %s is not a float; using %s", key, fallback)
            return fallback

    def get_int(self, key: str, default: int | None = None) -> int:
        fallback = int(default if default is not None else self.default_for(key, 0))
        try:
            return int(float(self.get(key, fallback)))
        except (TypeError, ValueError):
            _log.debug("Setting %s is not an int; using %s", key, fallback)
            return fallback

    def timeline(self) -> TimelineSettings:
        return TimelineSettings(
            duration_s=self.get_float("timeline/duration_s"),
            fps=self.get_int("timeline/fps"),
            update_interval_ms=self.get_int("timeline/update_interval_ms"),
            easing=str(self.get("timeline/easing")),
        )


def get_settings() -> Settings:
    return Settings()
