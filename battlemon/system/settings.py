from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List, Optional
from battlemon.core.logging import logger, LEVELS

SETTINGS_FILENAME = ".battlemon_settings.json"

@dataclass
class SettingsData:
    pause_seconds: float = 1.0     # narration pause between battle steps
    log_level: str = "INFO"        # DEBUG / INFO / WARN / ERROR
    language: str = "en"           # dialogue folder under assets/dialogue
    debug: bool = False            # forces DEBUG logging
    save_dir: Optional[str] = None # None -> ~/.battlemon_saves

    def normalize(self):
        try:
            self.pause_seconds = max(0.0, float(self.pause_seconds))
        except (TypeError, ValueError):
            self.pause_seconds = 1.0
        if self.log_level not in LEVELS:
            self.log_level = "INFO"
        if not isinstance(self.language, str) or not self.language.strip():
            self.language = "en"
        self.debug = bool(self.debug)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                # Unknown keys are dropped, missing ones take defaults
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)

    def apply_logging(self):
        logger.set_level(self.data.effective_log_level)

    def update(self, **changes):
        """Change fields, normalize, persist and notify listeners."""
        known = {f.name for f in fields(SettingsData)}
        for key, value in changes.items():
            if key not in known:
                raise KeyError(f"unknown setting '{key}'")
            setattr(self.data, key, value)
        self.data.normalize()
        self.apply_logging()
        self.save()
        self._notify()
