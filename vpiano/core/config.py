"""Configuration persistence using JSON format.

Stored at ~/.vpiano/config.json. Missing keys are filled from
``DEFAULT_CONFIG`` on load, so new settings appear without migration.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_HOLD_MS,
    DEFAULT_TEMPO_BPM,
    DEFAULT_VELOCITY,
    KEYBOARD_BASE_NOTE,
    KEYBOARD_OCTAVES,
    MAX_TEMPO_BPM,
    MIN_TEMPO_BPM,
)
from .errors import InvalidInputError

log = logging.getLogger(__name__)

_DEFAULT_DIR = Path.home() / ".vpiano"

# Default configuration schema
DEFAULT_CONFIG = {
    "version": "1.0",
    "recordings": {
        "directory": "",  # empty = <config dir>/recordings
    },
    "capture": {
        "velocity": DEFAULT_VELOCITY,
        "tempo_bpm": DEFAULT_TEMPO_BPM,  # informational, written to MIDI exports
    },
    "live": {
        "hold_ms": DEFAULT_HOLD_MS,  # auto-release for key-press feedback
    },
    "midi": {
        "output_port": "",  # empty = first available
    },
    "keyboard": {
        "base_note": KEYBOARD_BASE_NOTE,  # C3
        "octaves": KEYBOARD_OCTAVES,
    },
}


def parse_tempo(value: str | int) -> int:
    """Validate a user-entered tempo.

    Raises ``InvalidInputError`` for non-integers or values outside 1-300.
    """
    try:
        bpm = int(str(value).strip())
    except ValueError:
        raise InvalidInputError("Invalid tempo value") from None
    if not MIN_TEMPO_BPM <= bpm <= MAX_TEMPO_BPM:
        raise InvalidInputError(
            f"Tempo must be between {MIN_TEMPO_BPM} and {MAX_TEMPO_BPM}"
        )
    return bpm


class ConfigManager:
    """Manages user configuration with JSON persistence."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize config manager.

        Args:
            config_dir: Custom config directory. If None, uses ~/.vpiano/
        """
        if config_dir is None:
            config_dir = _DEFAULT_DIR
        self.config_dir = config_dir
        self.config_file = config_dir / "config.json"
        self._config: dict[str, Any] = {}
        self._load()

    @property
    def recordings_dir(self) -> Path:
        configured = self.get("recordings.directory", "")
        if configured:
            return Path(configured).expanduser()
        return self.config_dir / "recordings"

    def _load(self) -> None:
        """Load config from disk or create default."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    loaded = json.load(f)
                self._config = self._merge_defaults(loaded)
            except (json.JSONDecodeError, OSError) as e:
                log.warning("Failed to load config: %s. Using defaults.", e)
                self._config = copy.deepcopy(DEFAULT_CONFIG)
        else:
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save()

    def _merge_defaults(self, loaded: dict) -> dict:
        """Recursively merge loaded config with defaults."""
        def deep_merge(base: dict, override: dict) -> dict:
            merged = copy.deepcopy(base)
            for key, value in override.items():
                if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                    merged[key] = deep_merge(merged[key], value)
                else:
                    merged[key] = value
            return merged

        return deep_merge(DEFAULT_CONFIG, loaded)

    def _save(self) -> None:
        """Write config to disk."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.warning("Failed to save config: %s", e)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value using dot notation.

        Example:
            config.get("capture.tempo_bpm")
            config.get("live.hold_ms", 500)
        """
        keys = key_path.split(".")
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set config value using dot notation and save."""
        keys = key_path.split(".")
        target = self._config
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = value
        self._save()


# Global singleton instance
_global_config: ConfigManager | None = None


def get_config() -> ConfigManager:
    """Get global config instance (singleton pattern)."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config
