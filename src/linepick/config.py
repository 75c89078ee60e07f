"""Configuration with file defaults and env overrides."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from linepick.models import PickOptions

logger = logging.getLogger("linepick.config")

# Module-level cache for singleton pattern
_config_cache: "Config | None" = None


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing or config reload."""
    global _config_cache
    _config_cache = None


def get_default_config_dir() -> Path:
    """Get default config directory, respecting LINEPICK_CONFIG_DIR env var."""
    config_dir = os.environ.get("LINEPICK_CONFIG_DIR")
    if config_dir:
        return Path(config_dir)
    return Path.home() / ".config" / "linepick"


class Config:
    """Runtime configuration with env override support."""

    DEFAULTS: dict[str, Any] = {
        "numbering": False,
        "id_mode": False,
        "id_delimiter": "::",
        "skip_blank": False,
        "show_header": True,
        "cursor_indicator": ">",
        "selected_indicator": "*",
        "advance_on_toggle": False,
        "log_file": "",  # Empty = no logging
        "keybindings": {},  # key name -> action name, merged over defaults
    }

    def __init__(self, config_dir: Path | None = None):
        self._config_dir = config_dir or get_default_config_dir()
        self._config_file = self._config_dir / "config.json"
        self._data: dict[str, Any] = {}

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Factory method - explicit loading with caching."""
        global _config_cache

        if _config_cache is not None and config_dir is None:
            return _config_cache

        config = cls(config_dir)
        config._load_from_file()
        config._apply_env_overrides()

        if config_dir is None:
            _config_cache = config

        return config

    def __getattr__(self, name: str) -> Any:
        """Access config values as attributes."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._data:
            return self._data[name]
        if name in self.DEFAULTS:
            return self.DEFAULTS[name]
        raise AttributeError(f"Config has no attribute '{name}'")

    def pick_options(self, **overrides: Any) -> PickOptions:
        """Build picker options; non-None overrides (CLI flags) win."""
        values = {
            "numbering": bool(self.numbering),
            "id_mode": bool(self.id_mode),
            "id_delimiter": str(self.id_delimiter),
            "skip_blank": bool(self.skip_blank),
            "show_header": bool(self.show_header),
            "cursor_indicator": str(self.cursor_indicator),
            "selected_indicator": str(self.selected_indicator),
            "advance_on_toggle": bool(self.advance_on_toggle),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return PickOptions(**values)

    def _load_from_file(self) -> None:
        if self._config_file.exists():
            try:
                content = self._config_file.read_text()
                if content.strip():
                    data = json.loads(content)
                    self._data = data if isinstance(data, dict) else {}
            except json.JSONDecodeError:
                # Corrupted config - use defaults
                logger.warning("Ignoring corrupted config file %s", self._config_file)
                self._data = {}

    def _apply_env_overrides(self) -> None:
        """Apply LINEPICK_* env vars (highest priority)."""
        for key, default in self.DEFAULTS.items():
            env_key = f"LINEPICK_{key.upper()}"
            if env_key in os.environ:
                try:
                    self._data[key] = self._coerce(os.environ[env_key], type(default))
                except ValueError:
                    logger.warning("Ignoring invalid value for %s", env_key)

    @staticmethod
    def _coerce(value: str, target_type: type) -> Any:
        """Coerce string env value to target type."""
        if target_type is bool:
            return value.lower() in ("true", "1", "yes")
        if target_type is int:
            return int(value)
        if target_type is dict:
            parsed = json.loads(value)
            if not isinstance(parsed, dict):
                raise ValueError(f"Expected a JSON object, got {value!r}")
            return parsed
        return value
