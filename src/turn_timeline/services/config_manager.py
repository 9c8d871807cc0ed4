"""Pipeline settings with typed getters and JSON file overrides."""

import logging
from pathlib import Path

import orjson

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "stream/maxResultLines": 50,
    "summary/bulletMaxChars": 200,
    "text/dropFillerThinking": True,
    "advanced/debugLogging": False,
}


class ConfigError(RuntimeError):
    pass


class ConfigManager:
    """Centralized pipeline settings keyed by "section/key"."""

    def __init__(self, overrides: dict | None = None):
        self._settings: dict = {}
        if overrides:
            self._settings.update(overrides)

    def get_string(self, key: str) -> str:
        return str(self._settings.get(key, DEFAULTS.get(key, "")))

    def get_int(self, key: str) -> int:
        val = self._settings.get(key, DEFAULTS.get(key, 0))
        if isinstance(val, bool):
            return DEFAULTS.get(key, 0)
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._settings.get(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def set_string(self, key: str, value: str):
        self._settings[key] = value

    def set_int(self, key: str, value: int):
        self._settings[key] = value

    def set_bool(self, key: str, value: bool):
        self._settings[key] = value

    def load_file(self, path: str | Path, strict: bool = False) -> bool:
        """Merge overrides from a JSON object file.

        Nested sections ({"stream": {"maxResultLines": 20}}) and flat
        "section/key" entries are both accepted. Returns True when the file
        was applied. A missing, unreadable or non-object file raises
        ConfigError in strict mode and is otherwise ignored with a warning.
        """
        path = Path(path)
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            if strict:
                raise ConfigError(f"Cannot read config {path}: {e}") from e
            logger.warning("Ignoring config %s: %s", path, e)
            return False

        if not isinstance(data, dict):
            if strict:
                raise ConfigError(f"Config {path} must be a JSON object")
            logger.warning("Ignoring config %s: not a JSON object", path)
            return False

        for key, value in data.items():
            if isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    self._settings[f"{key}/{sub_key}"] = sub_value
            else:
                self._settings[key] = value
        return True

    def reset(self):
        """Drop every override, falling back to DEFAULTS."""
        self._settings.clear()


def configure_logging(config: ConfigManager) -> None:
    """Apply `advanced/debugLogging` to the package logger."""
    package_logger = logging.getLogger("turn_timeline")
    package_logger.setLevel(logging.DEBUG if config.get_bool("advanced/debugLogging") else logging.WARNING)
