"""Configuration management for Agenda."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

AGENDA_HOME = Path(os.environ.get("AGENDA_HOME", Path.home() / ".agenda"))
CONFIG_FILE = AGENDA_HOME / "agenda.conf"
DEFAULT_LOG_FILE = Path.home() / ".todo.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Agenda configuration."""

    log_file: str = str(DEFAULT_LOG_FILE)
    show_complete: bool = True
    editor: str = ""

    @property
    def log_path(self) -> Path:
        return Path(self.log_file).expanduser()


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning(f"Ignoring {key.upper()}={value!r}: expected true or false")
    return default


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from agenda.conf, then apply environment overrides."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if config_file.exists():
        for line in config_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "log_file":
                    config.log_file = value
                case "show_complete":
                    config.show_complete = _parse_bool(key, value, config.show_complete)
                case "editor":
                    config.editor = value
                case _:
                    logger.debug(f"Unknown config key: {key}")

    # Environment wins over the config file
    if os.environ.get("AGENDA_LOG"):
        config.log_file = os.environ["AGENDA_LOG"]

    return config
