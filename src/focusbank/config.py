"""Configuration management for Focusbank."""

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

FOCUSBANK_HOME = Path(os.environ.get("FOCUSBANK_HOME", Path.home() / "focusbank"))
CONFIG_FILE = FOCUSBANK_HOME / "config" / "focusbank.conf"
DATA_DIR = FOCUSBANK_HOME / "data"

LLM_BACKENDS = ("cli", "gemini", "none")


@dataclass
class Config:
    """Focusbank configuration."""

    tasks_file: str = ""
    default_quick_minutes: int = 25
    auto_categorize: bool = False
    # Model settings
    llm_backend: str = "cli"
    llm_command: list[str] = field(default_factory=lambda: ["claude", "-p"])
    llm_timeout: int = 300
    gemini_api_key: str = field(default_factory=lambda: os.environ.get("GEMINI_API_KEY", ""))
    gemini_model: str = "gemini-2.0-flash"

    @property
    def tasks_path(self) -> Path:
        """Resolved location of the task store."""
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key.upper()}={value!r}")
        return default


def load_config() -> Config:
    """Load configuration from focusbank.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "tasks_file":
                config.tasks_file = value
            case "default_quick_minutes":
                minutes = _parse_int(key, value, config.default_quick_minutes)
                config.default_quick_minutes = max(1, minutes)
            case "auto_categorize":
                config.auto_categorize = _parse_bool(value)
            case "llm_backend":
                backend = value.lower()
                if backend in LLM_BACKENDS:
                    config.llm_backend = backend
                else:
                    logger.warning(f"Unknown LLM_BACKEND value {value!r}, keeping {config.llm_backend}")
            case "llm_command":
                config.llm_command = shlex.split(value)
            case "llm_timeout":
                config.llm_timeout = _parse_int(key, value, config.llm_timeout)
            case "gemini_api_key":
                config.gemini_api_key = value
            case "gemini_model":
                config.gemini_model = value

    return config
