"""Tests for config file parsing."""

from unittest.mock import patch

from focusbank.config import DATA_DIR, Config, load_config


def _load(tmp_path, text: str) -> Config:
    config_file = tmp_path / "focusbank.conf"
    config_file.write_text(text)
    with patch("focusbank.config.CONFIG_FILE", config_file):
        return load_config()


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        with patch("focusbank.config.CONFIG_FILE", tmp_path / "absent.conf"):
            config = load_config()
        assert config.default_quick_minutes == 25
        assert config.llm_backend == "cli"
        assert config.llm_command == ["claude", "-p"]
        assert config.tasks_path == DATA_DIR / "tasks.json"

    def test_parses_values(self, tmp_path):
        config = _load(
            tmp_path,
            "\n".join(
                [
                    "# comment",
                    "TASKS_FILE=~/tasks.json",
                    "DEFAULT_QUICK_MINUTES=15",
                    "AUTO_CATEGORIZE=yes",
                    'LLM_BACKEND="gemini" # hosted',
                    "LLM_COMMAND='llm -m mini'",
                    "GEMINI_API_KEY=abc",
                    "GEMINI_MODEL=gemini-pro # inline comment",
                ]
            ),
        )
        assert config.tasks_path.name == "tasks.json"
        assert "~" not in str(config.tasks_path)
        assert config.default_quick_minutes == 15
        assert config.auto_categorize is True
        assert config.llm_backend == "gemini"
        assert config.llm_command == ["llm", "-m", "mini"]
        assert config.gemini_api_key == "abc"
        assert config.gemini_model == "gemini-pro"

    def test_bad_values_keep_defaults(self, tmp_path):
        config = _load(tmp_path, "DEFAULT_QUICK_MINUTES=soon\nLLM_BACKEND=openai\nLLM_TIMEOUT=x\n")
        assert config.default_quick_minutes == 25
        assert config.llm_backend == "cli"
        assert config.llm_timeout == 300

    def test_quick_minutes_floor(self, tmp_path):
        assert _load(tmp_path, "DEFAULT_QUICK_MINUTES=0").default_quick_minutes == 1
