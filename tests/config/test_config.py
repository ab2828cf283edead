"""Tests for layered configuration."""

import logging
from pathlib import Path
import pytest
import yaml
from stackplan.config import load_config, load_executor_settings, get_state_path
from stackplan.cli.utils import load_cli_config
from stackplan.utils.errors import ConfigError
from stackplan.utils.logging import parse_level


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point HOME and cwd at empty temp directories."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.chdir(project)
    return home, project


def _write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestLoadConfig:
    """Test config layering."""

    def test_defaults(self, isolated_home):
        config = load_config()
        settings = load_executor_settings(config)
        assert settings.concurrency == 10
        assert settings.max_attempts == 5
        assert get_state_path(config) == ".stackplan/state.json"

    def test_project_overrides_user(self, isolated_home):
        home, project = isolated_home
        _write_yaml(home / ".stackplan" / "config.yaml", {"executor": {"concurrency": 3, "max_attempts": 2}})
        _write_yaml(project / ".stackplan" / "config.yaml", {"executor": {"concurrency": 7}})

        settings = load_executor_settings(load_config())

        assert settings.concurrency == 7
        assert settings.max_attempts == 2
        assert settings.base_delay == 1.0

    def test_explicit_file_and_overrides_win(self, isolated_home, tmp_path):
        explicit = tmp_path / "extra.yaml"
        _write_yaml(explicit, {"executor": {"concurrency": 4}, "state": {"path": "custom.json"}})

        config = load_config(str(explicit))
        settings = load_executor_settings(config, concurrency=None, max_attempts=9)

        assert settings.concurrency == 4
        assert settings.max_attempts == 9
        assert get_state_path(config) == "custom.json"

    def test_missing_explicit_file(self, isolated_home):
        with pytest.raises(ConfigError, match="not found"):
            load_config("does-not-exist.yaml")

    def test_invalid_values(self, isolated_home):
        with pytest.raises(ConfigError, match="Invalid executor settings"):
            load_executor_settings({"executor": {"concurrency": 0}})

    def test_invalid_yaml(self, isolated_home, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("executor: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(str(bad))

    def test_backoff_delay_capped(self):
        settings = load_executor_settings({"executor": {"base_delay": 1.0, "max_delay": 5.0}})
        assert [settings.backoff_delay(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


class TestLogLevel:

    def test_level_names(self):
        assert parse_level("warning") == logging.WARNING
        assert parse_level(logging.DEBUG) == logging.DEBUG

    def test_unknown_level_from_config(self, isolated_home, tmp_path):
        bad = tmp_path / "bad-level.yaml"
        _write_yaml(bad, {"logging": {"level": "chatty"}})
        with pytest.raises(ConfigError, match="logging.level"):
            load_cli_config(str(bad))
