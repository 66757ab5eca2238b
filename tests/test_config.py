"""Tests for configuration loading, logging setup and the CLI."""

import json
import logging

import pytest

from agent_tools import tool_registry
from agent_tools.__main__ import main
from agent_tools.config import DEFAULTS, Config, load_config
from agent_tools.logger import configure_logging, get_logger


class TestConfig:
    """Tests for Config and load_config."""

    def test_defaults(self):
        config = Config()
        assert config.get("workflows.storage_dir") == ".workflows"
        assert config.get("eval.require_authorization") is True
        assert config.get("dispatch.timeout_seconds", 7) == 7

    def test_deep_merge_keeps_siblings(self):
        config = Config({"eval": {"timeout_seconds": 5}})
        assert config.get("eval.timeout_seconds") == 5
        assert config.get("eval.require_authorization") is True
        assert DEFAULTS["eval"]["timeout_seconds"] == 30

    def test_missing_key_default(self):
        assert Config().get("nope.nothing", "fallback") == "fallback"

    def test_set(self):
        config = Config()
        config.set("custom.deep.key", 3)
        assert config.get("custom.deep.key") == 3

    def test_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("database:\n  path: data.db\n")
        config = load_config(path)
        assert config.get("database.path") == "data.db"
        assert config.path == path

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("doc:\n  max_pages: 2\n")
        monkeypatch.setenv("AGENT_TOOLS_CONFIG", str(path))
        assert load_config().get("doc.max_pages") == 2

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AGENT_TOOLS_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        assert load_config().as_dict() == DEFAULTS

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            Config.from_file(path)


class TestLogger:
    """Tests for package logger configuration."""

    @pytest.fixture(autouse=True)
    def restore(self):
        yield
        configure_logging(Config({"logging": {"level": "WARNING"}}), force=True)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "test.log"
        config = Config({"logging": {"level": "DEBUG", "file": str(log_file), "console": False}})
        package_logger = configure_logging(config, force=True)
        get_logger("agent_tools.test_file_handler").debug("written")
        for handler in package_logger.handlers:
            handler.flush()
        assert package_logger.level == logging.DEBUG
        assert not package_logger.propagate
        assert "written" in log_file.read_text()

    def test_first_configuration_wins(self):
        configure_logging(Config({"logging": {"level": "ERROR"}}), force=True)
        package_logger = configure_logging(Config({"logging": {"level": "DEBUG"}}))
        assert package_logger.level == logging.ERROR

    def test_names_placed_under_package(self):
        assert get_logger("custom").name == "agent_tools.custom"
        assert get_logger("agent_tools.workflow_manager").name == "agent_tools.workflow_manager"


class TestCli:
    """Tests for python -m agent_tools."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path, monkeypatch):
        monkeypatch.delenv("AGENT_TOOLS_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        yield
        tool_registry.inject_dependencies({"config": None})

    def test_list(self, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert "disk_tool: directory_create" in out
        assert "workflow_manager: start, step, status, complete" in out

    def test_call(self, tmp_path, capsys, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(f"disk:\n  root: {tmp_path}\nlogging:\n  level: WARNING\n")
        (tmp_path / "a.txt").write_text("hello")
        code = main(["--config", str(path), "call", "disk_tool", "file_read", "path=a.txt"])
        result = json.loads(capsys.readouterr().out)
        assert code == 0
        assert result["data"] == "hello"

    def test_call_refused_path(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text(f"disk:\n  root: {tmp_path}\nlogging:\n  level: WARNING\n")
        code = main(["--config", str(path), "call", "disk_tool", "file_read", "path=../x"])
        assert code == 2
        assert json.loads(capsys.readouterr().out)["error"]["kind"] == "security_violation"
