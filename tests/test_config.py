"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from anycli import config as config_module
from anycli.config import (
    AnycliConfig,
    DiscoveryConfig,
    ServerConfig,
    load_config,
    load_default_config,
)


class TestDiscoveryConfig:
    """Test discovery settings."""

    def test_defaults(self):
        config = DiscoveryConfig()

        assert config.max_depth == 1
        assert config.build_depth == 3
        assert config.batch_size == 20
        assert config.help_args == ["--help"]
        assert config.progress_interval == 10

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            DiscoveryConfig(batch_size=0)

    def test_help_args_required(self):
        with pytest.raises(ValidationError) as exc_info:
            DiscoveryConfig(help_args=[])
        assert "help argument" in str(exc_info.value)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            DiscoveryConfig(timeout=0)


class TestServerConfig:
    def test_default_name(self):
        assert ServerConfig().server_name("az") == "az-cli-wrapper"

    def test_explicit_name(self):
        assert ServerConfig(name="azure").server_name("az") == "azure"


class TestAnycliConfig:
    def test_command_is_stripped(self):
        assert AnycliConfig(command="  gh ").command == "gh"

    def test_blank_command_rejected(self):
        with pytest.raises(ValidationError):
            AnycliConfig(command="   ")


class TestLoadConfig:
    """Test TOML loading."""

    def test_full_file(self, tmp_path: Path):
        path = tmp_path / "anycli.toml"
        path.write_text(
            """
command = "gh"
cache_dir = "~/.cache/anycli"

[discovery]
max_depth = 2
batch_size = 8
help_args = ["help"]
timeout = 5.5

[server]
name = "github"
execute_tool = false
"""
        )

        config = load_config(path)

        assert config.command == "gh"
        assert config.cache_dir == "~/.cache/anycli"
        assert config.discovery.max_depth == 2
        assert config.discovery.batch_size == 8
        assert config.discovery.help_args == ["help"]
        assert config.discovery.timeout == 5.5
        assert config.server.name == "github"
        assert config.server.execute_tool is False

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[discovery]\nbatch_size = -1\n")

        with pytest.raises(ValidationError):
            load_config(path)

    def test_default_config_absent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(
            config_module, "get_default_config_path", lambda: tmp_path / "config.toml"
        )

        assert load_default_config() == AnycliConfig()

    def test_default_config_present(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "config.toml"
        path.write_text('command = "kubectl"\n')
        monkeypatch.setattr(config_module, "get_default_config_path", lambda: path)

        assert load_default_config().command == "kubectl"
