"""Tests for configuration loading and environment overrides."""

import json
from pathlib import Path

import pytest

from construct_tree.app import App
from construct_tree.config import TreeConfig, get_config_path, load_config, save_config
from construct_tree.errors import ConfigError


class TestConfig:
    """Tests for ctree.json handling."""

    def test_defaults_without_file(self, tmp_path: Path):
        config = load_config(tmp_path)

        assert config.outdir == "cdk.out"
        assert config.tree_metadata is True
        assert config.log_level == "warning"

    def test_save_and_load(self, tmp_path: Path):
        save_config(TreeConfig(outdir="build/out", tree_metadata=False), tmp_path)

        assert get_config_path(tmp_path).exists()
        config = load_config(tmp_path)
        assert config.outdir == "build/out"
        assert config.tree_metadata is False

    def test_env_overrides(self, tmp_path: Path, monkeypatch):
        save_config(TreeConfig(outdir="from-file"), tmp_path)
        monkeypatch.setenv("CTREE_OUTDIR", "from-env")
        monkeypatch.setenv("CTREE_TREE_METADATA", "no")
        monkeypatch.setenv("CTREE_LOG_LEVEL", "DEBUG")

        config = load_config(tmp_path)

        assert config.outdir == "from-env"
        assert config.tree_metadata is False
        assert config.log_level == "debug"

    def test_invalid_env_values_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CTREE_TREE_METADATA", "maybe")
        monkeypatch.setenv("CTREE_LOG_LEVEL", "loud")

        config = load_config(tmp_path)

        assert config.tree_metadata is True
        assert config.log_level == "warning"

    def test_app_uses_config(self, tmp_path: Path):
        app = App(config=TreeConfig(outdir=str(tmp_path / "out"), tree_metadata=False))

        assert app.outdir == tmp_path / "out"
        assert app.tree_metadata is None

    def test_malformed_file_raises_config_error(self, tmp_path: Path):
        get_config_path(tmp_path).write_text("{not json")

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_value_raises_config_error(self, tmp_path: Path):
        get_config_path(tmp_path).write_text(json.dumps({"log_level": "loud"}))

        with pytest.raises(ConfigError):
            load_config(tmp_path)
