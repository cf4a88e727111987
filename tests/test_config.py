"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from participant_tracker.config import (
    Config,
    default_storage_path,
    load_config_file,
    resolve_config_paths,
)
from participant_tracker.store import STORAGE_KEY


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.storage_path == default_storage_path()
        assert config.storage_key == STORAGE_KEY
        assert config.export_filename == "participants.csv"

    def test_relative_storage_path_resolves_against_config_dir(self, tmp_path):
        config_path = tmp_path / "tracker.yaml"
        config_path.write_text("storage_path: data/storage.json\n", encoding="utf-8")
        config = load_config_file(config_path)
        assert config.storage_path == (tmp_path / "data" / "storage.json").resolve()

    def test_absolute_path_is_kept(self, tmp_path):
        absolute = tmp_path / "elsewhere.json"
        resolved = resolve_config_paths(
            {"storage_path": str(absolute)}, tmp_path / "x.yaml"
        )
        assert resolved["storage_path"] == str(absolute)

    def test_empty_inputs(self):
        assert resolve_config_paths(None, None) == {}
        assert resolve_config_paths({}, Path("x.yaml")) == {}

    def test_empty_file_uses_defaults(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")
        assert load_config_file(config_path).storage_key == STORAGE_KEY

    def test_storage_path_must_not_be_directory(self, tmp_path):
        config_path = tmp_path / "tracker.yaml"
        config_path.write_text(f"storage_path: {tmp_path}\n", encoding="utf-8")
        with pytest.raises(ValueError, match="not a file"):
            load_config_file(config_path)

    def test_bad_log_level(self, tmp_path):
        config_path = tmp_path / "tracker.yaml"
        config_path.write_text("log_level: LOUD\n", encoding="utf-8")
        with pytest.raises(ValueError, match="log_level"):
            load_config_file(config_path)

    def test_wrong_type(self, tmp_path):
        config_path = tmp_path / "tracker.yaml"
        config_path.write_text("storage_key: [1, 2]\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config_file(config_path)

    def test_not_a_mapping(self, tmp_path):
        config_path = tmp_path / "tracker.yaml"
        config_path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config_file(config_path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yaml")
