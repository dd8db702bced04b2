import os

import pytest
import yaml

from sticker_habits import configreader
from sticker_habits.errors import ConfigError


class TestLoadSettings:
    def test_missing_config_is_created_with_defaults(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"

        settings = configreader.load_settings(str(cfg_path))

        assert cfg_path.exists()
        written = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
        assert written["key"] == settings.key
        assert settings.storage_path == os.path.join(str(tmp_path), "storage.dat")
        assert settings.tick_seconds == 60
        assert settings.backups == 2
        assert settings.catalog_path is None
        assert settings.log_level == "INFO"

    def test_key_is_stable_between_loads(self, tmp_path):
        cfg_path = str(tmp_path / "config.yaml")
        assert configreader.load_settings(cfg_path).key == configreader.load_settings(cfg_path).key

    def test_custom_values(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text(yaml.safe_dump({
            "storage_file": "data/state.dat",
            "key": "abc",
            "tick_seconds": 5,
            "backups": 0,
            "catalog_file": "/abs/catalog.yaml",
            "log_level": "debug",
        }), encoding="utf-8")

        settings = configreader.load_settings(str(cfg_path))

        assert settings.storage_path == os.path.join(str(tmp_path), "data/state.dat")
        assert settings.tick_seconds == 5
        assert settings.backups == 0
        assert settings.catalog_path == "/abs/catalog.yaml"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("bad", [{"tick_seconds": 0}, {"tick_seconds": "x"}, {"backups": -1}])
    def test_bad_numbers(self, tmp_path, bad):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text(yaml.safe_dump({"key": "abc", **bad}), encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.load_settings(str(cfg_path))

    @pytest.mark.parametrize("bad", [{"storage_file": 5}, {"catalog_file": ["a.yaml"]}])
    def test_non_string_paths(self, tmp_path, bad):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text(yaml.safe_dump({"key": "abc", **bad}), encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.load_settings(str(cfg_path))

    def test_unknown_log_level(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text(yaml.safe_dump({"key": "abc", "log_level": "loud"}), encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.load_settings(str(cfg_path))

    def test_missing_key(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text("tick_seconds: 60\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.load_settings(str(cfg_path))

    def test_malformed_yaml(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text("key: [oops", encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.get_config(str(cfg_path))

    def test_non_mapping(self, tmp_path):
        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            configreader.get_config(str(cfg_path))
