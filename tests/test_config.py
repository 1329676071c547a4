"""Tests for configuration loading."""

import json

import pytest

from bible_mirror.config import API_KEY_ENV, Config, get_config
from bible_mirror.errors import ConfigurationError


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV, raising=False)


class TestConfigLoad:
    """Test loading config files."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = get_config(tmp_path / "missing.json")
        assert config.source == "getbible"
        assert config.channel_name == "bible_app"
        assert config.request_timeout == 15.0
        assert config.mirror_snapshot is True

    def test_known_keys_loaded_unknown_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"channel_name": "church", "colour": "blue"}))
        config = get_config(path)
        assert config.channel_name == "church"
        assert not hasattr(config, "colour")

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{oops")
        assert get_config(path) == Config()

    def test_invalid_enums_reset(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"source": "ftp", "sync_backend": "carrier-pigeon"}))
        config = get_config(path)
        assert config.source == "getbible"
        assert config.sync_backend == "auto"

    def test_env_overrides_api_key(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api_key": "from-file"}))
        monkeypatch.setenv(API_KEY_ENV, "from-env")
        assert get_config(path).api_key == "from-env"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        Config(sync_backend="storage", poll_interval=1.0).save(path)
        config = get_config(path)
        assert config.sync_backend == "storage"
        assert config.poll_interval == 1.0


class TestConfigHelpers:
    """Test derived settings."""

    def test_store_file(self, tmp_path):
        config = Config(data_dir=str(tmp_path))
        assert config.store_file == tmp_path / "storage.json"

    def test_require_api_key(self):
        with pytest.raises(ConfigurationError):
            Config().require_api_key()
        assert Config(api_key="k").require_api_key() == "k"
