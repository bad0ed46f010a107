"""
Tests for TOML configuration loading.
"""
from pathlib import Path

import pytest

from forward.config import Config, AdsConfig, LabelsConfig


def write_config(tmp_path, text):
    path = tmp_path / "forward-countdown.toml"
    path.write_text(text, encoding="utf-8")
    return path


class TestConfigLoad:
    def test_full_file(self, tmp_path):
        path = write_config(tmp_path, """
[General]
storage_file = "~/countdowns/events.json"
timezone = "Europe/Amsterdam"
toast_duration = 4

[Ads]
enabled = true
endpoint = "https://ads.example.com/native"
cache_size = 3
interval = 7

[Colors]
accent = "#112233"

[Labels]
toast_event_deleted = "Gone"
""")
        config = Config.load(path)
        assert config.storage_file == Path("~/countdowns/events.json").expanduser()
        assert config.timezone == "Europe/Amsterdam"
        assert config.toast_duration == 4.0
        assert config.ads.enabled is True
        assert config.ads.cache_size == 3
        assert config.ads.interval == 7
        assert config.ads.preload_count == AdsConfig().preload_count
        assert config.colors.accent == "#112233"
        assert config.labels.toast_event_deleted == "Gone"
        assert config.labels.toast_events_deleted == LabelsConfig().toast_events_deleted

    def test_empty_file_uses_defaults(self, tmp_path):
        config = Config.load(write_config(tmp_path, ""))
        assert config.timezone == ""
        assert config.toast_duration == 2.5
        assert config.ads.enabled is False
        assert config.storage_file == Config.get_default_storage_path()

    def test_unknown_keys_ignored(self, tmp_path):
        config = Config.load(write_config(tmp_path, "[Colors]\nnot_a_color = \"#000\"\n"))
        assert not hasattr(config.colors, "not_a_color")

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load(tmp_path / "missing.toml")

    def test_missing_default_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        config = Config.load()
        assert config.storage_file == tmp_path / "data" / "forward-countdown" / "events.json"

    @pytest.mark.parametrize("text", [
        "[General]\ntoast_duration = 0\n",
        "[Ads]\ncache_size = 0\n",
        "[Ads]\ninterval = 0\n",
    ])
    def test_invalid_values(self, tmp_path, text):
        with pytest.raises(ValueError):
            Config.load(write_config(tmp_path, text))
