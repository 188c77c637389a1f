"""Tests for bugzsync.lib.config and bugzsync.lib.envparse modules."""

from pathlib import Path
from unittest.mock import patch

import pytest

from bugzsync.lib import envparse
from bugzsync.lib.config import (
    DEFAULT_BUGZ_TIMEOUT,
    get_config_dir,
    load_sync_config,
)
from bugzsync.lib.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("BUGZSYNC_HOME", "BUGZSYNC_STORE_DIR", "BUGZSYNC_UNPLUGGED"):
        monkeypatch.delenv(key, raising=False)


class TestLoadEnv:
    """Test the safe env parser."""

    def test_parses_quoted_and_bare_values(self, tmp_path):
        path = tmp_path / "bugzsync.env"
        path.write_text('# comment\nBUGZ_USER="me@example.org"\nBUGZ_TIMEOUT=30\n\nexport UNPLUGGED=yes\n')
        env = envparse.load_env(path)
        assert env == {"BUGZ_USER": "me@example.org", "BUGZ_TIMEOUT": "30", "UNPLUGGED": "yes"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            envparse.load_env(tmp_path / "missing.env")

    def test_no_equals(self, tmp_path):
        path = tmp_path / "bad.env"
        path.write_text("JUSTAKEY\n")
        with pytest.raises(ValueError, match="no '='"):
            envparse.load_env(path)

    def test_lowercase_key_rejected(self, tmp_path):
        path = tmp_path / "bad.env"
        path.write_text("store_dir=/tmp\n")
        with pytest.raises(ValueError, match="Invalid key"):
            envparse.load_env(path)

    @pytest.mark.parametrize("value", ["bugz; rm -rf ~", "$(whoami)", "`id`", "a | b", "a && b"])
    def test_shell_patterns_rejected(self, tmp_path, value):
        path = tmp_path / "bad.env"
        path.write_text(f"BUGZ_COMMAND={value}\n")
        with pytest.raises(ValueError, match="Forbidden"):
            envparse.load_env(path)

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("on", True),
        ("false", False), ("0", False), ("", False), (None, False),
    ])
    def test_parse_bool(self, raw, expected):
        assert envparse.parse_bool(raw) is expected


class TestGetConfigDir:

    def test_defaults_to_home(self):
        assert get_config_dir() == Path("~/.bugzsync").expanduser()

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BUGZSYNC_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path


class TestLoadSyncConfig:
    """Test load_sync_config."""

    def test_defaults_without_file(self, tmp_path):
        config = load_sync_config(tmp_path)
        assert config.store_dir == tmp_path / "bugs"
        assert config.bugz_command == "bugz"
        assert config.timeout == DEFAULT_BUGZ_TIMEOUT
        assert config.unplugged is False
        assert config.columns is None
        assert config.queries_path == tmp_path / "queries.yaml"

    def test_reads_file(self, tmp_path):
        store = tmp_path / "cache"
        (tmp_path / "bugzsync.env").write_text(
            f'STORE_DIR="{store}"\n'
            'BUGZ_BASE_URL="https://bugs.example.org/"\n'
            'BUGZ_USER=me@example.org\n'
            'BUGZ_SKIP_AUTH=true\n'
            'BUGZ_COLUMNS=160\n'
            'BUGZ_TIMEOUT=45\n'
            'UNPLUGGED=true\n'
        )
        config = load_sync_config(tmp_path)
        assert config.store_dir == store
        assert config.base_url == "https://bugs.example.org/"
        assert config.user == "me@example.org"
        assert config.skip_auth is True
        assert config.columns == 160
        assert config.timeout == 45
        assert config.unplugged is True

    def test_environment_overrides(self, tmp_path, monkeypatch):
        (tmp_path / "bugzsync.env").write_text("UNPLUGGED=true\nSTORE_DIR=/from/file\n")
        monkeypatch.setenv("BUGZSYNC_UNPLUGGED", "false")
        monkeypatch.setenv("BUGZSYNC_STORE_DIR", str(tmp_path / "env-store"))
        config = load_sync_config(tmp_path)
        assert config.unplugged is False
        assert config.store_dir == tmp_path / "env-store"

    def test_bad_integer_is_config_error(self, tmp_path):
        (tmp_path / "bugzsync.env").write_text("BUGZ_TIMEOUT=soon\n")
        with pytest.raises(ConfigError, match="BUGZ_TIMEOUT must be an integer"):
            load_sync_config(tmp_path)

    def test_non_positive_integer_is_config_error(self, tmp_path):
        (tmp_path / "bugzsync.env").write_text("BUGZ_COLUMNS=0\n")
        with pytest.raises(ConfigError, match="positive"):
            load_sync_config(tmp_path)

    def test_malformed_file_is_config_error(self, tmp_path):
        (tmp_path / "bugzsync.env").write_text("not valid\n")
        with pytest.raises(ConfigError):
            load_sync_config(tmp_path)

    def test_unknown_key_warns(self, tmp_path, caplog):
        (tmp_path / "bugzsync.env").write_text("BUGZ_PASSWORD=hunter2\n")
        config = load_sync_config(tmp_path)
        assert config.extra == {"BUGZ_PASSWORD": "hunter2"}
        assert "Unknown key BUGZ_PASSWORD" in caplog.text

    @patch("bugzsync.lib.config.envparse.load_env")
    def test_uses_envparse(self, mock_load_env, tmp_path):
        (tmp_path / "bugzsync.env").write_text("")
        mock_load_env.return_value = {"BUGZ_COMMAND": "pybugz"}
        config = load_sync_config(tmp_path)
        assert config.bugz_command == "pybugz"
