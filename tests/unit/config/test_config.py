"""Unit tests for settings loading."""

from pathlib import Path

import pytest

from vklogin.config import Config, DatabaseConfig


class TestDatabaseUrl:
    def test_derived_from_data_dir(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.delenv("VKLOGIN_DATABASE__URL", raising=False)
        monkeypatch.setenv("VKLOGIN_DATA_DIR", str(tmp_path))

        config = Config()

        assert config.database.url == f"sqlite+aiosqlite:///{tmp_path / 'vklogin.db'}"
        assert config.database.auto_migrate is True

    def test_explicit_url_kept(self):
        config = Config(database=DatabaseConfig(url="postgresql+asyncpg://u@h/db"))

        assert config.database.url == "postgresql+asyncpg://u@h/db"


class TestSources:
    def test_yaml_file_is_read(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        config_file = tmp_path / "vklogin.yaml"
        config_file.write_text(
            "auth:\n  vk:\n    client_id: '42'\n  state_ttl_seconds: 30\n"
            "frontend:\n  url: https://front.example.com\n"
        )
        monkeypatch.setenv("VKLOGIN_CONFIG_FILE", str(config_file))

        config = Config()

        assert config.auth.vk.client_id == "42"
        assert config.auth.state_ttl_seconds == 30
        assert config.frontend.url == "https://front.example.com"

    def test_env_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("VKLOGIN_AUTH__VK__API_VERSION", "5.131")

        config = Config()

        assert config.auth.vk.api_version == "5.131"
        assert config.auth.vk.token_url == "https://oauth.vk.com/access_token"

    def test_session_secret_from_env(self):
        # Set by tests/conftest.py
        assert Config().auth.session.secret == "test-secret-for-unit-tests-min-32"
