# tests/unit/test_config.py
"""
Tests for the YAML + environment configuration loader.
"""

import pytest

from therapy_center.config import ConfigLoader


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("STORE_TYPE", "SQLITE_DB_PATH", "API_PORT", "ALLOWED_ORIGINS", "BATCH_LIMIT",
                 "FORM_LINK_BASE", "SUPER_ADMIN_KEY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("THERAPY_ENV", "staging")

    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "default.yaml").write_text(
        "store_type: sqlite\nsqlite_path: default.db\napi_port: 3001\n", encoding="utf-8"
    )
    (directory / "staging.yaml").write_text("sqlite_path: staging.db\n", encoding="utf-8")
    return directory


class TestConfigLoader:

    def test_environment_file_overrides_default(self, config_dir):
        config = ConfigLoader(str(config_dir)).get()
        assert config.environment == "staging"
        assert config.sqlite_path == "staging.db"
        assert config.api_port == 3001

    def test_env_vars_override_files(self, config_dir, monkeypatch):
        monkeypatch.setenv("STORE_TYPE", "memory")
        monkeypatch.setenv("API_PORT", "8080")
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test,")

        config = ConfigLoader(str(config_dir)).get()

        assert config.store_type == "memory"
        assert config.api_port == 8080
        assert config.allowed_origins == ["http://a.test", "http://b.test"]

    def test_missing_directory_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("STORE_TYPE", raising=False)
        config = ConfigLoader(str(tmp_path / "nowhere")).get()
        assert config.batch_limit == 500
        assert config.form_link_base == "/therapy/form/new"

    def test_broken_yaml_is_ignored(self, config_dir):
        (config_dir / "staging.yaml").write_text("sqlite_path: [unclosed\n", encoding="utf-8")
        assert ConfigLoader(str(config_dir)).get().sqlite_path == "default.db"

    def test_reload_picks_up_changes(self, config_dir, monkeypatch):
        loader = ConfigLoader(str(config_dir))
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert loader.reload().log_level == "DEBUG"
