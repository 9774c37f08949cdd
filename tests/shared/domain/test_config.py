"""Tests for settings loading: TOML overlays and environment overrides."""

import pytest
from shared.config import DEFAULT_JWT_SECRET, load_settings


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "marketplace.toml"
    path.write_text(
        """
[default]
database_uri = "sqlite:///default.db"
delivery_fee = 50.0
tax_rate = 0.05

[test]
database_uri = "sqlite://"
jwt_secret = "test-secret"

[production]
log_dir = "logs"
"""
    )
    return path


class TestOverlays:
    def test_default_table_applies(self, config_file, monkeypatch):
        monkeypatch.delenv("MARKET_DATABASE_URI", raising=False)
        settings = load_settings("development", path=config_file)
        assert settings.env == "development"
        assert settings.database_uri == "sqlite:///default.db"
        assert settings.delivery_fee == 50.0

    def test_environment_table_overrides_default(self, config_file, monkeypatch):
        monkeypatch.delenv("MARKET_DATABASE_URI", raising=False)
        settings = load_settings("test", path=config_file)
        assert settings.database_uri == "sqlite://"
        assert settings.jwt_secret == "test-secret"

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        settings = load_settings("development", path=tmp_path / "absent.toml")
        assert settings.tax_rate == 0.05
        assert settings.reservation_retries == 5


class TestEnvironmentOverrides:
    def test_values_are_coerced(self, config_file, monkeypatch):
        monkeypatch.setenv("MARKET_RESERVATION_RETRIES", "9")
        monkeypatch.setenv("MARKET_TAX_RATE", "0.1")
        monkeypatch.setenv("MARKET_CORS_ORIGINS", "https://a.example, https://b.example")
        settings = load_settings("test", path=config_file)
        assert settings.reservation_retries == 9
        assert settings.tax_rate == 0.1
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_production_requires_real_secret(self, config_file, monkeypatch):
        monkeypatch.delenv("MARKET_JWT_SECRET", raising=False)
        with pytest.raises(RuntimeError):
            load_settings("production", path=config_file)

    def test_production_with_secret(self, config_file, monkeypatch):
        monkeypatch.setenv("MARKET_JWT_SECRET", "s3cret")
        settings = load_settings("production", path=config_file)
        assert settings.jwt_secret != DEFAULT_JWT_SECRET
        assert settings.log_dir == "logs"

    def test_dotenv_file_is_read(self, config_file, tmp_path, monkeypatch):
        monkeypatch.delenv("MARKET_DELIVERY_FEE", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("MARKET_DELIVERY_FEE=75\n")
        settings = load_settings("test", path=config_file)
        assert settings.delivery_fee == 75.0

    def test_explicit_env_wins_over_market_env(self, config_file, monkeypatch):
        monkeypatch.setenv("MARKET_ENV", "production")
        settings = load_settings("test", path=config_file)
        assert settings.env == "test"
        assert settings.jwt_secret == "test-secret"
