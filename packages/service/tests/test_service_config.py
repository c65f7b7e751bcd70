"""Tests for the configuration system."""

from decimal import Decimal

import pytest
import structlog

from soa_core.exceptions import ConfigurationError
from soa_service.config import EngineConfig, PersistenceConfig, SoAConfig
from soa_service.logging import configure_logging


class TestEngineConfig:
    """Test suite for EngineConfig."""

    def test_default_values(self):
        assert EngineConfig().surplus_tolerance == Decimal("1.00")

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SOA_ENGINE_SURPLUS_TOLERANCE", "5")
        assert EngineConfig().surplus_tolerance == Decimal("5")

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(surplus_tolerance=Decimal("-1"))


class TestPersistenceConfig:
    """Test suite for PersistenceConfig."""

    def test_default_values(self):
        """Defaults: half a second debounce, three retries from 1s doubling."""
        config = PersistenceConfig()

        assert config.debounce_seconds == 0.5
        assert config.max_retries == 3
        assert config.retry_base_delay == 1.0
        assert config.retry_backoff_factor == 2.0

    def test_retry_delays(self):
        config = PersistenceConfig()
        assert [config.retry_delay(n) for n in range(3)] == [1.0, 2.0, 4.0]

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SOA_PERSISTENCE_MAX_RETRIES", "5")
        monkeypatch.setenv("SOA_PERSISTENCE_DEBOUNCE_SECONDS", "0")
        config = PersistenceConfig()
        assert config.max_retries == 5
        assert config.debounce_seconds == 0

    def test_bounds(self):
        with pytest.raises(ValueError):
            PersistenceConfig(max_retries=11)
        with pytest.raises(ValueError):
            PersistenceConfig(retry_backoff_factor=0.5)
        with pytest.raises(ValueError):
            PersistenceConfig(debounce_seconds=-1)


class TestSoAConfig:
    """Test suite for the root configuration."""

    def test_default_values(self):
        config = SoAConfig()
        assert config.env == "development"
        assert config.log_level == "INFO"
        assert not config.is_production
        assert not config.is_debug

    def test_normalises_values(self):
        config = SoAConfig(env=" Production ", log_level="debug")
        assert config.env == "production"
        assert config.is_production
        assert config.is_debug

    def test_invalid_env(self):
        with pytest.raises(ValueError):
            SoAConfig(env="qa")

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            SoAConfig(log_level="LOUD")

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SOA_ENV", "test")
        monkeypatch.setenv("SOA_LOG_LEVEL", "warning")
        config = SoAConfig()
        assert config.env == "test"
        assert config.log_level == "WARNING"

    def test_nested_override(self):
        config = SoAConfig(persistence=PersistenceConfig(debounce_seconds=0))
        assert config.persistence.debounce_seconds == 0
        assert config.engine.surplus_tolerance == Decimal("1.00")


class TestConfigureLogging:
    """Tests for structlog setup."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_accepts_valid_level(self):
        configure_logging("debug")
        configure_logging("INFO", json_output=True)

    def test_rejects_invalid_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            configure_logging("LOUD")
        assert exc_info.value.details["config_key"] == "log_level"
