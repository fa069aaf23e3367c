"""Unit tests for configuration loading."""

import json
import os
import tempfile

import pytest

from voice_identity.config import (
    Config,
    DriftConfig,
    EngineConfig,
    create_default_config,
    load_config,
)


def write_config(data) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(data, f)
        return f.name


class TestConfigLoading:
    """Test configuration file loading."""

    def test_load_minimal_config(self):
        """Test loading a config with only an LLM section."""
        path = write_config({
            "llm": {
                "provider": {"generation": "deepseek"},
                "providers": {"deepseek": {"api_key": "test-key", "model": "deepseek-chat"}},
            }
        })
        try:
            config = load_config(path)
            assert config.llm.get_generation_provider() == "deepseek"
            assert config.llm.providers["deepseek"].api_key == "test-key"
            assert config.llm.providers["deepseek"].timeout == 120
            assert config.engine == EngineConfig()
            assert config.drift == DriftConfig()
        finally:
            os.unlink(path)

    def test_load_full_config(self):
        """Test loading the default config round trip."""
        path = write_config(create_default_config())
        try:
            config = load_config(path)
            assert config.llm.get_generation_provider() == "openai"
            assert config.embeddings.model == "all-MiniLM-L6-v2"
            assert config.engine.max_fresh_generations == 5
            assert config.drift.rolling_window == 20
            assert config.log_level == "INFO"
        finally:
            os.unlink(path)

    def test_sections_override_defaults(self):
        path = write_config({
            "engine": {"generation_temperature": 0.5, "debug": True},
            "drift": {"drift_threshold": 0.05},
            "embeddings": {"provider": "openai", "model": "text-embedding-3-small"},
            "log_json": True,
        })
        try:
            config = load_config(path)
            assert config.engine.generation_temperature == 0.5
            assert config.engine.debug
            assert config.engine.max_fresh_generations == 5
            assert config.drift.drift_threshold == 0.05
            assert config.embeddings.provider == "openai"
            assert config.log_json
        finally:
            os.unlink(path)

    def test_unknown_keys_are_ignored(self):
        path = write_config({"engine": {"max_retries": 9}})
        try:
            assert load_config(path).engine == EngineConfig()
        finally:
            os.unlink(path)

    def test_recent_window_must_fit(self):
        path = write_config({"drift": {"rolling_window": 10, "recent_window": 10}})
        try:
            with pytest.raises(ValueError):
                load_config(path)
        finally:
            os.unlink(path)

    def test_missing_config_file_raises_error(self):
        """Test that missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError) as exc_info:
            load_config("nonexistent_config.json")
        assert "Configuration file not found" in str(exc_info.value)

    def test_invalid_json_raises_error(self):
        """Test that invalid JSON raises ValueError."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{ invalid json }")

        try:
            with pytest.raises(ValueError) as exc_info:
                load_config(f.name)
            assert "Invalid JSON" in str(exc_info.value)
        finally:
            os.unlink(f.name)


class TestEnvironmentVariables:
    """Test environment variable resolution."""

    def test_resolves_env_var(self, monkeypatch):
        """Test that ${VAR} syntax resolves environment variables."""
        monkeypatch.setenv("TEST_API_KEY", "secret-from-env")
        path = write_config({
            "llm": {"providers": {"openai": {"api_key": "${TEST_API_KEY}", "model": "test"}}},
            "embeddings": {"api_key": "${TEST_API_KEY}"},
        })
        try:
            config = load_config(path)
            assert config.llm.providers["openai"].api_key == "secret-from-env"
            assert config.embeddings.api_key == "secret-from-env"
        finally:
            os.unlink(path)

    def test_missing_env_var_returns_empty(self, monkeypatch):
        """Test that a missing env var resolves to an empty string."""
        monkeypatch.delenv("NONEXISTENT_VAR", raising=False)
        path = write_config({
            "llm": {"providers": {"openai": {"api_key": "${NONEXISTENT_VAR}", "model": "test"}}}
        })
        try:
            assert load_config(path).llm.providers["openai"].api_key == ""
        finally:
            os.unlink(path)


class TestDefaults:

    def test_default_values(self):
        config = Config()
        assert config.engine.generation_temperature == 0.7
        assert config.engine.max_fresh_generations == 5
        assert not config.engine.debug
        assert config.engine.background_drift_checks
        assert config.drift.min_older_runs == 3
        assert config.drift.variance_spike_multiplier == 2.5

    def test_create_default_config(self):
        data = create_default_config()
        assert set(data["llm"]["providers"]) == {"openai", "deepseek", "ollama"}
        assert data["engine"]["max_fresh_generations"] == EngineConfig().max_fresh_generations

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            Config().llm.get_provider_config("mlx")
