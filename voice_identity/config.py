"""Configuration management for the voice identity engine."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any

from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LLMProviderConfig:
    """Configuration for a specific LLM provider."""
    api_key: str = ""
    base_url: str = ""
    model: str = ""
    max_tokens: int = 4096
    temperature: float = 0.7
    timeout: int = 120


@dataclass
class LLMProviderRoles:
    """Role-based LLM provider assignment.

    - generation: provider that writes refinement candidates
    """
    generation: str = "openai"


@dataclass
class LLMConfig:
    """Configuration for LLM providers."""
    provider: LLMProviderRoles = field(default_factory=LLMProviderRoles)
    providers: Dict[str, LLMProviderConfig] = field(default_factory=dict)

    def get_provider_config(self, provider_name: str) -> LLMProviderConfig:
        """Get configuration for a specific provider."""
        if provider_name not in self.providers:
            raise ValueError(f"Unknown LLM provider: {provider_name}")
        return self.providers[provider_name]

    def get_generation_provider(self) -> str:
        """Get the provider name for refinement generation."""
        return self.provider.generation


@dataclass
class EmbeddingConfig:
    """Configuration for the embedding collaborator."""
    provider: str = "sentence_transformers"  # sentence_transformers, openai
    model: str = "all-MiniLM-L6-v2"
    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    timeout: int = 30


@dataclass
class EngineConfig:
    """Orchestration settings."""
    generation_temperature: float = 0.7
    min_samples_for_enforcement: int = 3
    min_words_for_enforcement: int = 50
    max_fresh_generations: int = 5  # Try-again regenerations per run chain
    debug: bool = False  # Attach evaluation detail to results
    background_drift_checks: bool = True


@dataclass
class DriftConfig:
    """Rolling-window drift detection settings."""
    rolling_window: int = 20
    recent_window: int = 10
    min_runs: int = 5
    min_older_runs: int = 3
    drift_threshold: float = 0.08
    high_severity_threshold: float = 0.12
    variance_spike_multiplier: float = 2.5


@dataclass
class Config:
    """Main configuration container."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    embeddings: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    drift: DriftConfig = field(default_factory=DriftConfig)
    log_level: str = "INFO"
    log_json: bool = False


def _resolve_env_vars(value: Any) -> Any:
    """Resolve environment variables in string values."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_var = value[2:-1]
        resolved = os.environ.get(env_var, "")
        if not resolved:
            logger.warning(f"Environment variable {env_var} not set")
        return resolved
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _parse_llm_provider_config(data: Dict) -> LLMProviderConfig:
    """Parse LLM provider configuration."""
    return LLMProviderConfig(
        api_key=_resolve_env_vars(data.get("api_key", "")),
        base_url=data.get("base_url", ""),
        model=data.get("model", ""),
        max_tokens=data.get("max_tokens", 4096),
        temperature=data.get("temperature", 0.7),
        timeout=data.get("timeout", 120),
    )


def _parse_llm_config(data: Dict) -> LLMConfig:
    """Parse LLM configuration section."""
    providers = {}
    for name, provider_data in data.get("providers", {}).items():
        providers[name] = _parse_llm_provider_config(provider_data)

    provider_data = data.get("provider", {})
    return LLMConfig(
        provider=LLMProviderRoles(generation=provider_data.get("generation", "openai")),
        providers=providers,
    )


def _parse_section(cls, data: Dict):
    """Build a flat dataclass section, ignoring unknown keys."""
    defaults = cls()
    known = {k: _resolve_env_vars(v) for k, v in data.items() if hasattr(defaults, k)}
    unknown = set(data) - set(known)
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**known)


def load_config(config_path: str = "config.json") -> Config:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Parsed configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config file is invalid.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            "Please copy config.json.sample to config.json and configure it."
        )

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    config = Config()

    if "llm" in data:
        config.llm = _parse_llm_config(data["llm"])

    if "embeddings" in data:
        config.embeddings = _parse_section(EmbeddingConfig, data["embeddings"])

    if "engine" in data:
        config.engine = _parse_section(EngineConfig, data["engine"])

    if "drift" in data:
        config.drift = _parse_section(DriftConfig, data["drift"])
        if config.drift.recent_window >= config.drift.rolling_window:
            raise ValueError("drift.recent_window must be smaller than drift.rolling_window")

    config.log_level = data.get("log_level", "INFO")
    config.log_json = data.get("log_json", False)

    logger.info(f"Loaded configuration from {config_path}")
    return config


def create_default_config() -> Dict:
    """Create a default configuration dictionary."""
    return {
        "llm": {
            "provider": {
                "generation": "openai"
            },
            "providers": {
                "openai": {
                    "api_key": "${OPENAI_API_KEY}",
                    "base_url": "https://api.openai.com/v1",
                    "model": "gpt-4o-mini",
                    "max_tokens": 4096,
                    "temperature": 0.7,
                    "timeout": 120
                },
                "deepseek": {
                    "api_key": "${DEEPSEEK_API_KEY}",
                    "base_url": "https://api.deepseek.com",
                    "model": "deepseek-chat",
                    "max_tokens": 4096,
                    "temperature": 0.7,
                    "timeout": 120
                },
                "ollama": {
                    "base_url": "http://localhost:11434",
                    "model": "qwen3:8b",
                    "timeout": 180
                }
            }
        },
        "embeddings": {
            "provider": "sentence_transformers",
            "model": "all-MiniLM-L6-v2"
        },
        "engine": {
            "generation_temperature": 0.7,
            "min_samples_for_enforcement": 3,
            "min_words_for_enforcement": 50,
            "max_fresh_generations": 5,
            "debug": False,
            "background_drift_checks": True
        },
        "drift": {
            "rolling_window": 20,
            "recent_window": 10,
            "min_runs": 5,
            "min_older_runs": 3,
            "drift_threshold": 0.08,
            "high_severity_threshold": 0.12,
            "variance_spike_multiplier": 2.5
        },
        "log_level": "INFO",
        "log_json": False
    }
