"""
Environment-based configuration system for the Game Build Orchestrator.

Settings are read from environment variables (optionally loaded from a .env
file) into a single AppSettings instance at the entry point. Build components
never read ambient settings themselves: they receive a BuilderConfig built
from AppSettings, which tests construct directly around temp directories.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)
    logger.info(f"Loaded environment variables from: {env_file}")
else:
    logger.debug(f"No .env file found at: {env_file}")


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, "").lower()
    return value in ("true", "1", "yes", "on") if value else default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float value from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class BuilderConfig:
    """Explicit configuration handed to every build component at construction."""

    templates_dir: Path
    builds_dir: Path
    builds_url: str
    assets_dir: Path
    unity_path: str = ""
    offline_mode: bool = False
    simulated_build_delay: float = 3.0
    build_timeout_seconds: int = 1800
    max_concurrent_builds: int = 2

    @property
    def public_builds_url(self) -> str:
        return self.builds_url.rstrip("/")


@dataclass
class AppSettings:
    """Application settings from environment variables."""

    # Environment
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    debug: bool = field(default_factory=lambda: get_env_bool("DEBUG", True))

    # Application info (constants - not configurable via environment)
    app_name: str = "Game Build Orchestrator"
    app_version: str = "0.1.0"

    # Design document LLM configuration
    llm_api_key: Optional[str] = field(default_factory=lambda: os.getenv("LLM_API_KEY"))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    llm_base_url: Optional[str] = field(default_factory=lambda: os.getenv("LLM_BASE_URL"))
    llm_max_tokens: int = field(default_factory=lambda: get_env_int("LLM_MAX_TOKENS", 2048))
    llm_temperature: float = field(default_factory=lambda: get_env_float("LLM_TEMPERATURE", 0.7))
    llm_timeout: int = field(default_factory=lambda: get_env_int("LLM_TIMEOUT", 60))
    llm_max_retries: int = field(default_factory=lambda: get_env_int("LLM_MAX_RETRIES", 3))

    # Build pipeline
    templates_dir: str = field(default_factory=lambda: os.getenv("TEMPLATES_DIR", "./templates"))
    builds_dir: str = field(default_factory=lambda: os.getenv("BUILDS_DIR", "./builds"))
    builds_url: str = field(default_factory=lambda: os.getenv("BUILDS_URL", "http://localhost:5000/builds"))
    assets_dir: str = field(default_factory=lambda: os.getenv("ASSETS_DIR", "./assets"))
    unity_path: str = field(default_factory=lambda: os.getenv("UNITY_PATH", ""))
    skip_unity_build: bool = field(default_factory=lambda: get_env_bool("SKIP_UNITY_BUILD", False))
    simulated_build_delay: float = field(default_factory=lambda: get_env_float("SIMULATED_BUILD_DELAY", 3.0))
    unity_build_timeout: int = field(default_factory=lambda: get_env_int("UNITY_BUILD_TIMEOUT", 1800))
    max_concurrent_builds: int = field(default_factory=lambda: get_env_int("MAX_CONCURRENT_BUILDS", 2))

    # Project persistence; empty means in-memory
    data_dir: Optional[str] = field(default_factory=lambda: os.getenv("DATA_DIR"))

    # Artifact publishing (S3-compatible, optional)
    storage_access_key_id: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_ACCESS_KEY_ID"))
    storage_secret_access_key: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_SECRET_ACCESS_KEY"))
    storage_bucket_name: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_BUCKET_NAME"))
    storage_endpoint_url: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_ENDPOINT_URL"))
    storage_region: str = field(default_factory=lambda: os.getenv("STORAGE_REGION", "us-east-1"))
    storage_public_url: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_PUBLIC_URL"))

    # Logging Configuration
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_json_format: bool = field(default_factory=lambda: get_env_bool("LOG_JSON_FORMAT", False))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.environment == "development" and not os.getenv("DEBUG"):
            self.debug = True
        elif self.environment == "production" and not os.getenv("DEBUG"):
            self.debug = False

        if self.environment == "production":
            if not self.unity_path and not self.skip_unity_build:
                logger.warning("UNITY_PATH not set for production; every build will use placeholder artifacts")
            if not self.llm_api_key:
                logger.warning("No LLM API key provided; design documents will use the offline generator")

        if self.max_concurrent_builds < 1:
            self.max_concurrent_builds = 1

    @property
    def offline_mode(self) -> bool:
        """Builds skip the Unity executable when explicitly told to, or when none is configured."""
        return self.skip_unity_build or not self.unity_path

    def get_builder_config(self) -> BuilderConfig:
        """Get build pipeline configuration."""
        return BuilderConfig(
            templates_dir=Path(self.templates_dir),
            builds_dir=Path(self.builds_dir),
            builds_url=self.builds_url,
            assets_dir=Path(self.assets_dir),
            unity_path=self.unity_path,
            offline_mode=self.offline_mode,
            simulated_build_delay=self.simulated_build_delay,
            build_timeout_seconds=self.unity_build_timeout,
            max_concurrent_builds=self.max_concurrent_builds,
        )

    def get_llm_config(self) -> dict:
        """Get LLM configuration as a dictionary."""
        return {
            "api_key": self.llm_api_key,
            "model": self.llm_model,
            "base_url": self.llm_base_url,
            "max_tokens": self.llm_max_tokens,
            "temperature": self.llm_temperature,
            "timeout": self.llm_timeout,
            "max_retries": self.llm_max_retries,
        }

    def get_storage_config(self) -> dict:
        """Get artifact storage configuration as a dictionary."""
        return {
            "access_key_id": self.storage_access_key_id,
            "secret_access_key": self.storage_secret_access_key,
            "bucket_name": self.storage_bucket_name,
            "endpoint_url": self.storage_endpoint_url,
            "region": self.storage_region,
            "public_url": self.storage_public_url,
        }


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get the global application settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
        logger.info(f"Loaded settings for environment: {_settings.environment}")
    return _settings


def reload_settings() -> AppSettings:
    """Reload the global application settings."""
    global _settings
    if env_file.exists():
        load_dotenv(env_file, override=True)
    _settings = AppSettings()
    logger.info(f"Reloaded settings for environment: {_settings.environment}")
    return _settings
