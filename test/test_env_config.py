import os
from pathlib import Path
from unittest.mock import patch

from src.utils.env_config import AppSettings, get_env_bool, get_env_float, get_env_int, get_settings, reload_settings

ENV_VARS_TO_CLEAR = [
    "LLM_API_KEY",
    "LLM_BASE_URL",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "LLM_MAX_TOKENS",
    "TEMPLATES_DIR",
    "BUILDS_DIR",
    "BUILDS_URL",
    "ASSETS_DIR",
    "UNITY_PATH",
    "SKIP_UNITY_BUILD",
    "SIMULATED_BUILD_DELAY",
    "UNITY_BUILD_TIMEOUT",
    "MAX_CONCURRENT_BUILDS",
    "DATA_DIR",
    "STORAGE_ACCESS_KEY_ID",
    "STORAGE_SECRET_ACCESS_KEY",
    "STORAGE_BUCKET_NAME",
    "STORAGE_ENDPOINT_URL",
    "STORAGE_REGION",
    "LOG_LEVEL",
    "ENVIRONMENT",
    "DEBUG",
]


def clean_environ() -> dict:
    return {key: value for key, value in os.environ.items() if key not in ENV_VARS_TO_CLEAR}


class TestAppSettings:
    """Test suite for AppSettings class."""

    def test_app_settings_default_values(self) -> None:
        """Test that AppSettings has correct default values."""
        with patch.dict(os.environ, clean_environ(), clear=True):
            settings = AppSettings()

        assert settings.llm_api_key is None
        assert settings.llm_base_url is None
        assert settings.llm_model == "gpt-4o-mini"
        assert settings.llm_temperature == 0.7
        assert settings.llm_max_tokens == 2048
        assert settings.templates_dir == "./templates"
        assert settings.builds_url == "http://localhost:5000/builds"
        assert settings.unity_path == ""
        assert settings.skip_unity_build is False
        assert settings.unity_build_timeout == 1800
        assert settings.max_concurrent_builds == 2
        assert settings.data_dir is None
        assert settings.storage_region == "us-east-1"
        assert settings.log_level == "INFO"
        assert settings.debug is True

    def test_app_settings_from_env_vars(self) -> None:
        """Test that AppSettings correctly reads from environment variables."""
        env_vars = {
            "LLM_API_KEY": "test-llm-key",
            "LLM_TEMPERATURE": "0.2",
            "TEMPLATES_DIR": "/srv/templates",
            "BUILDS_DIR": "/srv/builds",
            "BUILDS_URL": "https://games.example.com/builds",
            "UNITY_PATH": "/opt/unity/Editor/Unity",
            "SKIP_UNITY_BUILD": "false",
            "UNITY_BUILD_TIMEOUT": "600",
            "MAX_CONCURRENT_BUILDS": "4",
            "STORAGE_BUCKET_NAME": "test-bucket",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, {**clean_environ(), **env_vars}, clear=True):
            settings = AppSettings()

        assert settings.llm_api_key == "test-llm-key"
        assert settings.llm_temperature == 0.2
        assert settings.unity_path == "/opt/unity/Editor/Unity"
        assert settings.unity_build_timeout == 600
        assert settings.max_concurrent_builds == 4
        assert settings.storage_bucket_name == "test-bucket"
        assert settings.log_level == "DEBUG"
        assert settings.offline_mode is False

    def test_offline_mode(self) -> None:
        with patch.dict(os.environ, {**clean_environ(), "UNITY_PATH": "/opt/unity"}, clear=True):
            assert AppSettings().offline_mode is False
        with patch.dict(os.environ, {**clean_environ(), "UNITY_PATH": "/opt/unity", "SKIP_UNITY_BUILD": "1"},
                        clear=True):
            assert AppSettings().offline_mode is True
        with patch.dict(os.environ, clean_environ(), clear=True):
            assert AppSettings().offline_mode is True

    def test_max_concurrent_builds_floor(self) -> None:
        with patch.dict(os.environ, {**clean_environ(), "MAX_CONCURRENT_BUILDS": "0"}, clear=True):
            assert AppSettings().max_concurrent_builds == 1

    def test_get_builder_config(self) -> None:
        with patch.dict(os.environ, clean_environ(), clear=True):
            settings = AppSettings(
                templates_dir="/srv/templates",
                builds_dir="/srv/builds",
                builds_url="https://games.example.com/builds/",
                unity_path="/opt/unity",
                simulated_build_delay=1.5,
            )

        config = settings.get_builder_config()

        assert config.templates_dir == Path("/srv/templates")
        assert config.builds_dir == Path("/srv/builds")
        assert config.public_builds_url == "https://games.example.com/builds"
        assert config.offline_mode is False
        assert config.simulated_build_delay == 1.5

    def test_get_llm_and_storage_config(self) -> None:
        with patch.dict(os.environ, clean_environ(), clear=True):
            settings = AppSettings(llm_api_key="key", storage_bucket_name="bucket")

        llm = settings.get_llm_config()
        storage = settings.get_storage_config()

        assert llm["api_key"] == "key"
        assert set(llm) == {"api_key", "model", "base_url", "max_tokens", "temperature", "timeout", "max_retries"}
        assert storage["bucket_name"] == "bucket"
        assert storage["region"] == "us-east-1"


class TestEnvHelpers:
    def test_get_env_bool(self) -> None:
        with patch.dict(os.environ, {"FLAG_A": "yes", "FLAG_B": "off"}):
            assert get_env_bool("FLAG_A") is True
            assert get_env_bool("FLAG_B", default=True) is False
            assert get_env_bool("FLAG_MISSING", default=True) is True

    def test_get_env_int_invalid_uses_default(self) -> None:
        with patch.dict(os.environ, {"NUMBER": "not-a-number"}):
            assert get_env_int("NUMBER", 7) == 7

    def test_get_env_float(self) -> None:
        with patch.dict(os.environ, {"DELAY": "0.5", "BAD_DELAY": "soon"}):
            assert get_env_float("DELAY") == 0.5
            assert get_env_float("BAD_DELAY", 3.0) == 3.0


def test_get_settings_is_cached() -> None:
    reload_settings()
    assert get_settings() is get_settings()
