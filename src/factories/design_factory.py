"""
Factory for creating design document generator instances.
"""

from src.generators.base import DesignGenerator
from src.generators.design_generator import LLMConfig, LLMDesignGenerator, OfflineDesignGenerator
from src.utils.env_config import AppSettings


def create_design_generator(settings: AppSettings) -> DesignGenerator:
    """Create the LLM generator when an API key is configured, else the offline one."""
    config_dict = settings.get_llm_config()
    api_key = config_dict.pop("api_key")
    if api_key and api_key.strip():
        # LLMConfig keeps its own default endpoint when none is configured
        if not config_dict.get("base_url"):
            config_dict.pop("base_url")
        config = LLMConfig(api_key=api_key, **config_dict)
        return LLMDesignGenerator(config)
    return OfflineDesignGenerator()
