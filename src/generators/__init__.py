"""
Generators module for game builds.

This module provides the design document generators that turn prompts into
structured designs, the C# script generator, and the placeholder WebGL
build writer used when Unity cannot produce a build.
"""

from .base import (
    APIError,
    DesignDraft,
    DesignGenerationError,
    DesignGenerator,
    ErrorSeverity,
    GenerationTimeoutError,
    RateLimitError,
    with_retry,
)
from .design_generator import LLMConfig, LLMDesignGenerator, OfflineDesignGenerator, detect_category
from .placeholder_build import PlaceholderBuildWriter
from .script_generator import ScriptGenerator, escape_csharp

__all__ = [
    # Base classes and interfaces
    "DesignGenerator",
    "DesignDraft",
    "ErrorSeverity",
    # Error classes
    "DesignGenerationError",
    "APIError",
    "RateLimitError",
    "GenerationTimeoutError",
    # Utilities and decorators
    "with_retry",
    "detect_category",
    "escape_csharp",
    # Concrete implementations
    "LLMConfig",
    "LLMDesignGenerator",
    "OfflineDesignGenerator",
    "ScriptGenerator",
    "PlaceholderBuildWriter",
]
