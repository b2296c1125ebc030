"""
Input validation for the game builder.

This module validates the user-supplied text that enters the pipeline:
game prompts, project names, user ids and category names.
"""

import re
from typing import Any

from src.models.project_model import GameCategory


class ValidationConfig:
    """Configuration for validation parameters."""

    # Text input limits
    MIN_PROMPT_LENGTH = 10
    MAX_PROMPT_LENGTH = 2000
    MAX_PROJECT_NAME_LENGTH = 100
    MAX_USER_ID_LENGTH = 128

    # Security patterns
    DANGEROUS_PATTERNS = [
        r"<script[^>]*>.*?</script>",
        r"javascript:",
        r"vbscript:",
        r"on\w+\s*=",
        r"<iframe[^>]*>.*?</iframe>",
        r"<object[^>]*>.*?</object>",
        r"<embed[^>]*>.*?</embed>",
        r"eval\s*\(",
        r"document\.",
        r"window\.",
        r"\$\(.*\)",
        r"`[^`]*`",
        r"\.\./",
    ]


# Custom Exceptions


class ValidationException(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, field: str | None = None, code: str | None = None):
        self.message = message
        self.field = field
        self.code = code
        super().__init__(message)


class SecurityValidationException(ValidationException):
    """Exception for security-related validation failures."""

    pass


# Standardized Error Messages


class ErrorMessages:
    """Standardized error messages for consistent user experience."""

    PROMPT_EMPTY = "Game description cannot be empty"
    PROMPT_TOO_SHORT = "Game description must be at least {min_length} characters long"
    PROMPT_TOO_LONG = "Game description cannot exceed {max_length} characters"
    SECURITY_THREAT_DETECTED = "Potential security threat detected in input"
    NAME_TOO_LONG = "Project name cannot exceed {max_length} characters"
    USER_ID_INVALID = "User id must be 1-{max_length} letters, digits, dots, hyphens or underscores"
    CATEGORY_INVALID = "Game category must be one of: {allowed}"


class TextValidator:
    """Handles text input sanitization and validation."""

    @staticmethod
    def sanitize_text(text: str) -> str:
        """
        Strip markup and control characters and normalize whitespace.

        Raises:
            SecurityValidationException: If dangerous patterns are detected
        """
        if not isinstance(text, str):
            raise ValidationException("Input must be a string", code="INVALID_TYPE")

        TextValidator._check_security_patterns(text)

        sanitized = re.sub(r"<[^>]+>", "", text)
        sanitized = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", sanitized)
        return re.sub(r"\s+", " ", sanitized.strip())

    @staticmethod
    def _check_security_patterns(text: str) -> None:
        for pattern in ValidationConfig.DANGEROUS_PATTERNS:
            if re.search(pattern, text, re.IGNORECASE | re.DOTALL):
                raise SecurityValidationException(
                    ErrorMessages.SECURITY_THREAT_DETECTED, code="SECURITY_PATTERN_DETECTED"
                )

    @staticmethod
    def validate_prompt(prompt: str) -> str:
        """
        Validate and sanitize a game description prompt.

        Args:
            prompt: Free-text game description

        Returns:
            Sanitized prompt

        Raises:
            ValidationException: If validation fails
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationException(ErrorMessages.PROMPT_EMPTY, field="prompt", code="PROMPT_EMPTY")

        sanitized = TextValidator.sanitize_text(prompt)

        if len(sanitized) < ValidationConfig.MIN_PROMPT_LENGTH:
            raise ValidationException(
                ErrorMessages.PROMPT_TOO_SHORT.format(min_length=ValidationConfig.MIN_PROMPT_LENGTH),
                field="prompt",
                code="TEXT_TOO_SHORT",
            )

        if len(sanitized) > ValidationConfig.MAX_PROMPT_LENGTH:
            raise ValidationException(
                ErrorMessages.PROMPT_TOO_LONG.format(max_length=ValidationConfig.MAX_PROMPT_LENGTH),
                field="prompt",
                code="TEXT_TOO_LONG",
            )

        return sanitized

    @staticmethod
    def validate_project_name(name: str) -> str:
        """Validate a project name, truncating nothing."""
        sanitized = TextValidator.sanitize_text(name or "")
        if not sanitized:
            raise ValidationException("Project name cannot be empty", field="name", code="NAME_EMPTY")
        if len(sanitized) > ValidationConfig.MAX_PROJECT_NAME_LENGTH:
            raise ValidationException(
                ErrorMessages.NAME_TOO_LONG.format(max_length=ValidationConfig.MAX_PROJECT_NAME_LENGTH),
                field="name",
                code="NAME_TOO_LONG",
            )
        return sanitized

    @staticmethod
    def validate_user_id(user_id: str) -> str:
        if not isinstance(user_id, str) or not re.fullmatch(
            rf"[A-Za-z0-9._\-]{{1,{ValidationConfig.MAX_USER_ID_LENGTH}}}", user_id
        ):
            raise ValidationException(
                ErrorMessages.USER_ID_INVALID.format(max_length=ValidationConfig.MAX_USER_ID_LENGTH),
                field="user_id",
                code="INVALID_USER_ID",
            )
        return user_id


class CategoryValidator:
    """Validates explicit category choices."""

    @staticmethod
    def validate_category(category: Any) -> GameCategory:
        """
        Strictly parse a user-chosen category.

        Unlike GameCategory.coerce, an unknown value is an error here rather
        than silently becoming OTHER.
        """
        if isinstance(category, GameCategory):
            return category

        if isinstance(category, str):
            try:
                return GameCategory(category)
            except ValueError:
                pass

        raise ValidationException(
            ErrorMessages.CATEGORY_INVALID.format(allowed=", ".join(c.value for c in GameCategory)),
            field="category",
            code="INVALID_CATEGORY",
        )


def validate_prompt(prompt: str) -> str:
    """Module-level shortcut for TextValidator.validate_prompt."""
    return TextValidator.validate_prompt(prompt)
