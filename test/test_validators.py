import pytest

from src.models.project_model import GameCategory
from src.utils.validators import (
    CategoryValidator,
    SecurityValidationException,
    TextValidator,
    ValidationException,
    validate_prompt,
)


def test_text_validator_valid_prompt() -> None:
    prompt = "A detailed racing game through a neon city at night."
    sanitized = TextValidator.validate_prompt(prompt)
    assert sanitized == prompt, "Valid prompt should be returned unchanged"


def test_prompt_whitespace_is_normalized() -> None:
    assert validate_prompt("  a   puzzle game\nwith   mirrors  ") == "a puzzle game with mirrors"


def test_prompt_keeps_apostrophes() -> None:
    assert validate_prompt("A knight's quest for the dragon's egg") == "A knight's quest for the dragon's egg"


def test_text_validator_empty() -> None:
    with pytest.raises(ValidationException, match="cannot be empty"):
        TextValidator.validate_prompt("   ")


def test_text_validator_too_short() -> None:
    with pytest.raises(ValidationException, match="must be at least 10 characters"):
        TextValidator.validate_prompt("Short")


def test_text_validator_too_long() -> None:
    with pytest.raises(ValidationException, match="cannot exceed 2000 characters"):
        TextValidator.validate_prompt("x" * 2001)


@pytest.mark.parametrize("prompt", [
    "<script>alert('hack')</script> a shooter game",
    "a shooter game javascript:void(0)",
    "a game with $(rm -rf /) in it",
    "a platformer stored at ../../etc/passwd",
])
def test_text_validator_security(prompt: str) -> None:
    with pytest.raises(SecurityValidationException, match="Potential security threat detected"):
        TextValidator.validate_prompt(prompt)


def test_project_name_validation() -> None:
    assert TextValidator.validate_project_name(" Neon <b>Racers</b> ") == "Neon Racers"
    with pytest.raises(ValidationException, match="cannot exceed 100 characters"):
        TextValidator.validate_project_name("n" * 101)


def test_user_id_validation() -> None:
    assert TextValidator.validate_user_id("user_42.test-a") == "user_42.test-a"
    with pytest.raises(ValidationException):
        TextValidator.validate_user_id("user/../admin")
    with pytest.raises(ValidationException):
        TextValidator.validate_user_id("")


def test_category_validator() -> None:
    assert CategoryValidator.validate_category("fps") == GameCategory.FPS
    assert CategoryValidator.validate_category("first-person-shooter") == GameCategory.FPS
    assert CategoryValidator.validate_category(GameCategory.RACING) == GameCategory.RACING


def test_category_validator_invalid() -> None:
    with pytest.raises(ValidationException, match="Game category must be one of"):
        CategoryValidator.validate_category("strategy")
    with pytest.raises(ValidationException):
        CategoryValidator.validate_category(3)
