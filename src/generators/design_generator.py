"""
Design document generation from natural-language game descriptions.

LLMDesignGenerator asks an OpenAI-compatible chat completions API for a
design document. OfflineDesignGenerator derives one deterministically from
keywords and per-category tables; it is also the fallback whenever the API
is unconfigured, unreachable or returns something unusable.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from src.generators.base import (
    APIError,
    DesignDraft,
    DesignGenerationError,
    DesignGenerator,
    GenerationTimeoutError,
    RateLimitError,
    with_retry,
)
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory

CATEGORY_PATTERNS = [
    (GameCategory.FPS, re.compile(r"zombie|shooter|fps|gun|first.person|shooting", re.IGNORECASE)),
    (GameCategory.ADVENTURE, re.compile(r"adventure|quest|explore|journey", re.IGNORECASE)),
    (GameCategory.PUZZLE, re.compile(r"puzzle|solve|riddle", re.IGNORECASE)),
    (GameCategory.RACING, re.compile(r"race|car|driving|speed|track", re.IGNORECASE)),
    (GameCategory.PLATFORMER, re.compile(r"platform|jump|2d|side.?scroll", re.IGNORECASE)),
]

GENRES = {
    GameCategory.FPS: "First-Person Shooter",
    GameCategory.ADVENTURE: "Adventure",
    GameCategory.PUZZLE: "Puzzle",
    GameCategory.RACING: "Racing",
    GameCategory.PLATFORMER: "Platformer",
    GameCategory.OTHER: "Indie",
}

NAME_PARTS = {
    GameCategory.FPS: ("Epic", "Combat"),
    GameCategory.ADVENTURE: ("Mysterious", "Quest"),
    GameCategory.PUZZLE: ("Enigmatic", "Mystery"),
    GameCategory.RACING: ("Turbo", "Racers"),
    GameCategory.PLATFORMER: ("Super", "Jump"),
    GameCategory.OTHER: ("Amazing", "Game"),
}

MECHANICS = {
    GameCategory.FPS: ["First-person camera", "Shooting", "Weapon switching", "Health system", "Enemy AI"],
    GameCategory.ADVENTURE: ["Exploration", "Dialogue", "Inventory", "Quests", "Character progression"],
    GameCategory.PUZZLE: ["Object manipulation", "Logic puzzles", "Progression gates", "Hints system"],
    GameCategory.RACING: ["Vehicle control", "Speed boost", "Track navigation", "Lap timing", "Drift mechanics"],
    GameCategory.PLATFORMER: ["Jumping", "Collectibles", "Obstacles", "Power-ups", "Enemy encounters"],
}

DEFAULT_MECHANICS = ["Movement", "Interaction", "Objectives"]

LEVELS = {
    GameCategory.FPS: [
        ("Training Grounds", "Learn the basics of combat and weapon handling", "Tutorial"),
        ("First Encounter", "Face your first enemies in a controlled environment", "Easy"),
        ("The Horde", "Fight against waves of enemies in more open areas", "Medium"),
    ],
    GameCategory.ADVENTURE: [
        ("The Village", "Start your journey in a peaceful village and learn about your quest", "Tutorial"),
        ("The Ancient Forest", "Navigate through a mysterious forest filled with secrets", "Easy"),
        ("The Forgotten Temple", "Explore an ancient temple with puzzles and hidden treasures", "Medium"),
    ],
    GameCategory.PUZZLE: [
        ("Introduction", "Learn the basic puzzle mechanics", "Tutorial"),
        ("Mind Benders", "Solve increasingly complex logic puzzles", "Easy"),
        ("The Master Test", "Complex puzzles that combine all previously learned mechanics", "Hard"),
    ],
    GameCategory.RACING: [
        ("Rookie Circuit", "Simple track to learn driving controls", "Tutorial"),
        ("City Sprint", "Race through city streets with traffic and shortcuts", "Medium"),
        ("Champion's Speedway", "The most challenging track with complex turns and obstacles", "Hard"),
    ],
    GameCategory.PLATFORMER: [
        ("Green Hills", "Simple platforming level to learn the basics", "Tutorial"),
        ("Danger Zone", "More challenging platforms with hazards and enemies", "Medium"),
        ("The Final Tower", "Vertical ascent with the hardest platforming challenges", "Hard"),
    ],
}

DEFAULT_LEVELS = [
    ("Level 1", "Introduction to basic gameplay mechanics", "Tutorial"),
    ("Level 2", "First challenge with basic obstacles", "Easy"),
    ("Level 3", "Increased difficulty with new elements", "Medium"),
]

COMMON_UI = ["Main Menu", "Pause Menu", "Settings", "Game Over Screen"]

CATEGORY_UI = {
    GameCategory.FPS: ["Health Bar", "Ammo Counter", "Crosshair", "Minimap", "Weapon Selection"],
    GameCategory.ADVENTURE: ["Inventory Screen", "Dialog UI", "Quest Log", "Map", "Character Stats"],
    GameCategory.PUZZLE: ["Hint System", "Timer", "Move Counter", "Restart Button", "Puzzle Grid"],
    GameCategory.RACING: ["Speedometer", "Lap Counter", "Position Indicator", "Race Timer", "Minimap"],
    GameCategory.PLATFORMER: [
        "Health/Lives Counter", "Score Counter", "Collectible Counter", "Level Progress", "Power-up Display",
    ],
}

# Checked in order; the first match wins
SETTING_KEYWORDS = [
    ("space", ("space", "galaxy"), "A vast space environment with distant stars and mysterious planets"),
    ("medieval", ("medieval", "castle"), "A medieval world with castles, villages, and ancient forests"),
    ("future", ("future", "sci-fi"), "A futuristic sci-fi setting with advanced technology and structures"),
    ("urban", ("city", "urban"), "A modern urban environment with city streets and buildings"),
    ("nature", ("forest", "mountain"), "A natural wilderness setting with forests, mountains, and wildlife"),
    ("zombie", ("zombie", "undead"), "A post-apocalyptic world overrun by the undead"),
]

STOP_WORDS = {"game", "about", "with", "that", "this", "would", "could", "where", "there"}


def detect_category(prompt: str) -> GameCategory:
    """Keyword-based category detection; OTHER when nothing matches."""
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(prompt):
            return category
    return GameCategory.OTHER


def extract_json_object(content: str) -> Dict[str, Any]:
    """Parse the first {...} block of a model response."""
    match = re.search(r"\{.*\}", content, re.DOTALL)
    json_str = match.group(0) if match else content
    parsed = json.loads(json_str)
    if not isinstance(parsed, dict):
        raise ValueError("Response JSON is not an object")
    return parsed


class OfflineDesignGenerator(DesignGenerator):
    """Deterministic design generation from keywords and category tables."""

    def game_name(self, prompt: str, category: GameCategory) -> str:
        words = [
            word.strip(".,!?;:\"'()")
            for word in prompt.split()
        ]
        words = [w for w in words if len(w) > 3 and w.lower() not in STOP_WORDS]
        adjective, noun = NAME_PARTS[category]
        if len(words) > 1:
            return f"{words[0].capitalize()} {words[1].capitalize()}"
        if len(words) == 1:
            return f"{words[0].capitalize()} {noun}"
        return f"{adjective} {noun}"

    def setting(self, prompt: str) -> Dict[str, str]:
        lowered = prompt.lower()
        detected = [(name, text) for name, keys, text in SETTING_KEYWORDS if any(k in lowered for k in keys)]
        if not detected:
            return {"type": "fantasy", "description": "A fantasy setting based on the user's description"}
        name, text = detected[0]
        if name == "zombie" and len(detected) == 1:
            return {"type": "urban", "description": "A modern urban environment with city streets and buildings"}
        return {"type": name, "description": text}

    def characters(self, prompt: str, category: GameCategory) -> List[Dict[str, str]]:
        characters = [{"type": "player", "description": "Main player character controlled by the user"}]
        if category == GameCategory.FPS and "zombie" in prompt.lower():
            characters.append({"type": "enemy", "description": "Zombie enemies that attack the player"})
        else:
            characters.append({"type": "enemy", "description": "Enemy characters that challenge the player"})
        if category == GameCategory.ADVENTURE:
            characters.append({"type": "npc", "description": "Friendly characters that provide information and quests"})
        return characters

    def design(self, prompt: str, category: GameCategory) -> DesignDocument:
        """Build the design document for a prompt in a known category."""
        levels = LEVELS.get(category, DEFAULT_LEVELS)
        return DesignDocument.coerce({
            "gameName": self.game_name(prompt, category),
            "description": prompt,
            "genre": GENRES[category],
            "setting": self.setting(prompt),
            "characters": self.characters(prompt, category),
            "mechanics": MECHANICS.get(category, DEFAULT_MECHANICS),
            "levels": [{"name": n, "description": d, "difficulty": diff} for n, d, diff in levels],
            "assets": {},
            "userInterface": COMMON_UI + CATEGORY_UI.get(category, []),
        })

    async def generate(self, prompt: str) -> DesignDraft:
        category = detect_category(prompt)
        design = self.design(prompt, category)
        self.logger.info("Generated offline design", category=category.value, game_name=design.game_name)
        return DesignDraft(category=category, name=design.game_name or "", design=design, source="offline")


@dataclass
class LLMConfig:
    """Configuration for the chat completions design generator."""

    api_key: str
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout: int = 60
    max_retries: int = 3
    max_tokens: int = 2048
    temperature: float = 0.7

    def validate(self) -> None:
        """Validate the configuration."""
        if not self.api_key:
            raise DesignGenerationError("API key is required", error_code="INVALID_CONFIG")
        if not self.base_url:
            raise DesignGenerationError("Base URL is required", error_code="INVALID_CONFIG")
        if self.timeout <= 0:
            raise DesignGenerationError("Timeout must be positive", error_code="INVALID_CONFIG")
        if self.max_retries < 0:
            raise DesignGenerationError("Max retries cannot be negative", error_code="INVALID_CONFIG")
        if not (0.0 <= self.temperature <= 2.0):
            raise DesignGenerationError("Temperature must be between 0.0 and 2.0", error_code="INVALID_CONFIG")


SYSTEM_PROMPT = """You are a game design expert. Turn the user's game description into a JSON object with these fields:
"gameType": exactly one of fps, adventure, puzzle, racing, platformer, other
"gameName": a short catchy title
"description": one or two sentences
"genre": the game's genre
"setting": {"type": "...", "description": "..."}
"characters": [{"type": "player|enemy|npc", "description": "..."}]
"mechanics": ["..."]
"levels": [{"name": "...", "description": "...", "difficulty": "Tutorial|Easy|Medium|Hard"}]
"assets": {"<asset category>": ["asset name", ...]}
"userInterface": ["..."]
Respond with the JSON object only."""


class LLMDesignGenerator(DesignGenerator):
    """
    Design generation through an OpenAI-compatible chat completions API.

    Failed or unusable responses fall back to the offline generator, so
    generate() only raises for programming errors.
    """

    def __init__(self, config: LLMConfig, fallback: Optional[DesignGenerator] = None):
        super().__init__()
        config.validate()
        self.config = config
        self.fallback = fallback or OfflineDesignGenerator()
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
        )
        self._request_with_retry = with_retry(max_retries=config.max_retries)(self._request)

        self.logger.info("LLM design generator initialized", model=config.model, max_tokens=config.max_tokens)

    async def generate(self, prompt: str) -> DesignDraft:
        try:
            content = await self._request_with_retry(prompt)
            raw = extract_json_object(content)
        except (DesignGenerationError, ValueError) as e:
            self.logger.warning("LLM design generation failed, using offline design", error=str(e))
            return await self.fallback.generate(prompt)

        category = GameCategory.coerce(raw.get("gameType"))
        if category == GameCategory.OTHER:
            category = detect_category(prompt)

        design = DesignDocument.coerce(raw)
        if design.game_name is None:
            design = design.model_copy(update={"game_name": OfflineDesignGenerator().game_name(prompt, category)})

        self.logger.info("Generated design document", category=category.value, game_name=design.game_name)
        return DesignDraft(category=category, name=design.game_name or "", design=design, source="llm")

    async def _request(self, prompt: str) -> str:
        """Make one chat completions call and return the message content."""
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "response_format": {"type": "json_object"},
        }

        try:
            response = await self.client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            raise GenerationTimeoutError(
                "Request to LLM API timed out",
                timeout_duration=self.config.timeout,
                original_exception=e,
            )
        except httpx.RequestError as e:
            raise APIError(f"Network error calling LLM API: {e}", original_exception=e)

        if response.status_code == 429:
            retry_after = int(response.headers.get("retry-after", 60))
            raise RateLimitError("Rate limit exceeded", retry_after=retry_after, status_code=429)

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"error": response.text}
            raise APIError(
                f"LLM API error: {response.status_code}",
                status_code=response.status_code,
                response_data=error_data,
            )

        try:
            choices = response.json().get("choices") or []
            content = choices[0]["message"]["content"] if choices else ""
        except (ValueError, KeyError, TypeError) as e:
            raise APIError("Malformed LLM API response", original_exception=e)

        if not content or not content.strip():
            raise APIError("Empty response from LLM")
        return content

    async def close(self) -> None:
        await self.client.aclose()
        self.logger.info("LLM design generator client closed")
