import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.generators.base import APIError, DesignGenerationError, GenerationTimeoutError, RateLimitError, with_retry
from src.generators.design_generator import (
    LLMConfig,
    LLMDesignGenerator,
    OfflineDesignGenerator,
    detect_category,
    extract_json_object,
)
from src.models.project_model import GameCategory


def chat_response(content: str, status_code: int = 200) -> httpx.Response:
    request = httpx.Request("POST", "https://llm.example.com/v1/chat/completions")
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"content": content}}]},
        request=request,
    )


@pytest.fixture
async def llm_generator():
    generator = LLMDesignGenerator(LLMConfig(api_key="test-key", base_url="https://llm.example.com/v1", max_retries=0))
    yield generator
    await generator.close()


class TestCategoryDetection:
    @pytest.mark.parametrize("prompt, expected", [
        ("A zombie survival game", GameCategory.FPS),
        ("A first person shooter in space", GameCategory.FPS),
        ("An adventure to explore ancient ruins", GameCategory.ADVENTURE),
        ("Solve riddles in a lighthouse", GameCategory.PUZZLE),
        ("Drive fast cars around a track", GameCategory.RACING),
        ("Jump between floating islands", GameCategory.PLATFORMER),
        ("A cozy farming simulator", GameCategory.OTHER),
    ])
    def test_detect_category(self, prompt: str, expected: GameCategory) -> None:
        assert detect_category(prompt) == expected


class TestOfflineDesignGenerator:
    async def test_generate_is_deterministic(self) -> None:
        generator = OfflineDesignGenerator()

        first = await generator.generate("A zombie shooter in a medieval castle")
        second = await generator.generate("A zombie shooter in a medieval castle")

        assert first.design == second.design
        assert first.category == GameCategory.FPS
        assert first.source == "offline"

    async def test_design_contents(self) -> None:
        draft = await OfflineDesignGenerator().generate("Race hover cars through a neon city")

        design = draft.design
        assert draft.category == GameCategory.RACING
        assert design.genre == "Racing"
        assert design.setting.type == "urban"
        assert "Vehicle control" in design.mechanics
        assert [level.name for level in design.levels][0] == "Rookie Circuit"
        assert "Speedometer" in design.user_interface
        assert "Main Menu" in design.user_interface
        assert draft.name == design.game_name

    def test_game_name_from_prompt_words(self) -> None:
        generator = OfflineDesignGenerator()

        assert generator.game_name("haunted lighthouse riddles", GameCategory.PUZZLE) == "Haunted Lighthouse"
        assert generator.game_name("a big one", GameCategory.PUZZLE) == "Enigmatic Mystery"

    def test_zombie_only_setting_is_urban(self) -> None:
        assert OfflineDesignGenerator().setting("zombie outbreak")["type"] == "urban"

    def test_adventure_has_npc(self) -> None:
        characters = OfflineDesignGenerator().characters("a quest", GameCategory.ADVENTURE)
        assert [c["type"] for c in characters] == ["player", "enemy", "npc"]


class TestExtractJson:
    def test_extracts_embedded_object(self) -> None:
        assert extract_json_object('Here you go:\n{"gameName": "X"}\nEnjoy!') == {"gameName": "X"}

    def test_rejects_non_object(self) -> None:
        with pytest.raises(ValueError):
            extract_json_object("[1, 2, 3]")


class TestLLMDesignGenerator:
    async def test_uses_llm_response(self, llm_generator: LLMDesignGenerator, mocker) -> None:
        content = json.dumps({
            "gameType": "puzzle",
            "gameName": "Mirror Maze",
            "mechanics": "Reflect beams",
            "levels": ["Entrance", "Hall of Mirrors"],
        })
        post = mocker.patch.object(llm_generator.client, "post", AsyncMock(return_value=chat_response(content)))

        draft = await llm_generator.generate("A puzzle game about light and mirrors")

        assert draft.source == "llm"
        assert draft.category == GameCategory.PUZZLE
        assert draft.name == "Mirror Maze"
        assert draft.design.mechanics == ["Reflect beams"]
        payload = post.call_args.kwargs["json"]
        assert payload["messages"][1]["content"] == "A puzzle game about light and mirrors"

    async def test_unknown_game_type_uses_keywords(self, llm_generator: LLMDesignGenerator, mocker) -> None:
        content = json.dumps({"gameType": "strategy"})
        mocker.patch.object(llm_generator.client, "post", AsyncMock(return_value=chat_response(content)))

        draft = await llm_generator.generate("A racing game with fast cars")

        assert draft.category == GameCategory.RACING
        assert draft.design.game_name

    async def test_api_error_falls_back_to_offline(self, llm_generator: LLMDesignGenerator, mocker) -> None:
        mocker.patch.object(llm_generator.client, "post", AsyncMock(return_value=chat_response("", status_code=500)))

        draft = await llm_generator.generate("A zombie shooter in a mall")

        assert draft.source == "offline"
        assert draft.category == GameCategory.FPS

    async def test_timeout_falls_back_to_offline(self, llm_generator: LLMDesignGenerator, mocker) -> None:
        mocker.patch.object(llm_generator.client, "post", AsyncMock(side_effect=httpx.ReadTimeout("slow")))

        draft = await llm_generator.generate("A platformer about jumping frogs")

        assert draft.source == "offline"

    async def test_unparseable_content_falls_back(self, llm_generator: LLMDesignGenerator, mocker) -> None:
        mocker.patch.object(llm_generator.client, "post", AsyncMock(return_value=chat_response("no json here")))

        draft = await llm_generator.generate("An adventure through the desert")

        assert draft.source == "offline"

    def test_invalid_config(self) -> None:
        with pytest.raises(DesignGenerationError):
            LLMConfig(api_key="").validate()
        with pytest.raises(DesignGenerationError):
            LLMConfig(api_key="k", temperature=3.0).validate()


class TestWithRetry:
    async def test_retries_then_succeeds(self, mocker) -> None:
        mocker.patch("src.generators.base.asyncio.sleep", AsyncMock())
        calls = MagicMock(side_effect=[APIError("down"), GenerationTimeoutError("slow"), "ok"])

        @with_retry(max_retries=2)
        async def flaky() -> str:
            result = calls()
            return result

        assert await flaky() == "ok"
        assert calls.call_count == 3

    async def test_gives_up_after_max_retries(self, mocker) -> None:
        mocker.patch("src.generators.base.asyncio.sleep", AsyncMock())

        @with_retry(max_retries=1)
        async def always_down() -> None:
            raise APIError("down", status_code=503)

        with pytest.raises(APIError):
            await always_down()

    async def test_rate_limit_honours_retry_after(self, mocker) -> None:
        sleep = mocker.patch("src.generators.base.asyncio.sleep", AsyncMock())
        calls = MagicMock(side_effect=[RateLimitError("slow down", retry_after=7), "ok"])

        @with_retry(max_retries=1, backoff_factor=1.0)
        async def limited() -> str:
            return calls()

        assert await limited() == "ok"
        sleep.assert_awaited_once_with(7)

    async def test_other_errors_are_not_retried(self) -> None:
        calls = MagicMock(side_effect=ValueError("bad"))

        @with_retry(max_retries=3)
        async def broken() -> None:
            calls()

        with pytest.raises(ValueError):
            await broken()
        assert calls.call_count == 1
