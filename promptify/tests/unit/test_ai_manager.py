"""Unit tests for the AIManager dispatcher."""
from unittest.mock import AsyncMock

import pytest

from promptify.services.ai import AIManager, AIResponse, ClaudeProvider, get_ai_manager


@pytest.fixture
def manager() -> AIManager:
    return AIManager(AIManager.default_providers())


class TestDispatch:
    async def test_unknown_model_fails_without_calling_any_provider(self, manager: AIManager):
        """
        Given: A model name that is not registered
        When: send_message is called
        Then: A 400 failure naming the valid models is returned and no provider is called
        """
        for provider in manager.providers.values():
            provider.send_message = AsyncMock()

        result = await manager.send_message("Hello", model="gemini")

        assert result.success is False
        assert result.code == 400
        assert result.error == (
            "Unsupported AI model: gemini. Available models: claude, chatgpt, perplexity, catgpt"
        )
        for provider in manager.providers.values():
            provider.send_message.assert_not_called()

    async def test_default_model_is_claude(self, manager: AIManager):
        result = await manager.send_message("Hello")
        assert result.success is True
        assert result.ai_model == "claude"

    @pytest.mark.parametrize("model", ["claude", "chatgpt", "perplexity", "catgpt"])
    async def test_success_stamps_ai_model(self, manager: AIManager, model: str):
        result = await manager.send_message("Hello", model=model)
        assert result.success is True
        assert result.ai_model == model
        assert result.response

    async def test_provider_exception_becomes_500(self, manager: AIManager):
        manager.providers["chatgpt"].send_message = AsyncMock(side_effect=RuntimeError("boom"))

        result = await manager.send_message("Hello", model="chatgpt")

        assert result.success is False
        assert result.code == 500
        assert result.error == "Failed to process request with chatgpt: boom"

    async def test_forwards_generation_parameters(self):
        provider = ClaudeProvider()
        provider.send_message = AsyncMock(return_value=AIResponse(success=True, response="ok"))
        manager = AIManager({"claude": provider})

        await manager.send_message("Hi", model="claude", session_id="s1", temperature=0.2, max_tokens=50)

        provider.send_message.assert_awaited_once_with(
            "Hi", session_id="s1", temperature=0.2, max_tokens=50
        )


class TestBulkOperations:
    async def test_validate_api_keys_covers_every_provider(self, manager: AIManager):
        results = await manager.validate_api_keys()
        assert set(results) == {"claude", "chatgpt", "perplexity", "catgpt"}
        assert results["catgpt"]["valid"] is True
        assert results["claude"]["valid"] is False

    async def test_health_check_reports_mock_providers_healthy(self, manager: AIManager):
        health = await manager.health_check()
        assert all(entry["status"] == "healthy" for entry in health.values())
        assert all(entry["mock_mode"] for entry in health.values())

    async def test_available_models(self, manager: AIManager):
        models = await manager.get_available_models()
        assert "catgpt-4" in models["catgpt"]["models"]
        assert models["claude"]["error"] is None

    def test_service_info_and_description(self, manager: AIManager):
        info = manager.get_service_info()
        assert info["perplexity"]["mock_mode"] is True
        assert manager.get_model_description("claude") == info["claude"]["description"]
        assert manager.get_model_description("nope") == "Unknown model"

    def test_placeholders(self, manager: AIManager):
        stats = manager.get_usage_stats()
        assert stats["total_requests"] == 0
        limit = manager.check_rate_limit("user-1")
        assert limit["allowed"] is True
        assert limit["remaining"] == 100


def test_get_ai_manager_is_a_singleton():
    assert get_ai_manager() is get_ai_manager()
