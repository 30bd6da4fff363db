"""Routes playground messages to the provider the user picked."""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Optional

import httpx

from promptify.core.config import ai_settings
from promptify.models import utc_now
from promptify.services.ai.base import AIResponse, BaseAIProvider
from promptify.services.ai.catgpt import CatGPTProvider
from promptify.services.ai.chatgpt import ChatGPTProvider
from promptify.services.ai.claude import ClaudeProvider
from promptify.services.ai.perplexity import PerplexityProvider

logger = logging.getLogger(__name__)


class AIManager:
    """Name -> provider table with a few bulk operations on top."""

    _instance: Optional["AIManager"] = None

    def __init__(
        self,
        providers: Optional[dict[str, BaseAIProvider]] = None,
        default_model: Optional[str] = None,
    ):
        self.providers = providers if providers is not None else self.default_providers()
        self.default_model = default_model or ai_settings.DEFAULT_MODEL

    @staticmethod
    def default_providers(transport: Optional[httpx.AsyncBaseTransport] = None) -> dict[str, BaseAIProvider]:
        return {
            "claude": ClaudeProvider(ai_settings.ANTHROPIC_API_KEY, transport=transport),
            "chatgpt": ChatGPTProvider(ai_settings.OPENAI_API_KEY, transport=transport),
            "perplexity": PerplexityProvider(ai_settings.PERPLEXITY_API_KEY, transport=transport),
            "catgpt": CatGPTProvider(ai_settings.CATGPT_API_KEY, transport=transport),
        }

    @classmethod
    def get_instance(cls) -> "AIManager":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def available_models(self) -> list[str]:
        return list(self.providers)

    async def send_message(
        self,
        message: str,
        model: Optional[str] = None,
        session_id: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        model = model or self.default_model
        provider = self.providers.get(model)
        if provider is None:
            return AIResponse(
                success=False,
                error=(
                    f"Unsupported AI model: {model}. "
                    f"Available models: {', '.join(self.available_models)}"
                ),
                code=400,
            )

        try:
            result = await provider.send_message(
                message,
                session_id=session_id,
                temperature=ai_settings.DEFAULT_TEMPERATURE if temperature is None else temperature,
                max_tokens=max_tokens or ai_settings.DEFAULT_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"AI request to {model} failed: {e}")
            return AIResponse(
                success=False,
                error=f"Failed to process request with {model}: {e}",
                code=500,
            )

        if result.success:
            result.ai_model = model
        return result

    async def validate_api_keys(self) -> dict[str, dict[str, Any]]:
        results = await asyncio.gather(
            *(provider.validate_api_key() for provider in self.providers.values()),
            return_exceptions=True,
        )
        validation = {}
        for name, result in zip(self.providers, results):
            if isinstance(result, Exception):
                validation[name] = {"valid": False, "error": str(result)}
            else:
                validation[name] = result
        return validation

    async def get_available_models(self) -> dict[str, dict[str, Any]]:
        models = {}
        for name, provider in self.providers.items():
            try:
                provider_models = await provider.get_models()
                models[name] = {"models": provider_models, "error": None}
            except Exception as e:
                logger.warning(f"Could not list models for {name}: {e}")
                models[name] = {"models": [], "error": str(e)}
        return models

    def get_service_info(self) -> dict[str, dict[str, Any]]:
        return {name: provider.info() for name, provider in self.providers.items()}

    def get_model_description(self, model: str) -> str:
        provider = self.providers.get(model)
        return provider.description if provider else "Unknown model"

    async def health_check(self) -> dict[str, dict[str, Any]]:
        health = {}
        for name, provider in self.providers.items():
            try:
                validation = await provider.validate_api_key()
                healthy = validation.get("valid", False) or provider.is_mock_mode
                health[name] = {
                    "status": "healthy" if healthy else "unhealthy",
                    "mock_mode": provider.is_mock_mode,
                    "error": None if validation.get("valid") else validation.get("error"),
                }
            except Exception as e:
                health[name] = {
                    "status": "unhealthy",
                    "mock_mode": provider.is_mock_mode,
                    "error": str(e),
                }
        return health

    def get_usage_stats(self) -> dict[str, Any]:
        # placeholder until per-provider usage is persisted
        return {
            "total_requests": 0,
            "requests_by_model": {name: 0 for name in self.providers},
            "total_tokens": 0,
        }

    def check_rate_limit(self, user_id: str, model: Optional[str] = None) -> dict[str, Any]:
        # placeholder; the HTTP layer enforces the global request limit
        return {
            "allowed": True,
            "remaining": 100,
            "reset_time": (utc_now() + timedelta(hours=1)).isoformat(),
        }


def get_ai_manager() -> AIManager:
    return AIManager.get_instance()
