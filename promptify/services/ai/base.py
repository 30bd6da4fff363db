"""Shared plumbing for AI chat providers."""

import asyncio
import logging
import random
import string
import time
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from promptify.core.config import ai_settings
from promptify.core.errors import ExternalAPIError

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"", "demo-key"}


class AIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class AIResponse(BaseModel):
    """Normalized reply from any provider, or the dispatcher's failure."""
    success: bool
    response: Optional[str] = None
    session_id: Optional[str] = None
    usage: AIUsage = Field(default_factory=AIUsage)
    model: Optional[str] = None
    citations: Optional[list[str]] = None
    ai_model: Optional[str] = None
    error: Optional[str] = None
    code: Optional[int] = None


def estimate_tokens(text: str) -> int:
    return len(text) // 4


def random_suffix(length: int = 9) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


class BaseAIProvider:
    """One vendor's chat endpoint, with a canned fallback when no key is set."""

    name: str = ""
    display_name: str = ""
    description: str = ""
    default_model: str = ""
    static_models: tuple[str, ...] = ()
    mock_delay: tuple[float, float] = (1.0, 3.0)
    session_prefix: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.transport = transport
        self.timeout = timeout or ai_settings.REQUEST_TIMEOUT

    @property
    def is_mock_mode(self) -> bool:
        return self.api_key in PLACEHOLDER_KEYS

    def new_session_id(self) -> str:
        return f"{self.session_prefix or self.name}_{int(time.time() * 1000)}_{random_suffix()}"

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or self.timeout, connect=5.0),
            transport=self.transport,
        )

    async def send_message(
        self,
        message: str,
        session_id: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AIResponse:
        session_id = session_id or self.new_session_id()
        model = model or self.default_model

        if self.is_mock_mode:
            await asyncio.sleep(random.uniform(*self.mock_delay))
            return self._mock_reply(message, session_id, model)

        try:
            return await self._send(message, session_id, model, temperature, max_tokens)
        except httpx.HTTPStatusError as e:
            detail = self._error_detail(e.response)
            logger.error(f"{self.display_name} API returned {e.response.status_code}: {detail}")
            raise ExternalAPIError(self.display_name, detail) from e
        except httpx.RequestError as e:
            logger.error(f"{self.display_name} API request failed: {e}")
            raise ExternalAPIError(self.display_name, str(e) or e.__class__.__name__) from e

    def _mock_reply(self, message: str, session_id: str, model: str) -> AIResponse:
        text = self.mock_response(message)
        prompt_tokens = estimate_tokens(message)
        completion_tokens = estimate_tokens(text)
        return AIResponse(
            success=True,
            response=text,
            session_id=session_id,
            usage=AIUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            model=model,
        )

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        return f"HTTP {response.status_code}"

    async def _send(
        self,
        message: str,
        session_id: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: Optional[float] = None,
    ) -> AIResponse:
        raise NotImplementedError

    def mock_response(self, message: str) -> str:
        raise NotImplementedError

    async def validate_api_key(self) -> dict[str, Any]:
        if self.is_mock_mode:
            return {"valid": False, "error": "No API key configured", "mock_mode": True}
        try:
            await self._send(
                "Hello", self.new_session_id(), self.default_model, 0.0, 10,
                timeout=ai_settings.VALIDATE_TIMEOUT,
            )
            return {"valid": True}
        except httpx.HTTPError as e:
            return {"valid": False, "error": str(e) or e.__class__.__name__}

    async def get_models(self) -> list[str]:
        return list(self.static_models)

    def info(self) -> dict[str, Any]:
        return {
            "name": self.display_name,
            "description": self.description,
            "mock_mode": self.is_mock_mode,
            "default_model": self.default_model,
        }
