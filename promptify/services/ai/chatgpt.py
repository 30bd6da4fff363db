import random
from typing import Optional

import httpx

from promptify.core.errors import ExternalAPIError
from promptify.services.ai.base import AIResponse, AIUsage, BaseAIProvider

SYSTEM_PROMPT = (
    "You are ChatGPT, a helpful assistant inside the Promptify playground. "
    "Answer the user's prompt directly and concisely."
)

MOCK_TEMPLATES = [
    "Sure! Here's a quick answer to your prompt:\n\n"
    "The key is to be specific. Tell the model what you want, who it is for, and "
    "what the output should look like. Vague prompts get vague answers.",
    "Great question. Let me break it down:\n\n"
    "**Step 1:** Identify the outcome you need.\n"
    "**Step 2:** Give the model the context it can't guess.\n"
    "**Step 3:** Ask for a specific format.\n\n"
    "Following these steps usually improves the result right away.",
    "Here are a few ideas based on your prompt:\n\n"
    "- Add a persona (\"Act as a senior copywriter...\")\n"
    "- Limit the length (\"in under 150 words\")\n"
    "- Ask for alternatives (\"give me three variations\")",
    "Happy to help! Your prompt works, but it could be tighter. Try naming the "
    "audience and the tone explicitly, then ask for the answer in a numbered list.",
]

FOLLOW_UP = "\n\n*This is a demo response. Configure an OpenAI API key to use the real ChatGPT.*"


class ChatGPTProvider(BaseAIProvider):
    name = "chatgpt"
    display_name = "ChatGPT"
    description = "OpenAI's ChatGPT - versatile general-purpose assistant"
    default_model = "gpt-3.5-turbo"
    static_models = ("gpt-3.5-turbo", "gpt-4", "gpt-4-turbo")
    mock_delay = (1.2, 3.0)
    api_base = "https://api.openai.com/v1"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def mock_response(self, message: str) -> str:
        return random.choice(MOCK_TEMPLATES) + FOLLOW_UP

    async def _send(
        self,
        message: str,
        session_id: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: Optional[float] = None,
    ) -> AIResponse:
        async with self._client(timeout) as client:
            response = await client.post(
                f"{self.api_base}/chat/completions",
                headers=self._headers(),
                json={
                    "model": model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": message},
                    ],
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                },
            )
            response.raise_for_status()
            data = response.json()

        usage = data.get("usage", {})
        return AIResponse(
            success=True,
            response=data["choices"][0]["message"]["content"],
            session_id=session_id,
            usage=AIUsage(
                prompt_tokens=int(usage.get("prompt_tokens", 0)),
                completion_tokens=int(usage.get("completion_tokens", 0)),
                total_tokens=int(usage.get("total_tokens", 0)),
            ),
            model=data.get("model", model),
        )

    async def get_models(self) -> list[str]:
        if self.is_mock_mode:
            return list(self.static_models)
        try:
            async with self._client() as client:
                response = await client.get(f"{self.api_base}/models", headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise ExternalAPIError(self.display_name, str(e) or e.__class__.__name__) from e
        return sorted(
            model["id"]
            for model in data.get("data", [])
            if "gpt" in model.get("id", "") and "instruct" not in model.get("id", "")
        )
