import random
from typing import Optional

from promptify.services.ai.base import AIResponse, AIUsage, BaseAIProvider

SYSTEM_PROMPT = (
    "You are Claude, an AI assistant helping users test and refine prompts in the "
    "Promptify playground. Give clear, well-structured answers and point out how "
    "the prompt itself could be improved when that is useful."
)

MOCK_TEMPLATES = [
    "I'd be happy to help with that. Looking at your request, a few things stand out:\n\n"
    "1. **Context matters**: the more background you give, the more targeted the answer.\n"
    "2. **Structure**: breaking the task into steps usually produces better results.\n"
    "3. **Examples**: one or two samples of the output you want go a long way.",
    "That's an interesting prompt. Here is how I would approach it:\n\n"
    "- Start by stating the goal in one sentence\n"
    "- List the constraints the answer has to respect\n"
    "- Say who the audience is and what tone fits them\n\n"
    "With those pieces in place the response becomes much easier to steer.",
    "Thanks for the question. My take:\n\n"
    "Your prompt already has a clear intent. To sharpen it, specify the format you "
    "expect (a list, a table, a short essay) and the length. That removes most of "
    "the guesswork on my side.",
    "Good starting point. A stronger version of this prompt would:\n\n"
    "**Define the role** the assistant should play\n"
    "**Describe the task** in concrete terms\n"
    "**Set success criteria** so the output can be judged\n\n"
    "Try adding those and compare the results.",
]

FOLLOW_UP = (
    "\n\n*This is a demo response. Configure an Anthropic API key to talk to the real Claude.*"
)


class ClaudeProvider(BaseAIProvider):
    name = "claude"
    display_name = "Claude"
    description = "Anthropic's Claude - thoughtful, nuanced answers with strong reasoning"
    default_model = "claude-3-sonnet-20240229"
    static_models = (
        "claude-3-haiku-20240307",
        "claude-3-sonnet-20240229",
        "claude-3-opus-20240229",
    )
    mock_delay = (1.5, 3.5)
    api_url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"

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
                self.api_url,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": self.api_version,
                    "content-type": "application/json",
                },
                json={
                    "model": model,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "system": SYSTEM_PROMPT,
                    "messages": [{"role": "user", "content": message}],
                },
            )
            response.raise_for_status()
            data = response.json()

        usage = data.get("usage", {})
        input_tokens = int(usage.get("input_tokens", 0))
        output_tokens = int(usage.get("output_tokens", 0))
        return AIResponse(
            success=True,
            response=data["content"][0]["text"],
            session_id=session_id,
            usage=AIUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            model=data.get("model", model),
        )
