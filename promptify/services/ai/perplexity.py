import random
from typing import Optional

from promptify.services.ai.base import AIResponse, AIUsage, BaseAIProvider

SYSTEM_PROMPT = (
    "You are Perplexity, a research assistant. Answer accurately, cite sources "
    "where possible, and keep the answer focused on the user's question."
)

MOCK_TEMPLATES = [
    "Based on current sources, the most effective prompts share three traits: a clear "
    "objective, relevant context, and an explicit output format [1]. Studies of prompt "
    "engineering practice also show that examples improve consistency [2].",
    "Recent guidance on working with language models suggests iterating on prompts in "
    "small steps and comparing outputs side by side [1]. Adding constraints such as "
    "length or tone tends to reduce irrelevant content [3].",
    "Research on this topic points to structured prompting as the most reliable "
    "approach [2]. Breaking a complex request into sub-questions produces more "
    "accurate answers than a single broad question [1].",
]

MOCK_CITATIONS = [
    "https://example.com/prompt-engineering-guide",
    "https://example.com/llm-best-practices",
    "https://example.com/ai-research-overview",
]

FOLLOW_UP = "\n\n*This is a demo response. Configure a Perplexity API key for live search-backed answers.*"


class PerplexityProvider(BaseAIProvider):
    name = "perplexity"
    display_name = "Perplexity"
    description = "Perplexity AI - search-backed answers with citations"
    default_model = "llama-3.1-sonar-small-128k-online"
    static_models = (
        "llama-3.1-sonar-small-128k-online",
        "llama-3.1-sonar-large-128k-online",
        "llama-3.1-sonar-huge-128k-online",
    )
    mock_delay = (2.0, 5.0)
    api_url = "https://api.perplexity.ai/chat/completions"

    def mock_response(self, message: str) -> str:
        sources = "\n".join(f"[{i}] {url}" for i, url in enumerate(MOCK_CITATIONS, start=1))
        return f"{random.choice(MOCK_TEMPLATES)}\n\n**Sources:**\n{sources}{FOLLOW_UP}"

    def _mock_reply(self, message: str, session_id: str, model: str) -> AIResponse:
        reply = super()._mock_reply(message, session_id, model)
        reply.citations = list(MOCK_CITATIONS)
        return reply

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
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
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
            citations=list(data.get("citations", [])),
        )
