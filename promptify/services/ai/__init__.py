from promptify.services.ai.base import AIResponse, AIUsage, BaseAIProvider
from promptify.services.ai.catgpt import CatGPTProvider
from promptify.services.ai.chatgpt import ChatGPTProvider
from promptify.services.ai.claude import ClaudeProvider
from promptify.services.ai.manager import AIManager, get_ai_manager
from promptify.services.ai.perplexity import PerplexityProvider

__all__ = [
    "AIManager",
    "AIResponse",
    "AIUsage",
    "BaseAIProvider",
    "CatGPTProvider",
    "ChatGPTProvider",
    "ClaudeProvider",
    "PerplexityProvider",
    "get_ai_manager",
]
