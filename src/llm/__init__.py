"""Provider client adapters.

Uniform chat-completion interface over Groq, OpenAI, Anthropic and
Gemini, used by the completion orchestrator.
"""

from src.llm.backends import (
    AnthropicBackend,
    ChatTurn,
    GeminiBackend,
    LLMCallResult,
    ModelBackend,
    OpenAICompatibleBackend,
)
from src.llm.factory import build_provider_chain, get_backend

__all__ = [
    "ChatTurn",
    "LLMCallResult",
    "ModelBackend",
    "OpenAICompatibleBackend",
    "AnthropicBackend",
    "GeminiBackend",
    "get_backend",
    "build_provider_chain",
]
