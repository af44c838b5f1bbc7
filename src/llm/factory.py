"""Model backend factory.

Resolves model IDs to the appropriate backend implementation and builds
the ordered provider chain used for fallback.
"""

import logging
from typing import Iterable, Union

from src.llm.backends import (
    GROQ_BASE_URL,
    AnthropicBackend,
    GeminiBackend,
    ModelBackend,
    OpenAICompatibleBackend,
)

logger = logging.getLogger(__name__)


def get_backend(
    model_id: str,
    timeout: float = 8.0,
) -> Union[OpenAICompatibleBackend, AnthropicBackend, GeminiBackend]:
    """Get the appropriate backend for a model ID.

    Args:
        model_id: Full model identifier (e.g. 'groq/llama-3.3-70b-versatile',
                  'openai/gpt-4o', 'gpt-4o', 'claude-sonnet-4-5', 'gemini-2.5-flash')
        timeout: Per-call timeout in seconds

    Returns:
        Backend instance for the model

    Raises:
        ValueError: If model_id is not recognized
    """
    if model_id.startswith("groq/"):
        return OpenAICompatibleBackend(
            model_id[len("groq/"):],
            provider="groq",
            base_url=GROQ_BASE_URL,
            api_key_env="GROQ_API_KEY",
            timeout=timeout,
        )
    elif model_id.startswith("openai/"):
        return OpenAICompatibleBackend(model_id[len("openai/"):], timeout=timeout)
    elif model_id.startswith("gpt-"):
        return OpenAICompatibleBackend(model_id, timeout=timeout)
    elif model_id.startswith("claude-"):
        return AnthropicBackend(model_id=model_id, timeout=timeout)
    elif model_id.startswith("gemini-"):
        return GeminiBackend(model_id=model_id, timeout=timeout)
    else:
        raise ValueError(
            f"Unknown model: '{model_id}'. "
            f"Expected a model ID starting with 'groq/', 'openai/', 'gpt-', "
            f"'claude-', or 'gemini-'."
        )


def build_provider_chain(model_ids: Iterable[str], timeout: float = 8.0) -> list[ModelBackend]:
    """Build the ordered fallback chain. Adding a provider means adding an id."""
    chain = [get_backend(model_id, timeout=timeout) for model_id in model_ids]
    logger.info(
        "Provider chain: " + " -> ".join(f"{b.provider}/{b.model_id}" for b in chain)
    )
    return chain
