"""LLM backend abstraction for multi-provider chat completion.

Provides a unified interface for calling different chat-completion
providers (Groq, OpenAI, Anthropic Claude, Google Gemini) with a
consistent response format.

Each backend handles provider-specific concerns:
- Client creation and timeout configuration
- Translating the shared turn list into the provider's message shape
- Response parsing and token counting

Backends never retry. Any failure (transport, auth, rate limit, missing
API key) is raised as a single ProviderError; the completion orchestrator
decides what happens next.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, Sequence, runtime_checkable

from src.errors import ProviderError

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

# Output cap for providers that require one (Anthropic)
DEFAULT_MAX_TOKENS = 2048


@dataclass(frozen=True)
class ChatTurn:
    """One message handed to a provider."""

    role: Role
    content: str


@dataclass
class LLMCallResult:
    """Normalized response from any LLM backend."""

    content: str
    provider: str
    model_id: str
    input_tokens: int
    output_tokens: int
    duration_ms: int


@runtime_checkable
class ModelBackend(Protocol):
    """Protocol for chat-completion backend implementations."""

    @property
    def provider(self) -> str: ...

    @property
    def model_id(self) -> str: ...

    def complete(
        self,
        system_prompt: str,
        turns: Sequence[ChatTurn],
        *,
        label: str = "",
    ) -> LLMCallResult: ...


def _http_timeout(seconds: float):
    import httpx

    return httpx.Timeout(seconds, connect=min(seconds, 5.0))


def _require_api_key(env_var: str) -> str:
    api_key = os.environ.get(env_var)
    if not api_key:
        raise RuntimeError(f"{env_var} not set")
    return api_key


class OpenAICompatibleBackend:
    """Chat-completions backend for OpenAI and OpenAI-compatible APIs.

    Groq exposes the same API shape, so both are served by this class
    with a different base URL and API key variable.
    """

    def __init__(
        self,
        model_id: str,
        *,
        provider: str = "openai",
        base_url: Optional[str] = None,
        api_key_env: str = "OPENAI_API_KEY",
        timeout: float = 8.0,
    ):
        self._model_id = model_id
        self._provider = provider
        self._base_url = base_url
        self._api_key_env = api_key_env
        self._timeout = timeout

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self):
        from openai import OpenAI

        return OpenAI(
            api_key=_require_api_key(self._api_key_env),
            base_url=self._base_url,
            timeout=_http_timeout(self._timeout),
            max_retries=0,
        )

    def complete(
        self,
        system_prompt: str,
        turns: Sequence[ChatTurn],
        *,
        label: str = "",
    ) -> LLMCallResult:
        start_time = time.time()
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": t.role, "content": t.content} for t in turns)

        logger.info(
            f"[{label}] {self._provider} call: model={self._model_id}, "
            f"{len(messages)} messages, timeout={self._timeout}s"
        )
        try:
            client = self._get_client()
            response = client.chat.completions.create(
                model=self._model_id,
                messages=messages,
            )
            content = ""
            if response.choices:
                content = response.choices[0].message.content or ""
        except Exception as e:
            raise ProviderError(self._provider, self._model_id, e) from e

        duration_ms = int((time.time() - start_time) * 1000)
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0

        logger.info(
            f"[{label}] {self._provider} completed: {input_tokens}+{output_tokens} tokens, "
            f"{duration_ms}ms, {len(content):,} chars"
        )

        return LLMCallResult(
            content=content.strip(),
            provider=self._provider,
            model_id=self._model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )


class AnthropicBackend:
    """Anthropic Claude backend.

    The Messages API wants the system prompt as a separate parameter and
    strictly alternating turns that start with the user, so the shared turn
    list is normalized before sending.
    """

    def __init__(self, model_id: str = "claude-sonnet-4-5", *, timeout: float = 8.0):
        self._model_id = model_id
        self._timeout = timeout

    @property
    def provider(self) -> str:
        return "anthropic"

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self):
        from anthropic import Anthropic

        return Anthropic(
            api_key=_require_api_key("ANTHROPIC_API_KEY"),
            timeout=_http_timeout(self._timeout),
            max_retries=0,
        )

    @staticmethod
    def _to_messages(turns: Sequence[ChatTurn]) -> tuple[list[str], list[dict[str, Any]]]:
        """Split out system turns and merge consecutive same-role turns."""
        extra_system: list[str] = []
        messages: list[dict[str, Any]] = []
        for turn in turns:
            if turn.role == "system":
                extra_system.append(turn.content)
                continue
            if not messages and turn.role == "assistant":
                continue
            if messages and messages[-1]["role"] == turn.role:
                messages[-1]["content"] += "\n\n" + turn.content
            else:
                messages.append({"role": turn.role, "content": turn.content})
        return extra_system, messages

    def complete(
        self,
        system_prompt: str,
        turns: Sequence[ChatTurn],
        *,
        label: str = "",
    ) -> LLMCallResult:
        start_time = time.time()
        extra_system, messages = self._to_messages(turns)
        system = "\n\n".join([system_prompt, *extra_system])

        logger.info(
            f"[{label}] Anthropic call: model={self._model_id}, "
            f"{len(messages)} messages, timeout={self._timeout}s"
        )
        try:
            client = self._get_client()
            response = client.messages.create(
                model=self._model_id,
                max_tokens=DEFAULT_MAX_TOKENS,
                system=system,
                messages=messages,
            )
            raw_text = ""
            for block in response.content:
                if hasattr(block, "text"):
                    raw_text += block.text
        except Exception as e:
            raise ProviderError(self.provider, self._model_id, e) from e

        duration_ms = int((time.time() - start_time) * 1000)
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "input_tokens", 0) or 0
        output_tokens = getattr(usage, "output_tokens", 0) or 0

        logger.info(
            f"[{label}] Anthropic completed: {input_tokens}+{output_tokens} tokens, "
            f"{duration_ms}ms, {len(raw_text):,} chars"
        )

        return LLMCallResult(
            content=raw_text.strip(),
            provider=self.provider,
            model_id=self._model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )


class GeminiBackend:
    """Google Gemini backend.

    Requires GEMINI_API_KEY environment variable.
    Requires google-genai package: pip install google-genai
    """

    def __init__(self, model_id: str = "gemini-2.5-flash", *, timeout: float = 8.0):
        self._model_id = model_id
        self._timeout = timeout

    @property
    def provider(self) -> str:
        return "gemini"

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self):
        from google import genai

        return genai.Client(
            api_key=_require_api_key("GEMINI_API_KEY"),
            http_options=genai.types.HttpOptions(timeout=int(self._timeout * 1000)),
        )

    def complete(
        self,
        system_prompt: str,
        turns: Sequence[ChatTurn],
        *,
        label: str = "",
    ) -> LLMCallResult:
        start_time = time.time()

        logger.info(
            f"[{label}] Gemini call: model={self._model_id}, "
            f"{len(turns)} turns, timeout={self._timeout}s"
        )
        try:
            from google.genai import types

            client = self._get_client()
            system_parts = [system_prompt] + [t.content for t in turns if t.role == "system"]
            contents = [
                types.Content(
                    role="model" if t.role == "assistant" else "user",
                    parts=[types.Part(text=t.content)],
                )
                for t in turns
                if t.role != "system"
            ]
            response = client.models.generate_content(
                model=self._model_id,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction="\n\n".join(system_parts),
                ),
            )
            raw_text = ""
            if response.candidates and response.candidates[0].content:
                for part in response.candidates[0].content.parts or []:
                    if getattr(part, "thought", False):
                        continue
                    raw_text += getattr(part, "text", "") or ""
        except Exception as e:
            raise ProviderError(self.provider, self._model_id, e) from e

        duration_ms = int((time.time() - start_time) * 1000)

        usage = getattr(response, "usage_metadata", None)
        input_tokens = getattr(usage, "prompt_token_count", 0) or 0
        output_tokens = getattr(usage, "candidates_token_count", 0) or 0

        logger.info(
            f"[{label}] Gemini completed: {input_tokens}+{output_tokens} tokens, "
            f"{duration_ms}ms, {len(raw_text):,} chars"
        )

        return LLMCallResult(
            content=raw_text.strip(),
            provider=self.provider,
            model_id=self._model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )
