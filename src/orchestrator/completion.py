"""Provider fallback for one assistant reply.

Providers are an ordered list of uniform handles. Each request tries them
in order, once each, and returns on the first success. Adding a provider
means appending to the list; nothing here branches on provider type.
"""

import logging
import time
from typing import Sequence

from src.config import FALLBACK_REPLY
from src.errors import AllProvidersFailedError, ProviderError
from src.llm.backends import ChatTurn, ModelBackend
from src.orchestrator.prompts import build_system_prompt
from src.orchestrator.schemas import CompletionContext, CompletionResult, ProviderAttempt

logger = logging.getLogger(__name__)


class CompletionOrchestrator:
    """Builds the prompt and walks the provider chain."""

    def __init__(self, backends: Sequence[ModelBackend], fallback_reply: str = FALLBACK_REPLY):
        if not backends:
            raise ValueError("At least one provider backend is required")
        self.backends = list(backends)
        self.fallback_reply = fallback_reply

    def complete(self, context: CompletionContext, label: str = "") -> CompletionResult:
        """Return one reply, or raise AllProvidersFailedError.

        Never returns empty content: a blank reply from a provider that
        otherwise succeeded is replaced with the fallback reply.
        """
        system_prompt = build_system_prompt(context.workspace_text)
        turns = [ChatTurn(role=t.role.value, content=t.content) for t in context.recent_turns]

        attempts: list[ProviderAttempt] = []
        errors: list[ProviderError] = []
        start_time = time.time()

        for backend in self.backends:
            try:
                result = backend.complete(system_prompt, turns, label=label)
            except ProviderError as e:
                errors.append(e)
                attempts.append(ProviderAttempt(
                    provider=backend.provider,
                    model_id=backend.model_id,
                    succeeded=False,
                    error=str(e),
                ))
                logger.warning(f"[{label}] {e}; trying next provider")
                continue

            attempts.append(ProviderAttempt(
                provider=backend.provider,
                model_id=backend.model_id,
                succeeded=True,
            ))
            content = (result.content or "").strip()
            if not content:
                logger.warning(
                    f"[{label}] {backend.provider} returned empty content, using fallback reply"
                )
                content = self.fallback_reply

            if errors:
                logger.info(
                    f"[{label}] Recovered via {backend.provider} after "
                    f"{len(errors)} failed provider(s)"
                )
            return CompletionResult(
                content=content,
                provider=result.provider,
                model_id=result.model_id,
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
                duration_ms=int((time.time() - start_time) * 1000),
                attempts=attempts,
            )

        logger.error(f"[{label}] All {len(errors)} providers failed")
        raise AllProvidersFailedError(errors)
