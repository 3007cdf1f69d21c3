"""Backend generativo OpenAI (chat completions)."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from app.protocols.text_generator import (
    GenerationBackendError,
    GenerationResult,
    InvalidRequestError,
    QuotaExceededError,
    RateLimitedError,
    TextGeneratorProtocol,
    TokenUsage,
)
from config.settings.ai.openai import OpenAISettings, get_openai_settings

logger = logging.getLogger(__name__)

_QUOTA_CODE = "insufficient_quota"
_REPETITION_PENALTY = 0.1


class OpenAITextGenerator(TextGeneratorProtocol):
    """Implementa TextGeneratorProtocol sobre AsyncOpenAI.

    O prompt completo é enviado como mensagem única de usuário; erros do
    SDK são convertidos para a hierarquia GenerationError.
    """

    __slots__ = ("_client",)

    def __init__(
        self,
        *,
        settings: OpenAISettings | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        cfg = settings or get_openai_settings()
        if client is not None:
            self._client = client
        else:
            self._client = AsyncOpenAI(
                api_key=cfg.api_key,
                timeout=cfg.timeout_seconds,
                max_retries=0,
            )

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        model: str,
    ) -> GenerationResult:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
                top_p=1,
                frequency_penalty=_REPETITION_PENALTY,
                presence_penalty=_REPETITION_PENALTY,
            )
        except openai.RateLimitError as exc:
            if _error_code(exc) == _QUOTA_CODE:
                raise QuotaExceededError(str(exc)) from exc
            raise RateLimitedError(str(exc)) from exc
        except openai.BadRequestError as exc:
            raise InvalidRequestError(str(exc)) from exc
        except openai.OpenAIError as exc:
            raise GenerationBackendError(f"{type(exc).__name__}: {exc}") from exc

        content = _extract_content(response)
        if content is None:
            raise GenerationBackendError("openai_empty_choices")

        usage = getattr(response, "usage", None)
        return GenerationResult(
            text=content,
            usage=TokenUsage(
                prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
                completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            ),
            model=str(getattr(response, "model", None) or model),
        )

    async def aclose(self) -> None:
        """Fecha o cliente HTTP do SDK."""
        await self._client.close()


def _error_code(exc: openai.APIError) -> str | None:
    code = getattr(exc, "code", None)
    if code:
        return str(code)
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error", body)
        if isinstance(nested, dict) and nested.get("code"):
            return str(nested["code"])
    return None


def _extract_content(response: Any) -> str | None:
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    return choices[0].message.content or ""
