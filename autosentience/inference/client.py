"""Inference Service: OpenAI-compatible chat completions with bounded retries.

Agents depend on the :class:`InferenceService` interface only, so tests can
substitute a fake.  :class:`InferenceClient` is the production
implementation (Groq, Ollama or any other OpenAI-compatible endpoint).
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import openai
import structlog
from openai import AsyncOpenAI

from autosentience.config import Settings
from autosentience.exceptions import InferenceError

logger = structlog.get_logger(__name__)


class InferenceService(ABC):
    """Given a prompt and a system prompt, return the model's raw text."""

    @abstractmethod
    async def infer(self, prompt: str, system_prompt: str, temperature: float) -> str:
        """Return the completion text.

        Raises:
            InferenceError: if the backend cannot produce an answer.
        """


class InferenceClient(InferenceService):
    """Chat-completions client with exponential-backoff retry and a per-call timeout."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "",
        *,
        max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        timeout_seconds: float = 30.0,
        max_tokens: int = 2048,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.base_url = base_url
        self.model = model
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self.max_tokens = max_tokens
        # Retries are handled here, not by the SDK.
        self.client = client or AsyncOpenAI(
            api_key=api_key or "not-set",
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        logger.info("initialized_inference_client", base_url=base_url, model=model)

    @classmethod
    def from_settings(cls, settings: Settings) -> "InferenceClient":
        return cls(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            max_retries=settings.llm_max_retries,
            backoff_base_seconds=settings.llm_backoff_base_seconds,
            timeout_seconds=settings.llm_timeout_seconds,
            max_tokens=settings.llm_max_tokens,
        )

    async def infer(self, prompt: str, system_prompt: str, temperature: float) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        last_error: Optional[str] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=self.max_tokens,
                )
                content = response.choices[0].message.content if response.choices else None
                if content:
                    logger.debug(
                        "inference_response_received",
                        attempt=attempt,
                        length=len(content),
                    )
                    return content
                last_error = "empty completion"

            except openai.APIError as exc:
                last_error = str(exc)

            wait = self.backoff_base_seconds * 2 ** (attempt - 1)
            logger.warning(
                "inference_attempt_failed",
                attempt=attempt,
                max_retries=self.max_retries,
                error=last_error,
                retry_in=wait if attempt < self.max_retries else None,
            )
            if attempt < self.max_retries:
                await asyncio.sleep(wait)

        raise InferenceError(
            f"Inference failed after {self.max_retries} attempts: {last_error}"
        )

    async def close(self) -> None:
        await self.client.close()
