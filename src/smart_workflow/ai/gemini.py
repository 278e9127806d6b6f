"""Gemini ``generateContent`` client over plain REST.

Example:
    ```python
    client = GeminiClient(api_key="...", model="gemini-1.5-flash")
    text = await client.generate("Suggest tasks for a mobile banking app")
    await client.close()
    ```
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from smart_workflow.ai.base import TextGenerator
from smart_workflow.core.exceptions import SuggestionGenerationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def extract_text(payload: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate.

    Raises:
        SuggestionGenerationError: The response carries no usable text
    """
    candidates = payload.get("candidates") or []
    if not candidates:
        feedback = payload.get("promptFeedback") or {}
        raise SuggestionGenerationError(
            "Model returned no candidates",
            {"blockReason": feedback.get("blockReason")} if feedback else None,
        )
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise SuggestionGenerationError("Model returned an empty response")
    return text


class GeminiClient(TextGenerator):
    """Generative-language model reached with :mod:`httpx`.

    A missing API key is not an error at construction time; every
    :meth:`generate` call then fails with
    :class:`~smart_workflow.core.exceptions.SuggestionGenerationError`.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-1.5-flash",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._owns_client = client is None
        self._client = client

    def _http(self) -> httpx.AsyncClient:
        # an owned client is rebuilt on first use after close()
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise SuggestionGenerationError("Generative model API key is not configured")

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            rsp = await self._http().post(
                self.endpoint,
                json=body,
                headers={"x-goog-api-key": self.api_key},
            )
            rsp.raise_for_status()
            payload = rsp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Model call failed with HTTP %d", exc.response.status_code)
            raise SuggestionGenerationError(
                f"Model call failed with HTTP {exc.response.status_code}",
                {"status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Model call failed: %s", exc)
            raise SuggestionGenerationError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise SuggestionGenerationError("Model returned invalid JSON") from exc

        text = extract_text(payload)
        logger.debug("Model %s returned %d characters", self.model, len(text))
        return text

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["DEFAULT_BASE_URL", "GeminiClient", "extract_text"]
