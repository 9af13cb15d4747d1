"""Text completion against an Ollama-style generate endpoint."""

from __future__ import annotations

import json

import httpx
from loguru import logger

from ccip_agent.config import Settings
from ccip_agent.errors import ExternalProviderError


class OllamaCompletionClient:
    """POSTs the whole transcript as one prompt and returns the ``response`` text."""

    def __init__(
        self,
        endpoint: str,
        *,
        model: str = "llama3.2",
        api_key: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._model = model
        self._api_key = api_key
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(None, connect=10.0))

    @classmethod
    def from_settings(cls, settings: Settings, *, http: httpx.AsyncClient | None = None) -> OllamaCompletionClient:
        api_key = settings.llama_api_key.get_secret_value() if settings.llama_api_key else None
        return cls(settings.llama_api_url, model=settings.llama_model, api_key=api_key, http=http)

    async def complete(self, prompt: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        logger.debug("completion.request model={} prompt_chars={}", self._model, len(prompt))
        try:
            response = await self._http.post(
                self._endpoint,
                headers=headers,
                json={"model": self._model, "prompt": prompt, "stream": False},
            )
        except httpx.HTTPError as exc:
            raise ExternalProviderError(f"LLM request failed: {exc!s}") from exc

        if response.is_error:
            raise ExternalProviderError(
                f"LLM request failed: {response.status_code} {response.reason_phrase} - {response.text}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalProviderError(f"Unexpected response format: {response.text}") from exc
        text = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise ExternalProviderError(f"Unexpected response format: {json.dumps(payload)}")
        return text

    async def aclose(self) -> None:
        await self._http.aclose()
