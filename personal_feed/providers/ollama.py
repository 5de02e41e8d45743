"""
Ollama provider - local models served over Ollama's HTTP API.
"""

import asyncio
import json
import logging

import aiohttp

from .base import LLMProvider, LLMResponse, ProviderError

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """Calls ``POST /api/generate`` on a local Ollama server."""

    DEFAULT_MODEL = "llama3.2"

    def __init__(
        self,
        host: str = "http://localhost:11434",
        default_model: str | None = None,
        timeout: float = 120,
    ):
        self.host = host.rstrip("/")
        self.default_model = default_model or self.DEFAULT_MODEL
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def generate_url(self) -> str:
        return f"{self.host}/api/generate"

    def _payload(
        self,
        user_prompt: str,
        system_prompt: str | None,
        model: str | None,
        max_tokens: int,
        temperature: float,
    ) -> dict:
        payload = {
            "model": model or self.default_model,
            "prompt": user_prompt,
            "stream": False,
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }
        if system_prompt:
            payload["system"] = system_prompt
        return payload

    def _to_response(self, data: dict, model: str) -> LLMResponse:
        logger.debug(f"Ollama {model}: {data.get('eval_count', 0)} output tokens")
        return LLMResponse(
            text=data.get("response", "") or "",
            model=data.get("model", model),
            input_tokens=data.get("prompt_eval_count", 0) or 0,
            output_tokens=data.get("eval_count", 0) or 0,
            metadata={"total_duration": data.get("total_duration")},
        )

    async def _post(self, payload: dict) -> tuple[int, str]:
        """POST to the generate endpoint; returns status and raw body."""
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.generate_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                return resp.status, await resp.text()

    async def complete_async(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> LLMResponse:
        payload = self._payload(user_prompt, system_prompt, model, max_tokens, temperature)
        try:
            status, body = await self._post(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(f"Ollama request failed: {e}") from e

        if status >= 400:
            raise ProviderError(f"Ollama error: {status} - {body}")
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ProviderError(f"Ollama returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError("Ollama returned an unexpected response")
        return self._to_response(data, payload["model"])
