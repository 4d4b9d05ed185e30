"""Thin async client for OpenRouter chat completions (OpenAI-compatible API)."""
import json
import logging
from typing import AsyncIterator, Dict, List, Optional, Any

import httpx

from lumos.config import settings

logger = logging.getLogger(__name__)


class OpenRouterError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def is_rate_limited(self) -> bool:
        text = self.message.lower()
        return self.status_code == 429 or "rate limit" in text or "quota" in text


class OpenRouterClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self.timeout = timeout or settings.llm_timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.openrouter_referer,
            "X-Title": settings.openrouter_title,
        }

    def _payload(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str],
        max_tokens: Optional[int],
        temperature: Optional[float],
        stream: bool = False,
    ) -> Dict[str, Any]:
        return {
            "model": model or settings.openrouter_model,
            "messages": messages,
            "max_tokens": max_tokens or settings.llm_max_tokens,
            "temperature": settings.llm_temperature if temperature is None else temperature,
            "stream": stream,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """POST /chat/completions and return the raw completion JSON"""
        if not self.configured:
            raise OpenRouterError(500, "OpenRouter API key not configured")
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=self._payload(messages, model, max_tokens, temperature),
            )
        if response.status_code != 200:
            logger.error(f"OpenRouter error {response.status_code}: {response.text[:300]}")
            raise OpenRouterError(response.status_code, response.text or "OpenRouter request failed")
        return response.json()

    async def complete(self, messages: List[Dict[str, str]], **kwargs) -> str:
        """Content of the first choice, empty string when the model returned nothing"""
        data = await self.chat(messages, **kwargs)
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    async def stream(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[str]:
        """Yield content deltas from a server-sent-events completion stream"""
        if not self.configured:
            raise OpenRouterError(500, "OpenRouter API key not configured")
        async with self._client() as client:
            async with client.stream(
                "POST",
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=self._payload(messages, model, max_tokens, temperature, stream=True),
            ) as response:
                if response.status_code != 200:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.error(f"OpenRouter stream error {response.status_code}: {body[:300]}")
                    raise OpenRouterError(response.status_code, body or "OpenRouter request failed")
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        break
                    try:
                        chunk = json.loads(data)
                    except json.JSONDecodeError:
                        continue
                    choices = chunk.get("choices") or []
                    if not choices:
                        continue
                    content = (choices[0].get("delta") or {}).get("content")
                    if content:
                        yield content
