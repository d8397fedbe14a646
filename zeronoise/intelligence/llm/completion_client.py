"""
OpenAI-compatible chat completion client.

Used for query extraction, search-augmented completion and text rendering.
"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from ..errors import UpstreamFailure
from ..models.search import SearchContext, TokenUsage


logger = logging.getLogger(__name__)


class CompletionResult(BaseModel):
    """Parsed completion reply."""

    content: Optional[str] = None  # None when choices[0].message.content is missing
    model: str
    usage: Optional[TokenUsage] = None

    @property
    def is_malformed(self) -> bool:
        return self.content is None


class CompletionClient:
    """
    Thin async client for `/chat/completions`.

    Non-2xx replies and transport errors raise UpstreamFailure. Connection
    failures are retried by the transport, never by this class.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        retries: int = 2,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        model: str,
        messages: list[dict],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        """Plain chat completion."""
        payload = {"model": model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return await self._post(payload)

    async def search(
        self,
        model: str,
        messages: list[dict],
        search_context_size: SearchContext = SearchContext.HIGH,
    ) -> CompletionResult:
        """Search-augmented completion. Search models reject sampling params."""
        payload = {
            "model": model,
            "messages": messages,
            "web_search_options": {
                "search_context_size": SearchContext(search_context_size).value,
            },
        }
        return await self._post(payload)

    async def _post(self, payload: dict) -> CompletionResult:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        model = payload["model"]

        try:
            transport = httpx.AsyncHTTPTransport(retries=self.retries)
            async with httpx.AsyncClient(transport=transport, timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Completion transport error ({model}): {e}")
            raise UpstreamFailure(f"Completion request failed: {e}") from e

        if response.status_code >= 300:
            logger.error(
                f"Completion request failed: {response.status_code} - {response.text[:300]}"
            )
            raise UpstreamFailure(
                f"Completion service returned {response.status_code} for {model}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Completion reply for {model} was not JSON")
            return CompletionResult(content=None, model=model)

        return parse_completion(data, model)


def parse_completion(data: dict, requested_model: str) -> CompletionResult:
    """Pull content, model and usage out of a completion payload."""
    content = None
    choices = data.get("choices") if isinstance(data, dict) else None
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            content = message["content"]

    if content is None:
        logger.warning(f"Completion reply for {requested_model} had no message content")

    return CompletionResult(
        content=content,
        model=(data.get("model") if isinstance(data, dict) else None) or requested_model,
        usage=TokenUsage.from_response(data.get("usage") if isinstance(data, dict) else None),
    )
