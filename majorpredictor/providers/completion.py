"""OpenRouter chat-completions client.

Usage:
    client = CompletionClient.from_config(config)
    text = await client.complete(api_key, model_id, messages)
"""

from typing import Dict, List, Optional
import asyncio
import logging

import aiohttp

from majorpredictor.constants import (
    COMPLETION_PROVIDER,
    DEFAULT_APP_REFERER,
    DEFAULT_APP_TITLE,
    DEFAULT_COMPLETION_URL,
    TEST_API_MAX_TOKENS,
    TEST_API_PROMPT,
)
from majorpredictor.exceptions import EmptyCompletionError, ProviderError, ProviderTimeoutError
from majorpredictor.providers._http import post_json, session_scope

logger = logging.getLogger(__name__)


def _error_message(body, text: str, status: int) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    if text:
        return text.strip()[:200]
    return f"HTTP {status}"


class CompletionClient:
    """Sends chat messages to the completion endpoint and returns the reply text."""

    def __init__(
        self,
        url: str = DEFAULT_COMPLETION_URL,
        timeout: float = 60.0,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        referer: str = DEFAULT_APP_REFERER,
        title: str = DEFAULT_APP_TITLE,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.referer = referer
        self.title = title
        self._session = session

    @classmethod
    def from_config(cls, config, session: Optional[aiohttp.ClientSession] = None) -> "CompletionClient":
        return cls(
            url=config.completion_url,
            timeout=config.completion_timeout,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            referer=config.app_referer,
            title=config.app_title,
            session=session,
        )

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    async def complete(
        self,
        api_key: str,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run one chat completion.

        Raises:
            ProviderError: non-2xx answer, carrying the provider's message
            ProviderTimeoutError: no answer within ``self.timeout`` seconds
            EmptyCompletionError: the reply had no message content
        """
        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
            "temperature": temperature if temperature is not None else self.temperature,
        }

        try:
            status, body, text = await asyncio.wait_for(
                self._send(payload, api_key), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"{COMPLETION_PROVIDER} timed out after {self.timeout:g}s")
            raise ProviderTimeoutError(COMPLETION_PROVIDER, self.timeout)
        except aiohttp.ClientError as e:
            raise ProviderError(COMPLETION_PROVIDER, f"network error: {e}")

        if status < 200 or status >= 300:
            raise ProviderError(COMPLETION_PROVIDER, _error_message(body, text, status), status)

        content = self._extract_content(body)
        if not content:
            raise EmptyCompletionError(COMPLETION_PROVIDER)
        return content

    async def _send(self, payload: dict, api_key: str):
        async with session_scope(self._session) as session:
            return await post_json(session, self.url, payload, self._headers(api_key), self.timeout)

    @staticmethod
    def _extract_content(body) -> str:
        if not isinstance(body, dict):
            return ""
        choices = body.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content.strip() if isinstance(content, str) else ""

    async def test_connection(self, api_key: str, model: str) -> str:
        """Send the fixed connectivity prompt and return the reply."""
        return await self.complete(
            api_key,
            model,
            [{"role": "user", "content": TEST_API_PROMPT}],
            max_tokens=TEST_API_MAX_TOKENS,
        )
