"""Shared aiohttp plumbing for provider clients."""

from contextlib import asynccontextmanager
from typing import Any, Optional, Tuple
import json

import aiohttp


@asynccontextmanager
async def session_scope(session: Optional[aiohttp.ClientSession] = None):
    """Yield the injected session, or a short-lived one closed on exit."""
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession() as owned:
        yield owned


async def post_json(
    session: aiohttp.ClientSession,
    url: str,
    payload: dict,
    headers: dict,
    timeout_seconds: float,
) -> Tuple[int, Any, str]:
    """POST ``payload`` and return (status, decoded body or None, raw text)."""
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    async with session.post(url, json=payload, headers=headers, timeout=timeout) as response:
        text = await response.text()
        try:
            body = json.loads(text) if text else None
        except ValueError:
            body = None
        return response.status, body, text
