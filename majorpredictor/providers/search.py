"""Tavily web search client.

Search results only ever enrich a prompt, so every failure surfaces as
:class:`SearchError` and callers are expected to carry on without context.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import asyncio
import logging

import aiohttp

from majorpredictor.constants import DEFAULT_SEARCH_URL, SEARCH_PROVIDER
from majorpredictor.exceptions import SearchError
from majorpredictor.providers._http import post_json, session_scope
from majorpredictor.storage.cache import CacheStore

logger = logging.getLogger(__name__)

SEARCH_CACHE_TTL_SECONDS = 15 * 60


@dataclass
class SearchHit:
    title: str
    content: str
    url: str = ""


@dataclass
class SearchResponse:
    query: str
    answer: str = ""
    results: List[SearchHit] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.answer and not self.results


class SearchClient:
    def __init__(
        self,
        url: str = DEFAULT_SEARCH_URL,
        timeout: float = 10.0,
        max_results: int = 5,
        search_depth: str = "advanced",
        include_domains: Optional[List[str]] = None,
        cache: Optional[CacheStore] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.max_results = max_results
        self.search_depth = search_depth
        self.include_domains = list(include_domains or [])
        self.cache = cache
        self._session = session

    @classmethod
    def from_config(cls, config, cache: Optional[CacheStore] = None, session=None) -> "SearchClient":
        return cls(
            url=config.search_url,
            timeout=config.search_timeout,
            max_results=config.search_max_results,
            search_depth=config.search_depth,
            include_domains=config.search_domains,
            cache=cache,
            session=session,
        )

    async def search(self, api_key: str, query: str) -> SearchResponse:
        cache_key = f"{self.search_depth}:{query}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Search cache hit: {query}")
                return cached

        payload = {
            "api_key": api_key,
            "query": query,
            "search_depth": self.search_depth,
            "include_answer": True,
            "max_results": self.max_results,
        }
        if self.include_domains:
            payload["include_domains"] = self.include_domains

        try:
            status, body, text = await asyncio.wait_for(self._send(payload), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise SearchError(query, f"timed out after {self.timeout:g}s")
        except aiohttp.ClientError as e:
            raise SearchError(query, f"network error: {e}")

        if status < 200 or status >= 300:
            detail = ""
            if isinstance(body, dict):
                detail = str(body.get("detail") or body.get("error") or "")
            raise SearchError(query, f"{SEARCH_PROVIDER} returned {status} {detail or text[:200]}".strip())
        if not isinstance(body, dict):
            raise SearchError(query, "response was not a JSON object")

        response = self._parse(query, body)
        if self.cache is not None:
            self.cache.set(cache_key, response, SEARCH_CACHE_TTL_SECONDS)
        return response

    async def _send(self, payload: dict):
        async with session_scope(self._session) as session:
            return await post_json(session, self.url, payload, {"Content-Type": "application/json"}, self.timeout)

    @staticmethod
    def _parse(query: str, body: dict) -> SearchResponse:
        hits = []
        for item in body.get("results") or []:
            if not isinstance(item, dict):
                continue
            hits.append(
                SearchHit(
                    title=str(item.get("title") or "").strip(),
                    content=str(item.get("content") or "").strip(),
                    url=str(item.get("url") or ""),
                )
            )
        return SearchResponse(query=query, answer=str(body.get("answer") or "").strip(), results=hits)
