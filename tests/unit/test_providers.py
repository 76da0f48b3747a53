"""Unit tests for the completion and search HTTP clients."""

import json

import pytest

from majorpredictor.exceptions import (
    EmptyCompletionError,
    ProviderError,
    ProviderTimeoutError,
    SearchError,
)
from majorpredictor.providers import CompletionClient, SearchClient
from majorpredictor.storage.cache import MemoryCache
from tests.mocks import StubSession

MESSAGES = [{"role": "user", "content": "hi"}]


def _completion_body(content):
    return json.dumps({"choices": [{"message": {"content": content}}]})


class TestCompletionClient:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        session = StubSession(body=_completion_body("Alpha wins"))
        client = CompletionClient(url="https://example.test/chat", session=session)

        text = await client.complete("key-123", "anthropic/claude-3.5-sonnet", MESSAGES)

        assert text == "Alpha wins"
        request = session.requests[0]
        assert request["url"] == "https://example.test/chat"
        assert request["json"] == {
            "model": "anthropic/claude-3.5-sonnet",
            "messages": MESSAGES,
            "max_tokens": 1000,
            "temperature": 0.7,
        }
        assert request["headers"]["Authorization"] == "Bearer key-123"
        assert request["headers"]["HTTP-Referer"] == "https://majors.im"
        assert request["headers"]["X-Title"] == "Major Predictor"

    @pytest.mark.asyncio
    async def test_provider_error_message(self):
        body = json.dumps({"error": {"message": "No auth credentials found"}})
        client = CompletionClient(session=StubSession(status=401, body=body))

        with pytest.raises(ProviderError) as exc_info:
            await client.complete("bad", "model", MESSAGES)

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider_message == "No auth credentials found"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        client = CompletionClient(session=StubSession(status=502, body="Bad Gateway"))
        with pytest.raises(ProviderError, match="Bad Gateway"):
            await client.complete("key", "model", MESSAGES)

    @pytest.mark.asyncio
    async def test_empty_content(self):
        client = CompletionClient(session=StubSession(body=_completion_body("")))
        with pytest.raises(EmptyCompletionError):
            await client.complete("key", "model", MESSAGES)

    @pytest.mark.asyncio
    async def test_missing_choices(self):
        client = CompletionClient(session=StubSession(body=json.dumps({"choices": []})))
        with pytest.raises(EmptyCompletionError):
            await client.complete("key", "model", MESSAGES)

    @pytest.mark.asyncio
    async def test_timeout(self):
        session = StubSession(body=_completion_body("late"), delay=1.0)
        client = CompletionClient(timeout=0.05, session=session)

        with pytest.raises(ProviderTimeoutError):
            await client.complete("key", "model", MESSAGES)

    @pytest.mark.asyncio
    async def test_test_connection_uses_small_budget(self):
        session = StubSession(body=_completion_body("API connection successful"))
        client = CompletionClient(session=session)

        reply = await client.test_connection("key", "model")

        assert reply == "API connection successful"
        assert session.requests[0]["json"]["max_tokens"] == 50


class TestSearchClient:
    @pytest.mark.asyncio
    async def test_request_and_parse(self):
        body = json.dumps({
            "answer": "Vitality are favourites.",
            "results": [{"title": "HLTV", "content": "Vitality won", "url": "https://hltv.org/x"}],
        })
        session = StubSession(body=body)
        client = SearchClient(include_domains=["hltv.org"], session=session)

        response = await client.search("tvly-key", "Vitality ranking")

        assert response.answer == "Vitality are favourites."
        assert response.results[0].title == "HLTV"
        assert response.results[0].content == "Vitality won"
        payload = session.requests[0]["json"]
        assert payload == {
            "api_key": "tvly-key",
            "query": "Vitality ranking",
            "search_depth": "advanced",
            "include_answer": True,
            "max_results": 5,
            "include_domains": ["hltv.org"],
        }

    @pytest.mark.asyncio
    async def test_error_status(self):
        client = SearchClient(session=StubSession(status=401, body=json.dumps({"detail": "Unauthorized"})))
        with pytest.raises(SearchError, match="Unauthorized"):
            await client.search("bad", "q")

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = SearchClient(timeout=0.05, session=StubSession(body="{}", delay=1.0))
        with pytest.raises(SearchError, match="timed out"):
            await client.search("key", "q")

    @pytest.mark.asyncio
    async def test_cached_responses(self):
        session = StubSession(body=json.dumps({"answer": "a", "results": []}))
        client = SearchClient(cache=MemoryCache(), session=session)

        first = await client.search("key", "q")
        second = await client.search("key", "q")

        assert first is second
        assert len(session.requests) == 1
