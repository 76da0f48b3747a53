"""Prediction Service: search context + completion + parsing in one call.

Usage:
    service = PredictionService.from_config(config)
    result = await service.predict(request, settings)
"""

from typing import List, Optional
import asyncio
import logging

from majorpredictor.constants import SETTING_COMPLETION_API_KEY
from majorpredictor.exceptions import ConfigurationError, SearchError
from majorpredictor.prediction.parser import parse_prediction
from majorpredictor.prediction.prompt import (
    build_messages,
    format_search_context,
    head_to_head_query,
    ranking_query,
)
from majorpredictor.providers.completion import CompletionClient
from majorpredictor.providers.search import SearchClient, SearchResponse
from majorpredictor.schema import PredictionRequest, PredictionResult
from majorpredictor.storage.cache import MemoryCache
from majorpredictor.storage.settings_store import Settings

logger = logging.getLogger(__name__)


class PredictionService:
    """
    Predicts the winner of one match.

    Optional behaviour (head-to-head search, snippet size) is configuration
    on this one service rather than separate code paths.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        search_client: Optional[SearchClient] = None,
        head_to_head_search: bool = True,
        snippet_max_chars: int = 400,
    ):
        self.completion_client = completion_client
        self.search_client = search_client
        self.head_to_head_search = head_to_head_search
        self.snippet_max_chars = snippet_max_chars

    @classmethod
    def from_config(cls, config, session=None) -> "PredictionService":
        return cls(
            completion_client=CompletionClient.from_config(config, session=session),
            search_client=SearchClient.from_config(config, cache=MemoryCache(), session=session),
            head_to_head_search=config.head_to_head_search,
            snippet_max_chars=config.snippet_max_chars,
        )

    async def predict(self, request: PredictionRequest, settings: Settings) -> PredictionResult:
        """
        Raises:
            ConfigurationError: no completion API key (before any network call)
            ProviderError / EmptyCompletionError: completion call failed
        """
        if not settings.completion_api_key:
            raise ConfigurationError(
                SETTING_COMPLETION_API_KEY,
                "API key not configured. Set it with `majorpredictor settings set completionApiKey=...`",
            )

        search_context = await self._search_context(request, settings)
        messages = build_messages(request, search_context or None)
        content = await self.completion_client.complete(
            settings.completion_api_key,
            settings.model_id,
            messages,
        )
        return parse_prediction(content, request.team1, request.team2)

    async def _search_context(self, request: PredictionRequest, settings: Settings) -> str:
        if not settings.include_external_ranking or not settings.search_api_key:
            return ""
        if self.search_client is None:
            return ""

        queries = [ranking_query(request)]
        if self.head_to_head_search:
            queries.append(head_to_head_query(request))

        outcomes = await asyncio.gather(
            *(self.search_client.search(settings.search_api_key, query) for query in queries),
            return_exceptions=True,
        )

        responses: List[SearchResponse] = []
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, SearchError):
                logger.warning(f"{outcome}; continuing without it")
            elif isinstance(outcome, Exception):
                logger.warning(f"Search failed for '{query}': {outcome}; continuing without it")
            elif isinstance(outcome, SearchResponse):
                responses.append(outcome)
        return format_search_context(responses, self.snippet_max_chars)
