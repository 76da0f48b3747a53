"""HTTP clients for the completion and search providers."""

from majorpredictor.providers.completion import CompletionClient
from majorpredictor.providers.search import SearchClient, SearchHit, SearchResponse

__all__ = ["CompletionClient", "SearchClient", "SearchHit", "SearchResponse"]
