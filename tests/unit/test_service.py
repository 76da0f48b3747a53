"""Unit tests for the prediction service."""

import dataclasses

import pytest

from majorpredictor.exceptions import ConfigurationError, EmptyCompletionError, ProviderError
from majorpredictor.prediction.service import PredictionService
from majorpredictor.schema import PredictionRequest
from majorpredictor.storage.settings_store import Settings
from tests.conftest import ALPHA_BETA_JSON
from tests.mocks import StubCompletionClient, StubSearchClient


ALPHA_BETA = PredictionRequest(team1="Alpha", team2="Beta")


class TestPredict:
    @pytest.mark.asyncio
    async def test_json_completion(self, settings):
        completion = StubCompletionClient(ALPHA_BETA_JSON)
        service = PredictionService(completion)

        result = await service.predict(ALPHA_BETA, settings)

        assert result.predicted_winner == "Alpha"
        assert result.confidence == 70
        assert result.team1 == "Alpha"
        assert result.team2 == "Beta"
        assert completion.calls[0]["api_key"] == "sk-or-test-key"
        assert completion.calls[0]["model"] == settings.model_id

    @pytest.mark.asyncio
    async def test_text_completion_uses_fallback(self, settings):
        completion = StubCompletionClient("Alpha Alpha Alpha should win, Beta struggles. 65% likely.")
        result = await PredictionService(completion).predict(ALPHA_BETA, settings)

        assert result.predicted_winner == "Alpha"
        assert result.confidence == 65

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_any_call(self, search_settings):
        completion = StubCompletionClient(ALPHA_BETA_JSON)
        search = StubSearchClient(answer="context")
        service = PredictionService(completion, search)
        no_key = dataclasses.replace(search_settings, completion_api_key="")

        with pytest.raises(ConfigurationError):
            await service.predict(ALPHA_BETA, no_key)

        assert completion.calls == []
        assert search.queries == []

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, settings):
        completion = StubCompletionClient(error=ProviderError("OpenRouter", "Invalid API key", 401))
        with pytest.raises(ProviderError, match="Invalid API key"):
            await PredictionService(completion).predict(ALPHA_BETA, settings)

    @pytest.mark.asyncio
    async def test_empty_completion_propagates(self, settings):
        completion = StubCompletionClient(error=EmptyCompletionError())
        with pytest.raises(EmptyCompletionError):
            await PredictionService(completion).predict(ALPHA_BETA, settings)


class TestSearchContext:
    @pytest.mark.asyncio
    async def test_search_results_reach_the_prompt(self, search_settings):
        completion = StubCompletionClient(ALPHA_BETA_JSON)
        search = StubSearchClient(answer="Alpha ranked #1", snippets=[("HLTV", "Alpha won IEM")])
        service = PredictionService(completion, search)

        await service.predict(ALPHA_BETA, search_settings)

        assert len(search.queries) == 2
        prompt = completion.calls[0]["messages"][1]["content"]
        assert "**Recent data:**" in prompt
        assert "Alpha won IEM" in prompt

    @pytest.mark.asyncio
    async def test_head_to_head_can_be_disabled(self, search_settings):
        search = StubSearchClient(answer="ok")
        service = PredictionService(StubCompletionClient(ALPHA_BETA_JSON), search, head_to_head_search=False)

        await service.predict(ALPHA_BETA, search_settings)

        assert len(search.queries) == 1

    @pytest.mark.asyncio
    async def test_search_failure_is_advisory(self, search_settings):
        completion = StubCompletionClient(ALPHA_BETA_JSON)
        search = StubSearchClient(answer="ok")
        search.fail_queries = {"Alpha Beta CS2 ranking recent results", "Alpha vs Beta CS2 head to head history"}
        service = PredictionService(completion, search)

        result = await service.predict(ALPHA_BETA, search_settings)

        assert result.predicted_winner == "Alpha"
        assert "Recent data" not in completion.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_search_skipped_without_key_or_toggle(self, settings):
        search = StubSearchClient(answer="ok")
        service = PredictionService(StubCompletionClient(ALPHA_BETA_JSON), search)

        await service.predict(ALPHA_BETA, settings)
        await service.predict(
            ALPHA_BETA,
            Settings(completion_api_key="k", search_api_key="", include_external_ranking=True),
        )

        assert search.queries == []
