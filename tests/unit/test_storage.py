"""Unit tests for settings, the prediction log and caches."""

import json
from types import SimpleNamespace

import pytest

from majorpredictor.exceptions import ConfigurationError
from majorpredictor.schema import LogEntry
from majorpredictor.storage import cache as cache_module
from majorpredictor.storage import MemoryCache, PredictionCache, PredictionLogStore, SettingsStore
from tests.mocks import make_descriptor, make_result


class TestSettingsStore:
    def test_first_load_writes_defaults(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        settings = store.load()

        assert settings.model_id == "anthropic/claude-3.5-sonnet"
        assert settings.show_confidence is True
        assert settings.include_external_ranking is True
        assert settings.auto_predict is False
        assert settings.completion_api_key == ""

        raw = json.loads((data_dir / "settings.json").read_text(encoding="utf-8"))
        assert raw["majorPredictor.modelId"] == "anthropic/claude-3.5-sonnet"

    def test_set_and_get_round_trip(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        store.set({"completionApiKey": "  sk-or-abc  ", "autoPredict": "yes"})

        settings = store.load()
        assert settings.completion_api_key == "sk-or-abc"
        assert settings.auto_predict is True

    def test_unknown_key_rejected(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        with pytest.raises(ConfigurationError):
            store.set({"openAiKey": "x"})
        with pytest.raises(ConfigurationError):
            store.get(["nope"])

    def test_defaults_do_not_override_user_values(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        store.set({"showConfidence": False})

        assert store.ensure_defaults() == {
            "modelId": "anthropic/claude-3.5-sonnet",
            "autoPredict": False,
            "includeExternalRanking": True,
        }
        assert store.load().show_confidence is False

    def test_reads_do_not_rewrite_existing_file(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        store.set({"completionApiKey": "sk-or-abc"})
        path = data_dir / "settings.json"
        before = path.read_text(encoding="utf-8")

        settings = store.load()
        store.describe()

        assert settings.model_id == "anthropic/claude-3.5-sonnet"
        assert path.read_text(encoding="utf-8") == before
        assert "majorPredictor.modelId" not in json.loads(before)

    def test_corrupt_file_falls_back_to_defaults(self, data_dir):
        (data_dir / "settings.json").write_text("{not json", encoding="utf-8")
        store = SettingsStore(str(data_dir), environ={"OPENROUTER_API_KEY": "env-key"})

        settings = store.load()

        assert settings.completion_api_key == "env-key"
        assert settings.show_confidence is True

    def test_environment_fills_empty_keys(self, data_dir):
        store = SettingsStore(str(data_dir), environ={"OPENROUTER_API_KEY": "env-key", "TAVILY_API_KEY": "tv"})
        settings = store.load()

        assert settings.completion_api_key == "env-key"
        assert settings.search_api_key == "tv"
        assert "completionApiKey" not in store.get()

    def test_describe_masks_keys(self, data_dir):
        store = SettingsStore(str(data_dir), environ={})
        store.set({"completionApiKey": "sk-or-v1-1234567890", "searchApiKey": "short"})

        described = store.describe()
        assert described["completionApiKey"] == "sk-o...7890"
        assert described["searchApiKey"] == "*****"


class TestPredictionLogStore:
    def test_append_and_read(self, data_dir):
        store = PredictionLogStore(str(data_dir))
        descriptor = make_descriptor("Vitality", "FURIA")
        store.append(LogEntry.from_result(descriptor, make_result("Vitality", "FURIA", confidence=72)))
        store.append(LogEntry.from_error(descriptor, "Empty response from OpenRouter"))

        entries = store.read()
        assert len(entries) == 2
        assert entries[0].predicted_winner == "Vitality"
        assert entries[0].confidence == 72
        assert entries[0].round == "Round 1"
        assert entries[1].error == "Empty response from OpenRouter"
        assert entries[1].predicted_winner is None

    def test_keeps_most_recent_entries(self, data_dir):
        store = PredictionLogStore(str(data_dir), max_entries=3)
        for index in range(5):
            store.append(LogEntry.from_error(make_descriptor(f"Team{index}", "Other"), f"error {index}"))

        entries = store.read()
        assert [entry.error for entry in entries] == ["error 2", "error 3", "error 4"]

    def test_limit_and_clear(self, data_dir):
        store = PredictionLogStore(str(data_dir))
        for index in range(4):
            store.append(LogEntry.from_error(make_descriptor(f"Team{index}", "Other"), f"error {index}"))

        assert [entry.error for entry in store.read(limit=2)] == ["error 2", "error 3"]
        assert len(store.read(limit=-1)) == 4
        assert len(store.read(limit=0)) == 4
        assert store.clear() == 4
        assert store.read() == []

    def test_entry_dict_round_trip(self):
        entry = LogEntry.from_result(make_descriptor("A1", "B1"), make_result("A1", "B1"))
        assert LogEntry.from_dict(entry.to_dict()) == entry


class TestCaches:
    def test_prediction_cache_keeps_first_result(self):
        cache = PredictionCache()
        first = make_result("A1", "B1")

        assert cache.put_if_absent("a1-vs-b1", first) is True
        assert cache.put_if_absent("a1-vs-b1", make_result("A1", "B1", winner="B1")) is False
        assert cache.get("a1-vs-b1") is first
        assert "a1-vs-b1" in cache
        assert len(cache) == 1

    def test_memory_cache_ttl(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(cache_module, "time", SimpleNamespace(time=lambda: now[0]))
        cache = MemoryCache()
        cache.set("k", "v", ttl_seconds=60)
        cache.set("ignored", "v", ttl_seconds=0)

        assert cache.get("k") == "v"
        assert cache.get("ignored") is None
        now[0] += 61
        assert cache.get("k") is None
