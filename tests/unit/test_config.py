"""Unit tests for runtime configuration."""

import json

import pytest

from majorpredictor.config import Config

ENV_KEYS = [
    "MAJORPREDICTOR_DATA_DIR",
    "COMPLETION_TIMEOUT",
    "SEARCH_TIMEOUT",
    "SEARCH_DOMAINS",
    "HEAD_TO_HEAD_SEARCH",
    "FALLBACK_ROUND_LABEL",
    "FALLBACK_ROUND_INDEX",
    "MAX_TOKENS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.from_env()

    assert config.data_dir == ".majorpredictor"
    assert config.completion_timeout == 60.0
    assert config.search_timeout == 10.0
    assert config.max_tokens == 1000
    assert config.search_domains == ["hltv.org"]
    assert config.head_to_head_search is True
    assert config.fallback_round_label == "Unknown Round"
    assert config.fallback_round_index == 999


def test_environment_overrides(clean_env):
    clean_env.setenv("COMPLETION_TIMEOUT", "15")
    clean_env.setenv("SEARCH_DOMAINS", "hltv.org, liquipedia.net")
    clean_env.setenv("HEAD_TO_HEAD_SEARCH", "false")

    config = Config.from_env()

    assert config.completion_timeout == 15.0
    assert config.search_domains == ["hltv.org", "liquipedia.net"]
    assert config.head_to_head_search is False


def test_env_file_overrides_environment(clean_env, tmp_path):
    clean_env.setenv("MAX_TOKENS", "500")
    env_file = tmp_path / "majorpredictor.env"
    env_file.write_text('# comment\nMAX_TOKENS=800\nFALLBACK_ROUND_LABEL="Round 1"\nFALLBACK_ROUND_INDEX=1\n')

    config = Config.load(str(env_file))

    assert config.max_tokens == 800
    assert config.fallback_round_label == "Round 1"
    assert config.fallback_round_index == 1


def test_json_file(clean_env, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"SEARCH_DOMAINS": ["hltv.org", "liquipedia.net"], "SEARCH_TIMEOUT": 4}))

    config = Config.load(str(path))

    assert config.search_domains == ["hltv.org", "liquipedia.net"]
    assert config.search_timeout == 4.0


def test_missing_file(clean_env, tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "missing.env"))


def test_invalid_numbers_fall_back(clean_env):
    clean_env.setenv("MAX_TOKENS", "lots")
    assert Config.from_env().max_tokens == 1000
