"""Runtime configuration (endpoints, timeouts, page heuristics)."""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Dict, List
import json
import os

from majorpredictor.constants import (
    DEFAULT_APP_REFERER,
    DEFAULT_APP_TITLE,
    DEFAULT_COMPLETION_URL,
    DEFAULT_SEARCH_URL,
)


_DEFAULT_DATA_DIR = ".majorpredictor"
_DEFAULT_COMPLETION_TIMEOUT = 60.0
_DEFAULT_SEARCH_TIMEOUT = 10.0
_DEFAULT_PAGE_TIMEOUT = 30.0
_DEFAULT_MAX_TOKENS = 1000
_DEFAULT_TEMPERATURE = 0.7
_DEFAULT_SEARCH_MAX_RESULTS = 5
_DEFAULT_SEARCH_DEPTH = "advanced"
_DEFAULT_SEARCH_DOMAINS = ["hltv.org"]
_DEFAULT_SNIPPET_MAX_CHARS = 400
_DEFAULT_HEAD_TO_HEAD_SEARCH = True

# Unlabeled matches sort after every labeled round
_DEFAULT_FALLBACK_ROUND_LABEL = "Unknown Round"
_DEFAULT_FALLBACK_ROUND_INDEX = 999
_DEFAULT_ROUND_SEARCH_DEPTH = 8
_DEFAULT_ANCESTOR_PAIR_DEPTH = 5

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _coerce_float(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _coerce_list(value: Optional[str], default: List[str]) -> List[str]:
    if value is None or value == "":
        return list(default)
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(default)


def _parse_env_file(path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = _strip_quotes(value.strip())
    return data


def _load_config_data(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        return {
            str(k): (",".join(str(i) for i in v) if isinstance(v, list) else str(v))
            for k, v in payload.items()
        }
    return _parse_env_file(path)


@dataclass
class Config:
    # Storage
    data_dir: str

    # Providers
    completion_url: str
    search_url: str
    completion_timeout: float
    search_timeout: float
    max_tokens: int
    temperature: float
    app_referer: str
    app_title: str

    # Search context
    search_max_results: int
    search_depth: str
    search_domains: List[str]
    snippet_max_chars: int
    head_to_head_search: bool

    # Page heuristics
    fallback_round_label: str
    fallback_round_index: int
    round_search_depth: int
    ancestor_pair_depth: int
    known_teams_path: str

    # Page loading
    page_timeout: float
    user_agent: str

    @classmethod
    def from_env(cls) -> "Config":
        return cls._from_mapping(os.environ, defaults=None)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        env_config = cls.from_env()
        if not config_path:
            return env_config
        file_data = _load_config_data(Path(config_path))
        return cls._from_mapping(file_data, defaults=env_config)

    @classmethod
    def _from_mapping(cls, data, defaults: Optional["Config"]) -> "Config":
        def base(name: str, fallback):
            return getattr(defaults, name) if defaults is not None else fallback

        return cls(
            data_dir=data.get("MAJORPREDICTOR_DATA_DIR") or base("data_dir", _DEFAULT_DATA_DIR),
            completion_url=data.get("COMPLETION_URL") or base("completion_url", DEFAULT_COMPLETION_URL),
            search_url=data.get("SEARCH_URL") or base("search_url", DEFAULT_SEARCH_URL),
            completion_timeout=_coerce_float(
                data.get("COMPLETION_TIMEOUT"),
                base("completion_timeout", _DEFAULT_COMPLETION_TIMEOUT),
            ),
            search_timeout=_coerce_float(
                data.get("SEARCH_TIMEOUT"),
                base("search_timeout", _DEFAULT_SEARCH_TIMEOUT),
            ),
            max_tokens=_coerce_int(data.get("MAX_TOKENS"), base("max_tokens", _DEFAULT_MAX_TOKENS)),
            temperature=_coerce_float(data.get("TEMPERATURE"), base("temperature", _DEFAULT_TEMPERATURE)),
            app_referer=data.get("APP_REFERER") or base("app_referer", DEFAULT_APP_REFERER),
            app_title=data.get("APP_TITLE") or base("app_title", DEFAULT_APP_TITLE),
            search_max_results=_coerce_int(
                data.get("SEARCH_MAX_RESULTS"),
                base("search_max_results", _DEFAULT_SEARCH_MAX_RESULTS),
            ),
            search_depth=data.get("SEARCH_DEPTH") or base("search_depth", _DEFAULT_SEARCH_DEPTH),
            search_domains=_coerce_list(
                data.get("SEARCH_DOMAINS"),
                base("search_domains", _DEFAULT_SEARCH_DOMAINS),
            ),
            snippet_max_chars=_coerce_int(
                data.get("SNIPPET_MAX_CHARS"),
                base("snippet_max_chars", _DEFAULT_SNIPPET_MAX_CHARS),
            ),
            head_to_head_search=_coerce_bool(
                data.get("HEAD_TO_HEAD_SEARCH"),
                base("head_to_head_search", _DEFAULT_HEAD_TO_HEAD_SEARCH),
            ),
            fallback_round_label=data.get("FALLBACK_ROUND_LABEL") or base(
                "fallback_round_label", _DEFAULT_FALLBACK_ROUND_LABEL
            ),
            fallback_round_index=_coerce_int(
                data.get("FALLBACK_ROUND_INDEX"),
                base("fallback_round_index", _DEFAULT_FALLBACK_ROUND_INDEX),
            ),
            round_search_depth=_coerce_int(
                data.get("ROUND_SEARCH_DEPTH"),
                base("round_search_depth", _DEFAULT_ROUND_SEARCH_DEPTH),
            ),
            ancestor_pair_depth=_coerce_int(
                data.get("ANCESTOR_PAIR_DEPTH"),
                base("ancestor_pair_depth", _DEFAULT_ANCESTOR_PAIR_DEPTH),
            ),
            known_teams_path=data.get("KNOWN_TEAMS_PATH") or base("known_teams_path", ""),
            page_timeout=_coerce_float(data.get("PAGE_TIMEOUT"), base("page_timeout", _DEFAULT_PAGE_TIMEOUT)),
            user_agent=data.get("USER_AGENT") or base("user_agent", _DEFAULT_USER_AGENT),
        )

    def to_dict(self) -> Dict[str, str]:
        return {k: str(v) for k, v in asdict(self).items()}
