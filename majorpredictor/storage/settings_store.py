"""User settings: a flat, namespaced key/value store persisted as JSON."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
import logging
import os

from majorpredictor.config import _coerce_bool
from majorpredictor.constants import (
    BOOLEAN_SETTINGS,
    DEFAULT_MODEL_ID,
    DEFAULT_SETTINGS,
    SECRET_SETTINGS,
    SETTING_AUTO_PREDICT,
    SETTING_COMPLETION_API_KEY,
    SETTING_ENV_FALLBACKS,
    SETTING_INCLUDE_EXTERNAL_RANKING,
    SETTING_KEYS,
    SETTING_MODEL_ID,
    SETTING_SEARCH_API_KEY,
    SETTING_SHOW_CONFIDENCE,
    SETTINGS_NAMESPACE,
)
from majorpredictor.exceptions import ConfigurationError
from majorpredictor.storage.json_storage import JsonStorage

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "settings"


@dataclass(frozen=True)
class Settings:
    completion_api_key: str = ""
    search_api_key: str = ""
    model_id: str = DEFAULT_MODEL_ID
    auto_predict: bool = False
    show_confidence: bool = True
    include_external_ranking: bool = True

    @classmethod
    def from_mapping(cls, values: Dict[str, Any]) -> "Settings":
        return cls(
            completion_api_key=str(values.get(SETTING_COMPLETION_API_KEY) or ""),
            search_api_key=str(values.get(SETTING_SEARCH_API_KEY) or ""),
            model_id=str(values.get(SETTING_MODEL_ID) or DEFAULT_MODEL_ID),
            auto_predict=_coerce_bool(values.get(SETTING_AUTO_PREDICT), False),
            show_confidence=_coerce_bool(values.get(SETTING_SHOW_CONFIDENCE), True),
            include_external_ranking=_coerce_bool(values.get(SETTING_INCLUDE_EXTERNAL_RANKING), True),
        )


def _namespaced(key: str) -> str:
    return f"{SETTINGS_NAMESPACE}.{key}"


def _mask(value: str) -> str:
    if not value:
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


class SettingsStore:
    """Reads and writes settings under ``majorPredictor.<key>``.

    Every write rewrites the whole record; callers never see namespaced keys.
    """

    def __init__(self, data_dir: str, environ: Optional[Dict[str, str]] = None) -> None:
        self._storage = JsonStorage(data_dir)
        self._environ = os.environ if environ is None else environ

    @property
    def path(self) -> str:
        return str(self._storage.path_for(SETTINGS_TABLE))

    def _read_raw(self) -> Dict[str, Any]:
        payload = self._storage.read_table(SETTINGS_TABLE, default={})
        return payload if isinstance(payload, dict) else {}

    def get(self, keys: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        raw = self._read_raw()
        wanted = list(keys) if keys is not None else list(SETTING_KEYS)
        values: Dict[str, Any] = {}
        for key in wanted:
            if key not in SETTING_KEYS:
                raise ConfigurationError(key, "unknown setting")
            namespaced = _namespaced(key)
            if namespaced in raw:
                values[key] = raw[namespaced]
        return values

    def set(self, values: Dict[str, Any]) -> Dict[str, Any]:
        raw = self._read_raw()
        for key, value in values.items():
            if key not in SETTING_KEYS:
                raise ConfigurationError(key, f"unknown setting (valid: {', '.join(SETTING_KEYS)})")
            if key in BOOLEAN_SETTINGS:
                value = _coerce_bool(value, False)
            elif value is None:
                value = ""
            else:
                value = str(value).strip()
            raw[_namespaced(key)] = value
        self._storage.write_table(SETTINGS_TABLE, raw)
        logger.info("Saved settings: %s", ", ".join(sorted(values)))
        return self.get()

    def ensure_defaults(self) -> Dict[str, Any]:
        """Write defaults for keys that were never set. Returns the keys written."""
        current = self.get()
        missing = {key: value for key, value in DEFAULT_SETTINGS.items() if key not in current}
        if missing:
            self.set(missing)
        return missing

    def load(self) -> Settings:
        """Current settings; defaults are written only when no settings file exists yet."""
        if not self._storage.exists(SETTINGS_TABLE):
            self.ensure_defaults()
        values = dict(DEFAULT_SETTINGS)
        values.update(self.get())
        for key, env_name in SETTING_ENV_FALLBACKS.items():
            if not values.get(key) and self._environ.get(env_name):
                values[key] = self._environ[env_name]
        return Settings.from_mapping(values)

    def describe(self) -> Dict[str, Any]:
        """Current settings with API keys masked, for display."""
        settings = self.load()
        values = {
            SETTING_COMPLETION_API_KEY: settings.completion_api_key,
            SETTING_SEARCH_API_KEY: settings.search_api_key,
            SETTING_MODEL_ID: settings.model_id,
            SETTING_AUTO_PREDICT: settings.auto_predict,
            SETTING_SHOW_CONFIDENCE: settings.show_confidence,
            SETTING_INCLUDE_EXTERNAL_RANKING: settings.include_external_ranking,
        }
        for key in SECRET_SETTINGS:
            values[key] = _mask(values[key])
        return values
