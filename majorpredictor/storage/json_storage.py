"""JSON-based storage for flat records and lists."""

from pathlib import Path
from typing import Any
import json
import logging

logger = logging.getLogger(__name__)


class JsonStorage:
    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self._base_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def write_table(self, name: str, payload: Any) -> str:
        path = self.path_for(name)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(path)
        return str(path)

    def read_table(self, name: str, default: Any = None) -> Any:
        """Decoded table, or ``default`` when the file is missing or unreadable JSON."""
        path = self.path_for(name)
        fallback = [] if default is None else default
        if not path.exists():
            return fallback
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return fallback
