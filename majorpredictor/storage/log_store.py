"""Append-only prediction log, fully read and rewritten on each append."""

from typing import List, Optional
import logging

from majorpredictor.constants import LOG_MAX_ENTRIES
from majorpredictor.schema import LogEntry
from majorpredictor.storage.json_storage import JsonStorage

logger = logging.getLogger(__name__)

LOG_TABLE = "prediction_logs"


class PredictionLogStore:
    def __init__(self, data_dir: str, max_entries: int = LOG_MAX_ENTRIES) -> None:
        self._storage = JsonStorage(data_dir)
        self._max_entries = max_entries

    @property
    def path(self) -> str:
        return str(self._storage.path_for(LOG_TABLE))

    def _read_rows(self) -> List[dict]:
        rows = self._storage.read_table(LOG_TABLE, default=[])
        return rows if isinstance(rows, list) else []

    def append(self, entry: LogEntry) -> None:
        rows = self._read_rows()
        rows.append(entry.to_dict())
        if self._max_entries and len(rows) > self._max_entries:
            rows = rows[-self._max_entries:]
        self._storage.write_table(LOG_TABLE, rows)

    def read(self, limit: Optional[int] = None) -> List[LogEntry]:
        rows = self._read_rows()
        if limit is not None and limit > 0:
            rows = rows[-limit:]
        return [LogEntry.from_dict(row) for row in rows if isinstance(row, dict)]

    def clear(self) -> int:
        count = len(self._read_rows())
        self._storage.write_table(LOG_TABLE, [])
        logger.info("Cleared %d log entries", count)
        return count
