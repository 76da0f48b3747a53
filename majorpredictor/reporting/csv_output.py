"""CSV export for prediction log entries."""

from pathlib import Path
from typing import Dict, Iterable, List
import csv

from majorpredictor.schema import LogEntry

LOG_FIELDS = [
    "timestamp",
    "round",
    "team1",
    "team2",
    "predictedWinner",
    "confidence",
    "riskLevel",
    "keyFactors",
    "briefAnalysis",
    "error",
]


def log_rows(entries: Iterable[LogEntry]) -> List[Dict]:
    rows = []
    for entry in entries:
        row = entry.to_dict()
        row["keyFactors"] = "; ".join(row.get("keyFactors") or [])
        rows.append({field: row.get(field) for field in LOG_FIELDS})
    return rows


def write_log_csv(entries: Iterable[LogEntry], output_path: str) -> int:
    """Write log entries to CSV. Returns the number of rows written."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = log_rows(entries)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=LOG_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)
