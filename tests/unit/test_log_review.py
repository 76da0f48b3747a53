"""Tests for prediction log summaries and CSV export."""

import csv
from datetime import datetime, timezone

from majorpredictor.reporting import log_rows, summarize_log, write_log_csv
from majorpredictor.schema import LogEntry


def _entry(team1, team2, winner=None, confidence=None, risk=None, error=None):
    return LogEntry(
        timestamp=datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc),
        team1=team1,
        team2=team2,
        round="Round 1",
        predicted_winner=winner,
        confidence=confidence,
        risk_level=risk,
        key_factors=["Form", "Maps"] if winner else [],
        brief_analysis=f"{winner} favored." if winner else None,
        error=error,
    )


ENTRIES = [
    _entry("Vitality", "FURIA", "Vitality", 80, "low"),
    _entry("NAVI", "MOUZ", "NAVI", 60, "medium"),
    _entry("Spirit", "FaZe", "Uncertain", 50, "medium"),
    _entry("G2", "Heroic", error="Request timed out after 60s"),
]


class TestSummarizeLog:
    def test_counts_and_rates(self):
        summary = summarize_log(ENTRIES)

        assert summary["total"] == 4
        assert summary["succeeded"] == 3
        assert summary["failed"] == 1
        assert summary["error_rate"] == 0.25
        assert summary["mean_confidence"] == 63.3
        assert summary["uncertain"] == 1

    def test_confidence_by_risk(self):
        by_risk = summarize_log(ENTRIES)["by_risk"]

        assert by_risk["low"] == {"count": 1, "mean_confidence": 80.0}
        assert by_risk["medium"] == {"count": 2, "mean_confidence": 55.0}

    def test_empty_log(self):
        summary = summarize_log([])
        assert summary["total"] == 0
        assert summary["mean_confidence"] is None
        assert summary["by_risk"] == {}


class TestCsvExport:
    def test_rows_join_key_factors(self):
        rows = log_rows(ENTRIES[:1])
        assert rows[0]["keyFactors"] == "Form; Maps"
        assert rows[0]["predictedWinner"] == "Vitality"

    def test_write_log_csv(self, tmp_path):
        path = tmp_path / "exports" / "log.csv"

        written = write_log_csv(ENTRIES, str(path))

        assert written == 4
        with path.open(encoding="utf-8", newline="") as handle:
            rows = list(csv.DictReader(handle))
        assert rows[3]["error"] == "Request timed out after 60s"
        assert rows[0]["confidence"] == "80"
