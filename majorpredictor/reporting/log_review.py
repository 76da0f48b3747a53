"""Summaries over the prediction log, built with pandas."""

from typing import Dict, Iterable

import pandas as pd

from majorpredictor.reporting.csv_output import LOG_FIELDS, log_rows
from majorpredictor.schema import LogEntry


def entries_frame(entries: Iterable[LogEntry]) -> pd.DataFrame:
    frame = pd.DataFrame(log_rows(entries), columns=LOG_FIELDS)
    frame["confidence"] = pd.to_numeric(frame["confidence"], errors="coerce")
    frame["failed"] = frame["error"].notna() & (frame["error"] != "")
    return frame


def summarize_log(entries: Iterable[LogEntry]) -> Dict:
    """
    Counts, error rate and confidence by risk level.

    Returns:
        Dict with total, succeeded, failed, error_rate, mean_confidence,
        by_risk (risk level -> {count, mean_confidence}) and uncertain.
    """
    frame = entries_frame(entries)
    total = int(len(frame))
    if total == 0:
        return {
            "total": 0,
            "succeeded": 0,
            "failed": 0,
            "error_rate": 0.0,
            "mean_confidence": None,
            "by_risk": {},
            "uncertain": 0,
        }

    failed = int(frame["failed"].sum())
    succeeded = frame[~frame["failed"]]
    mean_confidence = succeeded["confidence"].mean()

    by_risk = {}
    if not succeeded.empty:
        grouped = succeeded.groupby("riskLevel")["confidence"].agg(["count", "mean"])
        for risk, row in grouped.iterrows():
            by_risk[str(risk)] = {
                "count": int(row["count"]),
                "mean_confidence": round(float(row["mean"]), 1),
            }

    return {
        "total": total,
        "succeeded": total - failed,
        "failed": failed,
        "error_rate": round(failed / total, 3),
        "mean_confidence": None if pd.isna(mean_confidence) else round(float(mean_confidence), 1),
        "by_risk": by_risk,
        "uncertain": int((succeeded["predictedWinner"] == "Uncertain").sum()),
    }
