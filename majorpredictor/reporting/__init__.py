"""Prediction log exports and summaries."""

from majorpredictor.reporting.csv_output import log_rows, write_log_csv
from majorpredictor.reporting.log_review import entries_frame, summarize_log

__all__ = ["entries_frame", "log_rows", "summarize_log", "write_log_csv"]
