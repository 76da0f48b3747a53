"""Operational helpers."""

from majorpredictor.ops.metrics import MetricsRecorder, InMemoryMetricsRecorder, get_metrics_recorder

__all__ = ["MetricsRecorder", "InMemoryMetricsRecorder", "get_metrics_recorder"]
