"""Prediction orchestration: round-gated passes and per-page sessions."""

from majorpredictor.engine.orchestrator import PredictionEngine, next_round_label, pending_descriptors
from majorpredictor.engine.session import PredictionSession

__all__ = ["PredictionEngine", "PredictionSession", "next_round_label", "pending_descriptors"]
