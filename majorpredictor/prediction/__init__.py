"""Prompt building, completion parsing and the prediction service."""

from majorpredictor.prediction.parser import parse_prediction
from majorpredictor.prediction.prompt import build_prediction_prompt, format_search_context
from majorpredictor.prediction.service import PredictionService

__all__ = [
    "PredictionService",
    "build_prediction_prompt",
    "format_search_context",
    "parse_prediction",
]
