"""Turn completion text into a :class:`PredictionResult`.

The model is asked for JSON, but any non-empty text must still produce a
well-formed result: when no JSON object can be decoded, the winner and
confidence are estimated from the prose.
"""

from typing import Any, Dict, List, Optional
import json
import logging
import re

from majorpredictor.constants import (
    CONFIDENCE_KEYWORDS,
    DEFAULT_CONFIDENCE,
    DEFAULT_RISK_LEVEL,
    FALLBACK_ANALYSIS_CHARS,
    RISK_LEVELS,
    UNCERTAIN_WINNER,
)
from majorpredictor.schema import PredictionResult

logger = logging.getLogger(__name__)

PERCENT_RE = re.compile(r"(?<!\d)(100|\d{1,2})\s*%")

KNOWN_FIELDS = {
    "predictedWinner",
    "confidence",
    "predictedScore",
    "keyFactors",
    "riskLevel",
    "briefAnalysis",
    "team1",
    "team2",
    "rawResponse",
    "timestamp",
}

_decoder = json.JSONDecoder()


def find_json_object(text: str) -> Optional[Dict[str, Any]]:
    """First decodable JSON object in ``text``, or None."""
    start = text.find("{")
    while start != -1:
        try:
            value, _end = _decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def clamp_confidence(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    if isinstance(value, str):
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if not match:
            return DEFAULT_CONFIDENCE
        value = match.group(0)
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_CONFIDENCE
    return max(0, min(100, number))


def normalize_winner(value: Any, team1: str, team2: str) -> Optional[str]:
    """Map the model's winner onto team1, team2 or the sentinel where possible."""
    if not isinstance(value, str) or not value.strip():
        return None
    winner = value.strip()
    lowered = winner.lower()
    if lowered == team1.lower():
        return team1
    if lowered == team2.lower():
        return team2
    if lowered == UNCERTAIN_WINNER.lower():
        return UNCERTAIN_WINNER
    in_1 = team1.lower() in lowered
    in_2 = team2.lower() in lowered
    if in_1 and not in_2:
        return team1
    if in_2 and not in_1:
        return team2
    return winner


def _normalize_risk(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in RISK_LEVELS:
        return value.strip().lower()
    return DEFAULT_RISK_LEVEL


def _normalize_factors(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _normalize_score(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_winner(content: str, team1: str, team2: str) -> str:
    """Team mentioned more often wins; a tie is ``Uncertain``."""
    lowered = content.lower()
    team1_mentions = len(re.findall(re.escape(team1.lower()), lowered)) if team1 else 0
    team2_mentions = len(re.findall(re.escape(team2.lower()), lowered)) if team2 else 0
    if team1_mentions > team2_mentions:
        return team1
    if team2_mentions > team1_mentions:
        return team2
    return UNCERTAIN_WINNER


def extract_confidence(content: str) -> int:
    match = PERCENT_RE.search(content)
    if match:
        return clamp_confidence(match.group(1))
    lowered = content.lower()
    for phrase, confidence in CONFIDENCE_KEYWORDS:
        if phrase in lowered:
            return confidence
    return DEFAULT_CONFIDENCE


def parse_prediction(content: str, team1: str, team2: str) -> PredictionResult:
    payload = find_json_object(content)
    if payload is None:
        logger.info(f"Could not parse JSON for {team1} vs {team2}, using text response")
        return PredictionResult(
            predicted_winner=extract_winner(content, team1, team2),
            confidence=extract_confidence(content),
            team1=team1,
            team2=team2,
            raw_response=content,
            brief_analysis=content[:FALLBACK_ANALYSIS_CHARS],
        )

    winner = normalize_winner(payload.get("predictedWinner"), team1, team2)
    if winner is None:
        winner = extract_winner(content, team1, team2)

    if "confidence" in payload:
        confidence = clamp_confidence(payload.get("confidence"))
    else:
        confidence = DEFAULT_CONFIDENCE

    brief = payload.get("briefAnalysis")
    extras = {key: value for key, value in payload.items() if key not in KNOWN_FIELDS}

    return PredictionResult(
        predicted_winner=winner,
        confidence=confidence,
        team1=team1,
        team2=team2,
        raw_response=content,
        predicted_score=_normalize_score(payload.get("predictedScore")),
        key_factors=_normalize_factors(payload.get("keyFactors")),
        risk_level=_normalize_risk(payload.get("riskLevel")),
        brief_analysis=str(brief).strip() if brief is not None else "",
        extras=extras,
    )
