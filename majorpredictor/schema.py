"""Records exchanged between the extractor, the engine and the presentation layer."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from majorpredictor.constants import DEFAULT_MATCH_TYPE, DEFAULT_TOURNAMENT


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return _utcnow()


@dataclass(frozen=True)
class MatchDescriptor:
    """One head-to-head matchup found on the page during a scan."""
    id: str
    team1: str
    team2: str
    tournament: str
    round: str
    round_index: int
    match_type: str = DEFAULT_MATCH_TYPE
    source_element: Any = field(default=None, compare=False, repr=False)

    @property
    def label(self) -> str:
        return f"{self.team1} vs {self.team2}"


@dataclass(frozen=True)
class PredictionRequest:
    team1: str
    team2: str
    tournament: str = DEFAULT_TOURNAMENT
    match_type: str = DEFAULT_MATCH_TYPE
    date: str = "Upcoming"
    additional_context: Optional[str] = None

    @classmethod
    def from_descriptor(cls, descriptor: MatchDescriptor) -> "PredictionRequest":
        return cls(
            team1=descriptor.team1,
            team2=descriptor.team2,
            tournament=descriptor.tournament or DEFAULT_TOURNAMENT,
            match_type=descriptor.match_type or DEFAULT_MATCH_TYPE,
        )


@dataclass
class PredictionResult:
    """Structured prediction for one match.

    ``predicted_winner`` is team1, team2 or ``"Uncertain"`` in practice;
    ``confidence`` is always an int in [0, 100].
    """
    predicted_winner: str
    confidence: int
    team1: str
    team2: str
    raw_response: str
    predicted_score: Optional[str] = None
    key_factors: List[str] = field(default_factory=list)
    risk_level: str = "medium"
    brief_analysis: str = ""
    timestamp: datetime = field(default_factory=_utcnow)
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.extras)
        payload.update({
            "predictedWinner": self.predicted_winner,
            "confidence": self.confidence,
            "predictedScore": self.predicted_score,
            "keyFactors": list(self.key_factors),
            "riskLevel": self.risk_level,
            "briefAnalysis": self.brief_analysis,
            "team1": self.team1,
            "team2": self.team2,
            "rawResponse": self.raw_response,
            "timestamp": self.timestamp.isoformat(),
        })
        return payload


@dataclass(frozen=True)
class LogEntry:
    """Append-only record of one prediction attempt."""
    timestamp: datetime
    team1: str
    team2: str
    round: str
    predicted_winner: Optional[str] = None
    confidence: Optional[int] = None
    risk_level: Optional[str] = None
    key_factors: List[str] = field(default_factory=list)
    brief_analysis: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, descriptor: MatchDescriptor, result: PredictionResult) -> "LogEntry":
        return cls(
            timestamp=result.timestamp,
            team1=descriptor.team1,
            team2=descriptor.team2,
            round=descriptor.round,
            predicted_winner=result.predicted_winner,
            confidence=result.confidence,
            risk_level=result.risk_level,
            key_factors=list(result.key_factors),
            brief_analysis=result.brief_analysis,
        )

    @classmethod
    def from_error(cls, descriptor: MatchDescriptor, message: str) -> "LogEntry":
        return cls(
            timestamp=_utcnow(),
            team1=descriptor.team1,
            team2=descriptor.team2,
            round=descriptor.round,
            error=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "team1": self.team1,
            "team2": self.team2,
            "round": self.round,
            "predictedWinner": self.predicted_winner,
            "confidence": self.confidence,
            "riskLevel": self.risk_level,
            "keyFactors": list(self.key_factors),
            "briefAnalysis": self.brief_analysis,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LogEntry":
        return cls(
            timestamp=_parse_timestamp(payload.get("timestamp")),
            team1=str(payload.get("team1", "")),
            team2=str(payload.get("team2", "")),
            round=str(payload.get("round", "")),
            predicted_winner=payload.get("predictedWinner"),
            confidence=payload.get("confidence"),
            risk_level=payload.get("riskLevel"),
            key_factors=list(payload.get("keyFactors") or []),
            brief_analysis=payload.get("briefAnalysis"),
            error=payload.get("error"),
        )


# Match states pushed to the presentation layer
STATE_LOADING = "loading"
STATE_SUCCESS = "success"
STATE_ERROR = "error"


@dataclass(frozen=True)
class MatchState:
    kind: str
    result: Optional[PredictionResult] = None
    message: Optional[str] = None

    @classmethod
    def loading(cls) -> "MatchState":
        return cls(STATE_LOADING)

    @classmethod
    def success(cls, result: PredictionResult) -> "MatchState":
        return cls(STATE_SUCCESS, result=result)

    @classmethod
    def error(cls, message: str) -> "MatchState":
        return cls(STATE_ERROR, message=message)


# Pass states pushed to the presentation layer
PASS_IDLE = "idle"
PASS_SCANNING = "scanning"
PASS_BUSY = "busy"
PASS_ERROR = "error"
PASS_ALL_DONE = "all_done"


@dataclass(frozen=True)
class PassStatus:
    kind: str
    label: Optional[str] = None

    @classmethod
    def idle(cls) -> "PassStatus":
        return cls(PASS_IDLE)

    @classmethod
    def scanning(cls) -> "PassStatus":
        return cls(PASS_SCANNING)

    @classmethod
    def busy(cls, label: str) -> "PassStatus":
        return cls(PASS_BUSY, label=label)

    @classmethod
    def error(cls, message: str) -> "PassStatus":
        return cls(PASS_ERROR, label=message)

    @classmethod
    def all_done(cls) -> "PassStatus":
        return cls(PASS_ALL_DONE)


@dataclass(frozen=True)
class PassSummary:
    """Outcome of one ``run_prediction_pass`` call."""
    predicted: int = 0
    failed: int = 0
    next_round: Optional[str] = None
    status: str = PASS_IDLE
    round: Optional[str] = None
    remaining: int = 0

    @property
    def nothing_to_do(self) -> bool:
        return self.status == PASS_IDLE and self.predicted == 0 and self.failed == 0

    @property
    def all_done(self) -> bool:
        return self.status == PASS_ALL_DONE
