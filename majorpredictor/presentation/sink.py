"""Presentation sink contract.

The engine reports progress through two callbacks and never reaches into
the page itself: per-match state changes and whole-pass status.
"""

from typing import Iterable, List
import logging

from majorpredictor.schema import (
    STATE_ERROR,
    STATE_LOADING,
    STATE_SUCCESS,
    MatchState,
    PassStatus,
)

logger = logging.getLogger(__name__)


class PresentationSink:
    def on_match_state_changed(self, match_id: str, state: MatchState) -> None:
        raise NotImplementedError

    def on_pass_status(self, status: PassStatus) -> None:
        raise NotImplementedError


class LoggingSink(PresentationSink):
    """Writes state changes to the log; used by the CLI alongside the renderer."""

    def on_match_state_changed(self, match_id: str, state: MatchState) -> None:
        if state.kind == STATE_LOADING:
            logger.debug(f"[{match_id}] predicting...")
        elif state.kind == STATE_SUCCESS:
            result = state.result
            logger.info(f"[{match_id}] {result.predicted_winner} ({result.confidence}%)")
        elif state.kind == STATE_ERROR:
            logger.warning(f"[{match_id}] failed: {state.message}")

    def on_pass_status(self, status: PassStatus) -> None:
        if status.label:
            logger.info(f"Pass status: {status.kind} ({status.label})")
        else:
            logger.info(f"Pass status: {status.kind}")


class CompositeSink(PresentationSink):
    """Fans every event out to several sinks in order."""

    def __init__(self, sinks: Iterable[PresentationSink]):
        self.sinks: List[PresentationSink] = list(sinks)

    def on_match_state_changed(self, match_id: str, state: MatchState) -> None:
        for sink in self.sinks:
            sink.on_match_state_changed(match_id, state)

    def on_pass_status(self, status: PassStatus) -> None:
        for sink in self.sinks:
            sink.on_pass_status(status)
