"""Round-gated prediction passes.

Each call to :meth:`PredictionEngine.run_prediction_pass` predicts exactly
one round: the lowest ``round_index`` among matches not yet in the cache.
Callers drive progress round by round; the engine never drains later
rounds on its own.
"""

from typing import Awaitable, Callable, List, Optional, Sequence
import asyncio
import logging
import time

from majorpredictor.ops.metrics import (
    FAILED_COUNTER,
    LATENCY_TIMING,
    SUCCESS_COUNTER,
    MetricsRecorder,
    get_metrics_recorder,
)
from majorpredictor.presentation.sink import PresentationSink
from majorpredictor.schema import (
    PASS_ALL_DONE,
    PASS_BUSY,
    PASS_IDLE,
    LogEntry,
    MatchDescriptor,
    MatchState,
    PassStatus,
    PassSummary,
    PredictionResult,
)
from majorpredictor.storage.cache import PredictionCache
from majorpredictor.storage.log_store import PredictionLogStore

logger = logging.getLogger(__name__)

PredictFn = Callable[[MatchDescriptor], Awaitable[PredictionResult]]


def pending_descriptors(descriptors: Sequence[MatchDescriptor], cache: PredictionCache) -> List[MatchDescriptor]:
    return [d for d in descriptors if d.id not in cache]


def next_round_label(descriptors: Sequence[MatchDescriptor]) -> Optional[str]:
    """Label of the earliest round among ``descriptors`` (first in document order on ties)."""
    if not descriptors:
        return None
    target = min(d.round_index for d in descriptors)
    for descriptor in descriptors:
        if descriptor.round_index == target:
            return descriptor.round
    return None


class PredictionEngine:
    """
    Owns the per-page prediction state: the cache and the busy flag.

    One engine is built per page session and handed to whatever drives it;
    nothing here is module-global.
    """

    def __init__(
        self,
        sink: PresentationSink,
        log_store: Optional[PredictionLogStore] = None,
        cache: Optional[PredictionCache] = None,
        metrics: Optional[MetricsRecorder] = None,
    ):
        self.sink = sink
        self.log_store = log_store
        self.cache = cache if cache is not None else PredictionCache()
        self.metrics = metrics or get_metrics_recorder()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_prediction_pass(
        self,
        descriptors: Sequence[MatchDescriptor],
        predict_fn: PredictFn,
    ) -> PassSummary:
        if self._running:
            logger.info("Prediction pass already running; request refused")
            return PassSummary(status=PASS_BUSY)

        self._running = True
        try:
            return await self._run(list(descriptors), predict_fn)
        finally:
            self._running = False

    async def _run(self, descriptors: List[MatchDescriptor], predict_fn: PredictFn) -> PassSummary:
        pending = pending_descriptors(descriptors, self.cache)
        if not pending:
            logger.info("Nothing to predict")
            self.sink.on_pass_status(PassStatus.idle())
            return PassSummary(status=PASS_IDLE)

        target = min(d.round_index for d in pending)
        batch = [d for d in pending if d.round_index == target]
        round_label = batch[0].round

        logger.info(f"Predicting {len(batch)} matches in {round_label}")
        self.sink.on_pass_status(PassStatus.busy(round_label))
        for descriptor in batch:
            self.sink.on_match_state_changed(descriptor.id, MatchState.loading())

        outcomes = await asyncio.gather(
            *(self._timed(predict_fn, descriptor) for descriptor in batch),
            return_exceptions=True,
        )

        predicted = 0
        failed = 0
        for descriptor, outcome in zip(batch, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                failed += 1
                self._record_failure(descriptor, outcome)
            else:
                predicted += 1
                self._record_success(descriptor, outcome)

        remaining = pending_descriptors(descriptors, self.cache)
        next_round = next_round_label(remaining)
        logger.info(
            f"{round_label}: {predicted} predicted, {failed} failed; "
            f"next: {next_round or 'none'}"
        )

        if next_round is None:
            self.sink.on_pass_status(PassStatus.all_done())
            status = PASS_ALL_DONE
        else:
            self.sink.on_pass_status(PassStatus(PASS_IDLE, label=next_round))
            status = PASS_IDLE

        return PassSummary(
            predicted=predicted,
            failed=failed,
            next_round=next_round,
            status=status,
            round=round_label,
            remaining=len(remaining),
        )

    async def _timed(self, predict_fn: PredictFn, descriptor: MatchDescriptor) -> PredictionResult:
        start = time.perf_counter()
        try:
            return await predict_fn(descriptor)
        finally:
            self.metrics.timing(LATENCY_TIMING, (time.perf_counter() - start) * 1000)

    def _record_success(self, descriptor: MatchDescriptor, result: PredictionResult) -> None:
        if not self.cache.put_if_absent(descriptor.id, result):
            # Another pass cached this id first; keep the earlier result
            result = self.cache.get(descriptor.id)
        self.metrics.increment(SUCCESS_COUNTER)
        self.sink.on_match_state_changed(descriptor.id, MatchState.success(result))
        self._append_log(LogEntry.from_result(descriptor, result))

    def _record_failure(self, descriptor: MatchDescriptor, error: BaseException) -> None:
        message = str(error) or type(error).__name__
        logger.warning(f"Prediction failed for {descriptor.label}: {message}")
        self.metrics.increment(FAILED_COUNTER)
        self.sink.on_match_state_changed(descriptor.id, MatchState.error(message))
        self._append_log(LogEntry.from_error(descriptor, message))

    def _append_log(self, entry: LogEntry) -> None:
        if self.log_store is None:
            return
        try:
            self.log_store.append(entry)
        except (OSError, ValueError) as e:
            logger.error(f"Could not write prediction log: {e}")
