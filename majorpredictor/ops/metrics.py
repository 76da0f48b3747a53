"""Prediction counters and provider latencies."""

from typing import Dict, List
import threading

SUCCESS_COUNTER = "predictions.success"
FAILED_COUNTER = "predictions.failed"
LATENCY_TIMING = "predictions.latency_ms"


class MetricsRecorder:
    def increment(self, key: str, value: int = 1) -> None:
        raise NotImplementedError

    def timing(self, key: str, value_ms: float) -> None:
        raise NotImplementedError

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError

    def prediction_summary(self) -> str:
        """One line for the end of a CLI run, e.g. ``3 predicted, 1 failed, avg 812 ms``."""
        snapshot = self.snapshot()
        counters = snapshot.get("counters", {})
        line = (
            f"{int(counters.get(SUCCESS_COUNTER, 0))} predicted, "
            f"{int(counters.get(FAILED_COUNTER, 0))} failed"
        )
        latency = snapshot.get("timings", {}).get(LATENCY_TIMING)
        if latency:
            line += f", avg {latency['avg_ms']:.0f} ms, max {latency['max_ms']:.0f} ms"
        return line


class InMemoryMetricsRecorder(MetricsRecorder):
    """Thread-safe recorder; one per process unless a test injects its own."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._timings: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + int(value)

    def timing(self, key: str, value_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(key, []).append(float(value_ms))

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            timings = {
                key: {
                    "count": len(values),
                    "avg_ms": sum(values) / len(values),
                    "max_ms": max(values),
                }
                for key, values in self._timings.items()
                if values
            }
            return {"counters": dict(self._counters), "timings": timings}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()


_DEFAULT_RECORDER = InMemoryMetricsRecorder()


def get_metrics_recorder() -> MetricsRecorder:
    return _DEFAULT_RECORDER
