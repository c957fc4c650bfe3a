"""Naive extrapolation of monitored node series.

Two interchangeable strategies are available: a moving average with a damped
trend and a little injected noise, and an ordinary least squares line fitted
over the whole history. Historical observations and forecast points are kept
in separate sequences; forecast times always continue after the last
historical index.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from . import config

log = logging.getLogger(__name__)


class SeriesNotFoundError(LookupError):
    """Raised when a node or metric has no series in the engine."""

    def __init__(self, node_id: str, metric: Optional[str] = None):
        self.node_id = node_id
        self.metric = metric
        if metric is None:
            message = f"unknown node {node_id!r}"
        else:
            message = f"no {metric!r} series for node {node_id!r}"
        super().__init__(message)


class Strategy(str, Enum):
    MOVING_AVERAGE = "moving_average"
    LINEAR_REGRESSION = "linear_regression"

    @classmethod
    def coerce(cls, value: object, default: Optional["Strategy"] = None) -> "Strategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return default if default is not None else cls(config.DEFAULT_STRATEGY)


class ForecastStatus(str, Enum):
    OK = "ok"
    MISSING_DATA = "missing_data"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class Observation:
    time: int
    value: float
    period_label: Optional[str] = None
    period_start: Optional[str] = None
    period_end: Optional[str] = None


@dataclass(frozen=True)
class ForecastPoint:
    time: int
    value: float


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def moving_average_predict(
    values: Sequence[float],
    steps: int,
    window_size: int = config.MOVING_AVERAGE_WINDOW,
    rng: Optional[random.Random] = None,
    *,
    damping: float = config.TREND_DAMPING,
    noise: float = config.NOISE_AMPLITUDE,
) -> List[float]:
    if not values or steps <= 0:
        return []
    window_size = max(1, int(window_size))
    rng = rng if rng is not None else random.Random()
    running = [float(v) for v in values]
    forecasts: List[float] = []
    for _ in range(steps):
        average = _mean(running[-window_size:])
        trend = 0.0
        if len(running) >= window_size + 1:
            previous_average = _mean(running[-(window_size + 1) : -1])
            trend = (average - previous_average) * damping
        jitter = (rng.random() - 0.5) * average * noise
        prediction = max(0.0, average + trend + jitter)
        forecasts.append(prediction)
        running.append(prediction)
    return forecasts


def fit_line(values: Sequence[float]) -> Tuple[float, float]:
    """Closed-form OLS of ``values`` against ``0..n-1``. Returns ``(slope, intercept)``.

    A single observation has no slope; it fits the flat line through itself.
    """
    n = len(values)
    if n == 0:
        raise ValueError("cannot fit a line to an empty series")
    sum_x = n * (n - 1) / 2.0
    sum_y = float(sum(values))
    sum_xy = float(sum(i * v for i, v in enumerate(values)))
    sum_xx = (n - 1) * n * (2 * n - 1) / 6.0
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0, sum_y / n
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def linear_regression_predict(values: Sequence[float], steps: int) -> List[float]:
    if not values or steps <= 0:
        return []
    n = len(values)
    slope, intercept = fit_line(values)
    return [max(0.0, intercept + slope * (n + step - 1)) for step in range(1, steps + 1)]


def _as_points(start: int, values: Sequence[float]) -> List[ForecastPoint]:
    return [ForecastPoint(time=start + i, value=v) for i, v in enumerate(values)]


@dataclass(frozen=True)
class ForecastResult:
    node_id: str
    metric: str
    strategy: Strategy
    historical: Tuple[Observation, ...]
    forecast: Tuple[ForecastPoint, ...]
    status: ForecastStatus

    @property
    def is_empty(self) -> bool:
        return not self.historical and not self.forecast


class ForecastEngine:
    """Per-node, per-metric histories plus forecasting over them."""

    def __init__(self, series: Mapping[str, Mapping[str, Sequence[Observation]]]):
        self._series: Dict[str, Dict[str, Tuple[Observation, ...]]] = {
            str(node_id): {str(metric): tuple(obs) for metric, obs in metrics.items()}
            for node_id, metrics in series.items()
        }
        self._regression_cache: Dict[Tuple[str, str, int], Tuple[ForecastPoint, ...]] = {}

    def nodes(self) -> List[str]:
        return list(self._series)

    def metrics(self, node_id: str) -> List[str]:
        try:
            return list(self._series[node_id])
        except KeyError:
            raise SeriesNotFoundError(node_id) from None

    def history(self, node_id: str, metric: str) -> Tuple[Observation, ...]:
        try:
            by_metric = self._series[node_id]
        except KeyError:
            raise SeriesNotFoundError(node_id) from None
        try:
            return by_metric[metric]
        except KeyError:
            raise SeriesNotFoundError(node_id, metric) from None

    def forecast(
        self,
        node_id: str,
        metric: str,
        steps: int,
        strategy: Strategy = Strategy.LINEAR_REGRESSION,
        rng: Optional[random.Random] = None,
    ) -> List[ForecastPoint]:
        history = self.history(node_id, metric)
        if not history or steps <= 0:
            return []
        strategy = Strategy.coerce(strategy)
        values = [obs.value for obs in history]
        n = len(values)
        if strategy is Strategy.LINEAR_REGRESSION:
            key = (node_id, metric, steps)
            cached = self._regression_cache.get(key)
            if cached is None:
                cached = tuple(_as_points(n, linear_regression_predict(values, steps)))
                self._regression_cache[key] = cached
            return list(cached)
        return _as_points(n, moving_average_predict(values, steps, rng=rng))

    def run(self, selection) -> ForecastResult:
        """Forecast for a caller-owned selection without raising on missing series."""
        strategy = Strategy.coerce(selection.strategy)
        try:
            history = self.history(selection.node_id, selection.metric)
        except SeriesNotFoundError as exc:
            log.info("no series to forecast: %s", exc)
            return ForecastResult(
                selection.node_id, selection.metric, strategy, (), (), ForecastStatus.MISSING_DATA
            )
        if not history:
            return ForecastResult(
                selection.node_id, selection.metric, strategy, (), (), ForecastStatus.MISSING_DATA
            )
        rng = random.Random(selection.seed) if selection.seed is not None else None
        points = self.forecast(selection.node_id, selection.metric, selection.steps, strategy, rng)
        status = ForecastStatus.OK
        if strategy is Strategy.LINEAR_REGRESSION and len(history) < 2:
            status = ForecastStatus.INSUFFICIENT_DATA
        elif strategy is Strategy.MOVING_AVERAGE and len(history) < config.MOVING_AVERAGE_WINDOW:
            status = ForecastStatus.INSUFFICIENT_DATA
        return ForecastResult(selection.node_id, selection.metric, strategy, history, tuple(points), status)
