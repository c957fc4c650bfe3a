import random

import pytest

from conftest import make_series
from sewer_explorer.forecast import (
    ForecastEngine,
    ForecastStatus,
    SeriesNotFoundError,
    Strategy,
    fit_line,
    linear_regression_predict,
    moving_average_predict,
)
from sewer_explorer.state import Selection


def test_regression_on_linear_data():
    values = [2 * t + 5 for t in range(10)]
    assert linear_regression_predict(values, 3) == pytest.approx([25, 27, 29])


def test_regression_deterministic():
    values = [3.2, 4.1, 3.9, 5.5, 6.0, 5.8]
    assert linear_regression_predict(values, 6) == linear_regression_predict(values, 6)


def test_regression_single_value_repeats():
    assert fit_line([7.0]) == (0.0, 7.0)
    assert linear_regression_predict([7.0], 3) == [7.0, 7.0, 7.0]


def test_regression_clamps_at_zero():
    out = linear_regression_predict([5, 4, 3, 2, 1], 6)
    assert out[:1] == pytest.approx([0.0])
    assert all(v >= 0 for v in out)


def test_empty_and_zero_steps():
    assert linear_regression_predict([], 3) == []
    assert moving_average_predict([], 3) == []
    assert linear_regression_predict([1, 2], 0) == []
    assert moving_average_predict([1, 2], 0) == []


def test_moving_average_seeded_is_reproducible():
    values = [10, 12, 11, 13, 14]
    first = moving_average_predict(values, 12, rng=random.Random(7))
    second = moving_average_predict(values, 12, rng=random.Random(7))
    assert first == second
    assert len(first) == 12


def test_moving_average_without_noise():
    out = moving_average_predict([3, 6, 9, 12], 1, noise=0.0, rng=random.Random(0))
    # window mean 9, previous window mean 6, damped trend 0.9
    assert out == pytest.approx([9.9])


def test_moving_average_extends_running_series():
    out = moving_average_predict([3, 6, 9, 12], 2, noise=0.0)
    # second step averages [9, 12, 9.9] against [6, 9, 12]
    assert out == pytest.approx([9.9, 10.69])


def test_moving_average_appends_clamped_prediction():
    # step one is 1/3 - 9.9 before clamping; a negative running value would pull step two below zero too
    out = moving_average_predict([100, 0, 0, 1], 2, noise=0.0)
    assert out == pytest.approx([0.0, 1 / 3])


def test_moving_average_short_history_uses_all_points():
    out = moving_average_predict([4, 8], 1, noise=0.0)
    assert out == pytest.approx([6.0])


def test_moving_average_noise_bounded():
    values = [100.0, 100.0, 100.0]
    for seed in range(20):
        (value,) = moving_average_predict(values, 1, rng=random.Random(seed))
        assert 97.5 <= value <= 102.5


def test_moving_average_non_negative():
    out = moving_average_predict([50, 10, 0, 0], 6, rng=random.Random(1))
    assert all(v >= 0 for v in out)


def test_engine_end_to_end(engine):
    points = engine.forecast("N1", "depth", 2, Strategy.LINEAR_REGRESSION)
    assert [p.time for p in points] == [5, 6]
    assert [p.value for p in points] == pytest.approx([14.7, 15.6])


@pytest.mark.parametrize("strategy", list(Strategy))
@pytest.mark.parametrize("steps", [1, 6, 12])
def test_forecast_count_and_disjoint_times(engine, strategy, steps):
    history = engine.history("N1", "depth")
    points = engine.forecast("N1", "depth", steps, strategy, random.Random(3))
    assert len(points) == steps
    assert not {p.time for p in points} & {o.time for o in history}
    assert all(p.value >= 0 for p in points)


def test_engine_unknown_node_and_metric(engine):
    with pytest.raises(SeriesNotFoundError):
        engine.forecast("missing", "depth", 1)
    with pytest.raises(SeriesNotFoundError) as excinfo:
        engine.forecast("N1", "pressure", 1)
    assert excinfo.value.metric == "pressure"


def test_engine_empty_history(engine):
    assert engine.forecast("N2", "rate", 6) == []


def test_engine_regression_cache_returns_copies(engine):
    first = engine.forecast("N1", "depth", 6)
    first.clear()
    assert len(engine.forecast("N1", "depth", 6)) == 6


def test_run_reports_status(engine):
    ok = engine.run(Selection("N1", "depth", 6))
    assert ok.status is ForecastStatus.OK
    assert len(ok.historical) == 5 and len(ok.forecast) == 6

    missing = engine.run(Selection("ghost", "depth", 6))
    assert missing.status is ForecastStatus.MISSING_DATA
    assert missing.is_empty

    empty = engine.run(Selection("N2", "rate", 1))
    assert empty.status is ForecastStatus.MISSING_DATA

    short = engine.run(Selection("N2", "depth", 6))
    assert short.status is ForecastStatus.INSUFFICIENT_DATA
    assert [p.value for p in short.forecast] == [7.0] * 6


def test_run_moving_average_seeded(engine):
    selection = Selection("N1", "rate", 12, Strategy.MOVING_AVERAGE, seed=42)
    assert engine.run(selection).forecast == engine.run(selection).forecast


def test_history_keeps_period_metadata():
    engine = ForecastEngine({"A": {"depth": make_series([1, 2], label_prefix="p")}})
    result = engine.run(Selection("A", "depth", 1))
    assert [o.period_label for o in result.historical] == ["p1", "p2"]
