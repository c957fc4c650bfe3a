import pytest

from sewer_explorer.forecast import Strategy
from sewer_explorer.state import Selection, normalize_selection, normalize_steps, selection_to_store

NODES = ["A", "B"]


def test_defaults_from_empty_store():
    selection = normalize_selection(None, NODES)
    assert selection == Selection("A", "depth", 1, Strategy.LINEAR_REGRESSION, None)


def test_invalid_values_fall_back():
    raw = {"node_id": "Z", "metric": "pressure", "steps": "abc", "strategy": "arima", "seed": "x"}
    selection = normalize_selection(raw, NODES)
    assert selection.node_id == "A"
    assert selection.metric == "depth"
    assert selection.steps == 1
    assert selection.strategy is Strategy.LINEAR_REGRESSION
    assert selection.seed is None


@pytest.mark.parametrize("raw, expected", [(1, 1), (6, 6), (12, 12), (4, 6), (3, 1), (30, 12), ("6", 6)])
def test_steps_snap_to_allowed_horizons(raw, expected):
    assert normalize_steps(raw) == expected


def test_store_round_trip():
    selection = Selection("B", "rate", 12, Strategy.MOVING_AVERAGE, seed=3)
    data = selection_to_store(selection)
    assert data["strategy"] == "moving_average"
    assert normalize_selection(data, NODES) == selection


def test_with_changes():
    selection = Selection("A", "depth", 1)
    changed = selection.with_changes(metric="rate", steps=12)
    assert (changed.node_id, changed.metric, changed.steps) == ("A", "rate", 12)
    assert selection.metric == "depth"


def test_no_nodes_available():
    assert normalize_selection({"node_id": "A"}, []).node_id == ""


@pytest.mark.parametrize("raw, expected", [("42", 42), (" 7 ", 7), ("", None), ("abc", None), (5, 5)])
def test_seed_from_text_or_number_input(raw, expected):
    assert normalize_selection({"seed": raw}, NODES).seed == expected
