import plotly.graph_objects as go
import pytest

from conftest import make_series
from sewer_explorer.data import NodeRecord, PipeRecord
from sewer_explorer.forecast import ForecastEngine, ForecastStatus, Strategy
from sewer_explorer.graph_engine import build_forecast_figure, build_network_figure, forecast_y_range
from sewer_explorer.network import build_network_layout
from sewer_explorer.state import Selection
from sewer_explorer.tooltips import node_tooltip, pipe_tooltip


def test_network_figure_has_pipes_nodes_and_arrows():
    nodes = [NodeRecord("M1", 0, 0, {"Node ID": "M1"}), NodeRecord("M2", 10, 10, {"Node ID": "M2"})]
    pipes = [PipeRecord("M1", "M2", {"Inlet Node": "M1", "Outlet Node": "M2"})]
    fig = build_network_figure(build_network_layout(nodes, pipes, 600, 500))
    assert isinstance(fig, go.Figure)
    names = [trace.name for trace in fig.data]
    assert "Manholes" in names and "Pipes (flow)" in names
    assert len(fig.layout.annotations) == 1
    assert "Rotated 55" in fig.layout.title.text
    manholes = next(t for t in fig.data if t.name == "Manholes")
    assert list(manholes.text) == ["M1", "M2"]


def test_forecast_figure_traces():
    engine = ForecastEngine({"N": {"depth": make_series([10, 12, 11, 13, 14])}})
    result = engine.run(Selection("N", "depth", 6, Strategy.LINEAR_REGRESSION))
    fig = build_forecast_figure(result)
    historical, forecast_line, forecast_points = fig.data
    assert list(historical.x) == [0, 1, 2, 3, 4]
    assert forecast_line.x[0] == 4
    assert list(forecast_points.x) == [5, 6, 7, 8, 9, 10]
    assert fig.layout.yaxis.title.text == "Depth Value"


def test_forecast_figure_empty_result_shows_message():
    engine = ForecastEngine({})
    result = engine.run(Selection("nope", "rate", 1))
    assert result.status is ForecastStatus.MISSING_DATA
    fig = build_forecast_figure(result)
    assert fig.layout.annotations[0].text == "No data for this node"


def test_forecast_y_range():
    assert forecast_y_range([]) is None
    assert forecast_y_range([10.0, 20.0]) == pytest.approx([0.0, 22.0])
    assert forecast_y_range([-10.0, 5.0]) == pytest.approx([-9.0, 5.5])


def test_tooltips_skip_empty_and_zero_fields():
    text = node_tooltip("M1", {"Node ID": "M1", "Depth": "0", "Invert": "", "Area": "12"})
    assert text.startswith("<b>Manhole - M1</b>")
    assert "Area: 12" in text
    assert "Depth" not in text and "Invert" not in text
    assert "unknown node" in pipe_tooltip({}, dangling=True)
