"""Dash dashboard for the sewer network: overlap-resolved network view and per-node forecasts."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence

import dash
from dash import Input, Output, State, dcc, html

from sewer_explorer import config
from sewer_explorer.data import load_network, load_timeseries
from sewer_explorer.forecast import ForecastEngine, ForecastResult, ForecastStatus, Strategy
from sewer_explorer.graph_engine import build_forecast_figure, build_network_figure
from sewer_explorer.logger import build_event_record, setup_logging, write_event
from sewer_explorer.network import build_network_layout
from sewer_explorer.state import normalize_selection, selection_to_store

_METRIC_BUTTON_IDS: Dict[str, str] = {metric: f"btn-metric-{metric}" for metric in config.METRICS}
_STEP_BUTTON_IDS: Dict[int, str] = {steps: f"btn-steps-{steps}" for steps in config.FORECAST_HORIZONS}

_BUTTON_BASE_STYLE: Dict[str, Any] = {
    "margin": "0 5px",
    "padding": "5px 10px",
    "border": "none",
    "cursor": "pointer",
}
_CONTROL_GROUP_STYLE: Dict[str, Any] = {"marginRight": "20px", "display": "inline-flex", "alignItems": "center"}

setup_logging()
_ENGINE = ForecastEngine(load_timeseries())
_NODES, _PIPES = load_network()
_LAYOUT = build_network_layout(_NODES, _PIPES)
_NODE_IDS: List[str] = _ENGINE.nodes()


def _get_session_id(session_data: Optional[Dict[str, Any]]) -> str:
    if isinstance(session_data, dict):
        raw = session_data.get("session_id")
        if isinstance(raw, str) and raw:
            return raw
    return "unknown"


def _button_style(active: bool) -> Dict[str, Any]:
    style = dict(_BUTTON_BASE_STYLE)
    style["background"] = config.FIGURE_COLORS["button_active" if active else "button_idle"]
    style["color"] = "white" if active else "black"
    return style


def _horizon_label(steps: int) -> str:
    return f"{steps} Step" if steps == 1 else f"{steps} Steps"


def _apply_trigger(
    data: Optional[Dict[str, Any]],
    trigger_id: Optional[str],
    *,
    node_value: Any = None,
    strategy_value: Any = None,
    seed_value: Any = None,
    available_nodes: Sequence[str] = (),
) -> Dict[str, Any]:
    """Fold one control event into the stored selection and return the normalized store data."""
    updated = dict(data) if isinstance(data, dict) else {}
    if trigger_id == "node-selector":
        updated["node_id"] = node_value
    elif trigger_id == "strategy-selector":
        updated["strategy"] = strategy_value
    elif trigger_id == "seed-input":
        updated["seed"] = seed_value
    else:
        for metric, button_id in _METRIC_BUTTON_IDS.items():
            if trigger_id == button_id:
                updated["metric"] = metric
        for steps, button_id in _STEP_BUTTON_IDS.items():
            if trigger_id == button_id:
                updated["steps"] = steps
    return selection_to_store(normalize_selection(updated, list(available_nodes)))


def _status_message(result: ForecastResult) -> str:
    if result.status is ForecastStatus.MISSING_DATA:
        return f"No {result.metric} data for node {result.node_id or '-'}."
    if result.status is ForecastStatus.INSUFFICIENT_DATA:
        if result.strategy is Strategy.LINEAR_REGRESSION:
            return "Only one observation; the forecast repeats the observed value."
        return "Fewer observations than the averaging window; the forecast averages all of them."
    last = result.forecast[-1] if result.forecast else None
    if last is None:
        return ""
    label = config.METRIC_LABELS.get(result.metric, result.metric)
    return f"{label} forecast at t={last.time}: {last.value:.2f}"


def _dangling_message() -> str:
    if not _LAYOUT.dangling:
        return ""
    names = sorted({ref.node_id or "(blank)" for ref in _LAYOUT.dangling})
    return (
        f"{len(_LAYOUT.dangling)} pipe endpoint(s) reference unknown nodes "
        f"({', '.join(names)}) and are drawn from the origin."
    )


_INITIAL_SELECTION = selection_to_store(normalize_selection(None, _NODE_IDS))

app = dash.Dash(__name__)
server = app.server


def _forecast_controls() -> html.Div:
    return html.Div(
        [
            html.Span(
                [
                    html.Label("Select Node: ", htmlFor="node-selector", style={"marginRight": "5px"}),
                    dcc.Dropdown(
                        id="node-selector",
                        options=[{"label": node_id, "value": node_id} for node_id in _NODE_IDS],
                        value=_INITIAL_SELECTION["node_id"] or None,
                        clearable=False,
                        style={"width": "180px"},
                    ),
                ],
                style=_CONTROL_GROUP_STYLE,
            ),
            html.Span(
                [
                    html.Label("Metric: ", style={"marginRight": "5px"}),
                    *[
                        html.Button(
                            config.METRIC_LABELS[metric],
                            id=button_id,
                            n_clicks=0,
                            type="button",
                            style=_button_style(metric == _INITIAL_SELECTION["metric"]),
                        )
                        for metric, button_id in _METRIC_BUTTON_IDS.items()
                    ],
                ],
                style=_CONTROL_GROUP_STYLE,
            ),
            html.Span(
                [
                    html.Label("Forecast: ", style={"marginRight": "5px"}),
                    *[
                        html.Button(
                            _horizon_label(steps),
                            id=button_id,
                            n_clicks=0,
                            type="button",
                            className="step-btn",
                            style=_button_style(steps == _INITIAL_SELECTION["steps"]),
                        )
                        for steps, button_id in _STEP_BUTTON_IDS.items()
                    ],
                ],
                style=_CONTROL_GROUP_STYLE,
            ),
            html.Span(
                [
                    html.Label("Strategy: ", style={"marginRight": "5px"}),
                    dcc.RadioItems(
                        id="strategy-selector",
                        options=[{"label": label, "value": key} for key, label in config.STRATEGY_LABELS.items()],
                        value=_INITIAL_SELECTION["strategy"],
                        inline=True,
                    ),
                ],
                style=_CONTROL_GROUP_STYLE,
            ),
            html.Span(
                [
                    html.Label("Seed: ", htmlFor="seed-input", style={"marginRight": "5px"}),
                    dcc.Input(
                        id="seed-input",
                        type="number",
                        placeholder="random",
                        debounce=True,
                        style={"width": "90px"},
                    ),
                ],
                style=_CONTROL_GROUP_STYLE,
                title="Fix the moving-average noise for reproducible forecasts.",
            ),
        ],
        className="forecast-controls",
        style={"marginBottom": "20px", "textAlign": "center"},
    )


def _serve_layout() -> html.Div:
    return html.Div(
        [
            html.H1("Sewer Network Explorer", style={"textAlign": "center"}),
            dcc.Tabs(
                id="view-tabs",
                value="network",
                children=[
                    dcc.Tab(
                        label="Network",
                        value="network",
                        children=[
                            html.Div(_dangling_message(), id="network-status", style={"color": "#b35900"}),
                            dcc.Graph(
                                id="network-chart",
                                figure=build_network_figure(_LAYOUT),
                                config={"displaylogo": False},
                            ),
                        ],
                    ),
                    dcc.Tab(
                        label="Forecast",
                        value="forecast",
                        children=[
                            _forecast_controls(),
                            dcc.Graph(id="forecast-chart", config={"displaylogo": False}),
                            html.Div(id="forecast-status", style={"textAlign": "center"}),
                        ],
                    ),
                ],
            ),
            dcc.Store(id="store-session", data={"session_id": uuid.uuid4().hex}),
            dcc.Store(id="store-selection", data=dict(_INITIAL_SELECTION)),
        ],
        style={"maxWidth": "1100px", "margin": "0 auto", "fontFamily": "sans-serif"},
    )


app.layout = _serve_layout


@app.callback(
    Output("store-selection", "data"),
    [
        Input("node-selector", "value"),
        Input("strategy-selector", "value"),
        Input("seed-input", "value"),
        *[Input(button_id, "n_clicks") for button_id in _METRIC_BUTTON_IDS.values()],
        *[Input(button_id, "n_clicks") for button_id in _STEP_BUTTON_IDS.values()],
    ],
    [
        State("store-selection", "data"),
        State("store-session", "data"),
    ],
    prevent_initial_call=True,
)
def _update_selection(node_value, strategy_value, seed_value, *args):
    selection_data, session_data = args[-2], args[-1]
    ctx = dash.callback_context
    if not ctx.triggered:
        return dash.no_update
    trigger_id = ctx.triggered[0]["prop_id"].split(".")[0]
    updated = _apply_trigger(
        selection_data,
        trigger_id,
        node_value=node_value,
        strategy_value=strategy_value,
        seed_value=seed_value,
        available_nodes=_NODE_IDS,
    )
    if updated == selection_data:
        return dash.no_update
    record = build_event_record(
        _get_session_id(session_data),
        event="selection_change",
        source=trigger_id,
        selection=updated,
    )
    write_event(record)
    return updated


@app.callback(
    [
        Output("forecast-chart", "figure"),
        Output("forecast-status", "children"),
    ],
    Input("store-selection", "data"),
)
def _render_forecast(selection_data):
    selection = normalize_selection(selection_data, _NODE_IDS)
    result = _ENGINE.run(selection)
    return build_forecast_figure(result), _status_message(result)


@app.callback(
    [
        *[Output(button_id, "style") for button_id in _METRIC_BUTTON_IDS.values()],
        *[Output(button_id, "style") for button_id in _STEP_BUTTON_IDS.values()],
    ],
    Input("store-selection", "data"),
)
def _sync_button_styles(selection_data):
    selection = normalize_selection(selection_data, _NODE_IDS)
    metric_styles = [_button_style(metric == selection.metric) for metric in _METRIC_BUTTON_IDS]
    step_styles = [_button_style(steps == selection.steps) for steps in _STEP_BUTTON_IDS]
    return [*metric_styles, *step_styles]


if __name__ == "__main__":
    app.run(debug=True)
