"""Streamlit controls for the forecast view."""

from typing import Any, Dict, Sequence

import streamlit as st
import streamlit_shadcn_ui as ui

from . import config


def _horizon_label(steps):
    return f"{steps} Step" if steps == 1 else f"{steps} Steps"


def forecast_controls(node_ids: Sequence[str], defaults: Dict[str, Any]) -> Dict[str, Any]:
    node_ids = list(node_ids)
    node_index = node_ids.index(defaults["node_id"]) if defaults.get("node_id") in node_ids else 0
    node_id = st.selectbox("Select Node", node_ids, index=node_index, key="forecast_node")

    metric_labels = [config.METRIC_LABELS[m] for m in config.METRICS]
    default_metric = config.METRIC_LABELS.get(defaults.get("metric"), metric_labels[0])
    metric_label = ui.tabs(options=metric_labels, default_value=default_metric, key="forecast_metric")
    metric = next((m for m, lbl in config.METRIC_LABELS.items() if lbl == metric_label), config.DEFAULT_METRIC)

    horizon_labels = [_horizon_label(h) for h in config.FORECAST_HORIZONS]
    default_horizon = _horizon_label(defaults.get("steps", config.DEFAULT_HORIZON))
    horizon_label = ui.tabs(options=horizon_labels, default_value=default_horizon, key="forecast_horizon")
    steps = dict(zip(horizon_labels, config.FORECAST_HORIZONS)).get(horizon_label, config.DEFAULT_HORIZON)

    strategy_keys = list(config.STRATEGY_LABELS)
    strategy = st.radio(
        "Strategy",
        strategy_keys,
        index=strategy_keys.index(defaults.get("strategy", config.DEFAULT_STRATEGY)),
        format_func=config.STRATEGY_LABELS.get,
        horizontal=True,
        key="forecast_strategy",
    )
    seed = st.text_input(
        "Seed",
        value="" if defaults.get("seed") is None else str(defaults["seed"]),
        placeholder="random",
        help="Fix the moving-average noise for reproducible forecasts.",
        key="forecast_seed",
    )
    return {"node_id": node_id, "metric": metric, "steps": steps, "strategy": strategy, "seed": seed}
