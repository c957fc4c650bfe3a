import streamlit as st
import streamlit_shadcn_ui as ui

from sewer_explorer import config
from sewer_explorer.data import load_network, load_timeseries
from sewer_explorer.forecast import ForecastEngine, ForecastStatus
from sewer_explorer.graph_engine import build_forecast_figure, build_network_figure
from sewer_explorer.logger import setup_logging
from sewer_explorer.network import build_network_layout
from sewer_explorer.state import normalize_selection, selection_to_store
from sewer_explorer.ui_components import forecast_controls

st.set_page_config(page_title="Sewer Network Explorer", layout="wide")

st.title("Sewer Network Explorer")
st.caption("Network layout (left) and per-node forecasts (right).")


@st.cache_resource
def _load_engine():
    setup_logging()
    return ForecastEngine(load_timeseries())


@st.cache_resource
def _load_layout():
    nodes, pipes = load_network()
    return build_network_layout(nodes, pipes)


engine = _load_engine()
layout = _load_layout()
node_ids = engine.nodes()

if "selection" not in st.session_state:
    st.session_state["selection"] = selection_to_store(normalize_selection(None, node_ids))

left_col, right_col = st.columns([1, 1], gap="large")

with left_col:
    st.header("Network")
    if layout.dangling:
        st.warning(
            f"{len(layout.dangling)} pipe endpoint(s) reference unknown nodes and are drawn from the origin."
        )
    st.plotly_chart(build_network_figure(layout), use_container_width=True, config={"displaylogo": False})

with right_col:
    st.header("Forecast")
    if not node_ids:
        st.info("No monitored nodes available.")
    else:
        raw = forecast_controls(node_ids, st.session_state["selection"])
        selection = normalize_selection(raw, node_ids)
        st.session_state["selection"] = selection_to_store(selection)
        result = engine.run(selection)
        if result.status is ForecastStatus.INSUFFICIENT_DATA:
            st.caption("Too few observations for this strategy; showing a flat extrapolation.")
        st.plotly_chart(build_forecast_figure(result), use_container_width=True, config={"displaylogo": False})
        if result.forecast:
            last = result.forecast[-1]
            ui.metric_card(
                title=f"{config.METRIC_LABELS[selection.metric]} at t={last.time}",
                content=f"{last.value:.2f}",
                description=config.STRATEGY_LABELS[selection.strategy.value],
                key="forecast_last_value",
            )
