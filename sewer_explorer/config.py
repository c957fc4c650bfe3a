from __future__ import annotations

import os
from pathlib import Path

# Paths and filenames
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("SEWER_EXPLORER_DATA_DIR", PROJECT_ROOT / "data"))
LOG_DIR = PROJECT_ROOT / "sewer_explorer" / "logs"
NODE_FILE = "WW01_node.csv"
PIPE_FILE = "WW01_pipe.csv"
DEPTH_FILE = "Flow_depth.csv"
RATE_FILE = "Flow_rate.csv"

# Source table columns
NODE_ID_COLUMN = "Node ID"
NODE_X_COLUMN = "X-Coordinate"
NODE_Y_COLUMN = "Y-Coordinate"
PIPE_INLET_COLUMN = "Inlet Node"
PIPE_OUTLET_COLUMN = "Outlet Node"
PERIOD_COLUMN = "period"
PERIOD_START_COLUMN = "period_start"
PERIOD_END_COLUMN = "period_end"
PERIOD_COLUMNS = (PERIOD_COLUMN, PERIOD_START_COLUMN, PERIOD_END_COLUMN)

# Network view
NETWORK_WIDTH = 960
NETWORK_HEIGHT = 720
NETWORK_MARGIN = {"top": 40, "right": 80, "bottom": 60, "left": 60}
ROTATION_ANGLE = 55.0
ZOOM_FACTOR = 0.9
NODE_PADDING = 20.0
MIN_NODE_DISTANCE = 25.0
OVERLAP_MAX_ITERATIONS = 50
BACKGROUND_IMAGE = None

# Forecasting
METRICS = ("depth", "rate")
METRIC_LABELS = {"depth": "Depth", "rate": "Rate"}
DEFAULT_METRIC = "depth"
FORECAST_HORIZONS = (1, 6, 12)
DEFAULT_HORIZON = 1
MOVING_AVERAGE_WINDOW = 3
TREND_DAMPING = 0.3
NOISE_AMPLITUDE = 0.05
DEFAULT_STRATEGY = "linear_regression"
STRATEGY_LABELS = {
    "linear_regression": "Linear regression",
    "moving_average": "Moving average",
}

# Synthetic fallback data
SAMPLE_PERIODS = 12
SAMPLE_NODE_IDS = [
    "92090040",
    "92090041",
    "92090042",
    "92090070",
    "92090090",
    "92090100",
    "92100100",
    "92100110",
    "92100120",
    "92100130",
    "92100150",
    "92100160",
    "92100170",
    "92100190",
    "92100220",
    "92100230",
    "92100240",
    "92100250",
    "92100260",
    "92100280",
    "92100300",
    "92100320",
    "OF-1",
]
SAMPLE_PROFILES = {
    "depth": {"base": 500.0, "spread": 500.0, "season_freq": 0.5, "season_amp": 100.0, "noise": 50.0},
    "rate": {"base": 200.0, "spread": 300.0, "season_freq": 0.3, "season_amp": 50.0, "noise": 30.0},
}

# Interaction log
SCHEMA_VERSION = 1
APP_MODE = "dash"
SCHEMA_COLUMNS = [
    "schema_version",
    "session_id",
    "t_server_iso",
    "seq",
    "event",
    "source",
    "node_id",
    "metric",
    "steps",
    "strategy",
    "elapsed_time_ms",
    "mode",
    "status",
]

# Plot palette and styles
FIGURE_COLORS = {
    "node": "#3498db",
    "node_outline": "#2c3e50",
    "pipe": "#ffc107",
    "arrow": "#fd7e14",
    "historical": "#4682b4",
    "forecast": "#ff6b6b",
    "grid": "#6c757d",
    "text": "#2c3e50",
    "button_active": "#4682b4",
    "button_idle": "#dddddd",
}
NODE_MARKER_STYLE = {
    "color": FIGURE_COLORS["node"],
    "size": 14,
    "symbol": "circle",
    "line": {"color": FIGURE_COLORS["node_outline"], "width": 2},
}
PIPE_LINE_STYLE = {"color": FIGURE_COLORS["pipe"], "width": 2.5}
HISTORICAL_LINE_STYLE = {"color": FIGURE_COLORS["historical"], "width": 3}
FORECAST_LINE_STYLE = {"color": FIGURE_COLORS["forecast"], "width": 3, "dash": "dash"}
HISTORICAL_MARKER_STYLE = {"color": FIGURE_COLORS["historical"], "size": 8}
FORECAST_MARKER_STYLE = {"color": FIGURE_COLORS["forecast"], "size": 8}
FORECAST_CHART_HEIGHT = 400
FORECAST_CHART_MARGIN = {"l": 60, "r": 80, "t": 40, "b": 60}
