from __future__ import annotations

from typing import List, Optional, Sequence

import plotly.graph_objects as go

from . import config
from .forecast import ForecastResult, ForecastStatus
from .network import NetworkLayout
from .tooltips import forecast_tooltip, node_tooltip, observation_tooltip, pipe_tooltip


def network_title(view) -> str:
    return (
        f"Campus Sewer Network Graph Structure "
        f"(Rotated {view.rotation_deg:g}°, Zoom {view.zoom * 100:.0f}%)"
    )


def pipe_traces(layout: NetworkLayout) -> List[go.Scatter]:
    view = layout.view
    xs: List[Optional[float]] = []
    ys: List[Optional[float]] = []
    mid_x: List[float] = []
    mid_y: List[float] = []
    hover: List[str] = []
    for pipe in layout.pipes:
        x1, y1 = view.apply(*pipe.start)
        x2, y2 = view.apply(*pipe.end)
        xs.extend([x1, x2, None])
        ys.extend([y1, y2, None])
        mid_x.append((x1 + x2) / 2.0)
        mid_y.append((y1 + y2) / 2.0)
        hover.append(pipe_tooltip(pipe.attributes, dangling=pipe.dangling))
    return [
        go.Scatter(
            x=xs,
            y=ys,
            mode="lines",
            name="Pipes (flow)",
            line=dict(config.PIPE_LINE_STYLE),
            opacity=0.8,
            hoverinfo="skip",
        ),
        go.Scatter(
            x=mid_x,
            y=mid_y,
            mode="markers",
            name="Pipe info",
            marker=dict(size=12, color=config.FIGURE_COLORS["pipe"], opacity=0),
            hovertext=hover,
            hovertemplate="%{hovertext}<extra></extra>",
            showlegend=False,
        ),
    ]


def pipe_arrows(layout: NetworkLayout) -> List[dict]:
    view = layout.view
    arrows = []
    for pipe in layout.pipes:
        x1, y1 = view.apply(*pipe.start)
        x2, y2 = view.apply(*pipe.end)
        if (x1, y1) == (x2, y2):
            continue
        arrows.append(
            dict(
                x=x2,
                y=y2,
                ax=x1,
                ay=y1,
                xref="x",
                yref="y",
                axref="x",
                ayref="y",
                text="",
                showarrow=True,
                arrowhead=2,
                arrowsize=1.2,
                arrowwidth=1.5,
                arrowcolor=config.FIGURE_COLORS["arrow"],
                standoff=7,
                opacity=0.8,
            )
        )
    return arrows


def node_trace(layout: NetworkLayout) -> go.Scatter:
    coords = [layout.view.apply(point.x, point.y) for point in layout.points]
    return go.Scatter(
        x=[c[0] for c in coords],
        y=[c[1] for c in coords],
        mode="markers+text",
        name="Manholes",
        marker=dict(config.NODE_MARKER_STYLE),
        text=[point.id for point in layout.points],
        textposition="top right",
        textfont=dict(size=10, color=config.FIGURE_COLORS["text"]),
        hovertext=[node_tooltip(point.id, point.data) for point in layout.points],
        hovertemplate="%{hovertext}<extra></extra>",
    )


def build_network_figure(layout: NetworkLayout, *, uirevision: str = "network") -> go.Figure:
    view = layout.view
    fig = go.Figure(data=[*pipe_traces(layout), node_trace(layout)])
    fig.update_layout(
        title=dict(text=network_title(view), x=0.5, font=dict(size=16, color=config.FIGURE_COLORS["text"])),
        width=view.width,
        height=view.height,
        margin=dict(l=10, r=10, t=50, b=10),
        xaxis=dict(range=[0, view.width], showgrid=False, zeroline=False, visible=False),
        yaxis=dict(
            range=[view.height, 0],
            showgrid=False,
            zeroline=False,
            visible=False,
            scaleanchor="x",
        ),
        plot_bgcolor="rgba(255,255,255,0.3)",
        legend=dict(
            x=1,
            y=0,
            xanchor="right",
            yanchor="bottom",
            bgcolor="rgba(248,249,250,0.95)",
            bordercolor="#adb5bd",
            borderwidth=1,
        ),
        annotations=pipe_arrows(layout),
        hovermode="closest",
        uirevision=uirevision,
    )
    if config.BACKGROUND_IMAGE:
        fig.add_layout_image(
            dict(
                source=config.BACKGROUND_IMAGE,
                xref="x",
                yref="y",
                x=0,
                y=0,
                sizex=view.width,
                sizey=view.height,
                sizing="stretch",
                layer="below",
            )
        )
    return fig


def forecast_y_range(values: Sequence[float]) -> Optional[List[float]]:
    if not values:
        return None
    low = min(values)
    high = max(values)
    return [min(0.0, low * 0.9), high * 1.1]


def build_forecast_figure(result: ForecastResult, *, uirevision: str = "forecast") -> go.Figure:
    label = config.METRIC_LABELS.get(result.metric, result.metric.title())
    historical = result.historical
    forecast = result.forecast
    fig = go.Figure(
        data=[
            go.Scatter(
                x=[obs.time for obs in historical],
                y=[obs.value for obs in historical],
                mode="lines+markers",
                name="Historical",
                line=dict(config.HISTORICAL_LINE_STYLE, shape="spline"),
                marker=dict(config.HISTORICAL_MARKER_STYLE),
                hovertext=[observation_tooltip(obs, label) for obs in historical],
                hovertemplate="%{hovertext}<extra></extra>",
            ),
        ]
    )
    if forecast:
        joined_x = [historical[-1].time] if historical else []
        joined_y = [historical[-1].value] if historical else []
        fig.add_trace(
            go.Scatter(
                x=[*joined_x, *(p.time for p in forecast)],
                y=[*joined_y, *(p.value for p in forecast)],
                mode="lines",
                name="Forecast",
                line=dict(config.FORECAST_LINE_STYLE),
                hoverinfo="skip",
                showlegend=False,
            )
        )
        fig.add_trace(
            go.Scatter(
                x=[p.time for p in forecast],
                y=[p.value for p in forecast],
                mode="markers",
                name="Forecast",
                marker=dict(config.FORECAST_MARKER_STYLE),
                hovertext=[forecast_tooltip(p, label, step) for step, p in enumerate(forecast, start=1)],
                hovertemplate="%{hovertext}<extra></extra>",
            )
        )
    values = [obs.value for obs in historical] + [p.value for p in forecast]
    x_max = len(historical) - 1 + len(forecast)
    fig.update_layout(
        title=dict(text="Time Series Forecasting for Water System Monitoring", x=0.5),
        height=config.FORECAST_CHART_HEIGHT,
        margin=dict(config.FORECAST_CHART_MARGIN),
        xaxis=dict(title="Time Period", showgrid=True, range=[0, max(x_max, 1)] if values else None),
        yaxis=dict(title=f"{label} Value", showgrid=True, range=forecast_y_range(values)),
        legend=dict(x=0.01, y=0.99),
        uirevision=uirevision,
    )
    if not values:
        message = "No data for this node" if result.status is ForecastStatus.MISSING_DATA else "Nothing to draw"
        fig.add_annotation(
            text=message,
            x=0.5,
            y=0.5,
            xref="paper",
            yref="paper",
            showarrow=False,
            font=dict(size=14, color="#6c757d"),
        )
    return fig
