"""Hover text for manholes, pipes and forecast points."""

from __future__ import annotations

from html import escape
from typing import List, Mapping, Optional

from .forecast import ForecastPoint, Observation


def _attribute_lines(attributes: Mapping[str, str]) -> List[str]:
    return [
        f"{escape(str(key))}: {escape(str(value))}"
        for key, value in attributes.items()
        if value and value != "0"
    ]


def node_tooltip(node_id: str, attributes: Mapping[str, str]) -> str:
    return "<br>".join([f"<b>Manhole - {escape(node_id)}</b>", *_attribute_lines(attributes)])


def pipe_tooltip(attributes: Mapping[str, str], *, dangling: bool = False) -> str:
    lines = ["<b>Pipe Information</b>", *_attribute_lines(attributes)]
    if dangling:
        lines.append("<i>Endpoint references an unknown node</i>")
    return "<br>".join(lines)


def observation_tooltip(observation: Observation, metric_label: str) -> str:
    lines = ["<b>Historical</b>", f"Time: {observation.time}", f"{metric_label}: {observation.value:.2f}"]
    if observation.period_label:
        lines.append(f"Period: {escape(observation.period_label)}")
    if observation.period_start:
        lines.append(f"Start: {escape(observation.period_start)}")
    if observation.period_end:
        lines.append(f"End: {escape(observation.period_end)}")
    return "<br>".join(lines)


def forecast_tooltip(point: ForecastPoint, metric_label: str, step: Optional[int] = None) -> str:
    header = "<b>Forecast</b>" if step is None else f"<b>Forecast (step {step})</b>"
    return "<br>".join([header, f"Time: {point.time}", f"{metric_label}: {point.value:.2f}"])
