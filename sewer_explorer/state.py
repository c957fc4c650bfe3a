from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

from . import config
from .forecast import Strategy


@dataclass(frozen=True)
class Selection:
    """What the forecast view is showing. Owned by the caller, passed into every refresh."""

    node_id: str
    metric: str = config.DEFAULT_METRIC
    steps: int = config.DEFAULT_HORIZON
    strategy: Strategy = Strategy(config.DEFAULT_STRATEGY)
    seed: Optional[int] = None

    def with_changes(self, **changes: Any) -> "Selection":
        data = selection_to_store(self)
        data.update(changes)
        return normalize_selection(data, [data.get("node_id") or self.node_id])


def normalize_steps(value: Any) -> int:
    try:
        steps = int(float(value))
    except (TypeError, ValueError):
        return config.DEFAULT_HORIZON
    return min(config.FORECAST_HORIZONS, key=lambda h: (abs(h - steps), h))


def normalize_seed(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_selection(raw: Optional[Dict[str, Any]], available_nodes: Sequence[str]) -> Selection:
    data = raw if isinstance(raw, dict) else {}
    node_id = data.get("node_id")
    if node_id not in available_nodes:
        node_id = available_nodes[0] if available_nodes else ""
    metric = data.get("metric")
    if metric not in config.METRICS:
        metric = config.DEFAULT_METRIC
    return Selection(
        node_id=str(node_id),
        metric=metric,
        steps=normalize_steps(data.get("steps", config.DEFAULT_HORIZON)),
        strategy=Strategy.coerce(data.get("strategy")),
        seed=normalize_seed(data.get("seed")),
    )


def selection_to_store(selection: Selection) -> Dict[str, Any]:
    data = asdict(selection)
    data["strategy"] = selection.strategy.value
    return data
