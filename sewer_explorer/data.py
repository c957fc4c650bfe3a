from __future__ import annotations

import csv
import io
import logging
import math
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from . import config
from .forecast import Observation

log = logging.getLogger(__name__)

Row = Dict[str, str]
SeriesMap = Dict[str, Dict[str, List[Observation]]]


@dataclass(frozen=True)
class NodeRecord:
    node_id: str
    x: float
    y: float
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PipeRecord:
    inlet: str
    outlet: str
    attributes: Dict[str, str] = field(default_factory=dict)


def coerce_float(value: Any) -> Optional[float]:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def parse_csv_text(text: str) -> List[Row]:
    reader = csv.DictReader(io.StringIO(text.strip()))
    rows: List[Row] = []
    for raw in reader:
        # fields past the header land under the None key; they have no column name
        rows.append({key.strip(): (value or "").strip() for key, value in raw.items() if key is not None})
    return rows


def read_csv_rows(path: Union[str, Path]) -> List[Row]:
    with Path(path).open("r", encoding="utf-8-sig", newline="") as fh:
        return parse_csv_text(fh.read())


def load_nodes(rows: Sequence[Row]) -> List[NodeRecord]:
    nodes: List[NodeRecord] = []
    for index, row in enumerate(rows):
        node_id = row.get(config.NODE_ID_COLUMN, "")
        x = coerce_float(row.get(config.NODE_X_COLUMN))
        y = coerce_float(row.get(config.NODE_Y_COLUMN))
        if not node_id or x is None or y is None:
            log.warning("skipping node row %d with missing id or coordinates: %r", index, row)
            continue
        nodes.append(NodeRecord(node_id, x, y, dict(row)))
    return nodes


def load_pipes(rows: Sequence[Row]) -> List[PipeRecord]:
    return [
        PipeRecord(
            row.get(config.PIPE_INLET_COLUMN, ""),
            row.get(config.PIPE_OUTLET_COLUMN, ""),
            dict(row),
        )
        for row in rows
    ]


def node_columns(rows: Sequence[Row]) -> List[str]:
    if not rows:
        return []
    return [col for col in rows[0] if col and col not in config.PERIOD_COLUMNS]


def series_from_rows(rows: Sequence[Row], node_id: str) -> List[Observation]:
    """Observations of one node column, re-indexed so times stay contiguous."""
    observations: List[Observation] = []
    for row in rows:
        value = coerce_float(row.get(node_id))
        if value is None:
            continue
        observations.append(
            Observation(
                time=len(observations),
                value=value,
                period_label=row.get(config.PERIOD_COLUMN) or None,
                period_start=row.get(config.PERIOD_START_COLUMN) or None,
                period_end=row.get(config.PERIOD_END_COLUMN) or None,
            )
        )
    return observations


def build_series(tables: Dict[str, Sequence[Row]]) -> SeriesMap:
    """Build node -> metric -> observations from one time-series table per metric.

    Node order follows the first table's columns; nodes that appear only in a
    later table are appended after them.
    """
    series: SeriesMap = {}
    for metric, rows in tables.items():
        for node_id in node_columns(rows):
            observations = series_from_rows(rows, node_id)
            skipped = len(rows) - len(observations)
            if skipped:
                log.debug("node %s %s: skipped %d non-numeric cell(s)", node_id, metric, skipped)
            series.setdefault(node_id, {})[metric] = observations
    return series


def sample_timeseries_csv(metric: str, rng: Optional[random.Random] = None) -> str:
    profile = config.SAMPLE_PROFILES[metric]
    rng = rng if rng is not None else random.Random()
    header = [config.PERIOD_COLUMN, *config.SAMPLE_NODE_IDS, config.PERIOD_START_COLUMN, config.PERIOD_END_COLUMN]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    for i in range(1, config.SAMPLE_PERIODS + 1):
        row: List[str] = [f"t{i}"]
        for _ in config.SAMPLE_NODE_IDS:
            base = profile["base"] + rng.random() * profile["spread"]
            seasonality = math.sin(i * profile["season_freq"]) * profile["season_amp"]
            noise = (rng.random() - 0.5) * profile["noise"]
            row.append(f"{base + seasonality + noise:.2f}")
        row.append(f"2023-{i:02d}-01 00:00:00")
        row.append(f"2023-{i:02d}-15 23:50:00")
        writer.writerow(row)
    return buffer.getvalue()


def load_timeseries(
    data_dir: Union[str, Path, None] = None,
    rng: Optional[random.Random] = None,
) -> SeriesMap:
    """Read the depth and rate tables, substituting synthetic data for missing files."""
    base = Path(data_dir) if data_dir is not None else config.DATA_DIR
    files = {"depth": config.DEPTH_FILE, "rate": config.RATE_FILE}
    tables: Dict[str, List[Row]] = {}
    for metric, filename in files.items():
        path = base / filename
        try:
            tables[metric] = read_csv_rows(path)
        except FileNotFoundError:
            log.warning("could not read %s, using sample %s data", path, metric)
            tables[metric] = parse_csv_text(sample_timeseries_csv(metric, rng))
    return build_series(tables)


def load_network(data_dir: Union[str, Path, None] = None):
    """Read the node and pipe tables. Missing files yield empty tables."""
    base = Path(data_dir) if data_dir is not None else config.DATA_DIR
    tables = {}
    for name, filename in (("nodes", config.NODE_FILE), ("pipes", config.PIPE_FILE)):
        path = base / filename
        try:
            tables[name] = read_csv_rows(path)
        except FileNotFoundError:
            log.warning("could not read %s, the network view will be empty", path)
            tables[name] = []
    return load_nodes(tables["nodes"]), load_pipes(tables["pipes"])
