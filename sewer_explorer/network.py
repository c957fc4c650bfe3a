from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from . import config
from .data import NodeRecord, PipeRecord
from .overlap import Bounds, Point, resolve_overlaps
from .projection import LinearScale, ViewTransform, extent

log = logging.getLogger(__name__)

ORIGIN = (0.0, 0.0)


@dataclass(frozen=True)
class PipeSegment:
    inlet: str
    outlet: str
    start: Tuple[float, float]
    end: Tuple[float, float]
    attributes: Dict[str, str] = field(default_factory=dict)
    dangling: bool = False


@dataclass(frozen=True)
class DanglingReference:
    pipe_index: int
    end: str
    node_id: str


@dataclass
class NetworkLayout:
    points: List[Point]
    pipes: List[PipeSegment]
    dangling: List[DanglingReference]
    view: ViewTransform

    def position(self, node_id: str) -> Optional[Tuple[float, float]]:
        for point in self.points:
            if point.id == node_id:
                return point.x, point.y
        return None


def project_nodes(nodes: Sequence[NodeRecord], view: ViewTransform, padding: float) -> List[Point]:
    x_extent = extent(n.x for n in nodes) or (0.0, 0.0)
    y_extent = extent(n.y for n in nodes) or (0.0, 0.0)
    x_scale = LinearScale(x_extent, (padding, view.inner_width - padding))
    y_scale = LinearScale(y_extent, (padding, view.inner_height - padding))
    return [Point.at(n.node_id, x_scale(n.x), y_scale(n.y), n.attributes) for n in nodes]


def build_network_layout(
    nodes: Sequence[NodeRecord],
    pipes: Sequence[PipeRecord],
    width: float = config.NETWORK_WIDTH,
    height: float = config.NETWORK_HEIGHT,
    *,
    view: Optional[ViewTransform] = None,
    padding: float = config.NODE_PADDING,
    min_distance: float = config.MIN_NODE_DISTANCE,
) -> NetworkLayout:
    """Project, de-overlap and connect the network in inner plot coordinates.

    Pipe endpoints that name an unknown node are drawn from the plot origin and
    reported in ``NetworkLayout.dangling``.
    """
    view = view if view is not None else ViewTransform(width, height)
    projected = project_nodes(nodes, view, padding)
    points = resolve_overlaps(
        projected,
        min_distance,
        Bounds(view.inner_width, view.inner_height),
        padding,
    )
    positions = {point.id: (point.x, point.y) for point in points}

    segments: List[PipeSegment] = []
    dangling: List[DanglingReference] = []
    for index, pipe in enumerate(pipes):
        ends = []
        for end_name, node_id in (("inlet", pipe.inlet), ("outlet", pipe.outlet)):
            position = positions.get(node_id)
            if position is None:
                dangling.append(DanglingReference(index, end_name, node_id))
                log.warning(
                    "pipe %d %s references unknown node %r; drawing it from the origin",
                    index,
                    end_name,
                    node_id,
                )
                position = ORIGIN
            ends.append(position)
        segments.append(
            PipeSegment(
                pipe.inlet,
                pipe.outlet,
                ends[0],
                ends[1],
                dict(pipe.attributes),
                dangling=bool(dangling and dangling[-1].pipe_index == index),
            )
        )
    return NetworkLayout(points, segments, dangling, view)
