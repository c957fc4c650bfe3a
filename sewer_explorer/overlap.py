"""Pairwise repulsion that pushes projected nodes apart until no two sit closer than a minimum distance."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Sequence

from . import config

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float


@dataclass
class Point:
    id: str
    x: float
    y: float
    original_x: float
    original_y: float
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def at(cls, point_id: str, x: float, y: float, data: Dict[str, Any] | None = None) -> "Point":
        return cls(point_id, x, y, x, y, dict(data or {}))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamp_point(point: Point, bounds: Bounds, padding: float) -> None:
    point.x = _clamp(point.x, padding, bounds.width - padding)
    point.y = _clamp(point.y, padding, bounds.height - padding)


def relax_once(points: List[Point], min_distance: float, bounds: Bounds, padding: float) -> bool:
    """Run one all-pairs pass in place. Returns True if any pair was pushed apart."""
    overlaps_found = False
    coincident = 0
    count = len(points)
    for i in range(count):
        for j in range(i + 1, count):
            first = points[i]
            second = points[j]
            dx = second.x - first.x
            dy = second.y - first.y
            distance = math.hypot(dx, dy)
            if distance == 0:
                coincident += 1
                continue
            if distance >= min_distance:
                continue
            overlaps_found = True
            half_deficit = (min_distance - distance) * 0.5
            shift_x = dx / distance * half_deficit
            shift_y = dy / distance * half_deficit
            first.x -= shift_x
            first.y -= shift_y
            second.x += shift_x
            second.y += shift_y
            _clamp_point(first, bounds, padding)
            _clamp_point(second, bounds, padding)
    if coincident:
        log.debug("skipped %d coincident node pair(s); no separation direction", coincident)
    return overlaps_found


def resolve_overlaps(
    points: Sequence[Point],
    min_distance: float = config.MIN_NODE_DISTANCE,
    bounds: Bounds = Bounds(config.NETWORK_WIDTH, config.NETWORK_HEIGHT),
    padding: float = config.NODE_PADDING,
    *,
    max_iterations: int = config.OVERLAP_MAX_ITERATIONS,
) -> List[Point]:
    """Return copies of ``points`` nudged apart so pairs keep ``min_distance``.

    Positions stay inside ``[padding, bounds - padding]`` on both axes after
    every adjustment. The relaxation stops at the first pass without overlaps
    or after ``max_iterations`` passes, in which case the last positions are
    returned as they are. Coincident points have no direction to separate
    along and are left where they are.
    """
    resolved = [replace(point, data=dict(point.data)) for point in points]
    if len(resolved) < 2:
        return resolved
    for iteration in range(max_iterations):
        if not relax_once(resolved, min_distance, bounds, padding):
            log.debug("overlap resolution converged after %d iteration(s)", iteration + 1)
            break
    else:
        log.debug("overlap resolution stopped at the %d iteration cap", max_iterations)
    return resolved


def min_pair_distance(points: Sequence[Point]) -> float:
    best = math.inf
    for i, first in enumerate(points):
        for second in points[i + 1 :]:
            best = min(best, math.hypot(second.x - first.x, second.y - first.y))
    return best
