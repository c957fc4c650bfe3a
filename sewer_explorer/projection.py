from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from . import config


def extent(values: Iterable[float]) -> Optional[Tuple[float, float]]:
    items = [v for v in values if v is not None and math.isfinite(v)]
    if not items:
        return None
    return min(items), max(items)


@dataclass(frozen=True)
class LinearScale:
    """Map a data interval linearly onto a pixel interval."""

    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2.0
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2.0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)


@dataclass(frozen=True)
class ViewTransform:
    """Rotate and zoom the plot area about the canvas centre.

    Equivalent to ``translate(w/2, h/2) scale(z) rotate(a) translate(-w/2 + ml, -h/2 + mt)``
    applied to inner plot coordinates, y pointing down.
    """

    width: float
    height: float
    margin: Dict[str, float] = field(default_factory=lambda: dict(config.NETWORK_MARGIN))
    rotation_deg: float = config.ROTATION_ANGLE
    zoom: float = config.ZOOM_FACTOR

    @property
    def inner_width(self) -> float:
        return self.width - self.margin["left"] - self.margin["right"]

    @property
    def inner_height(self) -> float:
        return self.height - self.margin["top"] - self.margin["bottom"]

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        cx = self.width / 2.0
        cy = self.height / 2.0
        px = x - cx + self.margin["left"]
        py = y - cy + self.margin["top"]
        theta = math.radians(self.rotation_deg)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        rx = px * cos_t - py * sin_t
        ry = px * sin_t + py * cos_t
        return cx + self.zoom * rx, cy + self.zoom * ry
