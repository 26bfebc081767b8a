from __future__ import annotations

import logging

import numpy as np

from svgvis_plot.display import FLUID_VIEWBOX_WIDTH
from svgvis_plot.errors import PlotDataError
from svgvis_plot.scales import round_half_up
from svgvis_plot.series import SMOOTHING_MODES, Smoothing


LOGGER = logging.getLogger(__name__)

DEFAULT_TARGET_POINTS = 50
MIN_BUCKETS = 3
MIN_BUCKET_SPAN = 0.01
RDP_EPSILON_BASE = 1.0
MIN_RDP_VALUE_RANGE = 0.001


def bucket_average(
    x: np.ndarray,
    y: np.ndarray,
    target_points: int = DEFAULT_TARGET_POINTS,
) -> tuple[np.ndarray, np.ndarray]:
    """Average values in fixed-width position buckets.

    The bucket count scales with the covered span so that data filling only
    part of a fixed domain is smoothed as much as full-width data. Each point
    falls into exactly one bucket; the point sitting on the upper edge of the
    span is counted in the last bucket. Empty buckets emit nothing.
    """

    if target_points <= 0:
        raise PlotDataError("target_points must be > 0")
    if x.size == 0:
        return x, y
    min_x = float(np.min(x))
    max_x = float(np.max(x))
    span = max_x - min_x
    if span < MIN_BUCKET_SPAN:
        LOGGER.debug("bucket averaging skipped: span %.6f below %.2f", span, MIN_BUCKET_SPAN)
        return x, y

    buckets = max(MIN_BUCKETS, round_half_up(target_points * span))
    width = span / buckets
    index = np.floor((x - min_x) / width).astype(np.int64)
    np.clip(index, 0, buckets - 1, out=index)

    counts = np.bincount(index, minlength=buckets)
    sums = np.bincount(index, weights=y, minlength=buckets)
    occupied = counts > 0
    if int(np.count_nonzero(occupied)) < MIN_BUCKETS:
        LOGGER.debug("bucket averaging skipped: only %d occupied buckets", int(np.count_nonzero(occupied)))
        return x, y

    centers = min_x + (np.arange(buckets, dtype=np.float64) + 0.5) * width
    return centers[occupied], sums[occupied] / counts[occupied]


def simplify_rdp(x: np.ndarray, y: np.ndarray, epsilon: float) -> tuple[np.ndarray, np.ndarray]:
    """Ramer-Douglas-Peucker simplification on (normalized x, value) points.

    Values are rescaled to [0, 1] by their own extent before measuring, so
    `epsilon` is independent of the value domain. Kept points carry their
    original values and the first and last points are always kept.
    """

    keep = rdp_keep_mask(x, y, epsilon)
    return x[keep], y[keep]


def rdp_keep_mask(x: np.ndarray, y: np.ndarray, epsilon: float) -> np.ndarray:
    n = int(x.size)
    keep = np.ones(n, dtype=bool)
    if n < 3:
        return keep
    if epsilon < 0:
        raise PlotDataError("epsilon must be >= 0")

    y_min = float(np.min(y))
    value_range = float(np.max(y)) - y_min
    if value_range < MIN_RDP_VALUE_RANGE:
        value_range = 1.0
    ny = (y - y_min) / value_range

    keep[:] = False
    keep[0] = True
    keep[-1] = True
    # Explicit stack of inclusive index ranges; pathological inputs cannot exhaust the call stack.
    stack: list[tuple[int, int]] = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        dist = _perpendicular_distances(x[first + 1 : last], ny[first + 1 : last], x[first], ny[first], x[last], ny[last])
        rel = int(np.argmax(dist))
        if float(dist[rel]) > epsilon:
            split = first + 1 + rel
            keep[split] = True
            stack.append((split, last))
            stack.append((first, split))
    return keep


def _perpendicular_distances(
    px: np.ndarray,
    py: np.ndarray,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
) -> np.ndarray:
    dx = x1 - x0
    dy = y1 - y0
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return np.hypot(px - x0, py - y0)
    area2 = np.abs(dx * (y0 - py) - (x0 - px) * dy)
    return area2 / np.sqrt(length_sq)


def rdp_epsilon(viewbox_width: float, *, fluid: bool = False) -> float:
    """Tolerance in normalized x units: about one percent of a fixed width, one unit for fluid charts."""

    if viewbox_width <= 0:
        raise ValueError("viewbox_width must be > 0")
    pixels = RDP_EPSILON_BASE if fluid else max(RDP_EPSILON_BASE, viewbox_width / 100.0)
    return pixels / viewbox_width


def reduce_points(
    x: np.ndarray,
    y: np.ndarray,
    mode: Smoothing,
    *,
    target_points: int = DEFAULT_TARGET_POINTS,
    epsilon: float | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    if mode not in SMOOTHING_MODES:
        raise PlotDataError(f"unsupported smoothing mode: {mode}")
    if x.shape != y.shape:
        raise PlotDataError(f"x and y length mismatch: {x.size} != {y.size}")
    if mode == "none":
        return x, y
    if mode == "moving_average":
        out = bucket_average(x, y, target_points=target_points)
    else:
        if epsilon is None:
            epsilon = rdp_epsilon(FLUID_VIEWBOX_WIDTH, fluid=True)
        out = simplify_rdp(x, y, epsilon)
    LOGGER.debug("%s reduced %d points to %d", mode, x.size, out[0].size)
    return out
