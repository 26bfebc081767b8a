from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable

import numpy as np


@dataclass(frozen=True)
class ValueRange:
    vmin: float
    vmax: float

    @property
    def span(self) -> float:
        return self.vmax - self.vmin


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_tenth(value: float) -> float:
    return math.floor(value * 10.0 + 0.5) / 10.0


def round_tenths(values: np.ndarray) -> np.ndarray:
    return np.floor(values * 10.0 + 0.5) / 10.0


def shared_value_range(values: Iterable[np.ndarray]) -> ValueRange | None:
    """Min/max over every finite value of every array, or None when there are none."""

    vmin = math.inf
    vmax = -math.inf
    for arr in values:
        finite = arr[np.isfinite(arr)]
        if finite.size == 0:
            continue
        vmin = min(vmin, float(np.min(finite)))
        vmax = max(vmax, float(np.max(finite)))
    if vmin > vmax:
        return None
    return ValueRange(vmin=vmin, vmax=vmax)


def values_to_viewbox_y(y: np.ndarray, value_range: ValueRange, *, plot_height: float, top: float) -> np.ndarray:
    """Map values onto viewbox rows, larger values higher up; a flat range sits at mid height."""

    if value_range.span == 0:
        return np.full(y.shape, top + plot_height / 2.0, dtype=np.float64)
    return plot_height - (y - value_range.vmin) / value_range.span * plot_height + top


def positions_to_viewbox_x(x: np.ndarray, *, viewbox_width: float) -> np.ndarray:
    return x * viewbox_width


def format_value_label(value: float) -> str:
    return f"{value:.1f}"
