from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import logging
import math
from typing import Any

import numpy as np

from svgvis_core.render.svg import PathBuilder, PathCommand
from svgvis_plot.errors import PlotDataError, SectorCountError
from svgvis_plot.scales import round_half_up


LOGGER = logging.getLogger(__name__)

DEFAULT_SECTORS = 16
COMPASS_LABELS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
COMPASS_STEP_DEGREES = 360.0 / len(COMPASS_LABELS)

Accumulator = Callable[[np.ndarray], np.ndarray]


def count_accumulator(contributions: np.ndarray) -> np.ndarray:
    return np.ones_like(contributions, dtype=np.float64)


def cubic_energy_accumulator(contributions: np.ndarray) -> np.ndarray:
    return contributions * contributions * contributions


DEFAULT_ACCUMULATORS: Mapping[str, Accumulator] = {
    "count": count_accumulator,
    "energy": cubic_energy_accumulator,
}


def degrees_per_sector(sectors: int) -> float:
    if sectors <= 0:
        raise PlotDataError("sectors must be > 0")
    return 360.0 / sectors


def sector_index(angle_degrees: float, sectors: int) -> int:
    return round_half_up(angle_degrees / degrees_per_sector(sectors)) % sectors


def sector_indices(angles_degrees: np.ndarray, sectors: int) -> np.ndarray:
    step = degrees_per_sector(sectors)
    return np.floor(angles_degrees / step + 0.5).astype(np.int64) % sectors


def sector_center_degrees(index: int, sectors: int) -> int:
    return round_half_up(index * degrees_per_sector(sectors)) % 360


def direction_label(degrees: float) -> str:
    """16-point compass label, independent of the chart's own sector count."""

    return COMPASS_LABELS[round_half_up(degrees / COMPASS_STEP_DEGREES) % len(COMPASS_LABELS)]


def compass_angle(x: float, y: float, cx: float, cy: float) -> float:
    """Compass bearing of (x, y) around (cx, cy) in screen space: 0 is up, clockwise."""

    return math.degrees(math.atan2(x - cx, cy - y)) % 360.0


def wedge_commands(cx: float, cy: float, radius: float, index: int, sectors: int) -> tuple[PathCommand, ...]:
    step = degrees_per_sector(sectors)
    start = math.radians(index * step - step / 2.0 - 90.0)
    end = math.radians(index * step + step / 2.0 - 90.0)
    return (
        PathBuilder()
        .move_to(cx, cy)
        .line_to(cx + math.cos(start) * radius, cy + math.sin(start) * radius)
        .arc_to(radius, radius, 0.0, False, True, cx + math.cos(end) * radius, cy + math.sin(end) * radius)
        .close()
        .commands()
    )


def spoke_end(cx: float, cy: float, radius: float, bearing_degrees: float) -> tuple[float, float]:
    angle = math.radians(bearing_degrees - 90.0)
    return (cx + math.cos(angle) * radius, cy + math.sin(angle) * radius)


def validate_sector_values(values: Any, sectors: int) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise PlotDataError("sector values must be 1-D")
    if arr.size != sectors:
        raise SectorCountError(f"values length ({arr.size}) must match sectors count ({sectors})")
    return arr.copy()


def sector_shares(series_values: Sequence[np.ndarray], index: int) -> tuple[list[float], list[float]]:
    """Absolute values and percent-of-series-total at `index` for every series."""

    values: list[float] = []
    percentages: list[float] = []
    for arr in series_values:
        total = float(np.sum(arr))
        value = float(arr[index])
        values.append(value)
        percentages.append(value / total * 100.0 if total > 0 else 0.0)
    return values, percentages


class SectorAggregator:
    """Fixed-size angular accumulation of (angle, contribution) observations.

    Memory is one array of `sectors` floats per accumulator no matter how many
    observations arrive, and the sums do not depend on arrival order.
    """

    def __init__(
        self,
        sectors: int = DEFAULT_SECTORS,
        accumulators: Mapping[str, Accumulator] | None = None,
    ) -> None:
        degrees_per_sector(sectors)
        self._sectors = sectors
        self._accumulators = dict(DEFAULT_ACCUMULATORS if accumulators is None else accumulators)
        if not self._accumulators:
            raise PlotDataError("at least one accumulator is required")
        self._values = {name: np.zeros(sectors, dtype=np.float64) for name in self._accumulators}
        self._observations = 0

    @property
    def sectors(self) -> int:
        return self._sectors

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._values)

    @property
    def observations(self) -> int:
        return self._observations

    def add(self, angle_degrees: float, contribution: float = 1.0) -> int | None:
        if not math.isfinite(angle_degrees):
            LOGGER.warning("skipping observation with non-finite angle %r", angle_degrees)
            return None
        index = sector_index(angle_degrees, self._sectors)
        sample = np.asarray([contribution], dtype=np.float64)
        for name, accumulator in self._accumulators.items():
            self._values[name][index] += float(accumulator(sample)[0])
        self._observations += 1
        return index

    def add_many(self, angles_degrees: Any, contributions: Any = None) -> None:
        angles = np.asarray(angles_degrees, dtype=np.float64).ravel()
        if contributions is None:
            weights = np.ones_like(angles)
        else:
            weights = np.asarray(contributions, dtype=np.float64).ravel()
            if weights.shape != angles.shape:
                raise PlotDataError(f"angles and contributions length mismatch: {angles.size} != {weights.size}")
        finite = np.isfinite(angles)
        skipped = int(angles.size - np.count_nonzero(finite))
        if skipped:
            LOGGER.warning("skipping %d observations with non-finite angles", skipped)
            angles = angles[finite]
            weights = weights[finite]
        if angles.size == 0:
            return
        index = sector_indices(angles, self._sectors)
        for name, accumulator in self._accumulators.items():
            increments = np.asarray(accumulator(weights), dtype=np.float64)
            self._values[name] += np.bincount(index, weights=increments, minlength=self._sectors)
        self._observations += int(angles.size)

    def values(self, name: str) -> np.ndarray:
        if name not in self._values:
            raise KeyError(f"unknown accumulator: {name}")
        return self._values[name].copy()

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: arr.copy() for name, arr in self._values.items()}

    def reset(self) -> None:
        for arr in self._values.values():
            arr[:] = 0.0
        self._observations = 0
