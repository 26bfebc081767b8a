from __future__ import annotations

from dataclasses import dataclass

from svgvis_plot.scales import round_half_up
from svgvis_plot.series import SeriesData


@dataclass(frozen=True)
class LocatedSample:
    index: int
    position: float
    value: float


def relative_position(offset_x: float, width: float) -> float:
    """Pointer offset across the rendered width, clamped into [0, 1]."""

    if width <= 0:
        return 0.0
    return max(0.0, min(1.0, offset_x / width))


def locate_index(relative: float, n: int) -> int:
    if n <= 0:
        raise ValueError("n must be > 0")
    index = round_half_up(relative * (n - 1))
    return max(0, min(n - 1, index))


def locate(relative: float, series: SeriesData) -> LocatedSample | None:
    """Map a relative pointer position onto the original, unreduced series."""

    if series.size == 0:
        return None
    index = locate_index(relative, series.size)
    return LocatedSample(index=index, position=float(series.x[index]), value=float(series.y[index]))


class CrosshairLocator:
    """Holds the original series of an interactive chart after its render pass.

    Reduction is lossy, so hover lookups go to the raw samples instead of the
    drawn points.
    """

    def __init__(self, series: SeriesData) -> None:
        self._series = series

    @property
    def size(self) -> int:
        return self._series.size

    def locate(self, relative: float) -> LocatedSample | None:
        return locate(relative, self._series)

    def index_at(self, relative: float) -> int:
        if self._series.size == 0:
            return -1
        return locate_index(relative, self._series.size)

    def value_at(self, relative: float) -> float | None:
        found = self.locate(relative)
        return None if found is None else found.value
