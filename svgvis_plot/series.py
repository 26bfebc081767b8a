from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from typing import Literal

import numpy as np


Smoothing = Literal["none", "moving_average", "rdp"]
SMOOTHING_MODES: tuple[str, ...] = ("none", "moving_average", "rdp")

RGBA = tuple[int, int, int, int]


def epoch_millis(value: dt.datetime) -> float:
    """Collapse an instant to epoch milliseconds; naive datetimes are read as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.timestamp() * 1000.0


@dataclass(frozen=True)
class DataPoint:
    x: float
    y: float

    @classmethod
    def of(cls, x: float | dt.datetime, y: float) -> "DataPoint":
        if isinstance(x, dt.datetime):
            return cls(epoch_millis(x), float(y))
        return cls(float(x), float(y))


@dataclass(frozen=True)
class SeriesData:
    x: np.ndarray
    y: np.ndarray
    mask: np.ndarray
    source_name: str | None = None

    @property
    def size(self) -> int:
        return int(self.y.size)

    def finite(self) -> tuple[np.ndarray, np.ndarray]:
        if bool(np.all(self.mask)):
            return self.x, self.y
        return self.x[self.mask], self.y[self.mask]

    def with_x(self, x: np.ndarray) -> "SeriesData":
        return SeriesData(x=x, y=self.y, mask=self.mask, source_name=self.source_name)


@dataclass(frozen=True)
class DataSeries:
    data: SeriesData
    color: RGBA


def coerce_color(color: tuple[int, int, int] | tuple[int, int, int, int], alpha: float = 1.0) -> RGBA:
    if len(color) == 3:
        r, g, b = color  # type: ignore[misc]
        a = int(round(255 * max(0.0, min(1.0, alpha))))
        return (int(r), int(g), int(b), a)
    if len(color) == 4:
        r, g, b, a = color  # type: ignore[misc]
        a2 = int(round(a * max(0.0, min(1.0, alpha))))
        return (int(r), int(g), int(b), a2)
    raise ValueError("color must be RGB or RGBA tuple")
