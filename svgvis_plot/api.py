from __future__ import annotations

from typing import Any

from svgvis_plot.polar import DEFAULT_SECTORS
from svgvis_plot.sparkline import SparkLine, SparkLineConfig
from svgvis_plot.windrose import WindRose, WindRoseConfig


def sparkline(width: int | None = None, height: int = 100, **config: Any) -> SparkLine:
    """Build a sparkline; `width=None` gives a fluid-width chart at a fixed height."""

    if width is not None and width <= 0:
        raise ValueError("width must be > 0")
    return SparkLine(width, height, config=SparkLineConfig(**config))


def windrose(size: int = 300, sectors: int = DEFAULT_SECTORS, **config: Any) -> WindRose:
    if size <= 0:
        raise ValueError("size must be > 0")
    return WindRose(size, sectors, config=WindRoseConfig(**config))
