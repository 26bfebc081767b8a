from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
import logging
import math
from typing import Any

import numpy as np

from svgvis_core.render.svg import SvgCircle, SvgDocument, SvgLine, SvgPath, SvgText
from svgvis_plot.display import WINDROSE_LABEL_MARGIN, ChartViewport, resolve_windrose_viewport
from svgvis_plot.errors import SectorCountError
from svgvis_plot.interaction import parse_pointer_event
from svgvis_plot.polar import (
    DEFAULT_SECTORS,
    SectorAggregator,
    compass_angle,
    degrees_per_sector,
    direction_label,
    sector_center_degrees,
    sector_index,
    sector_shares,
    spoke_end,
    validate_sector_values,
    wedge_commands,
)
from svgvis_plot.series import RGBA, coerce_color


LOGGER = logging.getLogger(__name__)

CARDINALS = ("N", "E", "S", "W")
RING_COUNT = 4
LEGEND_SPACING = 70.0
HIGHLIGHT_ID = "highlight"


@dataclass(frozen=True)
class WindRoseSeries:
    label: str
    color: RGBA
    values: np.ndarray


@dataclass(frozen=True)
class SectorClickData:
    sector_index: int
    direction_label: str
    center_degrees: int
    series_values: tuple[float, ...]
    series_percentages: tuple[float, ...]


@dataclass(frozen=True)
class WindRoseConfig:
    title: str | None = None
    show_sector_lines: bool = True
    filled_opacity: float = 0.4
    ring_color: RGBA = (100, 100, 100, 255)
    spoke_color: RGBA = (80, 80, 80, 255)
    divider_color: RGBA = (60, 60, 60, 255)
    label_color: RGBA = (180, 180, 180, 255)
    title_color: RGBA = (200, 200, 200, 255)
    highlight_color: RGBA = (255, 255, 255, 255)
    highlight_opacity: float = 0.25

    def __post_init__(self) -> None:
        if not 0.0 <= self.filled_opacity <= 1.0:
            raise ValueError("filled_opacity must be in [0, 1]")
        if not 0.0 <= self.highlight_opacity <= 1.0:
            raise ValueError("highlight_opacity must be in [0, 1]")


SectorClickListener = Callable[[SectorClickData], None]


class WindRose:
    """Polar chart of per-sector totals; every series carries exactly `sectors` values."""

    def __init__(self, size: int = 300, sectors: int = DEFAULT_SECTORS, *, config: WindRoseConfig | None = None) -> None:
        degrees_per_sector(sectors)
        self._viewport = resolve_windrose_viewport(size)
        self._size = size
        self._sectors = sectors
        self._config = config or WindRoseConfig()
        self._series: list[WindRoseSeries] = []
        self._click_listener: SectorClickListener | None = None
        self._highlight: SvgPath | None = None
        self._last_document: SvgDocument | None = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def sectors(self) -> int:
        return self._sectors

    @property
    def viewport(self) -> ChartViewport:
        return self._viewport

    @property
    def config(self) -> WindRoseConfig:
        return self._config

    @property
    def center(self) -> tuple[float, float]:
        c = self._size / 2.0 + WINDROSE_LABEL_MARGIN
        return (c, c)

    @property
    def max_radius(self) -> float:
        return self._size / 2.0 - 10.0

    @property
    def series_list(self) -> tuple[WindRoseSeries, ...]:
        return tuple(self._series)

    @property
    def highlight(self) -> SvgPath | None:
        return self._highlight

    @property
    def last_document(self) -> SvgDocument | None:
        return self._last_document

    def add_series(self, label: str, color: tuple[int, int, int] | tuple[int, int, int, int], values: Any) -> "WindRose":
        arr = validate_sector_values(values, self._sectors)
        self._series.append(WindRoseSeries(label=label, color=coerce_color(color), values=arr))
        return self

    def add_aggregate(
        self,
        aggregator: SectorAggregator,
        name: str,
        *,
        label: str | None = None,
        color: tuple[int, int, int] | tuple[int, int, int, int],
    ) -> "WindRose":
        if aggregator.sectors != self._sectors:
            raise SectorCountError(
                f"aggregator sectors count ({aggregator.sectors}) must match sectors count ({self._sectors})"
            )
        return self.add_series(label or name, color, aggregator.values(name))

    def clear_series(self) -> "WindRose":
        self._series.clear()
        return self

    def set_title(self, title: str | None) -> "WindRose":
        self._config = replace(self._config, title=title)
        return self

    def set_show_sector_lines(self, show: bool) -> "WindRose":
        self._config = replace(self._config, show_sector_lines=bool(show))
        return self

    def set_sector_click_listener(self, listener: SectorClickListener | None) -> "WindRose":
        self._click_listener = listener
        return self

    def sector_at(self, x: float, y: float) -> int | None:
        """Sector under viewbox point (x, y), or None outside the rose."""

        cx, cy = self.center
        if math.hypot(x - cx, y - cy) > self.max_radius:
            return None
        return sector_index(compass_angle(x, y, cx, cy), self._sectors)

    def sector_click_data(self, index: int) -> SectorClickData:
        if not 0 <= index < self._sectors:
            raise IndexError(f"sector index out of range: {index}")
        center = sector_center_degrees(index, self._sectors)
        values, percentages = sector_shares([s.values for s in self._series], index)
        return SectorClickData(
            sector_index=index,
            direction_label=direction_label(center),
            center_degrees=center,
            series_values=tuple(values),
            series_percentages=tuple(percentages),
        )

    def click(self, x: float, y: float) -> SectorClickData | None:
        index = self.sector_at(x, y)
        if index is None or not self._series:
            return None
        return self.click_sector(index)

    def click_sector(self, index: int) -> SectorClickData:
        data = self.sector_click_data(index)
        self._highlight = self.highlight_wedge(index)
        if self._last_document is not None:
            self._last_document.replace(HIGHLIGHT_ID, self._highlight)
        if self._click_listener is not None:
            self._click_listener(data)
        return data

    def handle_pointer_event(self, event_type: str, payload: object) -> SectorClickData | None:
        event = parse_pointer_event(event_type, payload)
        if event is None or event.kind not in {"click", "touchstart"} or event.relative_y is None:
            return None
        return self.click(
            event.relative_x * self._viewport.viewbox_width,
            event.relative_y * self._viewport.viewbox_height,
        )

    def highlight_wedge(self, index: int | None) -> SvgPath:
        cfg = self._config
        cx, cy = self.center
        commands = () if index is None else wedge_commands(cx, cy, self.max_radius, index, self._sectors)
        return SvgPath(
            commands=commands,
            fill=cfg.highlight_color,
            fill_opacity=cfg.highlight_opacity,
            stroke=None,
            visible=index is not None,
            pointer_events=False,
            element_id=HIGHLIGHT_ID,
        )

    def draw(self) -> SvgDocument:
        doc = SvgDocument(
            width=self._viewport.css_width,
            height=self._viewport.css_height,
            viewbox=self._viewport.viewbox,
        )
        self._last_document = doc
        self._highlight = None
        if not self._series:
            return doc

        self._draw_grid(doc)
        self._draw_wedges(doc)
        if self._config.show_sector_lines:
            self._draw_sector_lines(doc)
        self._draw_legend(doc)
        self._highlight = doc.append(self.highlight_wedge(None))
        if self._click_listener is not None:
            self._draw_click_targets(doc)
        cfg = self._config
        if cfg.title is not None:
            doc.append(SvgText(self.center[0], 12.0, cfg.title, cfg.title_color, 11.0, anchor="middle"))
        LOGGER.debug("wind rose drawn: %d series, %d sectors, %d primitives", len(self._series), self._sectors, len(doc.elements))
        return doc

    def _draw_grid(self, doc: SvgDocument) -> None:
        cfg = self._config
        cx, cy = self.center
        radius = self.max_radius
        for i in range(1, RING_COUNT + 1):
            doc.append(SvgCircle(cx, cy, radius * i / RING_COUNT, fill=None, stroke=cfg.ring_color, stroke_width=0.5))
        for i, cardinal in enumerate(CARDINALS):
            bearing = i * 90.0
            if not cfg.show_sector_lines:
                x2, y2 = spoke_end(cx, cy, radius, bearing)
                doc.append(SvgLine(cx, cy, x2, y2, stroke=cfg.spoke_color, stroke_width=0.5))
            lx, ly = spoke_end(cx, cy, radius + 12.0, bearing)
            doc.append(SvgText(lx, ly + 4.0, cardinal, cfg.label_color, 10.0, anchor="middle"))

    def _draw_wedges(self, doc: SvgDocument) -> None:
        cx, cy = self.center
        for series_index, series in enumerate(self._series):
            series_max = float(np.max(series.values))
            if series_max <= 0:
                continue
            for i, value in enumerate(series.values.tolist()):
                if value <= 0:
                    continue
                radius = (value / series_max) * self.max_radius
                commands = wedge_commands(cx, cy, radius, i, self._sectors)
                if series_index == 0:
                    wedge = SvgPath(
                        commands,
                        fill=series.color,
                        fill_opacity=self._config.filled_opacity,
                        stroke=series.color,
                        stroke_width=1.0,
                    )
                else:
                    wedge = SvgPath(commands, fill=None, stroke=series.color, stroke_width=2.0)
                doc.append(wedge)

    def _draw_sector_lines(self, doc: SvgDocument) -> None:
        cx, cy = self.center
        step = degrees_per_sector(self._sectors)
        for i in range(self._sectors):
            x2, y2 = spoke_end(cx, cy, self.max_radius, i * step - step / 2.0)
            doc.append(SvgLine(cx, cy, x2, y2, stroke=self._config.divider_color, stroke_width=0.5))

    def _draw_legend(self, doc: SvgDocument) -> None:
        legend_y = self._size + 32.0
        start_x = self.center[0] - (len(self._series) - 1) * LEGEND_SPACING / 2.0
        for i, series in enumerate(self._series):
            x = start_x + i * LEGEND_SPACING
            doc.append(SvgCircle(x - 4.0, legend_y, 4.0, fill=series.color))
            doc.append(SvgText(x + 4.0, legend_y + 3.0, series.label, self._config.label_color, 9.0))

    def _draw_click_targets(self, doc: SvgDocument) -> None:
        cx, cy = self.center
        for i in range(self._sectors):
            doc.append(
                SvgPath(
                    wedge_commands(cx, cy, self.max_radius, i, self._sectors),
                    fill=(255, 255, 255, 255),
                    fill_opacity=0.0,
                    stroke=None,
                    element_id=f"sector-{i}",
                )
            )
