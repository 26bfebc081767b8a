from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
import datetime as dt
import logging
import math
from typing import Any

import numpy as np

from svgvis_core.render.svg import SvgDocument, SvgLine, SvgText
from svgvis_plot.adapters.normalize import normalize_domain, to_series
from svgvis_plot.curves import build_curve, to_viewbox
from svgvis_plot.display import FONT_SIZE, ChartViewport, resolve_sparkline_viewport, text_scale_x
from svgvis_plot.downsample import DEFAULT_TARGET_POINTS, rdp_epsilon, reduce_points
from svgvis_plot.errors import PlotDataError
from svgvis_plot.interaction import parse_pointer_event
from svgvis_plot.locator import CrosshairLocator, LocatedSample
from svgvis_plot.scales import ValueRange, format_value_label, shared_value_range
from svgvis_plot.series import RGBA, SMOOTHING_MODES, DataSeries, SeriesData, Smoothing, coerce_color, epoch_millis


LOGGER = logging.getLogger(__name__)

CrosshairListener = Callable[[float], None]

CROSSHAIR_ID = "crosshair"
REFERENCE_DASH = (2.0, 2.0)


@dataclass(frozen=True)
class SparkLineConfig:
    line_color: RGBA = (0, 0, 0, 255)
    smoothing: Smoothing = "moving_average"
    use_bezier_curve: bool = True
    target_points: int = DEFAULT_TARGET_POINTS
    title: str | None = None
    time_scale_start: str | None = None
    time_scale_end: str | None = None
    x_range: tuple[float, float] | None = None
    crosshair_color: RGBA = (128, 128, 128, 255)

    def __post_init__(self) -> None:
        if self.smoothing not in SMOOTHING_MODES:
            raise PlotDataError(f"unsupported smoothing mode: {self.smoothing}")
        if self.target_points <= 0:
            raise ValueError("target_points must be > 0")
        if self.x_range is not None:
            lo, hi = self.x_range
            if not (math.isfinite(lo) and math.isfinite(hi)):
                raise PlotDataError("x_range bounds must be finite")


@dataclass(frozen=True)
class _PreparedSeries:
    x: np.ndarray
    y: np.ndarray
    color: RGBA


class SparkLine:
    """Line chart that reduces arbitrarily long series to a handful of primitives.

    `set_data` / `add_series` hand data to the chart and `draw()` consumes it:
    after a render pass only the emitted document survives, plus the raw
    primary series when a crosshair listener is installed so that hover
    lookups can see unreduced values.
    """

    def __init__(self, width: int | None, height: int, *, config: SparkLineConfig | None = None) -> None:
        self._viewport = resolve_sparkline_viewport(width, height)
        self._config = config or SparkLineConfig()
        self._primary: SeriesData | None = None
        self._additional: list[DataSeries] = []
        self._crosshair_listener: CrosshairListener | None = None
        self._locator: CrosshairLocator | None = None
        self._last_document: SvgDocument | None = None

    @classmethod
    def fluid(cls, height: int, *, config: SparkLineConfig | None = None) -> "SparkLine":
        return cls(None, height, config=config)

    @property
    def viewport(self) -> ChartViewport:
        return self._viewport

    @property
    def config(self) -> SparkLineConfig:
        return self._config

    @property
    def plot_height(self) -> int:
        return self._viewport.viewbox_height - 2 * FONT_SIZE

    @property
    def crosshair_enabled(self) -> bool:
        return self._crosshair_listener is not None

    @property
    def has_pending_data(self) -> bool:
        return self._primary is not None

    @property
    def last_document(self) -> SvgDocument | None:
        return self._last_document

    def set_data(self, values: Any = None, *, x: Any = None, points: Any = None, data: Any = None) -> "SparkLine":
        """Replace the primary series; any additional series are dropped."""

        self._primary = to_series(values, x=x, points=points, data=data)
        self._additional = []
        return self

    def add_series(
        self,
        values: Any = None,
        *,
        x: Any = None,
        points: Any = None,
        data: Any = None,
        color: tuple[int, int, int] | tuple[int, int, int, int],
    ) -> "SparkLine":
        series = to_series(values, x=x, points=points, data=data)
        self._additional.append(DataSeries(data=series, color=coerce_color(color)))
        return self

    def configure(self, **changes: Any) -> "SparkLine":
        self._config = replace(self._config, **changes)
        return self

    def set_line_color(self, color: tuple[int, int, int] | tuple[int, int, int, int]) -> "SparkLine":
        return self.configure(line_color=coerce_color(color))

    def set_title(self, title: str | None) -> "SparkLine":
        return self.configure(title=title)

    def set_smoothing(self, smoothing: Smoothing) -> "SparkLine":
        return self.configure(smoothing=smoothing)

    def set_use_bezier_curve(self, use_bezier: bool) -> "SparkLine":
        return self.configure(use_bezier_curve=bool(use_bezier))

    def set_time_scale(self, start: str | None, end: str | None) -> "SparkLine":
        return self.configure(time_scale_start=start, time_scale_end=end)

    def set_x_range(self, xmin: float | dt.datetime, xmax: float | dt.datetime) -> "SparkLine":
        """Pin the horizontal domain; samples outside it are drawn past the plot edges."""

        lo = epoch_millis(xmin) if isinstance(xmin, dt.datetime) else float(xmin)
        hi = epoch_millis(xmax) if isinstance(xmax, dt.datetime) else float(xmax)
        return self.configure(x_range=(lo, hi))

    def clear_x_range(self) -> "SparkLine":
        return self.configure(x_range=None)

    def set_crosshair_listener(self, listener: CrosshairListener | None) -> "SparkLine":
        self._crosshair_listener = listener
        if listener is None:
            self._locator = None
        return self

    def text_scale_x(self, rendered_width: float, rendered_height: float) -> float | None:
        return text_scale_x(self._viewport, rendered_width, rendered_height)

    def handle_pointer_event(self, event_type: str, payload: object) -> float | None:
        """Forward an already debounced host pointer event to the crosshair listener."""

        if self._crosshair_listener is None:
            return None
        event = parse_pointer_event(event_type, payload)
        if event is None:
            return None
        self._crosshair_listener(event.relative_x)
        return event.relative_x

    def crosshair_line(self, relative: float) -> SvgLine:
        x = max(0.0, min(1.0, relative)) * self._viewport.viewbox_width
        return SvgLine(
            x1=x,
            y1=FONT_SIZE,
            x2=x,
            y2=self.plot_height + FONT_SIZE,
            stroke=self._config.crosshair_color,
            stroke_width=1.0,
            visible=True,
            element_id=CROSSHAIR_ID,
        )

    def locate(self, relative: float) -> LocatedSample | None:
        if self._locator is None:
            return None
        return self._locator.locate(relative)

    def index_at(self, relative: float) -> int:
        return -1 if self._locator is None else self._locator.index_at(relative)

    def value_at(self, relative: float) -> float | None:
        return None if self._locator is None else self._locator.value_at(relative)

    def draw(self) -> SvgDocument:
        doc = SvgDocument(
            width=self._viewport.css_width,
            height=self._viewport.css_height,
            viewbox=self._viewport.viewbox,
            preserve_aspect_ratio="none",
        )
        self._last_document = doc
        self._locator = None
        primary, additional = self._take_pending()
        if primary is None or primary.size == 0:
            return doc

        if self._crosshair_listener is not None:
            self._locator = CrosshairLocator(primary)

        cfg = self._config
        prepared_primary = self._prepare(primary, cfg.line_color)
        prepared_extra = [self._prepare(series.data, series.color) for series in additional]
        del primary, additional

        value_range = shared_value_range([p.y for p in [prepared_primary, *prepared_extra]])
        if value_range is None or prepared_primary.x.size == 0:
            return doc

        self._draw_reference_lines(doc)
        for prepared in prepared_extra:
            self._draw_series(doc, prepared, value_range)
        self._draw_series(doc, prepared_primary, value_range)
        self._draw_labels(doc, value_range)
        if self._crosshair_listener is not None:
            doc.append(replace(self.crosshair_line(0.0), visible=False))
        LOGGER.debug(
            "sparkline drawn: %d series, %d primary points, %d primitives",
            1 + len(prepared_extra),
            prepared_primary.x.size,
            len(doc.elements),
        )
        return doc

    def _take_pending(self) -> tuple[SeriesData | None, list[DataSeries]]:
        primary, additional = self._primary, self._additional
        self._primary = None
        self._additional = []
        return primary, additional

    def _prepare(self, series: SeriesData, color: RGBA) -> _PreparedSeries:
        cfg = self._config
        normalized = normalize_domain(series, cfg.x_range)
        x, y = normalized.finite()
        x, y = reduce_points(
            x,
            y,
            cfg.smoothing,
            target_points=cfg.target_points,
            epsilon=rdp_epsilon(self._viewport.viewbox_width, fluid=self._viewport.fluid),
        )
        return _PreparedSeries(x=x, y=y, color=color)

    def _draw_series(self, doc: SvgDocument, prepared: _PreparedSeries, value_range: ValueRange) -> None:
        if prepared.x.size == 0:
            return
        points = to_viewbox(
            prepared.x,
            prepared.y,
            value_range,
            viewbox_width=self._viewport.viewbox_width,
            plot_height=self.plot_height,
            top=FONT_SIZE,
        )
        doc.append(build_curve(points, prepared.color, smooth=self._config.use_bezier_curve))

    def _draw_reference_lines(self, doc: SvgDocument) -> None:
        color = self._config.line_color
        width = self._viewport.viewbox_width
        for y in (self.plot_height + FONT_SIZE, FONT_SIZE):
            doc.append(SvgLine(x1=0.0, y1=y, x2=width, y2=y, stroke=color, stroke_width=1.0, dasharray=REFERENCE_DASH))

    def _draw_labels(self, doc: SvgDocument, value_range: ValueRange) -> None:
        cfg = self._config
        color = cfg.line_color
        width = self._viewport.viewbox_width
        min_y = self.plot_height + FONT_SIZE
        max_y = FONT_SIZE
        doc.append(SvgText(0.0, min_y - 2, format_value_label(value_range.vmin), color, FONT_SIZE, bold=True))
        doc.append(SvgText(0.0, max_y - 2, format_value_label(value_range.vmax), color, FONT_SIZE, bold=True))
        if cfg.title is not None:
            doc.append(SvgText(width, FONT_SIZE - 2.5, cfg.title, color, FONT_SIZE, bold=True, anchor="end"))
        bottom = self.plot_height + 2 * FONT_SIZE
        if cfg.time_scale_start is not None:
            doc.append(SvgText(0.0, bottom, cfg.time_scale_start, color, FONT_SIZE))
        if cfg.time_scale_end is not None:
            doc.append(SvgText(width, bottom, cfg.time_scale_end, color, FONT_SIZE, anchor="end"))
