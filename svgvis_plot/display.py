from __future__ import annotations

from dataclasses import dataclass


FONT_SIZE = 10
FLUID_VIEWBOX_WIDTH = 1000
WINDROSE_LABEL_MARGIN = 20


@dataclass(frozen=True)
class ChartViewport:
    """Logical coordinate space of a chart, independent of rendered pixel size."""

    viewbox_width: int
    viewbox_height: int
    css_width: str
    css_height: str
    fluid: bool = False

    @property
    def viewbox(self) -> tuple[float, float, float, float]:
        return (0.0, 0.0, float(self.viewbox_width), float(self.viewbox_height))


def resolve_sparkline_viewport(width: int | None, height: int) -> ChartViewport:
    """Fixed `width x height` pixels, or fluid width (`width=None`) at a fixed height."""

    if height <= 2 * FONT_SIZE:
        raise ValueError(f"height must be > {2 * FONT_SIZE}")
    if width is None:
        return ChartViewport(
            viewbox_width=FLUID_VIEWBOX_WIDTH,
            viewbox_height=height,
            css_width="100%",
            css_height=f"{height}px",
            fluid=True,
        )
    if width <= 0:
        raise ValueError("width must be > 0")
    return ChartViewport(
        viewbox_width=width,
        viewbox_height=height,
        css_width=f"{width}px",
        css_height=f"{height}px",
    )


def resolve_windrose_viewport(size: int) -> ChartViewport:
    if size <= WINDROSE_LABEL_MARGIN:
        raise ValueError(f"size must be > {WINDROSE_LABEL_MARGIN}")
    total = size + 2 * WINDROSE_LABEL_MARGIN
    return ChartViewport(viewbox_width=total, viewbox_height=total, css_width=f"{total}px", css_height=f"{total}px")


def text_scale_x(viewport: ChartViewport, rendered_width: float, rendered_height: float) -> float | None:
    """Inverse horizontal scale a host applies to text when the viewbox is stretched non-uniformly.

    Returns None while the rendered box is still collapsed.
    """

    if rendered_width <= 0 or rendered_height <= 0:
        return None
    scale_x = rendered_width / viewport.viewbox_width
    scale_y = rendered_height / viewport.viewbox_height
    return scale_y / scale_x
