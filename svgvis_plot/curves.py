from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from svgvis_core.render.svg import Color, PathBuilder, SvgPath, SvgPolyline
from svgvis_plot.scales import ValueRange, positions_to_viewbox_x, round_tenth, round_tenths, values_to_viewbox_y


BEZIER_TENSION = 6.0

Point = tuple[float, float]


def to_viewbox(
    x: np.ndarray,
    y: np.ndarray,
    value_range: ValueRange,
    *,
    viewbox_width: float,
    plot_height: float,
    top: float,
) -> list[Point]:
    px = positions_to_viewbox_x(x, viewbox_width=viewbox_width)
    py = values_to_viewbox_y(y, value_range, plot_height=plot_height, top=top)
    return list(zip(px.tolist(), py.tolist()))


def build_polyline(points: Sequence[Point], color: Color, *, stroke_width: float = 1.0) -> SvgPolyline:
    if points:
        arr = round_tenths(np.asarray(points, dtype=np.float64))
        rounded = tuple((float(px), float(py)) for px, py in arr.tolist())
    else:
        rounded = ()
    return SvgPolyline(points=rounded, stroke=color, stroke_width=stroke_width)


def build_bezier_path(points: Sequence[Point], color: Color, *, stroke_width: float = 1.0) -> SvgPath:
    """Smooth curve through every point, one cubic segment per consecutive pair.

    Control points follow Catmull-Rom tangents with neighbours clamped at both
    ends: `cp1 = p1 + (p2 - p0) / 6`, `cp2 = p2 - (p3 - p1) / 6`.
    """

    path = PathBuilder()
    n = len(points)
    if n == 0:
        return SvgPath(commands=(), stroke=color, stroke_width=stroke_width)

    first = points[0]
    path.move_to(round_tenth(first[0]), round_tenth(first[1]))
    if n == 2:
        second = points[1]
        path.line_to(round_tenth(second[0]), round_tenth(second[1]))
    elif n > 2:
        for i in range(n - 1):
            p0 = points[max(0, i - 1)]
            p1 = points[i]
            p2 = points[i + 1]
            p3 = points[min(n - 1, i + 2)]
            path.cubic_to(
                round_tenth(p1[0] + (p2[0] - p0[0]) / BEZIER_TENSION),
                round_tenth(p1[1] + (p2[1] - p0[1]) / BEZIER_TENSION),
                round_tenth(p2[0] - (p3[0] - p1[0]) / BEZIER_TENSION),
                round_tenth(p2[1] - (p3[1] - p1[1]) / BEZIER_TENSION),
                round_tenth(p2[0]),
                round_tenth(p2[1]),
            )
    return SvgPath(commands=path.commands(), stroke=color, stroke_width=stroke_width)


def build_curve(points: Sequence[Point], color: Color, *, smooth: bool) -> SvgPath | SvgPolyline:
    if smooth and len(points) >= 2:
        return build_bezier_path(points, color)
    return build_polyline(points, color)
