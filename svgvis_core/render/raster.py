from __future__ import annotations

from functools import lru_cache
import math

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .svg import Color, PathCommand, SvgCircle, SvgDocument, SvgLine, SvgPath, SvgPolyline, SvgText


CURVE_SEGMENTS = 12
ARC_SEGMENTS_PER_RADIAN = 8
DEFAULT_FONT_FILES = ("DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttc")

Point = tuple[float, float]


def rasterize(
    document: SvgDocument,
    width: int | None = None,
    height: int | None = None,
    *,
    background: Color = (0, 0, 0, 255),
) -> np.ndarray:
    """Paint `document` into an (H, W, 4) uint8 array, stretching the viewbox to fill it."""

    vb_x, vb_y, vb_w, vb_h = document.viewbox
    if width is None:
        width = int(round(document.width if isinstance(document.width, (int, float)) else vb_w))
    if height is None:
        height = int(round(document.height if isinstance(document.height, (int, float)) else vb_h))
    if width <= 0 or height <= 0:
        raise ValueError("raster width/height must be > 0")

    image = Image.new("RGB", (width, height), background[:3])
    draw = ImageDraw.Draw(image, "RGBA")
    sx = width / vb_w if vb_w else 1.0
    sy = height / vb_h if vb_h else 1.0
    stroke_scale = (abs(sx) + abs(sy)) / 2.0

    def to_px(x: float, y: float) -> Point:
        return ((x - vb_x) * sx, (y - vb_y) * sy)

    for element in document.elements:
        if isinstance(element, SvgLine):
            if not element.visible or element.stroke is None:
                continue
            start = to_px(element.x1, element.y1)
            end = to_px(element.x2, element.y2)
            line_w = max(1, int(round(element.stroke_width * stroke_scale)))
            if element.dasharray:
                dashes = tuple(v * stroke_scale for v in element.dasharray)
                for seg_start, seg_end in _dash_segments(start, end, dashes):
                    draw.line([seg_start, seg_end], fill=element.stroke, width=line_w)
            else:
                draw.line([start, end], fill=element.stroke, width=line_w)
        elif isinstance(element, SvgCircle):
            cx, cy = to_px(element.cx, element.cy)
            rx = element.r * abs(sx)
            ry = element.r * abs(sy)
            box = [cx - rx, cy - ry, cx + rx, cy + ry]
            outline = element.stroke if element.stroke_width > 0 else None
            line_w = max(1, int(round(element.stroke_width * stroke_scale)))
            draw.ellipse(box, fill=element.fill, outline=outline, width=line_w)
        elif isinstance(element, SvgPolyline):
            if element.stroke is None or len(element.points) < 2:
                continue
            pts = [to_px(x, y) for x, y in element.points]
            draw.line(pts, fill=element.stroke, width=max(1, int(round(element.stroke_width * stroke_scale))))
        elif isinstance(element, SvgPath):
            if not element.visible:
                continue
            _draw_path(draw, element, to_px, stroke_scale)
        elif isinstance(element, SvgText):
            if element.fill is None or not element.text:
                continue
            _draw_text(draw, element, to_px, abs(sy))

    return np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()


def flatten_path(commands: tuple[PathCommand, ...]) -> list[tuple[list[Point], bool]]:
    """Flatten path commands into (points, closed) subpaths in path coordinates."""

    subpaths: list[tuple[list[Point], bool]] = []
    current: list[Point] = []
    for command in commands:
        if command.op == "M":
            if current:
                subpaths.append((current, False))
            current = [(command.args[0], command.args[1])]
        elif command.op == "L":
            current.append((command.args[0], command.args[1]))
        elif command.op == "C":
            if not current:
                continue
            current.extend(_sample_cubic(current[-1], command.args))
        elif command.op == "A":
            if not current:
                continue
            current.extend(_sample_arc(current[-1], command.args))
        elif command.op == "Z":
            if current:
                subpaths.append((current, True))
                current = [current[0]]
    if len(current) > 1 or (current and not subpaths):
        subpaths.append((current, False))
    return subpaths


def _draw_path(draw: ImageDraw.ImageDraw, path: SvgPath, to_px, stroke_scale: float) -> None:
    fill: Color | None = None
    if path.fill is not None and path.fill_opacity > 0:
        r, g, b, a = path.fill
        fill = (r, g, b, max(0, min(255, int(round(a * path.fill_opacity)))))
    line_w = max(1, int(round(path.stroke_width * stroke_scale)))
    for points, closed in flatten_path(path.commands):
        pts = [to_px(x, y) for x, y in points]
        if fill is not None and len(pts) >= 3:
            draw.polygon(pts, fill=fill)
        if path.stroke is not None and len(pts) >= 2:
            if closed:
                pts = pts + [pts[0]]
            draw.line(pts, fill=path.stroke, width=line_w)


def _draw_text(draw: ImageDraw.ImageDraw, text: SvgText, to_px, scale_y: float) -> None:
    font = _load_font(max(1, int(round(text.font_size * scale_y))))
    x, y = to_px(text.x, text.y)
    text_w = draw.textlength(text.text, font=font)
    if text.anchor == "middle":
        x -= text_w / 2.0
    elif text.anchor == "end":
        x -= text_w
    left, top, right, bottom = draw.textbbox((0, 0), text.text, font=font)
    # SVG y addresses the baseline; PIL addresses the top of the box.
    draw.text((x, y - (bottom - top)), text.text, fill=text.fill, font=font)


@lru_cache(maxsize=32)
def _load_font(size_px: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for name in DEFAULT_FONT_FILES:
        try:
            return ImageFont.truetype(name, size=size_px)
        except OSError:
            continue
    return ImageFont.load_default()


def _sample_cubic(start: Point, args: tuple[float, ...]) -> list[Point]:
    x0, y0 = start
    c1x, c1y, c2x, c2y, x3, y3 = args
    out: list[Point] = []
    for i in range(1, CURVE_SEGMENTS + 1):
        t = i / CURVE_SEGMENTS
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3.0 * mt * mt * t
        c = 3.0 * mt * t * t
        d = t * t * t
        out.append((a * x0 + b * c1x + c * c2x + d * x3, a * y0 + b * c1y + c * c2y + d * y3))
    return out


def _sample_arc(start: Point, args: tuple[float, ...]) -> list[Point]:
    # Endpoint-to-center conversion for unrotated arcs.
    x0, y0 = start
    rx, ry, _rotation, large_arc, sweep, x, y = args
    rx = abs(rx)
    ry = abs(ry)
    if rx == 0 or ry == 0 or (x0 == x and y0 == y):
        return [(x, y)]

    x1p = (x0 - x) / 2.0
    y1p = (y0 - y) / 2.0
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1.0:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale
    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if bool(large_arc) == bool(sweep):
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cxp + (x0 + x) / 2.0
    cy = cyp + (y0 + y) / 2.0

    theta1 = math.atan2((y1p - cyp) / ry, (x1p - cxp) / rx)
    theta2 = math.atan2((-y1p - cyp) / ry, (-x1p - cxp) / rx)
    delta = theta2 - theta1
    if sweep and delta < 0:
        delta += 2.0 * math.pi
    elif not sweep and delta > 0:
        delta -= 2.0 * math.pi

    steps = max(2, int(math.ceil(abs(delta) * ARC_SEGMENTS_PER_RADIAN)))
    out: list[Point] = []
    for i in range(1, steps + 1):
        theta = theta1 + delta * i / steps
        out.append((cx + rx * math.cos(theta), cy + ry * math.sin(theta)))
    out[-1] = (x, y)
    return out


def _dash_segments(start: Point, end: Point, dashes: tuple[float, ...]) -> list[tuple[Point, Point]]:
    x0, y0 = start
    x1, y1 = end
    length = math.hypot(x1 - x0, y1 - y0)
    pattern = [d for d in dashes if d > 0]
    if length == 0 or not pattern:
        return [(start, end)]
    if len(pattern) % 2 == 1:
        pattern = pattern * 2
    ux = (x1 - x0) / length
    uy = (y1 - y0) / length
    out: list[tuple[Point, Point]] = []
    pos = 0.0
    i = 0
    while pos < length:
        seg = min(pattern[i % len(pattern)], length - pos)
        if i % 2 == 0:
            out.append(((x0 + ux * pos, y0 + uy * pos), (x0 + ux * (pos + seg), y0 + uy * (pos + seg))))
        pos += seg
        i += 1
    return out
