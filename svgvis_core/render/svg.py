from __future__ import annotations

from dataclasses import dataclass, field
import re
from pathlib import Path
from typing import Literal, Optional, TypeVar, Union
import xml.etree.ElementTree as ET


Color = tuple[int, int, int, int]
PathOp = Literal["M", "L", "A", "C", "Z"]
TextAnchor = Literal["start", "middle", "end"]

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

_PATH_ARITY: dict[str, int] = {"M": 2, "L": 2, "A": 7, "C": 6, "Z": 0}
_PATH_TOKEN = re.compile(r"[MLACZ]|-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class SvgLine:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: Optional[Color]
    stroke_width: float = 1.0
    dasharray: tuple[float, ...] | None = None
    visible: bool = True
    element_id: str | None = None


@dataclass(frozen=True)
class SvgCircle:
    cx: float
    cy: float
    r: float
    fill: Optional[Color]
    stroke: Optional[Color] = None
    stroke_width: float = 0.0


@dataclass(frozen=True)
class SvgPolyline:
    points: tuple[tuple[float, float], ...]
    stroke: Optional[Color]
    stroke_width: float = 1.0


@dataclass(frozen=True)
class PathCommand:
    op: PathOp
    args: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        arity = _PATH_ARITY.get(self.op)
        if arity is None:
            raise ValueError(f"unsupported path command: {self.op}")
        if len(self.args) != arity:
            raise ValueError(f"path command {self.op} takes {arity} arguments, got {len(self.args)}")


@dataclass(frozen=True)
class SvgPath:
    commands: tuple[PathCommand, ...]
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    stroke_width: float = 1.0
    fill_opacity: float = 1.0
    visible: bool = True
    pointer_events: bool = True
    element_id: str | None = None

    @property
    def d(self) -> str:
        parts: list[str] = []
        for command in self.commands:
            parts.append(command.op)
            parts.extend(_fmt(v) for v in command.args)
        return " ".join(parts)


@dataclass(frozen=True)
class SvgText:
    x: float
    y: float
    text: str
    fill: Optional[Color]
    font_size: float = 10.0
    bold: bool = False
    anchor: TextAnchor = "start"


SvgElement = Union[SvgLine, SvgCircle, SvgPolyline, SvgPath, SvgText]
E = TypeVar("E", SvgLine, SvgCircle, SvgPolyline, SvgPath, SvgText)


class PathBuilder:
    """Fluent helper collecting absolute path commands."""

    def __init__(self) -> None:
        self._commands: list[PathCommand] = []

    def move_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(PathCommand("M", (float(x), float(y))))
        return self

    def line_to(self, x: float, y: float) -> "PathBuilder":
        self._commands.append(PathCommand("L", (float(x), float(y))))
        return self

    def arc_to(
        self,
        rx: float,
        ry: float,
        rotation: float,
        large_arc: bool,
        sweep: bool,
        x: float,
        y: float,
    ) -> "PathBuilder":
        args = (float(rx), float(ry), float(rotation), 1.0 if large_arc else 0.0, 1.0 if sweep else 0.0, float(x), float(y))
        self._commands.append(PathCommand("A", args))
        return self

    def cubic_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> "PathBuilder":
        args = (float(c1x), float(c1y), float(c2x), float(c2y), float(x), float(y))
        self._commands.append(PathCommand("C", args))
        return self

    def close(self) -> "PathBuilder":
        self._commands.append(PathCommand("Z"))
        return self

    def commands(self) -> tuple[PathCommand, ...]:
        return tuple(self._commands)


@dataclass
class SvgDocument:
    width: float | str
    height: float | str
    viewbox: tuple[float, float, float, float]
    elements: list[SvgElement] = field(default_factory=list)
    preserve_aspect_ratio: str | None = None

    def append(self, element: E) -> E:
        self.elements.append(element)
        return element

    def of_type(self, kind: type[E]) -> list[E]:
        return [elem for elem in self.elements if isinstance(elem, kind)]

    def is_empty(self) -> bool:
        return not self.elements

    def replace(self, element_id: str, element: E) -> bool:
        """Swap the element carrying `element_id` in place; False when none does."""

        for i, current in enumerate(self.elements):
            if getattr(current, "element_id", None) == element_id:
                self.elements[i] = element
                return True
        return False

    @classmethod
    def from_file(cls, path: Path) -> "SvgDocument":
        tree = ET.parse(path)
        return cls._from_root(tree.getroot())

    @classmethod
    def from_markup(cls, svg_markup: str) -> "SvgDocument":
        return cls._from_root(ET.fromstring(svg_markup))

    @classmethod
    def _from_root(cls, root: ET.Element) -> "SvgDocument":
        raw_width = root.attrib.get("width")
        raw_height = root.attrib.get("height")
        width = _parse_length(raw_width)
        height = _parse_length(raw_height)
        viewbox = _parse_viewbox(root.attrib.get("viewBox"))
        if viewbox is None:
            viewbox = (0.0, 0.0, width or 100.0, height or 100.0)
        doc = cls(
            width=width if width is not None else (raw_width or viewbox[2]),
            height=height if height is not None else (raw_height or viewbox[3]),
            viewbox=viewbox,
            preserve_aspect_ratio=root.attrib.get("preserveAspectRatio"),
        )
        for elem in root.iter():
            tag = _strip_namespace(elem.tag)
            parsed: SvgElement | None
            if tag == "line":
                parsed = _parse_line(elem)
            elif tag == "circle":
                parsed = _parse_circle(elem)
            elif tag == "polyline":
                parsed = _parse_polyline(elem)
            elif tag == "path":
                parsed = _parse_path(elem)
            elif tag == "text":
                parsed = _parse_text(elem)
            else:
                parsed = None
            if parsed is not None:
                doc.elements.append(parsed)
        return doc

    def to_element(self) -> ET.Element:
        root = ET.Element("svg", {"xmlns": SVG_NAMESPACE})
        root.set("width", _fmt_length(self.width))
        root.set("height", _fmt_length(self.height))
        root.set("viewBox", " ".join(_fmt(v) for v in self.viewbox))
        if self.preserve_aspect_ratio:
            root.set("preserveAspectRatio", self.preserve_aspect_ratio)
        for element in self.elements:
            root.append(_to_node(element))
        return root

    def to_markup(self) -> str:
        return ET.tostring(self.to_element(), encoding="unicode")

    def write(self, path: Path) -> None:
        path.write_text(self.to_markup(), encoding="utf-8")


def _to_node(element: SvgElement) -> ET.Element:
    if isinstance(element, SvgLine):
        node = ET.Element(
            "line",
            {"x1": _fmt(element.x1), "y1": _fmt(element.y1), "x2": _fmt(element.x2), "y2": _fmt(element.y2)},
        )
        _set_paint(node, "stroke", element.stroke)
        node.set("stroke-width", _fmt(element.stroke_width))
        if element.dasharray:
            node.set("stroke-dasharray", " ".join(_fmt(v) for v in element.dasharray))
        if not element.visible:
            node.set("visibility", "hidden")
        if element.element_id:
            node.set("id", element.element_id)
        return node
    if isinstance(element, SvgCircle):
        node = ET.Element("circle", {"cx": _fmt(element.cx), "cy": _fmt(element.cy), "r": _fmt(element.r)})
        _set_paint(node, "fill", element.fill)
        if element.stroke is not None:
            _set_paint(node, "stroke", element.stroke)
            node.set("stroke-width", _fmt(element.stroke_width))
        return node
    if isinstance(element, SvgPolyline):
        points = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in element.points)
        node = ET.Element("polyline", {"points": points, "fill": "none"})
        _set_paint(node, "stroke", element.stroke)
        node.set("stroke-width", _fmt(element.stroke_width))
        return node
    if isinstance(element, SvgPath):
        node = ET.Element("path", {"d": element.d})
        if element.fill is None:
            node.set("fill", "none")
        else:
            r, g, b, a = element.fill
            node.set("fill", f"#{r:02x}{g:02x}{b:02x}")
            opacity = element.fill_opacity * (a / 255.0)
            if opacity < 1.0:
                node.set("fill-opacity", _fmt(opacity))
        _set_paint(node, "stroke", element.stroke)
        if element.stroke is not None:
            node.set("stroke-width", _fmt(element.stroke_width))
        if not element.visible:
            node.set("visibility", "hidden")
        if not element.pointer_events:
            node.set("pointer-events", "none")
        if element.element_id:
            node.set("id", element.element_id)
        return node
    node = ET.Element("text", {"x": _fmt(element.x), "y": _fmt(element.y), "font-size": _fmt(element.font_size)})
    if element.bold:
        node.set("font-weight", "bold")
    if element.anchor != "start":
        node.set("text-anchor", element.anchor)
    _set_paint(node, "fill", element.fill)
    node.text = element.text
    return node


def _set_paint(node: ET.Element, attr: str, color: Optional[Color]) -> None:
    if color is None:
        node.set(attr, "none")
        return
    r, g, b, a = color
    node.set(attr, f"#{r:02x}{g:02x}{b:02x}")
    if a < 255:
        node.set(f"{attr}-opacity", _fmt(a / 255.0))


def _fmt(value: float) -> str:
    out = f"{float(value):.4f}".rstrip("0").rstrip(".")
    if out in {"-0", ""}:
        out = "0"
    return out


def _fmt_length(value: float | str) -> str:
    if isinstance(value, str):
        return value
    return f"{_fmt(value)}px"


def _strip_namespace(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    value = value.strip()
    if value.endswith("px"):
        value = value[:-2]
    try:
        return float(value)
    except ValueError:
        return None


def _parse_viewbox(value: Optional[str]) -> Optional[tuple[float, float, float, float]]:
    if not value:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        return tuple(float(p) for p in parts)  # type: ignore[return-value]
    except ValueError:
        return None


def _parse_line(elem: ET.Element) -> Optional[SvgLine]:
    x1 = _parse_length(elem.attrib.get("x1"))
    y1 = _parse_length(elem.attrib.get("y1"))
    x2 = _parse_length(elem.attrib.get("x2"))
    y2 = _parse_length(elem.attrib.get("y2"))
    if x1 is None or y1 is None or x2 is None or y2 is None:
        return None
    dash = _parse_numbers(elem.attrib.get("stroke-dasharray"))
    return SvgLine(
        x1=x1,
        y1=y1,
        x2=x2,
        y2=y2,
        stroke=_parse_paint(elem, "stroke"),
        stroke_width=_parse_length(elem.attrib.get("stroke-width")) or 1.0,
        dasharray=tuple(dash) if dash else None,
        visible=elem.attrib.get("visibility") != "hidden",
        element_id=elem.attrib.get("id"),
    )


def _parse_circle(elem: ET.Element) -> SvgCircle:
    return SvgCircle(
        cx=_parse_length(elem.attrib.get("cx")) or 0.0,
        cy=_parse_length(elem.attrib.get("cy")) or 0.0,
        r=_parse_length(elem.attrib.get("r")) or 0.0,
        fill=_parse_paint(elem, "fill"),
        stroke=_parse_paint(elem, "stroke"),
        stroke_width=_parse_length(elem.attrib.get("stroke-width")) or 0.0,
    )


def _parse_polyline(elem: ET.Element) -> Optional[SvgPolyline]:
    values = _parse_numbers(elem.attrib.get("points"))
    it = iter(values)
    points = tuple(zip(it, it))
    return SvgPolyline(
        points=points,
        stroke=_parse_paint(elem, "stroke"),
        stroke_width=_parse_length(elem.attrib.get("stroke-width")) or 1.0,
    )


def _parse_path(elem: ET.Element) -> Optional[SvgPath]:
    commands = parse_path_data(elem.attrib.get("d", ""))
    fill_opacity = _parse_length(elem.attrib.get("fill-opacity"))
    return SvgPath(
        commands=commands,
        fill=_parse_color(elem.attrib.get("fill")),
        stroke=_parse_paint(elem, "stroke"),
        stroke_width=_parse_length(elem.attrib.get("stroke-width")) or 1.0,
        fill_opacity=1.0 if fill_opacity is None else fill_opacity,
        visible=elem.attrib.get("visibility") != "hidden",
        pointer_events=elem.attrib.get("pointer-events") != "none",
        element_id=elem.attrib.get("id"),
    )


def _parse_text(elem: ET.Element) -> SvgText:
    anchor = elem.attrib.get("text-anchor", "start")
    if anchor not in {"start", "middle", "end"}:
        anchor = "start"
    return SvgText(
        x=_parse_length(elem.attrib.get("x")) or 0.0,
        y=_parse_length(elem.attrib.get("y")) or 0.0,
        text=elem.text or "",
        fill=_parse_paint(elem, "fill"),
        font_size=_parse_length(elem.attrib.get("font-size")) or 10.0,
        bold=elem.attrib.get("font-weight") == "bold",
        anchor=anchor,  # type: ignore[arg-type]
    )


def parse_path_data(d: str) -> tuple[PathCommand, ...]:
    """Parse absolute `M/L/A/C/Z` path data as emitted by `SvgPath.d`."""

    commands: list[PathCommand] = []
    op: str | None = None
    args: list[float] = []
    for token in _PATH_TOKEN.findall(d):
        if token in _PATH_ARITY:
            if op is not None:
                commands.append(PathCommand(op, tuple(args)))  # type: ignore[arg-type]
            op = token
            args = []
            continue
        if op is None:
            raise ValueError(f"path data must start with a command: {d!r}")
        args.append(float(token))
    if op is not None:
        commands.append(PathCommand(op, tuple(args)))  # type: ignore[arg-type]
    return tuple(commands)


def _parse_numbers(value: Optional[str]) -> list[float]:
    if not value:
        return []
    out: list[float] = []
    for part in value.replace(",", " ").split():
        try:
            out.append(float(part))
        except ValueError:
            continue
    return out


def _parse_paint(elem: ET.Element, attr: str) -> Optional[Color]:
    color = _parse_color(elem.attrib.get(attr))
    if color is None:
        return None
    opacity = _parse_length(elem.attrib.get(f"{attr}-opacity"))
    if opacity is None:
        return color
    r, g, b, _ = color
    return (r, g, b, max(0, min(255, int(round(opacity * 255)))))


def _parse_color(value: Optional[str]) -> Optional[Color]:
    if not value:
        return None
    value = value.strip()
    if value == "none":
        return None
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) == 3:
            return (int(hex_value[0] * 2, 16), int(hex_value[1] * 2, 16), int(hex_value[2] * 2, 16), 255)
        if len(hex_value) == 6:
            return (int(hex_value[0:2], 16), int(hex_value[2:4], 16), int(hex_value[4:6], 16), 255)
        if len(hex_value) == 8:
            return (
                int(hex_value[0:2], 16),
                int(hex_value[2:4], 16),
                int(hex_value[4:6], 16),
                int(hex_value[6:8], 16),
            )
    if value.startswith("rgb"):
        numbers = value[value.find("(") + 1 : value.find(")")].split(",")
        if len(numbers) >= 3:
            try:
                return (int(numbers[0]), int(numbers[1]), int(numbers[2]), 255)
            except ValueError:
                return None
    return None
