from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from svgvis_plot.locator import relative_position


PointerKind = Literal["move", "click", "touchstart", "touchmove"]

_EVENT_KINDS: dict[str, PointerKind] = {
    "mousemove": "move",
    "move": "move",
    "click": "click",
    "touchstart": "touchstart",
    "touchmove": "touchmove",
}


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position relative to the rendered chart box, both axes clamped into [0, 1]."""

    kind: PointerKind
    relative_x: float
    relative_y: float | None = None


def parse_pointer_event(event_type: str, payload: object) -> PointerEvent | None:
    """Parse a host pointer payload into a typed event.

    Mouse payloads carry `offset_x` (and optionally `offset_y`); touch payloads
    carry `touch_client_x` and `rect_left` (and optionally `touch_client_y` and
    `rect_top`). Both need `client_width`; `client_height` is needed for the
    vertical component. Unknown events or incomplete payloads yield None.
    """

    kind = _EVENT_KINDS.get(event_type)
    if kind is None or not isinstance(payload, Mapping):
        return None
    width = _number(payload.get("client_width"))
    if width is None:
        return None
    height = _number(payload.get("client_height"))

    if kind in {"touchstart", "touchmove"}:
        touch_x = _number(payload.get("touch_client_x"))
        left = _number(payload.get("rect_left"))
        if touch_x is None or left is None:
            return None
        offset_x = touch_x - left
        touch_y = _number(payload.get("touch_client_y"))
        top = _number(payload.get("rect_top"))
        offset_y = touch_y - top if touch_y is not None and top is not None else None
    else:
        offset_x = _number(payload.get("offset_x"))
        if offset_x is None:
            return None
        offset_y = _number(payload.get("offset_y"))

    relative_y = None
    if offset_y is not None and height is not None:
        relative_y = relative_position(offset_y, height)
    return PointerEvent(kind=kind, relative_x=relative_position(offset_x, width), relative_y=relative_y)


def _number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
