from __future__ import annotations

import unittest

from svgvis_plot import CrosshairLocator, DataPoint, locate
from svgvis_plot.adapters.normalize import to_series
from svgvis_plot.interaction import parse_pointer_event
from svgvis_plot.locator import locate_index, relative_position


class LocatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.series = to_series(
            [10.0, 12.0, 15.0, 18.0, 20.0, 30.0, 25.0, 22.0, 19.0, 17.0],
            x=list(range(10)),
        )

    def test_middle_of_chart_hits_sixth_sample(self) -> None:
        found = locate(0.5, self.series)
        assert found is not None
        self.assertEqual(found.index, 5)
        self.assertEqual(found.value, 30.0)
        self.assertEqual(found.position, 5.0)

    def test_reference_points_at_edges_and_middle(self) -> None:
        ys = [5.0, 15.0, 10.0, 25.0, 20.0, 30.0, 15.0, 35.0, 25.0, 40.0]
        series = to_series(points=[DataPoint(float(i), y) for i, y in enumerate(ys)])
        expected = {0.0: (0, 5.0), 1.0: (9, 40.0), 0.5: (5, 30.0)}
        for relative, (index, value) in expected.items():
            found = locate(relative, series)
            assert found is not None
            self.assertEqual((found.index, found.value), (index, value))

    def test_index_rounds_half_up_and_clamps(self) -> None:
        self.assertEqual(locate_index(0.45, 10), 4)
        self.assertEqual(locate_index(0.0, 10), 0)
        self.assertEqual(locate_index(1.0, 10), 9)
        self.assertEqual(locate_index(1.5, 10), 9)
        self.assertEqual(locate_index(-0.2, 10), 0)

    def test_empty_series_has_no_sample(self) -> None:
        empty = to_series([])
        self.assertIsNone(locate(0.5, empty))
        locator = CrosshairLocator(empty)
        self.assertEqual(locator.index_at(0.5), -1)
        self.assertIsNone(locator.value_at(0.5))

    def test_locator_reads_unreduced_values(self) -> None:
        locator = CrosshairLocator(self.series)
        self.assertEqual(locator.size, 10)
        self.assertEqual(locator.index_at(0.5), 5)
        self.assertEqual(locator.value_at(1.0), 17.0)

    def test_relative_position_is_clamped(self) -> None:
        self.assertEqual(relative_position(50.0, 200.0), 0.25)
        self.assertEqual(relative_position(-10.0, 200.0), 0.0)
        self.assertEqual(relative_position(500.0, 200.0), 1.0)
        self.assertEqual(relative_position(50.0, 0.0), 0.0)


class PointerEventTests(unittest.TestCase):
    def test_mouse_move_payload(self) -> None:
        event = parse_pointer_event("mousemove", {"offset_x": 30, "client_width": 120})
        assert event is not None
        self.assertEqual(event.kind, "move")
        self.assertEqual(event.relative_x, 0.25)
        self.assertIsNone(event.relative_y)

    def test_click_payload_with_vertical_offset(self) -> None:
        event = parse_pointer_event(
            "click",
            {"offset_x": 50, "offset_y": 150, "client_width": 100, "client_height": 200},
        )
        assert event is not None
        self.assertEqual(event.relative_x, 0.5)
        self.assertEqual(event.relative_y, 0.75)

    def test_touch_payload_uses_bounding_rect(self) -> None:
        payload = {
            "touch_client_x": 160.0,
            "rect_left": 100.0,
            "client_width": 240.0,
            "touch_client_y": 40.0,
            "rect_top": 20.0,
            "client_height": 80.0,
        }
        event = parse_pointer_event("touchmove", payload)
        assert event is not None
        self.assertEqual(event.kind, "touchmove")
        self.assertEqual(event.relative_x, 0.25)
        self.assertEqual(event.relative_y, 0.25)

    def test_incomplete_or_unknown_payloads_are_ignored(self) -> None:
        self.assertIsNone(parse_pointer_event("scroll", {"offset_x": 1, "client_width": 10}))
        self.assertIsNone(parse_pointer_event("mousemove", {"offset_x": 1}))
        self.assertIsNone(parse_pointer_event("mousemove", {"offset_x": True, "client_width": 10}))
        self.assertIsNone(parse_pointer_event("touchstart", {"touch_client_x": 5, "client_width": 10}))
        self.assertIsNone(parse_pointer_event("click", None))


if __name__ == "__main__":
    unittest.main()
