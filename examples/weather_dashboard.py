from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from svgvis_core.render.raster import rasterize
from svgvis_plot import SectorAggregator, SparkLine, SparkLineConfig, WindRose


LOGGER = logging.getLogger(__name__)


def _synthetic_day(samples: int, seed: int = 42) -> tuple[list[dt.datetime], np.ndarray, np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    start = dt.datetime(2024, 6, 1, tzinfo=dt.timezone.utc)
    step = dt.timedelta(seconds=86_400 / samples)
    times = [start + step * i for i in range(samples)]
    phase = np.linspace(0.0, 2.0 * np.pi, samples)
    temperature = 14.0 + 6.0 * np.sin(phase - np.pi / 2.0) + rng.normal(scale=0.4, size=samples)
    direction = (225.0 + rng.normal(scale=40.0, size=samples)) % 360.0
    speed = np.abs(4.0 + 2.5 * np.sin(phase * 3.0) + rng.normal(scale=1.2, size=samples))
    return times, temperature, direction, speed


def _render_sparkline(times: list[dt.datetime], temperature: np.ndarray) -> SparkLine:
    chart = SparkLine(
        600,
        120,
        config=SparkLineConfig(line_color=(255, 184, 70, 255), title="Temperature (C)"),
    )
    chart.set_x_range(times[0], times[0] + dt.timedelta(days=1))
    chart.set_time_scale("00:00", "24:00")
    chart.set_data(temperature, x=times)
    chart.add_series(temperature - 3.0, x=times, color=(96, 182, 255))
    return chart


def _render_windrose(direction: np.ndarray, speed: np.ndarray) -> WindRose:
    agg = SectorAggregator(16)
    agg.add_many(direction, speed)
    rose = WindRose(300)
    rose.set_title("Wind")
    rose.add_aggregate(agg, "energy", label="Energy", color=(255, 170, 70))
    rose.add_aggregate(agg, "count", label="Samples", color=(90, 190, 255))
    return rose


def _save_rgba(path: Path, frame: np.ndarray) -> None:
    Image.fromarray(frame, mode="RGBA").save(path)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)

    times, temperature, direction, speed = _synthetic_day(86_400)

    spark_doc = _render_sparkline(times, temperature).draw()
    rose = _render_windrose(direction, speed)
    rose_doc = rose.draw()
    clicked = rose.click_sector(10)
    LOGGER.info(
        "sector %s (%d deg): %s",
        clicked.direction_label,
        clicked.center_degrees,
        ", ".join(f"{p:.1f}%" for p in clicked.series_percentages),
    )

    spark_svg = out_dir / "temperature.svg"
    rose_svg = out_dir / "wind.svg"
    spark_doc.write(spark_svg)
    rose_doc.write(rose_svg)
    _save_rgba(out_dir / "temperature.png", rasterize(spark_doc, background=(4, 10, 20, 255)))
    _save_rgba(out_dir / "wind.png", rasterize(rose_doc, background=(4, 10, 20, 255)))

    for path in sorted(out_dir.iterdir()):
        print(f"wrote {path}")


if __name__ == "__main__":
    main()
