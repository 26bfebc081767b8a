from svgvis_plot.api import sparkline, windrose
from svgvis_plot.errors import PlotDataError, SectorCountError
from svgvis_plot.locator import CrosshairLocator, LocatedSample, locate
from svgvis_plot.polar import SectorAggregator, direction_label
from svgvis_plot.series import DataPoint, SeriesData, Smoothing
from svgvis_plot.sparkline import SparkLine, SparkLineConfig
from svgvis_plot.windrose import SectorClickData, WindRose, WindRoseConfig, WindRoseSeries

__all__ = [
    "CrosshairLocator",
    "DataPoint",
    "LocatedSample",
    "PlotDataError",
    "SectorAggregator",
    "SectorClickData",
    "SectorCountError",
    "SeriesData",
    "Smoothing",
    "SparkLine",
    "SparkLineConfig",
    "WindRose",
    "WindRoseConfig",
    "WindRoseSeries",
    "direction_label",
    "locate",
    "sparkline",
    "windrose",
]
