from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when chart input violates the data contract."""


class SectorCountError(PlotDataError):
    """Raised when a per-sector array does not match the configured sector count."""
