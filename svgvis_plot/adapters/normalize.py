from __future__ import annotations

from collections.abc import Sequence
import datetime as dt
import logging
import math
from typing import Any

import numpy as np

from svgvis_plot.errors import PlotDataError
from svgvis_plot.series import DataPoint, SeriesData, epoch_millis


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)

# Absolute width in position units, not a fraction of the domain: positions (or a
# fixed x_range) spanning less than this are spread evenly over [0, 1].
DEGENERATE_DOMAIN_WIDTH = 1e-3


def to_series(
    values: Any = None,
    *,
    x: Any = None,
    points: Sequence[DataPoint] | Sequence[tuple[Any, Any]] | None = None,
    data: Any = None,
    source_name: str | None = None,
) -> SeriesData:
    """Coerce caller input into parallel float64 arrays.

    Either `points` (DataPoints or `(x, y)` pairs) or `values` with optional `x`
    positions is accepted. Positions may be datetimes; they become epoch
    milliseconds. Missing `x` means sample index.
    """

    if points is not None:
        if values is not None or x is not None:
            raise PlotDataError("pass either `points` or `values`/`x`, not both")
        xs: list[Any] = []
        ys: list[Any] = []
        for point in points:
            if isinstance(point, DataPoint):
                xs.append(point.x)
                ys.append(point.y)
            else:
                px, py = point
                xs.append(px)
                ys.append(py)
        x = xs
        values = ys

    y_values = _resolve_input(values, key="y", data=data)
    if y_values is None:
        raise PlotDataError("values input is required")
    y_arr = _coerce_1d_numeric(y_values, label="values")

    if x is None:
        x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_values = _resolve_input(x, key="x", data=data)
        x_arr = _coerce_1d_numeric(x_values, label="x")

    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and values length mismatch: {x_arr.size} != {y_arr.size}")

    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    return SeriesData(x=x_arr, y=y_arr, mask=mask, source_name=source_name)


def normalize_domain(series: SeriesData, x_range: tuple[float, float] | None = None) -> SeriesData:
    """Map positions onto the canonical [0, 1] domain; values are untouched.

    With `x_range` the domain is fixed and positions outside it land outside
    [0, 1]. Without it the domain spans the first and last sample.
    """

    n = series.size
    if n == 0:
        return series
    if x_range is not None:
        min_x, max_x = float(x_range[0]), float(x_range[1])
    else:
        finite_x = series.x[np.isfinite(series.x)]
        if finite_x.size == 0:
            return series.with_x(_evenly_spaced(n))
        min_x, max_x = float(finite_x[0]), float(finite_x[-1])

    width = max_x - min_x
    if abs(width) < DEGENERATE_DOMAIN_WIDTH:
        LOGGER.debug("degenerate x domain [%s, %s]; spreading %d points evenly", min_x, max_x, n)
        return series.with_x(_evenly_spaced(n))
    return series.with_x((series.x - min_x) / width)


def _evenly_spaced(n: int) -> np.ndarray:
    if n == 1:
        return np.zeros(1, dtype=np.float64)
    return np.arange(n, dtype=np.float64) / float(n - 1)


def _resolve_input(value: Any, key: str, data: Any) -> Any:
    """Look up DataFrame columns; anything else is returned for coercion."""

    if data is None:
        if pd is not None and isinstance(value, pd.DataFrame):
            return _only_numeric_column(value, "a DataFrame passed as values")
        return value

    if pd is None:
        raise PlotDataError("pandas is required when using `data=`")
    if not isinstance(data, pd.DataFrame):
        raise PlotDataError("`data` must be a pandas DataFrame")
    if isinstance(value, str):
        if value not in data.columns:
            raise PlotDataError(f"column not found: {value}")
        return data[value]
    if value is None and key == "y":
        return _only_numeric_column(data, "`data` without a values column")
    return value


def _only_numeric_column(frame: Any, what: str) -> Any:
    numeric = [name for name in frame.columns if pd.api.types.is_numeric_dtype(frame[name])]
    if len(numeric) != 1:
        raise PlotDataError(f"{what} must have exactly one numeric column, found {len(numeric)}")
    return frame[numeric[0]]


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        value = value.detach().cpu().to(torch.float64).numpy()
    elif pd is not None and isinstance(value, (pd.Series, pd.Index)):
        value = value.to_numpy()
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        value = np.asarray(value, dtype=object)
    elif not isinstance(value, np.ndarray):
        raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")

    if value.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D, got shape {value.shape}")
    kind = value.dtype.kind
    if kind in "iufb":
        return value.astype(np.float64, copy=False)
    if kind == "M":
        millis = value.astype("datetime64[ms]")
        out = millis.astype(np.int64).astype(np.float64)
        out[np.isnat(millis)] = np.nan
        return out
    return np.fromiter((_scalar(raw, label, i) for i, raw in enumerate(value.tolist())), dtype=np.float64, count=value.size)


def _scalar(raw: Any, label: str, index: int) -> float:
    if raw is None:
        return math.nan
    if isinstance(raw, dt.datetime):
        return epoch_millis(raw)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"{label} contains non-numeric value at index {index}: {raw!r}") from exc
