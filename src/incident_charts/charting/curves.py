"""Monotone cubic sampling for time series paths.

Built on scipy's PCHIP interpolator: the curve passes through every data
point and never overshoots the values of neighbouring points, so a series of
counts never dips below zero between two years.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from scipy.interpolate import PchipInterpolator

__all__ = ["monotone_tangents", "monotone_curve"]


def monotone_tangents(xs: Sequence[float], ys: Sequence[float]) -> np.ndarray:
    """Slope of the monotone interpolant at each data point."""
    x = np.asarray(xs, dtype=float)
    if len(x) < 2:
        return np.zeros(len(x))
    return PchipInterpolator(x, np.asarray(ys, dtype=float)).derivative()(x)


def monotone_curve(
    xs: Sequence[float], ys: Sequence[float], samples_per_segment: int = 8
) -> List[Tuple[float, float]]:
    """Sample the monotone interpolant into a polyline through all points.

    ``xs`` must be strictly increasing. Fewer than two points are returned
    unchanged.
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if len(x) < 2:
        return [(float(a), float(b)) for a, b in zip(x, y)]
    t = np.linspace(0.0, 1.0, samples_per_segment + 1)[:-1]
    sample_x = (x[:-1, None] + t[None, :] * np.diff(x)[:, None]).ravel()
    sample_y = PchipInterpolator(x, y)(sample_x)
    # knots keep their exact data values
    sample_y[::samples_per_segment] = y[:-1]
    out = list(zip(sample_x.tolist(), sample_y.tolist()))
    out.append((float(x[-1]), float(y[-1])))
    return out
