"""Monotone curve sampling used by the yearly line chart."""

from __future__ import annotations

import numpy as np
import pytest
from scipy.interpolate import PchipInterpolator

from incident_charts.charting.curves import monotone_curve, monotone_tangents


def test_curve_passes_through_every_point():
    xs = [0.0, 10.0, 20.0, 30.0]
    ys = [5.0, 1.0, 8.0, 8.0]
    pts = monotone_curve(xs, ys, samples_per_segment=4)
    assert len(pts) == 3 * 4 + 1
    for x, y in zip(xs, ys):
        assert (x, y) in pts


def test_curve_never_overshoots_neighbours():
    xs = list(range(0, 90, 10))
    ys = [0, 10, 10, 0, 5, 40, 2, 2, 30]
    pts = monotone_curve(xs, ys, samples_per_segment=16)
    for k in range(len(xs) - 1):
        lo, hi = min(ys[k], ys[k + 1]), max(ys[k], ys[k + 1])
        segment = [y for x, y in pts if xs[k] <= x <= xs[k + 1]]
        assert min(segment) >= lo - 1e-9
        assert max(segment) <= hi + 1e-9


def test_counts_never_dip_below_zero():
    pts = monotone_curve([0, 1, 2, 3], [3, 0, 0, 4])
    assert min(y for _x, y in pts) >= 0.0


def test_flat_segments_have_zero_tangents():
    m = monotone_tangents([0, 1, 2], [2, 2, 2])
    assert np.allclose(m, 0.0)


def test_short_inputs_returned_unchanged():
    assert monotone_curve([], []) == []
    assert monotone_curve([3.0], [7.0]) == [(3.0, 7.0)]


def test_samples_lie_on_the_pchip_interpolant():
    xs = [0.0, 10.0, 20.0, 30.0]
    ys = [5.0, 1.0, 8.0, 8.0]
    spline = PchipInterpolator(xs, ys)
    for x, y in monotone_curve(xs, ys, samples_per_segment=5):
        assert y == pytest.approx(float(spline(x)))


def test_local_extremum_has_flat_tangent():
    m = monotone_tangents([0, 1, 2], [0, 5, 0])
    assert m[1] == 0.0
