"""Drag-pan / zoom state machine."""

from __future__ import annotations

from incident_charts.charting.types import ZOOM_MAX, ZOOM_MIN, InteractionState, clamp_zoom
from incident_charts.interaction.pan_zoom import Idle, PanZoomController, Panning, ViewTransform


def _controller(**kwargs):
    commits = []
    pz = PanZoomController(on_commit=commits.append, **kwargs)
    return pz, commits


def test_drag_commits_exactly_once_at_end():
    pz, commits = _controller()
    pz.begin(100, 100)
    assert isinstance(pz.state, Panning)
    for step in range(1, 6):
        assert pz.move(100 + step * 10, 100 - step * 2)
    assert commits == []
    assert pz.pan == (50.0, -10.0)
    assert pz.committed.pan == (0.0, 0.0)
    committed = pz.end()
    assert isinstance(pz.state, Idle)
    assert commits == [ViewTransform(1.0, (50.0, -10.0))]
    assert committed == commits[0]


def test_second_drag_accumulates_on_committed_pan():
    pz, commits = _controller(pan=(5.0, 5.0))
    pz.begin(0, 0)
    pz.move(10, 0)
    pz.end()
    pz.begin(50, 50)
    pz.move(50, 70)
    assert pz.pan == (15.0, 25.0)
    pz.end()
    assert [c.pan for c in commits] == [(15.0, 5.0), (15.0, 25.0)]


def test_move_and_end_without_drag_are_noops():
    pz, commits = _controller()
    assert pz.move(10, 10) is False
    assert pz.end() is None
    assert commits == []


def test_cancel_drops_buffer():
    pz, commits = _controller()
    pz.begin(0, 0)
    pz.move(40, 40)
    assert pz.cancel() is True
    assert pz.pan == (0.0, 0.0)
    assert commits == []
    assert pz.cancel() is False


def test_zoom_steps_clamped():
    pz, commits = _controller()
    pz.zoom_in()
    assert pz.zoom == 1.2
    for _ in range(50):
        pz.zoom_in()
    assert pz.zoom == ZOOM_MAX
    for _ in range(50):
        pz.zoom_out()
    assert pz.zoom == ZOOM_MIN
    # steps at the bounds do not commit
    assert pz.zoom_out() is None
    assert all(ZOOM_MIN <= c.zoom <= ZOOM_MAX for c in commits)


def test_reset_is_a_single_commit():
    pz, commits = _controller(zoom=2.4, pan=(30.0, -12.0))
    pz.reset()
    assert commits == [ViewTransform(1.0, (0.0, 0.0))]
    assert pz.zoom == 1.0 and pz.pan == (0.0, 0.0)


def test_reset_during_drag_drops_buffer():
    pz, commits = _controller()
    pz.begin(0, 0)
    pz.move(25, 25)
    pz.reset()
    assert isinstance(pz.state, Idle)
    assert len(commits) == 1


def test_clamp_zoom_bounds():
    assert clamp_zoom(0.1) == 0.5
    assert clamp_zoom(9) == 5.0
    assert clamp_zoom(1.0 + 0.2 + 0.2) == 1.4
    assert InteractionState(zoom=12).zoom == 5.0


def test_sync_adopts_external_transform():
    pz, commits = _controller()
    pz.begin(0, 0)
    pz.sync(3.0, (1.0, 2.0))
    assert not pz.dragging
    assert pz.zoom == 3.0 and pz.pan == (1.0, 2.0)
    assert commits == []
