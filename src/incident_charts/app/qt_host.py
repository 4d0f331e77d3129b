"""PyQt6 host for the dashboard (optional ``qt`` extra).

PyQt6 and the Qt matplotlib backend are imported lazily inside the
functions so the rest of the package stays importable and testable
headless.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from incident_charts.charting.surfaces import MatplotlibSurface

from .context import DashboardContext

__all__ = ["create_qt_surface", "build_dashboard_window"]

log = logging.getLogger(__name__)

TAB_TITLES = {
    "country_bar": "Attacks by Location",
    "global_summary": "Global Summary",
    "monthly_radar": "Monthly Patterns",
}


def create_qt_surface(width: float, height: float, *, owner: Optional[str] = None, dpi: int = 100) -> MatplotlibSurface:
    """Surface factory drawing into a ``FigureCanvasQTAgg`` widget."""
    from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
    from matplotlib.figure import Figure

    figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    FigureCanvasQTAgg(figure)
    return MatplotlibSurface(width, height, dpi=dpi, owner=owner, figure=figure)


def build_dashboard_window(ctx: DashboardContext, title: str = "Shark Attack Dashboard") -> Any:
    """One tab per view, each holding the canvases of its charts.

    Surfaces must come from ``create_qt_surface``. Pointer events of every
    canvas are forwarded to the chart's controller; switching tabs discards
    drags and tooltips of the hidden views.
    """
    from PyQt6.QtWidgets import QMainWindow, QTabWidget, QVBoxLayout, QWidget

    window = QMainWindow()
    window.setWindowTitle(title)
    tabs = QTabWidget(window)
    view_ids = list(ctx.views)
    for view_id in view_ids:
        view = ctx.views[view_id]
        page = QWidget()
        layout = QVBoxLayout(page)
        for chart_id, surface in view.surfaces.items():
            surface.connect(view.controllers[chart_id])
            layout.addWidget(surface.canvas)
        tabs.addTab(page, TAB_TITLES.get(view_id, view_id))

    def _on_tab(index: int) -> None:
        if 0 <= index < len(view_ids):
            ctx.switch_view(view_ids[index])

    tabs.currentChanged.connect(_on_tab)
    window.setCentralWidget(tabs)
    ctx.render_all()
    log.debug("Qt dashboard window built with %d tabs", tabs.count())
    return window
