"""Incident chart engine.

Turns dated, categorized incident records into bucketed series, derives
scales, draws shape trees onto a drawing surface and manages pointer-driven
interaction (tooltips, drag-pan, zoom, value label de-collision).

Subpackages:
 - ``data``: record loading, date windows, aggregation
 - ``charting``: scales, shape tree, surfaces, the four chart renderers
 - ``interaction``: tooltip context, pan/zoom state machine, hover routing
 - ``app``: per-view configuration, session persistence, view controllers
 - ``services``: event bus and log ring buffer
"""

__version__ = "0.3.0"
