"""Pairwise repulsion for radar value labels.

While two labels are closer than ``MIN_LABEL_SEPARATION`` both are pushed
apart along the line joining them by half the deficit plus a margin. Passes
repeat until a pass finds no collision or ``MAX_COLLISION_ITERATIONS`` is
reached; leftover overlap at the cap is accepted.

Coincident labels have no joining line; they are separated along a direction
derived from their indices so the layout is deterministic.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

__all__ = [
    "MIN_LABEL_SEPARATION",
    "PUSH_MARGIN",
    "MAX_COLLISION_ITERATIONS",
    "resolve_label_collisions",
    "min_pairwise_distance",
]

log = logging.getLogger(__name__)

MIN_LABEL_SEPARATION = 25.0
PUSH_MARGIN = 5.0
MAX_COLLISION_ITERATIONS = 500
_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

Point = Tuple[float, float]


def resolve_label_collisions(
    positions: Sequence[Point],
    *,
    min_separation: float = MIN_LABEL_SEPARATION,
    margin: float = PUSH_MARGIN,
    max_iterations: int = MAX_COLLISION_ITERATIONS,
) -> List[Point]:
    """Return new label positions; the input is not modified."""
    pts = [[float(x), float(y)] for x, y in positions]
    n = len(pts)
    for _ in range(max_iterations):
        moved = False
        for i in range(n):
            for j in range(i + 1, n):
                dx = pts[i][0] - pts[j][0]
                dy = pts[i][1] - pts[j][1]
                distance = math.hypot(dx, dy)
                if distance >= min_separation:
                    continue
                if distance == 0.0:
                    angle = (i + j + 1) * _GOLDEN_ANGLE
                else:
                    angle = math.atan2(dy, dx)
                push = (min_separation - distance) / 2.0 + margin
                ux, uy = math.cos(angle), math.sin(angle)
                pts[i][0] += push * ux
                pts[i][1] += push * uy
                pts[j][0] -= push * ux
                pts[j][1] -= push * uy
                moved = True
        if not moved:
            return [(x, y) for x, y in pts]
    log.debug("Label collision resolution stopped at the %d pass cap (%d labels)", max_iterations, n)
    return [(x, y) for x, y in pts]


def min_pairwise_distance(positions: Sequence[Point]) -> float:
    """Smallest distance between two positions (inf for fewer than two)."""
    best = math.inf
    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            best = min(best, math.dist(positions[i], positions[j]))
    return best
