"""Pinned-key helpers. Pinning only changes which value labels are drawn."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

__all__ = ["toggle_pinned", "prune_pinned"]


def toggle_pinned(pinned: Sequence[str], key: str) -> Tuple[str, ...]:
    if key in pinned:
        return tuple(k for k in pinned if k != key)
    return tuple(pinned) + (key,)


def prune_pinned(pinned: Sequence[str], selected: Iterable[str]) -> Tuple[str, ...]:
    """Drop pinned keys that are no longer selected."""
    allowed = set(selected)
    return tuple(k for k in pinned if k in allowed)
