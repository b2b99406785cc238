"""Utility helpers for kvlifecycle."""

from kvlifecycle.utils.decorators import traced

__all__ = [
    "traced",
]
