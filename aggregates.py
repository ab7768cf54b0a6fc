"""Weighted statistics and ranking helpers over normalized records.

All functions are pure and total: empty or zero-weight input yields a
neutral 0 rather than NaN or an exception.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def weighted_change(
    records: Iterable[T],
    weight: Callable[[T], float],
    change: Callable[[T], float],
) -> float:
    """Return ``sum(weight * change) / sum(weight)``, or 0 when total weight <= 0."""
    weighted_total = 0.0
    total_weight = 0.0
    for record in records:
        w = weight(record)
        weighted_total += w * change(record)
        total_weight += w

    if total_weight <= 0:
        return 0.0
    return weighted_total / total_weight


def share(value: float, total: float) -> float:
    """Percentage of ``total`` held by ``value``; 0 when total is not positive."""
    return value / total * 100 if total > 0 else 0.0


def turnover_ratio(volume: float, market_cap: float) -> float:
    return volume / market_cap if market_cap > 0 else 0.0


def rank_top(items: Iterable[T], score: Callable[[T], float], limit: int) -> list[T]:
    """Top ``limit`` items by descending score; ties keep input order."""
    indexed = list(enumerate(items))
    indexed.sort(key=lambda pair: (-score(pair[1]), pair[0]))
    return [item for _, item in indexed[: max(limit, 0)]]


def downsample(points: Sequence[T], target: int, timestamp: Callable[[T], float]) -> list[T]:
    """Stride-sample ``points`` down to roughly ``target`` entries.

    The final point is always kept so the series ends at the latest value.
    """
    if len(points) <= target:
        return list(points)

    stride = max(1, len(points) // max(target, 1))
    sampled = [point for index, point in enumerate(points) if index % stride == 0]

    last = points[-1]
    if timestamp(sampled[-1]) != timestamp(last):
        sampled.append(last)
    return sampled
