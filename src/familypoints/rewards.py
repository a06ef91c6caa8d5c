"""Utilities for converting weekly points into pocket money."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from .config import MAX_WEEKLY_CHF, POINTS_PER_CHF, WEEKLY_TARGET_POINTS

CENT = Decimal("0.01")


def floor_at_zero(points: int) -> int:
    """Clamp a signed point total for display; totals never go below zero."""

    return points if points > 0 else 0


def chf_earned(weekly_points: int) -> int:
    """Return whole francs earned for ``weekly_points`` (15 points each, capped at 5)."""

    return min(floor_at_zero(weekly_points) // POINTS_PER_CHF, MAX_WEEKLY_CHF)


def progress_percentage(weekly_points: int) -> Decimal:
    """Return progress towards the weekly target as a percentage (0-100)."""

    ratio = Decimal(floor_at_zero(weekly_points)) * Decimal(100) / Decimal(WEEKLY_TARGET_POINTS)
    capped = ratio if ratio < Decimal(100) else Decimal(100)
    return capped.quantize(CENT, rounding=ROUND_HALF_UP)


def max_reached(weekly_points: int) -> bool:
    return weekly_points >= WEEKLY_TARGET_POINTS


@dataclass(frozen=True, slots=True)
class RewardProgress:
    """Weekly reward standing shown on the progress card."""

    weekly_points: int
    chf_earned: int
    percentage: Decimal
    max_reached: bool

    @classmethod
    def from_weekly(cls, weekly_points: int) -> "RewardProgress":
        return cls(
            weekly_points=weekly_points,
            chf_earned=chf_earned(weekly_points),
            percentage=progress_percentage(weekly_points),
            max_reached=max_reached(weekly_points),
        )


__all__ = [
    "RewardProgress",
    "chf_earned",
    "floor_at_zero",
    "max_reached",
    "progress_percentage",
]
