"""Percentage and average helpers used by attendance and grading."""
import math
from typing import Iterable, Optional, Sequence, Tuple


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_percentage(part: float, total: float) -> int:
    """Whole-number percentage; 0 when there is nothing to divide by."""
    if not total:
        return 0
    return round_half_up(part / total * 100)


def calculate_average(numbers: Iterable[Optional[float]]) -> int:
    values = [number or 0 for number in numbers]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def calculate_weighted_average(components: Sequence[Tuple[Optional[float], float]]) -> int:
    """Percentage of ``(score, max)`` pairs, unset scores counting as zero."""
    if not components:
        return 0
    total_score = sum(score or 0 for score, _ in components)
    total_max = sum(maximum or 1 for _, maximum in components)
    return round_half_up(total_score / total_max * 100)
