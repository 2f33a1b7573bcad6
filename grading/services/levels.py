"""
CBC performance levels: mark classification and the weighted-average banding
shared by every roll-up (strand, subject, class).
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Iterable, Optional, Tuple

from grading.exceptions import InvalidMarkRange, UnknownPerformanceLevel

PERFORMANCE_LEVELS = ("EM", "AP", "PR", "AD")

LEVEL_WEIGHTS = {"EM": 1, "AP": 2, "PR": 3, "AD": 4}

LEVEL_NAMES = {
    "EM": "Emerging",
    "AP": "Approaching Proficiency",
    "PR": "Proficient",
    "AD": "Advanced",
}

_LEVEL_BY_WEIGHT = {weight: code for code, weight in LEVEL_WEIGHTS.items()}

# Lower bounds, highest band first.
MARK_BANDS = ((80, "AD"), (60, "PR"), (40, "AP"), (0, "EM"))


def _is_nan(mark) -> bool:
    if isinstance(mark, Decimal):
        return mark.is_nan()
    return isinstance(mark, float) and math.isnan(mark)


def classify(mark) -> str:
    """Map a mark in [0, 100] to its performance level. Never clamps."""
    if isinstance(mark, bool) or not isinstance(mark, (Real, Decimal)):
        raise InvalidMarkRange(mark)
    if _is_nan(mark):
        raise InvalidMarkRange(mark)
    if mark < 0 or mark > 100:
        raise InvalidMarkRange(mark)
    for lower, code in MARK_BANDS:
        if mark >= lower:
            return code
    raise InvalidMarkRange(mark)


def clamp_mark(mark) -> float:
    """Caller-side helper: force a numeric mark into [0, 100] before classifying."""
    if isinstance(mark, bool) or not isinstance(mark, (Real, Decimal)):
        raise InvalidMarkRange(mark)
    if _is_nan(mark):
        raise InvalidMarkRange(mark)
    return min(100.0, max(0.0, float(mark)))


def normalize_level(code) -> str:
    if not isinstance(code, str):
        raise UnknownPerformanceLevel(code)
    normalized = code.strip().upper()
    if normalized not in LEVEL_WEIGHTS:
        raise UnknownPerformanceLevel(code)
    return normalized


def level_weight(code) -> int:
    return LEVEL_WEIGHTS[normalize_level(code)]


def level_from_average(average: float) -> str:
    """
    Band a weight average (1..4) back to a level, rounding half up:
    1.5 -> AP, 2.5 -> PR, 3.5 -> AD.
    """
    if average is None or math.isnan(average) or average < 1 or average > 4:
        raise ValueError(f"Level average must lie within [1, 4], got {average!r}")
    # round(…, 6) absorbs float noise such as 2.4999999999 from weighted sums
    rounded = Decimal(str(round(average, 6))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return _LEVEL_BY_WEIGHT[int(rounded)]


def weighted_level_average(pairs: Iterable[Tuple[str, float]]) -> Optional[float]:
    """
    Weighted mean of level weights from (level_code, weight) pairs.
    Returns None when nothing contributes.
    """
    total = 0.0
    total_weight = 0.0
    for code, weight in pairs:
        total += level_weight(code) * weight
        total_weight += weight
    if total_weight <= 0:
        return None
    return total / total_weight


def reduce_levels(pairs: Iterable[Tuple[str, float]]) -> Optional[Tuple[str, float]]:
    """The single levels -> level reduction used at every roll-up stage."""
    average = weighted_level_average(pairs)
    if average is None:
        return None
    return level_from_average(average), average


def empty_counts() -> dict:
    return {code: 0 for code in PERFORMANCE_LEVELS}
