# services/pirep-service/src/apps/core/services/flight_time.py
"""
Flight Time Computation

Pure functions deriving the credited (adjusted) flight time of a PIREP from
its base duration and an optional multiplier.

All durations are integer minutes. A missing multiplier is equivalent to a
multiplier of 1 in every formula.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, float, Decimal]


def round_half_away(value: Number) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _effective(multiplier_value: Optional[Number]) -> Number:
    return 1 if multiplier_value is None else multiplier_value


def compute_adjusted(base: int, multiplier_value: Optional[Number] = None) -> int:
    """
    Credited minutes for a base duration.

    Args:
        base: Raw flight time in minutes
        multiplier_value: Optional multiplier scalar

    Returns:
        base unchanged without a multiplier, else round(base * value)
    """
    if multiplier_value is None:
        return base
    return round_half_away(base * multiplier_value)


def recover_base(adjusted: int, multiplier_value: Optional[Number] = None) -> int:
    """Base minutes an adjusted value was derived from."""
    return round_half_away(adjusted / _effective(multiplier_value))


def is_credited_value(adjusted: int, multiplier_value: Optional[Number] = None) -> bool:
    """True when adjusted is round(base * value) for its recovered base."""
    return compute_adjusted(recover_base(adjusted, multiplier_value), multiplier_value) == adjusted


def recompute_on_multiplier_change(
    current_adjusted: int,
    old_multiplier_value: Optional[Number],
    new_multiplier_value: Optional[Number],
) -> int:
    """
    Re-derive credited minutes after the multiplier is swapped.

    Always goes through the base: round(round(T / M1) * M2). Repeated swaps
    may drift by a minute; that loss is part of the contract.
    """
    base = recover_base(current_adjusted, old_multiplier_value)
    return round_half_away(base * _effective(new_multiplier_value))


def recompute_on_direct_time_change(
    hours: int,
    minutes: int,
    current_multiplier_value: Optional[Number] = None,
) -> int:
    """Credited minutes for a raw time entered as hours + minutes."""
    base_minutes = hours * 60 + minutes
    return round_half_away(base_minutes * _effective(current_multiplier_value))


def format_hours_minutes(total_minutes: Optional[Number]) -> str:
    """Format minutes as '8hrs 05m'."""
    minutes = total_minutes if total_minutes is not None else 0

    if isinstance(minutes, float) and not math.isfinite(minutes):
        return '0hrs 00m'
    if minutes < 0:
        return '0hrs 00m'

    whole = round_half_away(minutes)
    hours, mins = divmod(whole, 60)
    return f"{hours}hrs {mins:02d}m"


def format_decimal_hours(total_minutes: int) -> str:
    """Format minutes as decimal hours to one place, e.g. 510 -> '8.5h'."""
    tenths = round_half_away(Decimal(total_minutes) / 60 * 10)
    if tenths % 10 == 0:
        return f"{tenths // 10}h"
    return f"{tenths / 10}h"
