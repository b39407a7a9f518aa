"""
Business metrics derived from aggregated sums.

Pure functions with no database access. Denominators of zero always yield 0
so reports never carry NaN or infinities. Nothing here rounds: rounding to
two decimals happens once, when a report response is assembled.
"""

from datetime import date, timedelta
from typing import Optional, Tuple

# Performance score policy
PROGRESS_WEIGHT = 0.4
VARIANCE_WEIGHT = 0.3
HARVEST_WEIGHT = 0.3
VARIANCE_MULTIPLIER = 2
VARIANCE_CLAMP = 30
HARVEST_FULL_CREDIT = 30

DUE_SOON_DAYS = 7

KHARIF = 'Kharif'
RABI = 'Rabi'
ZAID = 'Zaid'
SEASONS = (KHARIF, RABI, ZAID)


def round2(value) -> float:
    """Round a currency or percentage value for a response."""
    return round(float(value or 0), 2)


def safe_divide(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


def percentage(part, whole) -> float:
    """``part`` as a percentage of ``whole``; 0 when ``whole`` is 0."""
    if not whole or whole <= 0:
        return 0.0
    return float(part) / float(whole) * 100


def clamp(value, low, high):
    return max(low, min(high, value))


def profit_margin(revenue, expenditure) -> float:
    """Net profit as a percentage of revenue."""
    if revenue <= 0:
        return 0.0
    return (float(revenue) - float(expenditure)) / float(revenue) * 100


def roi(profit, expenses) -> float:
    """Return on investment: profit as a percentage of expenses."""
    if expenses <= 0:
        return 0.0
    return float(profit) / float(expenses) * 100


def revenue_per_unit(revenue, quantity) -> float:
    if quantity <= 0:
        return 0.0
    return float(revenue) / float(quantity)


def growth_rate(current, previous) -> float:
    """
    Period-over-period growth in percent.

    A rise from nothing counts as 100% growth; nothing to nothing is 0%.
    """
    if not previous:
        return 100.0 if current > 0 else 0.0
    return (float(current) - float(previous)) / float(previous) * 100


# =============================================================================
# CROP SCHEDULE METRICS
# =============================================================================

def days_between(earlier: Optional[date], later: Optional[date]) -> int:
    if earlier is None or later is None:
        return 0
    return (later - earlier).days


def expected_progress(days_from_start, total_cycle_days) -> float:
    """Progress a crop should show if it grows linearly from start to harvest."""
    if total_cycle_days <= 0:
        return 0.0
    return float(days_from_start) / float(total_cycle_days) * 100


def progress_variance(actual_progress, expected) -> float:
    """Positive when a crop is ahead of schedule."""
    return float(actual_progress) - float(expected)


def performance_score(progress, variance, days_to_harvest) -> float:
    """
    Weighted 0-100 composite of stage progress, schedule variance and
    harvest proximity.

    Variance counts double and is capped at +/-30 points. Crops whose
    expected harvest is still ahead get the full 30 harvest points; overdue
    crops lose one point per day late down to zero.
    """
    variance_points = clamp(VARIANCE_MULTIPLIER * variance, -VARIANCE_CLAMP, VARIANCE_CLAMP)
    if days_to_harvest >= 0:
        harvest_points = HARVEST_FULL_CREDIT
    else:
        harvest_points = clamp(HARVEST_FULL_CREDIT + days_to_harvest, 0, HARVEST_FULL_CREDIT)
    return (
        PROGRESS_WEIGHT * float(progress)
        + VARIANCE_WEIGHT * variance_points
        + HARVEST_WEIGHT * harvest_points
    )


def crop_status(days_to_harvest, stage) -> str:
    """
    Schedule status label for a crop.

    Evaluated in order: Overdue, Due Soon, Completed, Ready, In Progress.
    A harvested crop whose expected harvest date has passed still reads
    Overdue.
    """
    if days_to_harvest < 0:
        return 'Overdue'
    if days_to_harvest <= DUE_SOON_DAYS:
        return 'Due Soon'
    if stage == 'Harvested':
        return 'Completed'
    if stage == 'Harvesting':
        return 'Ready'
    return 'In Progress'


# =============================================================================
# SEASONS
# =============================================================================

def season_for(day: date) -> Tuple[str, int]:
    """
    Agricultural season and season-year for a calendar day.

    Kharif runs Jun 1 - Oct 31 and Zaid May 1 - May 31 of the same year.
    Rabi runs Nov 1 - Apr 30, so January to April belong to the Rabi
    season that started the previous November.
    """
    month = day.month
    if 6 <= month <= 10:
        return KHARIF, day.year
    if month >= 11:
        return RABI, day.year
    if month <= 4:
        return RABI, day.year - 1
    return ZAID, day.year


def season_bounds(season: str, season_year: int) -> Tuple[date, date]:
    """Inclusive first and last day of a season."""
    if season == KHARIF:
        return date(season_year, 6, 1), date(season_year, 10, 31)
    if season == RABI:
        return date(season_year, 11, 1), date(season_year + 1, 5, 1) - timedelta(days=1)
    if season == ZAID:
        return date(season_year, 5, 1), date(season_year, 5, 31)
    raise ValueError(f"Unrecognized season: {season!r}")
