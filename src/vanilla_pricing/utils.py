"""Helper functions for option valuation: timing, day counts, calculation dates, payoffs."""

from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Iterator
import datetime as dt
import time
import numpy as np

from .enums import DayCountConvention, OptionType
from .exceptions import ValidationError

__all__ = [
    "log_timing",
    "calculate_year_fraction",
    "parse_calculation_date",
    "elapsed_years",
    "effective_maturity",
    "intrinsic_value",
]

SECONDS_IN_DAY = 86400
ISO_DATE_FORMAT = "%Y-%m-%d"


@contextmanager
def log_timing(logger, label: str, enabled: bool) -> Iterator[None]:
    """Log timing for a code block when enabled is True."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("Timing %s: %.6fs", label, elapsed)


def _day_count_30_360_us(start_date: dt.datetime, end_date: dt.datetime) -> float:
    """30/360 (US) day-count fraction between two dates."""
    y1, m1, d1 = start_date.year, start_date.month, start_date.day
    y2, m2, d2 = end_date.year, end_date.month, end_date.day

    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 in (30, 31):
        d2 = 30

    return (360 * (y2 - y1) + 30 * (m2 - m1) + (d2 - d1)) / 360.0


def calculate_year_fraction(
    start_date: dt.datetime,
    end_date: dt.datetime,
    day_count_convention: DayCountConvention = DayCountConvention.ACT_365_25,
) -> float:
    """Calculate year fraction between two dates.

    Parameters
    ==========
    start_date: datetime
        starting date
    end_date: datetime
        ending date
    day_count_convention: DayCountConvention, default DayCountConvention.ACT_365_25
        Day-count basis. Supported:
        - DayCountConvention.ACT_365_25
        - DayCountConvention.ACT_365F
        - DayCountConvention.ACT_360
        - DayCountConvention.THIRTY_360_US

    Returns
    =======
    year_fraction: float
        year fraction between start_date and end_date (negative if end precedes start)

    Examples
    ========
    >>> import datetime as dt
    >>> calculate_year_fraction(dt.datetime(2025, 1, 1), dt.datetime(2026, 1, 1))  # doctest: +SKIP
    0.99931...
    """
    if day_count_convention is DayCountConvention.THIRTY_360_US:
        return _day_count_30_360_us(start_date, end_date)
    if day_count_convention is DayCountConvention.ACT_360:
        denom = 360.0
    elif day_count_convention is DayCountConvention.ACT_365_25:
        denom = 365.25
    elif day_count_convention is DayCountConvention.ACT_365F:
        denom = 365.0
    else:
        raise ValidationError(f"Unsupported day_count_convention: {day_count_convention}")

    delta_days = (end_date - start_date).total_seconds() / SECONDS_IN_DAY
    return delta_days / denom


def parse_calculation_date(value: str | dt.date | None) -> dt.datetime | None:
    """Normalise a calculation date to a naive midnight ``datetime``.

    Accepts ISO ``YYYY-MM-DD`` strings, ``date`` and ``datetime`` objects.
    ``None`` and the empty string mean "no calculation date".
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return dt.datetime.strptime(text, ISO_DATE_FORMAT)
        except ValueError as exc:
            raise ValidationError(f"Failed to parse calculation date: {value!r}") from exc
    raise ValidationError(
        f"calculation_date must be an ISO date string, date or datetime, got {type(value).__name__}"
    )


def elapsed_years(
    calculation_date: str | dt.date | None,
    now: dt.datetime | None = None,
    day_count_convention: DayCountConvention = DayCountConvention.ACT_365_25,
) -> float:
    """Year fraction elapsed between the calculation date and *now* (0 without a date)."""
    start = parse_calculation_date(calculation_date)
    if start is None:
        return 0.0
    if now is None:
        now = dt.datetime.now()
    return calculate_year_fraction(start, now, day_count_convention)


def effective_maturity(config, now: dt.datetime | None = None) -> float:
    """Configured maturity less the time already elapsed since the calculation date."""
    return config.maturity - elapsed_years(
        config.calculation_date, now, config.day_count_convention
    )


def intrinsic_value(
    option_type: OptionType, strike: float, spot: np.ndarray | float
) -> np.ndarray:
    """Vectorized vanilla payoff: max(S-K,0) for calls, max(K-S,0) for puts."""
    spot = np.asarray(spot, dtype=float)
    if option_type is OptionType.CALL:
        return np.maximum(spot - strike, 0.0)
    return np.maximum(strike - spot, 0.0)
