from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

_WEEKEND = {5, 6}  # Saturday, Sunday


def count_business_days(start_date: date, end_date: date) -> int:
    """Count Monday-Friday dates in the inclusive range [start_date, end_date]."""
    if end_date < start_date:
        return 0
    total_days = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5
    for offset in range(remainder):
        if (start_date + timedelta(days=full_weeks * 7 + offset)).weekday() not in _WEEKEND:
            count += 1
    return count


def estimate_request_hours(start_date: date, end_date: date, workday_hours: Decimal) -> Decimal:
    """Default cost of a request: business days in range times the workday length.

    Only used when the caller does not supply hours; the stored value is what
    approval later deducts.
    """
    return Decimal(count_business_days(start_date, end_date)) * workday_hours
