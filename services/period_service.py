"""
Budget Period Service
Derives the inclusive end date of a budget period from its start date
"""
from datetime import timedelta
from dateutil.relativedelta import relativedelta
from models.enums import PeriodType


class PeriodService:
    """Service for budget period date calculations"""

    # Length of each period; the end date is the day before start + length.
    # CUSTOM has no duration of its own and falls back to a month.
    PERIOD_LENGTHS = {
        PeriodType.DAILY: relativedelta(days=1),
        PeriodType.WEEKLY: relativedelta(weeks=1),
        PeriodType.MONTHLY: relativedelta(months=1),
        PeriodType.QUARTERLY: relativedelta(months=3),
        PeriodType.YEARLY: relativedelta(years=1),
        PeriodType.CUSTOM: relativedelta(months=1),
    }

    @staticmethod
    def calculate_end_date(start_date, period_type):
        """
        Get the inclusive end date of a period starting on ``start_date``.

        Month arithmetic clamps to the last day of shorter months, so a
        MONTHLY budget starting 2024-01-31 ends 2024-02-28.

        Examples:
            2024-01-15 MONTHLY -> 2024-02-14
            2024-01-01 YEARLY  -> 2024-12-31
            2024-01-01 WEEKLY  -> 2024-01-07
        """
        if isinstance(period_type, str):
            period_type = PeriodType[period_type]
        return start_date + PeriodService.PERIOD_LENGTHS[period_type] - timedelta(days=1)

    @staticmethod
    def days_remaining(end_date, today):
        """Days from ``today`` until ``end_date`` (negative once the period has passed)"""
        return (end_date - today).days
