"""
Period-over-period comparison.

The comparison window is the equal-length period immediately before the
requested one. Only order counts are compared.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional


class PeriodComparator:
    """Derives the preceding period and the order count change against it."""

    @staticmethod
    def previous_period(start: datetime, end: datetime) -> tuple[datetime, datetime]:
        """
        Get the half-open period of equal length ending at ``start``.

        Returns:
            Tuple of (previous_start, previous_end)
        """
        return start - (end - start), start

    @staticmethod
    def change_vs_previous(
        current_count: int,
        previous_count: int,
    ) -> Optional[Decimal]:
        """
        Percentage change of the order count.

        Returns:
            Change in percent, or None when the previous period had no orders
            (no baseline, as opposed to no change)
        """
        if previous_count == 0:
            return None
        return Decimal(current_count - previous_count) / Decimal(previous_count) * 100
