"""
Time bucketing for analytics time series.

Partitions a half-open period ``[start, end)`` into contiguous hour, day or
month buckets and assigns each order to exactly one bucket by its order date.
Empty buckets are kept with zero counts so charts show gaps as zeros.
"""

from bisect import bisect_right
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Union

from campus_eats.schemas.analytics import TimeSeriesPoint
from campus_eats.services.analytics.errors import AnalyticsValidationError


class Granularity(str, Enum):
    """Time-series bucket width."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"

    @classmethod
    def from_string(cls, value: str) -> "Granularity":
        """Parse a granularity case-insensitively.

        Raises:
            AnalyticsValidationError: If the value is not hour, day or month
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as e:
            raise AnalyticsValidationError(
                f"Invalid granularity: {value}. "
                f"Valid values are: {', '.join(g.value for g in cls)}",
                granularity=value,
            ) from e


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_period(
    start: datetime,
    end: datetime,
    max_window: Optional[timedelta] = None,
) -> tuple[datetime, datetime]:
    """
    Normalize and validate an analytics period.

    Args:
        start: Period start (inclusive)
        end: Period end (exclusive)
        max_window: Longest accepted period, unbounded if None

    Returns:
        Tuple of (start, end) in UTC

    Raises:
        AnalyticsValidationError: If end <= start or the period is too long
    """
    start, end = to_utc(start), to_utc(end)
    if end <= start:
        raise AnalyticsValidationError(
            "Period end must be after period start",
            start=start.isoformat(),
            end=end.isoformat(),
        )
    if max_window is not None and end - start > max_window:
        raise AnalyticsValidationError(
            f"Period exceeds the maximum window of {max_window.days} days",
            start=start.isoformat(),
            end=end.isoformat(),
        )
    return start, end


def add_months(value: datetime, months: int) -> datetime:
    """Shift a first-of-month datetime by whole months."""
    month_index = value.month - 1 + months
    return value.replace(
        year=value.year + month_index // 12,
        month=month_index % 12 + 1,
    )


class TimeBucketer:
    """
    Builds the zero-filled time series for a period.

    Hour buckets step from ``start``; day buckets step from midnight of
    ``start``'s date; month buckets step from the first day of ``start``'s
    month. Bucket generation continues while the bucket start is before
    ``end``, so every instant of ``[start, end)`` falls in exactly one bucket.
    """

    def __init__(
        self,
        start: datetime,
        end: datetime,
        granularity: Union[Granularity, str],
    ):
        if not isinstance(granularity, Granularity):
            granularity = Granularity.from_string(granularity)
        self.start, self.end = validate_period(start, end)
        self.granularity = granularity

    def _anchor(self) -> datetime:
        if self.granularity is Granularity.HOUR:
            return self.start
        if self.granularity is Granularity.DAY:
            return datetime.combine(self.start.date(), time.min, tzinfo=timezone.utc)
        return self.start.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    def _step(self, value: datetime) -> datetime:
        if self.granularity is Granularity.HOUR:
            return value + timedelta(hours=1)
        if self.granularity is Granularity.DAY:
            return value + timedelta(days=1)
        return add_months(value, 1)

    def buckets(self) -> list[tuple[datetime, datetime]]:
        """
        Get the ordered ``(bucket_start, bucket_end)`` pairs.

        Consecutive buckets share their boundary: each bucket's end is the
        next bucket's start.
        """
        result = []
        current = self._anchor()
        while current < self.end:
            following = self._step(current)
            result.append((current, following))
            current = following
        return result

    def fill(self, orders: Iterable[Any]) -> list[TimeSeriesPoint]:
        """
        Count orders and sum their totals per bucket.

        Args:
            orders: Orders exposing ``order_date`` and ``total_amount``

        Returns:
            One point per bucket, in time order, including empty buckets
        """
        buckets = self.buckets()
        starts = [bucket_start for bucket_start, _ in buckets]
        counts = [0] * len(buckets)
        revenue = [Decimal("0")] * len(buckets)

        for order in orders:
            timestamp = to_utc(order.order_date)
            index = bisect_right(starts, timestamp) - 1
            if index < 0 or timestamp >= buckets[index][1]:
                continue
            counts[index] += 1
            revenue[index] += order.total_amount

        return [
            TimeSeriesPoint(
                period=bucket_start,
                period_end=bucket_end,
                order_count=counts[index],
                revenue=revenue[index],
            )
            for index, (bucket_start, bucket_end) in enumerate(buckets)
        ]
