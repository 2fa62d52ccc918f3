"""
Kitchen analytics service.

Orchestrates the analytics repository and the pure aggregation functions:
validates the requested period, materializes the working set, fetches the
previous period count and the returning customer lookup, then hands everything
to the aggregator.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from campus_eats.core.config import Settings, get_settings
from campus_eats.core.logging import get_logger, log_performance
from campus_eats.schemas.analytics import (
    AdminOrderSnapshot,
    AnalyticsReport,
    DailySalesRow,
)
from campus_eats.services.analytics.aggregator import (
    AnalyticsAggregator,
    StatusInclusionPolicy,
)
from campus_eats.services.analytics.cohorts import CustomerCohortClassifier
from campus_eats.services.analytics.comparison import PeriodComparator
from campus_eats.services.analytics.daily import (
    build_admin_snapshot,
    daily_sales_report,
)
from campus_eats.services.analytics.repository import AnalyticsRepository
from campus_eats.services.analytics.time_buckets import (
    Granularity,
    to_utc,
    validate_period,
)

logger = get_logger(__name__)

TOP_CUSTOMERS_LIMIT = 10


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC range covering one calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class AnalyticsService:
    """
    Kitchen analytics service.

    Attributes:
        repository: Analytics repository for data access
        settings: Application settings supplying the inclusion policy, the
            top items limit and the maximum window
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.repository = AnalyticsRepository(session)
        self.settings = settings or get_settings()

    @property
    def policy(self) -> StatusInclusionPolicy:
        return StatusInclusionPolicy(
            include_cancelled=self.settings.analytics_include_cancelled
        )

    async def get_report(
        self,
        start: datetime,
        end: datetime,
        group_by: str = "day",
    ) -> AnalyticsReport:
        """
        Build the analytics report for ``[start, end)``.

        Args:
            start: Period start (inclusive)
            end: Period end (exclusive)
            group_by: Time-series granularity (hour, day or month)

        Returns:
            Complete analytics report

        Raises:
            AnalyticsValidationError: If the period or granularity is invalid
            AnalyticsRepositoryError: If a query fails
        """
        granularity = Granularity.from_string(group_by)
        start, end = validate_period(
            start,
            end,
            max_window=timedelta(days=self.settings.analytics_max_window_days),
        )
        policy = self.policy

        with log_performance(
            logger,
            "analytics_report",
            start=start.isoformat(),
            end=end.isoformat(),
            granularity=granularity.value,
        ):
            working_set = await self.repository.fetch_orders(start, end)

            previous_start, previous_end = PeriodComparator.previous_period(start, end)
            previous_count = await self.repository.fetch_order_count(
                previous_start,
                previous_end,
                exclude_cancelled=not policy.include_cancelled,
            )

            customer_ids = CustomerCohortClassifier.unique_customer_ids(working_set)
            returning_ids = await self.repository.fetch_customers_with_prior_orders(
                customer_ids, start
            )

            aggregator = AnalyticsAggregator(
                policy=policy,
                top_items_limit=self.settings.analytics_top_items_limit,
            )
            report = aggregator.build_report(
                working_set,
                start,
                end,
                granularity,
                previous_count,
                returning_ids,
            )

        logger.info(
            "Analytics report built",
            orders=len(working_set),
            previous_count=previous_count,
            buckets=len(report.time_series),
        )

        return report

    async def get_daily_sales(self, day: date) -> list[DailySalesRow]:
        """
        Get per-item sales for one UTC calendar day.

        Raises:
            AnalyticsRepositoryError: If the query fails
        """
        start, end = day_bounds(day)
        orders = await self.repository.fetch_orders(start, end)
        rows = daily_sales_report(orders)

        logger.info("Daily sales report built", day=day.isoformat(), items=len(rows))

        return rows

    async def get_admin_snapshot(
        self,
        now: Optional[datetime] = None,
    ) -> AdminOrderSnapshot:
        """
        Get today's order figures and the top customers.

        Args:
            now: Reference time, defaults to the current UTC time

        Raises:
            AnalyticsRepositoryError: If a query fails
        """
        now = now or datetime.now(timezone.utc)
        start, end = day_bounds(to_utc(now).date())

        orders_today = await self.repository.fetch_orders(start, end)
        top_customers = await self.repository.fetch_top_customers(TOP_CUSTOMERS_LIMIT)

        return build_admin_snapshot(now, orders_today, top_customers)
