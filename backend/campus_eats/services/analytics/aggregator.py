"""
Kitchen analytics aggregation.

The aggregator is a pure function of an already fetched working set, the
previous period's order count and the set of customers known to have ordered
before the period. It performs no I/O, so every figure in the report can be
unit tested from in-memory orders.

Grouping enumerates the working set in the order it is given, which the
analytics repository sorts by ``(order_date, id)``. When two groups tie on the
metric being ranked, the group encountered first wins; ranked lists use a
stable sort so equal entries keep that first-encounter order.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Collection, Hashable, Optional, Sequence, Union
from uuid import UUID

from campus_eats.schemas.analytics import (
    AnalyticsReport,
    AnalyticsSummary,
    BestDay,
    CategoryRevenue,
    HourlyRevenue,
    ItemInsight,
    ItemInsights,
    PeakHour,
    PerformanceMetrics,
    RevenueInsights,
    TopRevenueItem,
)
from campus_eats.services.analytics.cohorts import CustomerCohortClassifier
from campus_eats.services.analytics.comparison import PeriodComparator
from campus_eats.services.analytics.time_buckets import (
    Granularity,
    TimeBucketer,
    to_utc,
)
from campus_eats.services.orders.enums import OrderStatus

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Hour-of-day windows, half-open
MORNING_HOURS = range(6, 12)
EVENING_HOURS = range(17, 22)

UNKNOWN_ITEM_NAME = "Unknown"
OTHER_CATEGORY = "Other"

DEFAULT_TOP_ITEMS_LIMIT = 5

ZERO = Decimal("0")
HUNDRED = Decimal("100")

ItemKey = tuple[Optional[UUID], str]


@dataclass(frozen=True)
class StatusInclusionPolicy:
    """
    Which orders count toward totals.

    With ``include_cancelled`` False, cancelled orders are left out of the
    time series, summary, item and revenue insights, peak hour, best day and
    items per order. Completion figures and customer cohorts always see the
    full working set.
    """

    include_cancelled: bool = True

    def counted(self, orders: Sequence[Any]) -> list[Any]:
        if self.include_cancelled:
            return list(orders)
        return [order for order in orders if order.status != OrderStatus.CANCELLED]


def item_key(line: Any) -> ItemKey:
    """Group key for an order line; severed lines share one key."""
    if line.menu_item is None:
        return (None, UNKNOWN_ITEM_NAME)
    return (line.menu_item_id, line.menu_item.name)


def category_name(line: Any) -> str:
    if line.menu_item is None or not line.menu_item.category:
        return OTHER_CATEGORY
    return line.menu_item.category


def _safe_divide(numerator: Union[Decimal, int], denominator: Union[Decimal, int]) -> Decimal:
    if not denominator:
        return ZERO
    return Decimal(numerator) / Decimal(denominator)


def _first_max(counts: dict[Hashable, int]) -> Optional[Hashable]:
    if not counts:
        return None
    return max(counts, key=counts.__getitem__)


def _first_min(counts: dict[Hashable, int]) -> Optional[Hashable]:
    if not counts:
        return None
    return min(counts, key=counts.__getitem__)


def _item_quantities(orders: Sequence[Any], hours: Optional[range] = None) -> dict[ItemKey, int]:
    quantities: dict[ItemKey, int] = {}
    for order in orders:
        if hours is not None and to_utc(order.order_date).hour not in hours:
            continue
        for line in order.order_items:
            key = item_key(line)
            quantities[key] = quantities.get(key, 0) + line.quantity
    return quantities


def _insight(quantities: dict[ItemKey, int], key: Optional[ItemKey]) -> Optional[ItemInsight]:
    if key is None:
        return None
    menu_item_id, name = key
    return ItemInsight(menu_item_id=menu_item_id, name=name, quantity=quantities[key])


class AnalyticsAggregator:
    """Builds an :class:`AnalyticsReport` from an in-memory working set."""

    def __init__(
        self,
        policy: Optional[StatusInclusionPolicy] = None,
        top_items_limit: int = DEFAULT_TOP_ITEMS_LIMIT,
    ):
        self.policy = policy or StatusInclusionPolicy()
        self.top_items_limit = top_items_limit
        self.cohorts = CustomerCohortClassifier()

    def build_report(
        self,
        working_set: Sequence[Any],
        start: datetime,
        end: datetime,
        granularity: Union[Granularity, str],
        previous_count: int,
        returning_customer_ids: Collection[UUID],
    ) -> AnalyticsReport:
        """
        Assemble the full report for one period.

        Args:
            working_set: Orders with ``order_date`` in ``[start, end)``, line
                items and menu items loaded
            start: Period start (inclusive)
            end: Period end (exclusive)
            granularity: Time-series bucket width
            previous_count: Order count of the preceding equal-length period
            returning_customer_ids: Customers with an order before ``start``

        Returns:
            The analytics report; an empty working set yields the documented
            zero, hundred or absent defaults rather than an error

        Raises:
            AnalyticsValidationError: If the period or granularity is invalid
        """
        bucketer = TimeBucketer(start, end, granularity)
        counted = self.policy.counted(working_set)

        return AnalyticsReport(
            start=bucketer.start,
            end=bucketer.end,
            granularity=bucketer.granularity.value,
            include_cancelled=self.policy.include_cancelled,
            time_series=bucketer.fill(counted),
            summary=self.summarize(counted, previous_count),
            performance=self.performance(counted, working_set),
            items=self.item_insights(counted),
            revenue=self.revenue_insights(counted),
            customers=self.cohorts.classify(working_set, returning_customer_ids),
        )

    def summarize(self, orders: Sequence[Any], previous_count: int) -> AnalyticsSummary:
        total_orders = len(orders)
        total_revenue = sum((order.total_amount for order in orders), ZERO)
        total_items = sum(line.quantity for order in orders for line in order.order_items)

        return AnalyticsSummary(
            total_orders=total_orders,
            total_revenue=total_revenue,
            average_order_value=_safe_divide(total_revenue, total_orders),
            total_items_sold=total_items,
            change_vs_previous=PeriodComparator.change_vs_previous(
                total_orders, previous_count
            ),
        )

    def performance(
        self,
        orders: Sequence[Any],
        working_set: Sequence[Any],
    ) -> PerformanceMetrics:
        """
        Peak hour, best weekday and completion figures.

        ``orders`` is the counted set; completion figures use ``working_set``.
        """
        by_hour: dict[int, int] = {}
        by_weekday: dict[int, int] = {}
        for order in orders:
            timestamp = to_utc(order.order_date)
            by_hour[timestamp.hour] = by_hour.get(timestamp.hour, 0) + 1
            by_weekday[timestamp.weekday()] = by_weekday.get(timestamp.weekday(), 0) + 1

        peak = _first_max(by_hour)
        best = _first_max(by_weekday)

        statuses = Counter(order.status for order in working_set)
        completed = statuses[OrderStatus.COMPLETED]
        cancelled = statuses[OrderStatus.CANCELLED]
        finished = completed + cancelled
        completion_rate = (
            Decimal(completed) / Decimal(finished) * HUNDRED if finished else HUNDRED
        )

        total_items = sum(line.quantity for order in orders for line in order.order_items)

        return PerformanceMetrics(
            peak_hour=(
                PeakHour(hour=peak, order_count=by_hour[peak]) if peak is not None else None
            ),
            best_day_of_week=(
                BestDay(day_name=WEEKDAY_NAMES[best], avg_orders=Decimal(by_weekday[best]))
                if best is not None
                else None
            ),
            completion_rate=completion_rate,
            completed_orders=completed,
            cancelled_orders=cancelled,
            avg_items_per_order=_safe_divide(total_items, len(orders)),
        )

    def item_insights(self, orders: Sequence[Any]) -> ItemInsights:
        overall = _item_quantities(orders)
        morning = _item_quantities(orders, MORNING_HOURS)
        evening = _item_quantities(orders, EVENING_HOURS)

        return ItemInsights(
            most_sold=_insight(overall, _first_max(overall)),
            least_sold=_insight(overall, _first_min(overall)),
            morning_bestseller=_insight(morning, _first_max(morning)),
            evening_bestseller=_insight(evening, _first_max(evening)),
        )

    def revenue_insights(self, orders: Sequence[Any]) -> RevenueInsights:
        hourly_counts = [0] * 24
        hourly_revenue = [ZERO] * 24
        item_revenue: dict[ItemKey, Decimal] = {}
        item_quantity: dict[ItemKey, int] = {}
        category_revenue: dict[str, Decimal] = {}

        for order in orders:
            hour = to_utc(order.order_date).hour
            hourly_counts[hour] += 1
            hourly_revenue[hour] += order.total_amount

            for line in order.order_items:
                key = item_key(line)
                amount = line.quantity * line.unit_price
                item_revenue[key] = item_revenue.get(key, ZERO) + amount
                item_quantity[key] = item_quantity.get(key, 0) + line.quantity
                category = category_name(line)
                category_revenue[category] = category_revenue.get(category, ZERO) + amount

        ranked_items = sorted(item_revenue.items(), key=lambda entry: entry[1], reverse=True)
        top_items = [
            TopRevenueItem(
                menu_item_id=menu_item_id,
                name=name,
                revenue=revenue,
                quantity=item_quantity[(menu_item_id, name)],
            )
            for (menu_item_id, name), revenue in ranked_items[: self.top_items_limit]
        ]

        line_revenue = sum(category_revenue.values(), ZERO)
        categories = []
        if line_revenue > 0:
            ranked_categories = sorted(
                category_revenue.items(), key=lambda entry: entry[1], reverse=True
            )
            categories = [
                CategoryRevenue(
                    category_name=name,
                    revenue=revenue,
                    percentage=revenue / line_revenue * HUNDRED,
                )
                for name, revenue in ranked_categories
            ]

        return RevenueInsights(
            revenue_by_hour=[
                HourlyRevenue(hour=hour, order_count=hourly_counts[hour], revenue=hourly_revenue[hour])
                for hour in range(24)
            ],
            top_items_by_revenue=top_items,
            category_breakdown=categories,
        )


def build_report(
    working_set: Sequence[Any],
    start: datetime,
    end: datetime,
    granularity: Union[Granularity, str],
    previous_count: int,
    returning_customer_ids: Collection[UUID],
    policy: Optional[StatusInclusionPolicy] = None,
    top_items_limit: int = DEFAULT_TOP_ITEMS_LIMIT,
) -> AnalyticsReport:
    """Convenience wrapper around :meth:`AnalyticsAggregator.build_report`."""
    aggregator = AnalyticsAggregator(policy=policy, top_items_limit=top_items_limit)
    return aggregator.build_report(
        working_set,
        start,
        end,
        granularity,
        previous_count,
        returning_customer_ids,
    )
