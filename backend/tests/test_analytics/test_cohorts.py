"""Tests for new versus returning customer classification."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from campus_eats.services.analytics.cohorts import CustomerCohortClassifier

ORDER_TIME = datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)


class TestCustomerCohortClassifier:
    """Tests for CustomerCohortClassifier."""

    def test_one_returning_one_new(self, make_order):
        x, y = uuid4(), uuid4()
        orders = [make_order(ORDER_TIME, user_id=x), make_order(ORDER_TIME, user_id=y)]

        insights = CustomerCohortClassifier().classify(orders, {x})

        assert insights.unique_customers == 2
        assert insights.returning_customers == 1
        assert insights.new_customers == 1
        assert insights.new_customer_percentage == Decimal("50")

    def test_repeat_orders_count_once(self, make_order):
        x = uuid4()
        orders = [make_order(ORDER_TIME, user_id=x) for _ in range(3)]

        insights = CustomerCohortClassifier().classify(orders, set())

        assert insights.unique_customers == 1
        assert insights.new_customers == 1
        assert insights.orders_per_customer == Decimal("3")
        assert insights.new_customer_percentage == Decimal("100")

    def test_removed_customers_are_not_counted(self, make_order):
        x = uuid4()
        orders = [make_order(ORDER_TIME, user_id=x), make_order(ORDER_TIME, user_id=None)]

        insights = CustomerCohortClassifier().classify(orders, set())

        assert insights.unique_customers == 1
        assert insights.orders_per_customer == Decimal("2")

    def test_prior_ids_outside_working_set_are_ignored(self, make_order):
        x = uuid4()
        orders = [make_order(ORDER_TIME, user_id=x)]

        insights = CustomerCohortClassifier().classify(orders, {uuid4(), uuid4()})

        assert insights.returning_customers == 0
        assert insights.new_customers == 1

    def test_empty_working_set(self):
        insights = CustomerCohortClassifier().classify([], set())

        assert insights.unique_customers == 0
        assert insights.orders_per_customer == 0
        assert insights.new_customer_percentage == 0

    def test_unique_ids_keep_first_seen_order(self, make_order):
        x, y = uuid4(), uuid4()
        orders = [
            make_order(ORDER_TIME, user_id=y),
            make_order(ORDER_TIME, user_id=x),
            make_order(ORDER_TIME, user_id=y),
        ]

        assert CustomerCohortClassifier.unique_customer_ids(orders) == [y, x]
