"""
New versus returning customer classification.

A customer in the period is returning when they have at least one order
strictly before the period start; the lookup runs against the full order
history through the analytics repository, not against the working set.
"""

from decimal import Decimal
from typing import Any, Collection, Sequence
from uuid import UUID

from campus_eats.schemas.analytics import CustomerInsights


class CustomerCohortClassifier:
    """Splits the customers of a working set into new and returning."""

    @staticmethod
    def unique_customer_ids(orders: Sequence[Any]) -> list[UUID]:
        """
        Distinct customer references in first-seen order.

        Orders whose customer was removed (``user_id`` cleared) are skipped.
        """
        seen: dict[UUID, None] = {}
        for order in orders:
            if order.user_id is not None:
                seen.setdefault(order.user_id, None)
        return list(seen)

    def classify(
        self,
        orders: Sequence[Any],
        customers_with_prior_orders: Collection[UUID],
    ) -> CustomerInsights:
        """
        Build the customer insights block.

        Args:
            orders: Working set for the period
            customers_with_prior_orders: Customer ids known to have ordered
                before the period start

        Returns:
            Customer insights with zero defaults for an empty period
        """
        customer_ids = self.unique_customer_ids(orders)
        unique_customers = len(customer_ids)

        prior = set(customers_with_prior_orders)
        returning_customers = sum(1 for customer_id in customer_ids if customer_id in prior)
        new_customers = unique_customers - returning_customers

        if unique_customers:
            orders_per_customer = Decimal(len(orders)) / Decimal(unique_customers)
            new_customer_percentage = (
                Decimal(new_customers) / Decimal(unique_customers) * 100
            )
        else:
            orders_per_customer = Decimal("0")
            new_customer_percentage = Decimal("0")

        return CustomerInsights(
            unique_customers=unique_customers,
            orders_per_customer=orders_per_customer,
            new_customers=new_customers,
            returning_customers=returning_customers,
            new_customer_percentage=new_customer_percentage,
        )
