"""
Investment tracking service.

Positions carry an initial and a current value in cents. Contributions and
yields raise the current value; redemptions and fees lower it, never below
zero. Creating a position records its initial contribution.
"""

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Count, Sum

from ..models import Investment, InvestmentTransaction
from ..utils.currency_utils import days_ago, percentage

logger = logging.getLogger(__name__)

CATEGORIES = [choice for choice, _ in Investment.CATEGORY_CHOICES]
TRANSACTION_TYPES = [choice for choice, _ in InvestmentTransaction.TRANSACTION_TYPES]
MUTABLE_FIELDS = (
    "name",
    "category",
    "description",
    "initial_amount",
    "current_amount",
    "target_amount",
    "investment_date",
    "color",
    "is_active",
)
CONTRIBUTION_WINDOW_DAYS = 30


class InvestmentService:
    """
    Investment positions, their movements and portfolio summaries.
    """

    @staticmethod
    def _validate_investment_data(data, is_update=False):
        if not is_update or "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Investment name is required")
            data["name"] = name

        if not is_update or "category" in data:
            if data.get("category") not in CATEGORIES:
                raise ValidationError(
                    f"Category must be one of: {', '.join(CATEGORIES)}"
                )

        if not is_update or "initial_amount" in data:
            initial = data.get("initial_amount")
            if initial is None or initial <= 0:
                raise ValidationError("Initial amount must be greater than zero")

        if data.get("current_amount") is not None and data["current_amount"] < 0:
            raise ValidationError("Current amount cannot be negative")

        if data.get("target_amount") is not None and data["target_amount"] <= 0:
            raise ValidationError("Target amount must be greater than zero")

        if not is_update and not data.get("investment_date"):
            raise ValidationError("Missing required field: investment_date")

    @staticmethod
    @db_transaction.atomic
    def create_investment(user, data):
        """
        Create a position and its initial ``aporte`` movement.

        Returns:
            Investment: The created investment
        """
        data = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
        InvestmentService._validate_investment_data(data)
        if data.get("current_amount") is None:
            data["current_amount"] = data["initial_amount"]

        investment = Investment.objects.create(user=user, **data)
        InvestmentTransaction.objects.create(
            user=user,
            investment=investment,
            type="aporte",
            amount=investment.initial_amount,
            description="Initial contribution",
            transaction_date=investment.investment_date,
        )

        logger.info(
            "Investment created",
            extra={
                "user_id": user.id,
                "investment_id": investment.id,
                "category": investment.category,
                "initial_amount": investment.initial_amount,
                "action": "investment_created",
                "component": "InvestmentService",
            },
        )
        return investment

    @staticmethod
    @db_transaction.atomic
    def update_investment(investment, data):
        data = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
        InvestmentService._validate_investment_data(data, is_update=True)

        if "category" in data and "color" not in data:
            data["color"] = Investment.CATEGORY_COLORS.get(data["category"], "")

        for field, value in data.items():
            setattr(investment, field, value)
        investment.save()

        logger.info(
            "Investment updated",
            extra={
                "user_id": investment.user_id,
                "investment_id": investment.id,
                "updated_fields": list(data.keys()),
                "action": "investment_updated",
                "component": "InvestmentService",
            },
        )
        return investment

    @staticmethod
    @db_transaction.atomic
    def delete_investment(investment):
        investment_id = investment.id
        investment.delete()
        logger.info(
            "Investment deleted",
            extra={
                "user_id": investment.user_id,
                "investment_id": investment_id,
                "action": "investment_deleted",
                "component": "InvestmentService",
            },
        )
        return investment_id

    @staticmethod
    @db_transaction.atomic
    def add_transaction(investment, data):
        """
        Record a movement and apply it to the position's current value.

        Args:
            investment: Owned Investment
            data: Dict with type, amount (cents), transaction_date, description

        Returns:
            InvestmentTransaction: The recorded movement

        Raises:
            ValidationError: Unknown type or non-positive amount
        """
        tx_type = data.get("type")
        if tx_type not in TRANSACTION_TYPES:
            raise ValidationError(
                f"Type must be one of: {', '.join(TRANSACTION_TYPES)}"
            )
        amount = data.get("amount")
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if not data.get("transaction_date"):
            raise ValidationError("Missing required field: transaction_date")

        investment = Investment.objects.select_for_update().get(pk=investment.pk)
        movement = InvestmentTransaction.objects.create(
            user=investment.user,
            investment=investment,
            type=tx_type,
            amount=amount,
            description=data.get("description", ""),
            transaction_date=data["transaction_date"],
        )

        if tx_type in InvestmentTransaction.INCREASING_TYPES:
            investment.current_amount += amount
        else:
            investment.current_amount = max(0, investment.current_amount - amount)
        investment.save(update_fields=["current_amount", "updated_at"])

        logger.info(
            "Investment transaction recorded",
            extra={
                "user_id": investment.user_id,
                "investment_id": investment.id,
                "investment_transaction_id": movement.id,
                "type": tx_type,
                "amount": amount,
                "current_amount": investment.current_amount,
                "action": "investment_transaction_recorded",
                "component": "InvestmentService",
            },
        )
        return movement

    @staticmethod
    def get_summary(user, now=None):
        """
        Portfolio rollup over active positions.

        Returns:
            dict: total_invested, current_value, total_return (cents),
                return_percentage (Decimal), monthly_contributions (cents,
                ``aporte`` in the last 30 days), active_investments
        """
        active = Investment.objects.for_user(user).filter(is_active=True)
        totals = active.aggregate(
            invested=Sum("initial_amount"), current=Sum("current_amount")
        )
        invested = totals["invested"] or 0
        current = totals["current"] or 0
        total_return = current - invested

        monthly = (
            InvestmentTransaction.objects.for_user(user)
            .filter(
                type="aporte",
                transaction_date__gte=days_ago(CONTRIBUTION_WINDOW_DAYS, now),
            )
            .aggregate(total=Sum("amount"))["total"]
            or 0
        )

        return {
            "total_invested": invested,
            "current_value": current,
            "total_return": total_return,
            "return_percentage": percentage(total_return, invested),
            "monthly_contributions": monthly,
            "active_investments": active.count(),
        }

    @staticmethod
    def get_category_stats(user):
        """
        Per-category allocation of active positions, largest first.

        Returns:
            list[dict]: category, label, color, count, total_invested,
                current_value, percentage
        """
        labels = dict(Investment.CATEGORY_CHOICES)
        rows = list(
            Investment.objects.for_user(user)
            .filter(is_active=True)
            .values("category")
            .annotate(
                count=Count("id"),
                invested=Sum("initial_amount"),
                current=Sum("current_amount"),
            )
            .order_by()
        )

        grand_total = sum(row["current"] or 0 for row in rows)
        result = []
        for row in rows:
            category = row["category"]
            result.append(
                {
                    "category": category,
                    "label": labels.get(category, category),
                    "color": Investment.CATEGORY_COLORS.get(category, "#6B7280"),
                    "count": row["count"],
                    "total_invested": row["invested"] or 0,
                    "current_value": row["current"] or 0,
                    "percentage": (
                        percentage(row["current"] or 0, grand_total)
                        if grand_total
                        else Decimal("0.00")
                    ),
                }
            )
        result.sort(key=lambda item: item["current_value"], reverse=True)
        return result
