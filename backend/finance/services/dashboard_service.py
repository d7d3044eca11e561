"""
Read-only dashboard aggregates.

All figures are computed on demand from stored rows; nothing here writes.
Amounts are cents. Month windows are calendar months in UTC; "future"
figures use the same cutoff as balance projection so a transaction is either
in an account balance or in a future aggregate, never both.
"""

import logging

from django.db.models import Count, Max, Q, Sum
from django.utils import timezone

from ..models import Account, SavingsBox, Transaction
from ..utils.currency_utils import balance_cutoff, month_bounds, percentage, shift_month

logger = logging.getLogger(__name__)

UNCATEGORIZED_LABEL = "Uncategorized"
UNCATEGORIZED_COLOR = "#9CA3AF"


class DashboardService:
    """
    Dashboard overview, monthly history and expense breakdown.
    """

    @staticmethod
    def _income_expense(queryset):
        totals = queryset.aggregate(
            income=Sum("amount", filter=Q(type="INCOME")),
            expenses=Sum("amount", filter=Q(type="EXPENSE")),
            income_count=Count("id", filter=Q(type="INCOME")),
            expense_count=Count("id", filter=Q(type="EXPENSE")),
            max_income=Max("amount", filter=Q(type="INCOME")),
            max_expense=Max("amount", filter=Q(type="EXPENSE")),
        )
        return {key: value or 0 for key, value in totals.items()}

    @staticmethod
    def get_overview(user, now=None):
        """
        Current-month figures, balances and upcoming cash flow.

        Args:
            user: Owner
            now: Reference instant (defaults to ``timezone.now()``)

        Returns:
            dict: total_balance, monthly_income, monthly_expenses,
                monthly_savings, income_count, expense_count, max_income,
                max_expense, future_income, future_expenses,
                next_month_income, next_month_expenses, savings_total
        """
        now = now or timezone.now()
        ledger = Transaction.objects.for_user(user)

        month_start, month_end = month_bounds(now.year, now.month)
        monthly = DashboardService._income_expense(
            ledger.filter(date__gte=month_start, date__lte=month_end)
        )

        future = DashboardService._income_expense(
            ledger.filter(date__gt=balance_cutoff(now))
        )

        next_year, next_month = shift_month(now.year, now.month, 1)
        next_start, next_end = month_bounds(next_year, next_month)
        upcoming = DashboardService._income_expense(
            ledger.filter(date__gte=next_start, date__lte=next_end)
        )

        total_balance = (
            Account.objects.for_user(user).aggregate(total=Sum("balance"))["total"]
            or 0
        )
        savings_total = (
            SavingsBox.objects.for_user(user)
            .active()
            .aggregate(total=Sum("current_amount"))["total"]
            or 0
        )

        overview = {
            "total_balance": total_balance,
            "monthly_income": monthly["income"],
            "monthly_expenses": monthly["expenses"],
            "monthly_savings": monthly["income"] - monthly["expenses"],
            "income_count": monthly["income_count"],
            "expense_count": monthly["expense_count"],
            "max_income": monthly["max_income"],
            "max_expense": monthly["max_expense"],
            "future_income": future["income"],
            "future_expenses": future["expenses"],
            "next_month_income": upcoming["income"],
            "next_month_expenses": upcoming["expenses"],
            "savings_total": savings_total,
        }

        logger.debug(
            "Dashboard overview computed",
            extra={
                "user_id": user.id,
                "total_balance": total_balance,
                "action": "dashboard_overview",
                "component": "DashboardService",
            },
        )
        return overview

    @staticmethod
    def get_monthly_data(user, months=6, now=None):
        """
        Income and expenses per month, oldest first, ending with the current month.

        Returns:
            list[dict]: month ("YYYY-MM"), income, expenses, balance
        """
        now = now or timezone.now()
        ledger = Transaction.objects.for_user(user)

        result = []
        for offset in range(months - 1, -1, -1):
            year, month = shift_month(now.year, now.month, -offset)
            start, end = month_bounds(year, month)
            totals = DashboardService._income_expense(
                ledger.filter(date__gte=start, date__lte=end)
            )
            result.append(
                {
                    "month": f"{year:04d}-{month:02d}",
                    "income": totals["income"],
                    "expenses": totals["expenses"],
                    "balance": totals["income"] - totals["expenses"],
                }
            )
        return result

    @staticmethod
    def get_expense_breakdown(user, period="current", now=None):
        """
        Expenses of one month grouped by category, largest first.

        Args:
            user: Owner
            period: "current" or "previous" month

        Returns:
            dict: month, total and categories (category_id, name, color,
                amount, percentage)
        """
        now = now or timezone.now()
        offset = -1 if period == "previous" else 0
        year, month = shift_month(now.year, now.month, offset)
        start, end = month_bounds(year, month)

        rows = (
            Transaction.objects.for_user(user)
            .filter(type="EXPENSE", date__gte=start, date__lte=end)
            .values("category_id", "category__name", "category__color")
            .annotate(amount=Sum("amount"))
            .order_by("-amount")
        )

        rows = list(rows)
        total = sum(row["amount"] for row in rows)
        categories = [
            {
                "category_id": row["category_id"],
                "name": row["category__name"] or UNCATEGORIZED_LABEL,
                "color": row["category__color"] or UNCATEGORIZED_COLOR,
                "amount": row["amount"],
                "percentage": percentage(row["amount"], total),
            }
            for row in rows
        ]

        return {
            "month": f"{year:04d}-{month:02d}",
            "total": total,
            "categories": categories,
        }
