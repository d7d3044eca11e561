"""
Integration tests for the ledger API endpoints.

Every response is checked for the ``{success, data|error}`` envelope; money
crosses the wire in major units and is stored as cents.
"""

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from finance.models import (Account, FinancialGoal, SavingsBox,
                            SavingsTransaction, Transaction)

from ..factories import (AccountFactory, CategoryFactory, FinancialGoalFactory,
                         InvestmentFactory, SavingsBoxFactory,
                         TransactionFactory, UserFactory)

# =============================================================================
# URL ENDPOINT CONSTANTS
# =============================================================================

ACCOUNT_LIST = "account-list"
ACCOUNT_DETAIL = "account-detail"
ACCOUNT_REPROJECT = "account-reproject"
ACCOUNT_AUDIT = "account-audit"
CATEGORY_LIST = "category-list"
CATEGORY_DETAIL = "category-detail"
TRANSACTION_LIST = "transaction-list"
TRANSACTION_DETAIL = "transaction-detail"
TRANSACTION_RECENT = "transaction-recent"
GOAL_LIST = "goal-list"
GOAL_CONTRIBUTE = "goal-contribute"
SAVINGS_BOX_LIST = "savings-box-list"
SAVINGS_BOX_DETAIL = "savings-box-detail"
SAVINGS_BOX_STATS = "savings-box-stats"
SAVINGS_BOX_SUMMARY = "savings-box-summary"
SAVINGS_TX_LIST = "savings-transaction-list"
SAVINGS_TX_DETAIL = "savings-transaction-detail"
SAVINGS_TX_DEPOSIT = "savings-transaction-deposit"
SAVINGS_TX_WITHDRAW = "savings-transaction-withdraw"
SAVINGS_TX_TRANSFER = "savings-transaction-transfer"
SAVINGS_TX_STATS = "savings-transaction-stats"
INVESTMENT_LIST = "investment-list"
INVESTMENT_TRANSACTIONS = "investment-transactions"
INVESTMENT_CATEGORY_STATS = "investment-category-stats"
USER_SETTINGS_LIST = "user-settings-list"
USER_SETTINGS_DETAIL = "user-settings-detail"
DASHBOARD_OVERVIEW = "dashboard-overview"
DASHBOARD_MONTHLY = "dashboard-monthly-data"
DASHBOARD_BREAKDOWN = "dashboard-expense-breakdown"


def ledger_date(days=0):
    return (timezone.now().date() + timedelta(days=days)).isoformat()


class BaseAPITestCase(APITestCase):
    """Two users; the client is authenticated as the first one."""

    def setUp(self):
        self.user = UserFactory(username="owner")
        self.other_user = UserFactory(username="stranger")
        self.account = AccountFactory(user=self.user, name="Checking")
        self.foreign_account = AccountFactory(user=self.other_user, name="Not mine")
        self.client.force_authenticate(user=self.user)

    def assertSuccess(self, response, expected_status=status.HTTP_200_OK):
        self.assertEqual(response.status_code, expected_status, response.data)
        self.assertIs(response.data["success"], True)
        return response.data["data"]

    def assertError(self, response, expected_status, message=None):
        self.assertEqual(response.status_code, expected_status, response.data)
        self.assertEqual(set(response.data), {"success", "error"})
        self.assertIs(response.data["success"], False)
        if message is not None:
            self.assertEqual(response.data["error"], message)
        return response.data["error"]

    def post_json(self, name, data, **kwargs):
        return self.client.post(reverse(name, **kwargs), data, format="json")


# =============================================================================
# ENVELOPE & AUTHENTICATION
# =============================================================================


class EnvelopeAPITests(BaseAPITestCase):
    def test_unauthenticated_request_is_rejected(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse(ACCOUNT_LIST))

        self.assertError(response, status.HTTP_401_UNAUTHORIZED)

    def test_list_is_owner_scoped(self):
        data = self.assertSuccess(self.client.get(reverse(ACCOUNT_LIST)))

        self.assertEqual([row["name"] for row in data], ["Checking"])

    def test_foreign_row_is_not_found(self):
        response = self.client.get(
            reverse(ACCOUNT_DETAIL, args=[self.foreign_account.id])
        )

        self.assertError(response, status.HTTP_404_NOT_FOUND, "Not found.")

    def test_missing_row_looks_like_foreign_row(self):
        response = self.client.get(reverse(ACCOUNT_DETAIL, args=[999999]))

        self.assertError(response, status.HTTP_404_NOT_FOUND, "Not found.")

    def test_money_is_rendered_as_json_number(self):
        self.account.balance = 123456
        self.account.save()

        response = self.client.get(reverse(ACCOUNT_DETAIL, args=[self.account.id]))

        self.assertEqual(response.json()["data"]["balance"], 1234.56)


# =============================================================================
# ACCOUNTS & CATEGORIES
# =============================================================================


class AccountAPITests(BaseAPITestCase):
    def test_create_ignores_client_balance(self):
        data = self.assertSuccess(
            self.post_json(
                ACCOUNT_LIST, {"name": "Wallet", "type": "CASH", "balance": "99.00"}
            ),
            status.HTTP_201_CREATED,
        )

        self.assertEqual(data["balance"], Decimal("0.00"))
        self.assertEqual(data["currency"], "BRL")

    def test_create_validation_error(self):
        response = self.post_json(ACCOUNT_LIST, {"name": "Wallet", "type": "SAFE"})

        self.assertError(response, status.HTTP_400_BAD_REQUEST)

    def test_delete_returns_id(self):
        response = self.client.delete(reverse(ACCOUNT_DETAIL, args=[self.account.id]))

        self.assertEqual(self.assertSuccess(response), self.account.id)
        self.assertFalse(Account.objects.filter(pk=self.account.id).exists())

    def test_audit_and_reproject(self):
        TransactionFactory(user=self.user, account=self.account, type="INCOME", amount=2500)

        audit = self.assertSuccess(
            self.client.get(reverse(ACCOUNT_AUDIT, args=[self.account.id]))
        )
        self.assertEqual(audit["drift"], Decimal("25.00"))

        repaired = self.assertSuccess(
            self.client.post(reverse(ACCOUNT_REPROJECT, args=[self.account.id]))
        )
        self.assertEqual(repaired["balance"], Decimal("25.00"))


class CategoryAPITests(BaseAPITestCase):
    def test_filter_by_type(self):
        CategoryFactory(user=self.user, name="Rent", type="EXPENSE")
        CategoryFactory(user=self.user, name="Salary", type="INCOME")

        data = self.assertSuccess(
            self.client.get(reverse(CATEGORY_LIST), {"type": "income"})
        )

        self.assertEqual([row["name"] for row in data], ["Salary"])

    def test_type_change_blocked_while_in_use(self):
        category = CategoryFactory(user=self.user, type="EXPENSE")
        TransactionFactory(user=self.user, account=self.account, category=category)

        response = self.client.patch(
            reverse(CATEGORY_DETAIL, args=[category.id]), {"type": "INCOME"}, format="json"
        )

        error = self.assertError(response, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Cannot change the type", error)


# =============================================================================
# TRANSACTION LEDGER
# =============================================================================


class TransactionAPITests(BaseAPITestCase):
    def _create(self, **overrides):
        payload = {
            "account": self.account.id,
            "type": "INCOME",
            "amount": "12.34",
            "date": ledger_date(),
        }
        payload.update(overrides)
        return self.post_json(TRANSACTION_LIST, payload)

    def test_create_converts_major_units_to_cents(self):
        data = self.assertSuccess(self._create(), status.HTTP_201_CREATED)

        transaction = Transaction.objects.get(pk=data["id"])
        self.assertEqual(transaction.amount, 1234)
        self.assertEqual(data["amount"], Decimal("12.34"))
        self.assertEqual(data["account_name"], "Checking")
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, 1234)

    def test_balance_recompute_scenario(self):
        self.assertSuccess(self._create(amount="100.00"), status.HTTP_201_CREATED)
        self.assertSuccess(
            self._create(type="EXPENSE", amount="30.00"), status.HTTP_201_CREATED
        )
        self.assertSuccess(
            self._create(amount="50.00", date=ledger_date(30)), status.HTTP_201_CREATED
        )

        account = self.assertSuccess(
            self.client.get(reverse(ACCOUNT_DETAIL, args=[self.account.id]))
        )
        overview = self.assertSuccess(self.client.get(reverse(DASHBOARD_OVERVIEW)))

        self.assertEqual(account["balance"], Decimal("70.00"))
        self.assertEqual(overview["future_income"], Decimal("50.00"))

    def test_invalid_amount(self):
        response = self._create(amount="twelve")

        self.assertError(
            response, status.HTTP_400_BAD_REQUEST, "amount: A valid amount is required."
        )

    def test_non_positive_amount(self):
        response = self._create(amount="0")

        self.assertError(response, status.HTTP_400_BAD_REQUEST, "Amount must be positive")

    def test_foreign_account_rejected(self):
        response = self._create(account=self.foreign_account.id)

        error = self.assertError(response, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(error.startswith("account:"))
        self.assertFalse(Transaction.objects.exists())

    def test_category_type_must_match(self):
        category = CategoryFactory(user=self.user, type="EXPENSE")

        response = self._create(category=category.id)

        self.assertError(
            response,
            status.HTTP_400_BAD_REQUEST,
            "Income transaction cannot have expense category",
        )

    def test_delete_returns_id_and_reprojects(self):
        data = self.assertSuccess(self._create(), status.HTTP_201_CREATED)

        response = self.client.delete(reverse(TRANSACTION_DETAIL, args=[data["id"]]))

        self.assertEqual(self.assertSuccess(response), data["id"])
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, 0)

    def test_filters(self):
        TransactionFactory(
            user=self.user, account=self.account, type="EXPENSE", description="Coffee beans"
        )
        TransactionFactory(
            user=self.user, account=self.account, type="INCOME", description="Salary"
        )
        TransactionFactory(
            user=self.other_user,
            account=self.foreign_account,
            type="EXPENSE",
            description="Coffee elsewhere",
        )

        expenses = self.assertSuccess(
            self.client.get(reverse(TRANSACTION_LIST), {"type": "expense"})
        )
        searched = self.assertSuccess(
            self.client.get(reverse(TRANSACTION_LIST), {"search": "coffee"})
        )

        self.assertEqual(len(expenses), 1)
        self.assertEqual([row["description"] for row in searched], ["Coffee beans"])

    def test_date_range_filter(self):
        TransactionFactory(user=self.user, account=self.account)
        TransactionFactory(
            user=self.user,
            account=self.account,
            date=timezone.now() + timedelta(days=40),
        )

        data = self.assertSuccess(
            self.client.get(
                reverse(TRANSACTION_LIST),
                {"start_date": ledger_date(30), "end_date": ledger_date(60)},
            )
        )

        self.assertEqual(len(data), 1)

    def test_bad_date_filter(self):
        response = self.client.get(reverse(TRANSACTION_LIST), {"start_date": "June"})

        self.assertError(response, status.HTTP_400_BAD_REQUEST)

    def test_malformed_account_filter(self):
        response = self.client.get(reverse(TRANSACTION_LIST), {"account": "abc"})

        self.assertError(
            response, status.HTTP_400_BAD_REQUEST, "account: Must be an integer id."
        )

    def test_malformed_category_filter(self):
        response = self.client.get(reverse(TRANSACTION_LIST), {"category": "1.5"})

        self.assertError(
            response, status.HTTP_400_BAD_REQUEST, "category: Must be an integer id."
        )

    def test_recent_is_limited(self):
        for _ in range(7):
            TransactionFactory(user=self.user, account=self.account)

        default = self.assertSuccess(self.client.get(reverse(TRANSACTION_RECENT)))
        limited = self.assertSuccess(
            self.client.get(reverse(TRANSACTION_RECENT), {"limit": 2})
        )

        self.assertEqual(len(default), 5)
        self.assertEqual(len(limited), 2)


# =============================================================================
# GOALS
# =============================================================================


class GoalAPITests(BaseAPITestCase):
    def test_overshoot_scenario(self):
        goal = self.assertSuccess(
            self.post_json(
                GOAL_LIST,
                {"name": "Trip", "target_amount": "100.00", "current_amount": "90.00"},
            ),
            status.HTTP_201_CREATED,
        )

        data = self.assertSuccess(
            self.post_json(GOAL_CONTRIBUTE, {"amount": "20.00"}, args=[goal["id"]])
        )

        self.assertEqual(data["current_amount"], Decimal("110.00"))
        self.assertIs(data["is_completed"], True)

    def test_contribute_to_foreign_goal(self):
        goal = FinancialGoalFactory(user=self.other_user)

        response = self.post_json(GOAL_CONTRIBUTE, {"amount": "20.00"}, args=[goal.id])

        self.assertError(response, status.HTTP_404_NOT_FOUND, "Not found.")
        goal.refresh_from_db()
        self.assertEqual(goal.current_amount, 0)

    def test_contribute_to_malformed_goal_id(self):
        response = self.post_json(GOAL_CONTRIBUTE, {"amount": "20.00"}, args=["abc"])

        self.assertError(response, status.HTTP_404_NOT_FOUND, "Not found.")

    def test_link_to_foreign_box_rejected(self):
        box = SavingsBoxFactory(user=self.other_user)

        response = self.post_json(
            GOAL_LIST, {"name": "Car", "target_amount": "10.00", "savings_box": box.id}
        )

        self.assertError(response, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(FinancialGoal.objects.exists())


# =============================================================================
# SAVINGS BOXES & MOVEMENTS
# =============================================================================


class SavingsAPITests(BaseAPITestCase):
    def setUp(self):
        super().setUp()
        self.box = SavingsBoxFactory(user=self.user, name="Emergency fund")

    def test_deletion_blocked_scenario(self):
        self.assertSuccess(
            self.post_json(
                SAVINGS_TX_DEPOSIT, {"savings_box_id": self.box.id, "amount": "5.00"}
            ),
            status.HTTP_201_CREATED,
        )

        blocked = self.client.delete(reverse(SAVINGS_BOX_DETAIL, args=[self.box.id]))
        error = self.assertError(blocked, status.HTTP_400_BAD_REQUEST)
        self.assertIn("still holds a balance", error)

        self.assertSuccess(
            self.post_json(
                SAVINGS_TX_WITHDRAW, {"savings_box_id": self.box.id, "amount": "5.00"}
            ),
            status.HTTP_201_CREATED,
        )
        deleted = self.assertSuccess(
            self.client.delete(reverse(SAVINGS_BOX_DETAIL, args=[self.box.id]))
        )

        self.assertEqual(deleted["status"], SavingsBox.STATUS_INACTIVE)
        self.assertEqual(deleted["current_amount"], Decimal("0.00"))

    def test_soft_deleted_box_is_hidden(self):
        self.client.delete(reverse(SAVINGS_BOX_DETAIL, args=[self.box.id]))

        listed = self.assertSuccess(self.client.get(reverse(SAVINGS_BOX_LIST)))
        detail = self.client.get(reverse(SAVINGS_BOX_DETAIL, args=[self.box.id]))

        self.assertEqual(listed, [])
        self.assertError(detail, status.HTTP_404_NOT_FOUND, "Not found.")
        self.assertTrue(SavingsBox.objects.filter(pk=self.box.id).exists())

    def test_deposit_from_account_creates_ledger_expense(self):
        self.account.balance = 10000
        self.account.save()
        TransactionFactory(user=self.user, account=self.account, type="INCOME", amount=10000)

        data = self.assertSuccess(
            self.post_json(
                SAVINGS_TX_DEPOSIT,
                {
                    "savings_box_id": self.box.id,
                    "amount": "25.00",
                    "source_account_id": self.account.id,
                },
            ),
            status.HTTP_201_CREATED,
        )

        self.assertEqual(data["source_account_name"], "Checking")
        self.assertIsNotNone(data["ledger_transaction"])
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, 7500)

    def test_deposit_into_foreign_box(self):
        box = SavingsBoxFactory(user=self.other_user)

        response = self.post_json(
            SAVINGS_TX_DEPOSIT, {"savings_box_id": box.id, "amount": "5.00"}
        )

        self.assertError(response, status.HTTP_404_NOT_FOUND, "Not found.")

    def test_transfer_between_boxes(self):
        self.box.current_amount = 3000
        self.box.save()
        target = SavingsBoxFactory(user=self.user, name="Holidays")

        self.assertSuccess(
            self.post_json(
                SAVINGS_TX_TRANSFER,
                {"from_box_id": self.box.id, "to_box_id": target.id, "amount": "10.00"},
            ),
            status.HTTP_201_CREATED,
        )

        target.refresh_from_db()
        self.assertEqual(target.current_amount, 1000)

    def test_transfer_to_same_box(self):
        response = self.post_json(
            SAVINGS_TX_TRANSFER,
            {"from_box_id": self.box.id, "to_box_id": self.box.id, "amount": "1.00"},
        )

        self.assertError(
            response, status.HTTP_400_BAD_REQUEST, "Cannot transfer to the same savings box"
        )

    def test_movement_log_is_append_only(self):
        self.post_json(SAVINGS_TX_DEPOSIT, {"savings_box_id": self.box.id, "amount": "5.00"})
        movement = SavingsTransaction.objects.get()

        response = self.client.delete(reverse(SAVINGS_TX_DETAIL, args=[movement.id]))

        self.assertError(response, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertTrue(SavingsTransaction.objects.filter(pk=movement.id).exists())

    def test_movement_list_filtered_by_box(self):
        other = SavingsBoxFactory(user=self.user)
        self.post_json(SAVINGS_TX_DEPOSIT, {"savings_box_id": self.box.id, "amount": "5.00"})
        self.post_json(SAVINGS_TX_DEPOSIT, {"savings_box_id": other.id, "amount": "1.00"})

        data = self.assertSuccess(
            self.client.get(reverse(SAVINGS_TX_LIST), {"savings_box": self.box.id})
        )

        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["amount"], Decimal("5.00"))

    def test_malformed_box_filter(self):
        for name in (SAVINGS_TX_LIST, SAVINGS_TX_STATS):
            with self.subTest(name=name):
                response = self.client.get(reverse(name), {"savings_box": "abc"})

                self.assertError(
                    response,
                    status.HTTP_400_BAD_REQUEST,
                    "savings_box: Must be an integer id.",
                )

    def test_stats_and_summary(self):
        self.box.current_amount = 5000
        self.box.target_amount = 10000
        self.box.save()

        stats = self.assertSuccess(self.client.get(reverse(SAVINGS_BOX_STATS)))
        summary = self.assertSuccess(self.client.get(reverse(SAVINGS_BOX_SUMMARY)))

        self.assertEqual(stats["total_boxes"], 1)
        self.assertEqual(stats["total_amount"], Decimal("50.00"))
        self.assertEqual(summary["boxes"][0]["progress"], Decimal("50.00"))


# =============================================================================
# INVESTMENTS
# =============================================================================


class InvestmentAPITests(BaseAPITestCase):
    def test_create_and_record_movement(self):
        investment = self.assertSuccess(
            self.post_json(
                INVESTMENT_LIST,
                {
                    "name": "PETR4",
                    "category": "acoes",
                    "initial_amount": "1000.00",
                    "investment_date": ledger_date(),
                },
            ),
            status.HTTP_201_CREATED,
        )
        self.assertEqual(investment["current_amount"], Decimal("1000.00"))

        self.assertSuccess(
            self.post_json(
                INVESTMENT_TRANSACTIONS,
                {"type": "rendimento", "amount": "15.50", "transaction_date": ledger_date()},
                args=[investment["id"]],
            ),
            status.HTTP_201_CREATED,
        )
        movements = self.assertSuccess(
            self.client.get(reverse(INVESTMENT_TRANSACTIONS, args=[investment["id"]]))
        )

        self.assertEqual({row["type"] for row in movements}, {"aporte", "rendimento"})

    def test_category_stats(self):
        InvestmentFactory(user=self.user, category="fiis", initial_amount=5000)

        data = self.assertSuccess(self.client.get(reverse(INVESTMENT_CATEGORY_STATS)))

        self.assertEqual(data[0]["category"], "fiis")
        self.assertEqual(data[0]["percentage"], Decimal("100.00"))


# =============================================================================
# SETTINGS & DASHBOARD
# =============================================================================


class UserSettingsAPITests(BaseAPITestCase):
    def test_get_and_patch(self):
        current = self.assertSuccess(self.client.get(reverse(USER_SETTINGS_LIST)))

        updated = self.assertSuccess(
            self.client.patch(
                reverse(USER_SETTINGS_DETAIL, args=[current["id"]]),
                {"theme": "dark"},
                format="json",
            )
        )

        self.assertEqual(updated["theme"], "dark")

    def test_cannot_patch_foreign_settings(self):
        response = self.client.patch(
            reverse(USER_SETTINGS_DETAIL, args=[self.other_user.settings.id]),
            {"theme": "dark"},
            format="json",
        )

        self.assertError(response, status.HTTP_404_NOT_FOUND)


class DashboardAPITests(BaseAPITestCase):
    def test_monthly_data(self):
        data = self.assertSuccess(
            self.client.get(reverse(DASHBOARD_MONTHLY), {"months": 3})
        )

        self.assertEqual(len(data), 3)

    def test_monthly_data_rejects_garbage(self):
        response = self.client.get(reverse(DASHBOARD_MONTHLY), {"months": "many"})

        self.assertError(
            response, status.HTTP_400_BAD_REQUEST, "months: Must be an integer."
        )

    def test_expense_breakdown(self):
        TransactionFactory(user=self.user, account=self.account, amount=4200)

        data = self.assertSuccess(self.client.get(reverse(DASHBOARD_BREAKDOWN)))

        self.assertEqual(data["total"], Decimal("42.00"))
        self.assertEqual(data["categories"][0]["name"], "Uncategorized")

    def test_expense_breakdown_rejects_unknown_period(self):
        response = self.client.get(reverse(DASHBOARD_BREAKDOWN), {"period": "last-year"})

        self.assertError(response, status.HTTP_400_BAD_REQUEST)
