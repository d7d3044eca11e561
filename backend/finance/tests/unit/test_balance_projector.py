# finance/tests/unit/test_balance_projector.py
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from finance.models import Account
from finance.services.balance_projector import BalanceProjector, project
from finance.services.dashboard_service import DashboardService
from finance.services.transaction_service import TransactionService
from finance.tests.factories import TransactionFactory, ledger_today


class TestProjectFold:
    def test_empty_ledger_is_zero(self):
        assert project([]) == 0

    def test_income_adds_expense_subtracts(self):
        entries = [("INCOME", 10000), ("EXPENSE", 3000), ("EXPENSE", 500)]
        assert project(entries) == 6500

    def test_accepts_dicts(self):
        entries = [{"type": "INCOME", "amount": 100}, {"type": "EXPENSE", "amount": 250}]
        assert project(entries) == -150

    @pytest.mark.django_db
    def test_accepts_transactions(self, account):
        rows = [
            TransactionFactory.build(account=account, type="INCOME", amount=700),
            TransactionFactory.build(account=account, type="EXPENSE", amount=200),
        ]
        assert project(rows) == 500


@pytest.mark.django_db
class TestReprojectAccount:
    def test_sums_live_transactions(self, test_user, account):
        TransactionFactory(user=test_user, account=account, type="INCOME", amount=10000)
        TransactionFactory(user=test_user, account=account, type="EXPENSE", amount=2500)

        balance = BalanceProjector.reproject_account(account)

        assert balance == 7500
        assert account.balance == 7500
        account.refresh_from_db()
        assert account.balance == 7500

    def test_future_transactions_are_excluded(self, test_user, account):
        TransactionFactory(user=test_user, account=account, type="INCOME", amount=1000)
        TransactionFactory(
            user=test_user, account=account, type="INCOME", amount=9000, date=ledger_today(1)
        )

        assert BalanceProjector.reproject_account(account) == 1000

    def test_cutoff_boundary(self, test_user, account):
        now = datetime(2024, 5, 10, 15, 0, tzinfo=dt_timezone.utc)
        cutoff = datetime(2024, 5, 10, 3, 0, tzinfo=dt_timezone.utc)
        TransactionFactory(user=test_user, account=account, type="INCOME", amount=100, date=cutoff)
        TransactionFactory(
            user=test_user,
            account=account,
            type="INCOME",
            amount=200,
            date=cutoff + timedelta(microseconds=1),
        )

        assert BalanceProjector.reproject_account(account, now=now) == 100

    def test_only_touches_its_own_account(self, test_user, account, other_account):
        TransactionFactory(user=test_user, account=account, type="INCOME", amount=100)
        TransactionFactory(user=test_user, account=other_account, type="INCOME", amount=999)

        BalanceProjector.reproject_account(account.id)

        assert Account.objects.get(pk=account.pk).balance == 100
        assert Account.objects.get(pk=other_account.pk).balance == 0

    def test_failure_is_logged_and_swallowed(self, test_user, account):
        Account.objects.filter(pk=account.pk).update(balance=4242)

        with patch.object(
            BalanceProjector, "calculate_balance", side_effect=DatabaseError("boom")
        ), patch("finance.services.balance_projector.logger") as mock_logger:
            result = BalanceProjector.reproject_account(account)

        assert result is None
        account.refresh_from_db()
        assert account.balance == 4242
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args[1]["extra"]["severity"] == "high"

    def test_failed_projection_does_not_fail_the_write(self, test_user, account):
        with patch.object(
            BalanceProjector, "calculate_balance", side_effect=DatabaseError("boom")
        ):
            transaction = TransactionService.create_transaction(
                test_user,
                {"account": account, "type": "INCOME", "amount": 500, "date": ledger_today()},
            )

        assert transaction.pk is not None
        account.refresh_from_db()
        assert account.balance == 0

    def test_reproject_accounts_runs_each_once(self, test_user, account, other_account):
        TransactionFactory(user=test_user, account=other_account, type="EXPENSE", amount=300)

        with patch.object(
            BalanceProjector, "reproject_account", wraps=BalanceProjector.reproject_account
        ) as spy:
            results = BalanceProjector.reproject_accounts(
                [account.id, other_account.id, account.id, None]
            )

        assert results == {account.id: 0, other_account.id: -300}
        assert spy.call_count == 2


@pytest.mark.django_db
class TestAudit:
    def test_reports_drift_without_writing(self, test_user, account):
        TransactionFactory(user=test_user, account=account, type="INCOME", amount=1200)

        report = BalanceProjector.audit_account(account)

        assert report == {
            "account_id": account.id,
            "stored": 0,
            "projected": 1200,
            "drift": 1200,
        }
        account.refresh_from_db()
        assert account.balance == 0


@pytest.mark.django_db
def test_balance_recompute_scenario(test_user, account):
    """Two live entries count, the one dated a month ahead is future income."""
    for tx_type, amount, days in (("INCOME", 10000, 0), ("EXPENSE", 3000, 0), ("INCOME", 5000, 30)):
        TransactionService.create_transaction(
            test_user,
            {"account": account, "type": tx_type, "amount": amount, "date": ledger_today(days)},
        )

    account.refresh_from_db()
    assert account.balance == 7000

    overview = DashboardService.get_overview(test_user)
    assert overview["future_income"] == 5000
    assert overview["total_balance"] == 7000
