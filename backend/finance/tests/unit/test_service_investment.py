# finance/tests/unit/test_service_investment.py
from datetime import date, datetime
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from finance.models import Investment, InvestmentTransaction
from finance.services.investment_service import InvestmentService
from finance.tests.factories import (InvestmentFactory,
                                     InvestmentTransactionFactory)


def _data(**overrides):
    data = {
        "name": "Tesouro Selic",
        "category": "renda_fixa",
        "initial_amount": 100000,
        "investment_date": date(2024, 1, 15),
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestCreateInvestment:
    def test_records_initial_contribution(self, test_user):
        investment = InvestmentService.create_investment(test_user, _data())

        assert investment.current_amount == 100000
        assert investment.color == Investment.CATEGORY_COLORS["renda_fixa"]
        movement = investment.transactions.get()
        assert movement.type == "aporte"
        assert movement.amount == 100000
        assert movement.transaction_date == date(2024, 1, 15)

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": ""}, "Investment name is required"),
            ({"category": "poupanca"}, "Category must be one of"),
            ({"initial_amount": 0}, "Initial amount must be greater than zero"),
            ({"investment_date": None}, "Missing required field: investment_date"),
        ],
    )
    def test_validation(self, test_user, overrides, message):
        with pytest.raises(ValidationError, match=message):
            InvestmentService.create_investment(test_user, _data(**overrides))
        assert not Investment.objects.exists()

    def test_category_change_updates_color(self, test_user):
        investment = InvestmentService.create_investment(test_user, _data())

        InvestmentService.update_investment(investment, {"category": "acoes"})

        assert investment.color == Investment.CATEGORY_COLORS["acoes"]


@pytest.mark.django_db
class TestAddTransaction:
    @pytest.mark.parametrize(
        "tx_type, amount, expected",
        [
            ("aporte", 5000, 105000),
            ("rendimento", 250, 100250),
            ("resgate", 30000, 70000),
            ("taxa", 100, 99900),
            ("resgate", 500000, 0),
        ],
    )
    def test_applies_movement(self, test_user, tx_type, amount, expected):
        investment = InvestmentFactory(user=test_user, initial_amount=100000)

        InvestmentService.add_transaction(
            investment,
            {"type": tx_type, "amount": amount, "transaction_date": date(2024, 2, 1)},
        )

        investment.refresh_from_db()
        assert investment.current_amount == expected

    def test_rejects_unknown_type(self, test_user):
        investment = InvestmentFactory(user=test_user)
        with pytest.raises(ValidationError, match="Type must be one of"):
            InvestmentService.add_transaction(
                investment, {"type": "dividendo", "amount": 1, "transaction_date": date.today()}
            )


@pytest.mark.django_db
class TestPortfolioReports:
    def test_summary(self, test_user):
        now = datetime(2024, 6, 30, 12, 0, tzinfo=dt_timezone.utc)
        a = InvestmentFactory(user=test_user, initial_amount=100000, current_amount=110000)
        InvestmentFactory(user=test_user, initial_amount=50000, current_amount=45000)
        InvestmentFactory(user=test_user, initial_amount=70000, is_active=False)
        InvestmentTransactionFactory(investment=a, amount=2000, transaction_date=date(2024, 6, 20))
        InvestmentTransactionFactory(investment=a, amount=9000, transaction_date=date(2024, 4, 1))
        InvestmentTransactionFactory(
            investment=a, type="rendimento", amount=700, transaction_date=date(2024, 6, 25)
        )

        summary = InvestmentService.get_summary(test_user, now=now)

        assert summary["total_invested"] == 150000
        assert summary["current_value"] == 155000
        assert summary["total_return"] == 5000
        assert summary["return_percentage"] == Decimal("3.33")
        assert summary["monthly_contributions"] == 2000
        assert summary["active_investments"] == 2

    def test_summary_of_empty_portfolio(self, test_user):
        summary = InvestmentService.get_summary(test_user)
        assert summary["total_invested"] == 0
        assert summary["return_percentage"] == Decimal("0.00")

    def test_category_stats(self, test_user):
        InvestmentFactory(user=test_user, category="acoes", initial_amount=1000, current_amount=3000)
        InvestmentFactory(user=test_user, category="acoes", initial_amount=1000, current_amount=3000)
        InvestmentFactory(user=test_user, category="fiis", initial_amount=2000, current_amount=2000)

        stats = InvestmentService.get_category_stats(test_user)

        assert [row["category"] for row in stats] == ["acoes", "fiis"]
        assert stats[0]["label"] == "Ações"
        assert stats[0]["count"] == 2
        assert stats[0]["current_value"] == 6000
        assert stats[0]["percentage"] == Decimal("75.00")
        assert stats[1]["percentage"] == Decimal("25.00")


@pytest.mark.django_db
def test_delete_investment_cascades(test_user):
    investment = InvestmentService.create_investment(test_user, _data())
    investment_id = investment.id

    assert InvestmentService.delete_investment(investment) == investment_id
    assert not InvestmentTransaction.objects.exists()
