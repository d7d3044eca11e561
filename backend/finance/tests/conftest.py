# finance/tests/conftest.py
import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from .factories import (AccountFactory, CategoryFactory, SavingsBoxFactory,
                        UserFactory)

# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters and the current-user cache live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def test_user(db):
    return UserFactory(username="testuser", email="test@example.com")


@pytest.fixture
def test_user2(db):
    return UserFactory(username="testuser2", email="test2@example.com")


# =============================================================================
# LEDGER FIXTURES
# =============================================================================


@pytest.fixture
def account(test_user):
    return AccountFactory(user=test_user, name="Checking")


@pytest.fixture
def other_account(test_user):
    return AccountFactory(user=test_user, name="Wallet", type="CASH")


@pytest.fixture
def foreign_account(test_user2):
    return AccountFactory(user=test_user2, name="Someone else's")


@pytest.fixture
def expense_category(test_user):
    return CategoryFactory(user=test_user, name="Groceries", type="EXPENSE")


@pytest.fixture
def income_category(test_user):
    return CategoryFactory(user=test_user, name="Salary", type="INCOME", color="#10B981")


@pytest.fixture
def savings_box(test_user):
    return SavingsBoxFactory(user=test_user, name="Emergency fund")


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(api_client, test_user):
    api_client.force_authenticate(user=test_user)
    return api_client
