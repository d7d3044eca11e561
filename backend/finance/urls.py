"""
URL configuration for the personal finance ledger API.

This module defines the RESTful routes for every resource together with
their custom action endpoints (reproject, contribute, deposit, ...).
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

# Initialize DefaultRouter for RESTful API endpoints
router = DefaultRouter()

# User settings endpoints
router.register(r"user-settings", views.UserSettingsViewSet, basename="user-settings")

# Accounts with projected balances, reproject/ and audit/
router.register(r"accounts", views.AccountViewSet, basename="account")

# Income and expense categories
router.register(r"categories", views.CategoryViewSet, basename="category")

# Transaction ledger with recent/
router.register(r"transactions", views.TransactionViewSet, basename="transaction")

# Financial goals with contribute/
router.register(r"goals", views.FinancialGoalViewSet, basename="goal")

# Savings boxes (soft delete) with stats/, summary/ and total/
router.register(r"savings-boxes", views.SavingsBoxViewSet, basename="savings-box")

# Savings movement log with deposit/, withdraw/, transfer/ and stats/
router.register(
    r"savings-transactions",
    views.SavingsTransactionViewSet,
    basename="savings-transaction",
)

# Investments with summary/, category-stats/ and per-position transactions/
router.register(r"investments", views.InvestmentViewSet, basename="investment")

# Dashboard aggregates
router.register(r"dashboard", views.DashboardViewSet, basename="dashboard")

urlpatterns = [
    path("", include(router.urls)),
]
