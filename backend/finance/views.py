"""
Core API views for the personal finance ledger.

This module provides thin viewsets for accounts, categories, the transaction
ledger, goals, savings boxes and their movements, investments and the
dashboard. Business logic lives in ``finance.services``; views only scope
querysets to the requesting user, parse query parameters and delegate.
"""

import logging

from django.conf import settings
from django.utils.dateparse import parse_date
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .mixins.envelope import EnvelopeResponseMixin
from .mixins.owner_scoped import OwnerScopedMixin
from .mixins.service_exception_handler import ServiceExceptionHandlerMixin
from .models import (Account, Category, FinancialGoal, Investment, SavingsBox,
                     SavingsTransaction, Transaction, UserSettings)
from .serializers import (AccountSerializer, BalanceAuditSerializer,
                          CategorySerializer, DashboardOverviewSerializer,
                          ExpenseBreakdownSerializer, FinancialGoalSerializer,
                          GoalContributionSerializer,
                          InvestmentCategoryStatSerializer,
                          InvestmentSerializer, InvestmentSummarySerializer,
                          InvestmentTransactionSerializer,
                          MonthlyDataSerializer, SavingsBoxSerializer,
                          SavingsBoxStatsSerializer,
                          SavingsBoxSummarySerializer,
                          SavingsBoxTotalSerializer, SavingsDepositSerializer,
                          SavingsTransactionSerializer,
                          SavingsTransactionStatsSerializer,
                          SavingsTransferSerializer, SavingsWithdrawSerializer,
                          TransactionSerializer, UserSettingsSerializer)
from .services.account_service import AccountService
from .services.category_service import CategoryService
from .services.dashboard_service import DashboardService
from .services.goal_service import GoalService
from .services.investment_service import InvestmentService
from .services.savings_box_service import SavingsBoxService
from .services.savings_transaction_service import SavingsTransactionService
from .services.transaction_service import TransactionService

# Get structured logger for this module
logger = logging.getLogger(__name__)

MAX_RECENT_TRANSACTIONS = 50
MAX_MONTHLY_HISTORY = 24


def _parse_int_param(request, name, default, maximum):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: "Must be an integer."})
    if value < 1:
        raise ValidationError({name: "Must be at least 1."})
    return min(value, maximum)


def _parse_id_param(request, name):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: "Must be an integer id."})


# -------------------------------------------------------------------
# BASE VIEWSET
# -------------------------------------------------------------------


class BaseOwnedViewSet(
    EnvelopeResponseMixin,
    ServiceExceptionHandlerMixin,
    OwnerScopedMixin,
    viewsets.ModelViewSet,
):
    """
    THIN base for owner-scoped CRUD.

    Serializers delegate create/update to services; ``perform_destroy``
    returns what the delete answers with (usually the deleted id).
    """

    permission_classes = [IsAuthenticated]

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        deleted = self.perform_destroy(instance)
        return Response(deleted, status=status.HTTP_200_OK)


# -------------------------------------------------------------------
# USER SETTINGS
# -------------------------------------------------------------------


class UserSettingsViewSet(
    EnvelopeResponseMixin,
    ServiceExceptionHandlerMixin,
    OwnerScopedMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    THIN ViewSet for the requesting user's settings.

    ``GET /user-settings/`` answers with the single settings object.
    """

    queryset = UserSettings.objects.all()
    serializer_class = UserSettingsSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "patch", "head", "options"]

    def list(self, request, *args, **kwargs):
        user_settings, _ = UserSettings.objects.get_or_create(user=request.user)
        return Response(self.get_serializer(user_settings).data)

    def perform_update(self, serializer):
        # post_save on UserSettings drops the cached /auth/me/ payload
        serializer.save()

        logger.info(
            "User settings updated",
            extra={
                "user_id": self.request.user.id,
                "updated_fields": list(serializer.validated_data.keys()),
                "action": "user_settings_update",
                "component": "UserSettingsViewSet",
            },
        )


# -------------------------------------------------------------------
# ACCOUNTS & CATEGORIES
# -------------------------------------------------------------------


class AccountViewSet(BaseOwnedViewSet):
    """Accounts with read-only, projected balances."""

    queryset = Account.objects.all()
    serializer_class = AccountSerializer

    def perform_destroy(self, instance):
        return self.handle_service_call(AccountService.delete_account, instance)

    @action(detail=True, methods=["post"])
    def reproject(self, request, pk=None):
        """Recompute the balance of one account from its ledger."""
        account = self.handle_service_call(AccountService.reproject, self.get_object())
        return Response(self.get_serializer(account).data)

    @action(detail=True, methods=["get"])
    def audit(self, request, pk=None):
        """Stored vs projected balance, without writing."""
        report = self.handle_service_call(AccountService.audit, self.get_object())
        return Response(BalanceAuditSerializer(report).data)


class CategoryViewSet(BaseOwnedViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.category_service = CategoryService()

    def get_queryset(self):
        queryset = super().get_queryset()
        category_type = self.request.query_params.get("type")
        if category_type:
            queryset = queryset.filter(type=category_type.upper())
        return queryset

    def perform_destroy(self, instance):
        return self.handle_service_call(
            self.category_service.delete_category, instance
        )

    @action(detail=True, methods=["get"])
    def usage(self, request, pk=None):
        usage = self.handle_service_call(
            self.category_service.get_category_usage, self.get_object()
        )
        return Response(usage)


# -------------------------------------------------------------------
# TRANSACTION LEDGER
# -------------------------------------------------------------------


class TransactionViewSet(BaseOwnedViewSet):
    """
    THIN ViewSet for ledger transactions.

    Every write goes through TransactionService so account balances are
    re-projected after it.
    """

    queryset = Transaction.objects.all()
    serializer_class = TransactionSerializer
    owner_select_related = ("account", "category")

    def _parse_date_param(self, name):
        raw = self.request.query_params.get(name)
        if not raw:
            return None
        parsed = parse_date(raw)
        if parsed is None:
            raise ValidationError({name: "Date has wrong format. Use YYYY-MM-DD."})
        return parsed

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params

        tx_type = params.get("type")
        if tx_type:
            queryset = queryset.filter(type=tx_type.upper())
        account_id = _parse_id_param(self.request, "account")
        if account_id is not None:
            queryset = queryset.filter(account_id=account_id)
        category_id = _parse_id_param(self.request, "category")
        if category_id is not None:
            queryset = queryset.filter(category_id=category_id)

        start_date = self._parse_date_param("start_date")
        if start_date:
            queryset = queryset.filter(date__date__gte=start_date)
        end_date = self._parse_date_param("end_date")
        if end_date:
            queryset = queryset.filter(date__date__lte=end_date)

        search = params.get("search")
        if search:
            queryset = queryset.filter(description__icontains=search)

        return queryset

    def perform_destroy(self, instance):
        logger.info(
            "Transaction deletion delegated to service",
            extra={
                "user_id": self.request.user.id,
                "transaction_id": instance.id,
                "action": "transaction_delete_delegated",
                "component": "TransactionViewSet",
            },
        )
        return self.handle_service_call(TransactionService.delete_transaction, instance)

    @action(detail=False, methods=["get"])
    def recent(self, request):
        limit = _parse_int_param(
            request,
            "limit",
            getattr(settings, "RECENT_TRANSACTIONS_LIMIT", 5),
            MAX_RECENT_TRANSACTIONS,
        )
        transactions = self.get_queryset()[:limit]
        return Response(self.get_serializer(transactions, many=True).data)


# -------------------------------------------------------------------
# GOALS
# -------------------------------------------------------------------


class FinancialGoalViewSet(BaseOwnedViewSet):
    queryset = FinancialGoal.objects.all()
    serializer_class = FinancialGoalSerializer
    owner_select_related = ("savings_box",)

    def perform_destroy(self, instance):
        return self.handle_service_call(GoalService.delete_goal, instance)

    @action(detail=True, methods=["post"])
    def contribute(self, request, pk=None):
        """Add a contribution (major units) to a goal."""
        goal = self.get_object()
        serializer = GoalContributionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        goal = self.handle_service_call(
            GoalService.contribute,
            request.user,
            goal.pk,
            serializer.validated_data["amount"],
        )
        return Response(self.get_serializer(goal).data)


# -------------------------------------------------------------------
# SAVINGS BOXES
# -------------------------------------------------------------------


class SavingsBoxViewSet(BaseOwnedViewSet):
    """
    Savings boxes. Only active boxes are visible; DELETE is a soft delete
    and answers with the deactivated box.
    """

    queryset = SavingsBox.objects.all()
    serializer_class = SavingsBoxSerializer

    def get_queryset(self):
        return super().get_queryset().active()

    def perform_destroy(self, instance):
        savings_box = self.handle_service_call(
            SavingsBoxService.delete_savings_box, instance
        )
        return self.get_serializer(savings_box).data

    @action(detail=False, methods=["get"])
    def stats(self, request):
        stats = self.handle_service_call(SavingsBoxService.get_stats, request.user)
        return Response(SavingsBoxStatsSerializer(stats).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        summary = self.handle_service_call(SavingsBoxService.get_summary, request.user)
        return Response(SavingsBoxSummarySerializer(summary).data)

    @action(detail=False, methods=["get"])
    def total(self, request):
        total = self.handle_service_call(SavingsBoxService.get_total, request.user)
        return Response(SavingsBoxTotalSerializer(total).data)


class SavingsTransactionViewSet(
    EnvelopeResponseMixin,
    ServiceExceptionHandlerMixin,
    OwnerScopedMixin,
    viewsets.ReadOnlyModelViewSet,
):
    """
    Append-only savings movement log.

    Movements are created only through deposit, withdraw and transfer;
    there is no update or delete.
    """

    queryset = SavingsTransaction.objects.all()
    serializer_class = SavingsTransactionSerializer
    permission_classes = [IsAuthenticated]
    owner_select_related = ("savings_box", "target_box", "source_account")

    def get_queryset(self):
        queryset = super().get_queryset()
        box_id = _parse_id_param(self.request, "savings_box")
        if box_id is not None:
            queryset = queryset.filter(savings_box_id=box_id)
        tx_type = self.request.query_params.get("type")
        if tx_type:
            queryset = queryset.filter(type=tx_type.upper())
        return queryset

    def _created(self, movement):
        return Response(
            self.get_serializer(movement).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["post"])
    def deposit(self, request):
        serializer = SavingsDepositSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = self.handle_service_call(
            SavingsTransactionService.deposit,
            request.user,
            data["savings_box_id"],
            data["amount"],
            source_account_id=data.get("source_account_id"),
            description=data["description"],
        )
        return self._created(movement)

    @action(detail=False, methods=["post"])
    def withdraw(self, request):
        serializer = SavingsWithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = self.handle_service_call(
            SavingsTransactionService.withdraw,
            request.user,
            data["savings_box_id"],
            data["amount"],
            target_account_id=data.get("target_account_id"),
            description=data["description"],
        )
        return self._created(movement)

    @action(detail=False, methods=["post"])
    def transfer(self, request):
        serializer = SavingsTransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = self.handle_service_call(
            SavingsTransactionService.transfer,
            request.user,
            data["from_box_id"],
            data["to_box_id"],
            data["amount"],
            description=data["description"],
        )
        return self._created(movement)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        stats = self.handle_service_call(
            SavingsTransactionService.get_stats,
            request.user,
            box_id=_parse_id_param(request, "savings_box"),
        )
        return Response(SavingsTransactionStatsSerializer(stats).data)


# -------------------------------------------------------------------
# INVESTMENTS
# -------------------------------------------------------------------


class InvestmentViewSet(BaseOwnedViewSet):
    queryset = Investment.objects.all()
    serializer_class = InvestmentSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    def perform_destroy(self, instance):
        return self.handle_service_call(InvestmentService.delete_investment, instance)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        summary = self.handle_service_call(InvestmentService.get_summary, request.user)
        return Response(InvestmentSummarySerializer(summary).data)

    @action(detail=False, methods=["get"], url_path="category-stats")
    def category_stats(self, request):
        stats = self.handle_service_call(
            InvestmentService.get_category_stats, request.user
        )
        return Response(InvestmentCategoryStatSerializer(stats, many=True).data)

    @action(
        detail=True,
        methods=["get", "post"],
        serializer_class=InvestmentTransactionSerializer,
    )
    def transactions(self, request, pk=None):
        investment = self.get_object()

        if request.method == "GET":
            movements = investment.transactions.all()
            return Response(self.get_serializer(movements, many=True).data)

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(investment=investment)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


# -------------------------------------------------------------------
# DASHBOARD
# -------------------------------------------------------------------


class DashboardViewSet(
    EnvelopeResponseMixin, ServiceExceptionHandlerMixin, viewsets.ViewSet
):
    """Read-only aggregates computed on demand."""

    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=["get"])
    def overview(self, request):
        overview = self.handle_service_call(DashboardService.get_overview, request.user)
        return Response(DashboardOverviewSerializer(overview).data)

    @action(detail=False, methods=["get"], url_path="monthly-data")
    def monthly_data(self, request):
        months = _parse_int_param(request, "months", 6, MAX_MONTHLY_HISTORY)
        history = self.handle_service_call(
            DashboardService.get_monthly_data, request.user, months=months
        )
        return Response(MonthlyDataSerializer(history, many=True).data)

    @action(detail=False, methods=["get"], url_path="expense-breakdown")
    def expense_breakdown(self, request):
        period = request.query_params.get("period", "current")
        if period not in ("current", "previous"):
            raise ValidationError({"period": "Must be 'current' or 'previous'."})

        breakdown = self.handle_service_call(
            DashboardService.get_expense_breakdown, request.user, period=period
        )
        return Response(ExpenseBreakdownSerializer(breakdown).data)
