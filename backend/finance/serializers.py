"""
Serializers for the personal finance ledger API.

Serializers own the money boundary: every monetary field crosses the API in
major units and is converted to integer cents on entry (``CentsField``), and
back to major units on exit. Writes are delegated to the service layer.

Architecture Pattern:
Serializer (Boundary conversion + field validation) → Services → Database
         ↓
ServiceExceptionHandlerMixin (Unified Error Handling)
"""

import logging
from datetime import date, datetime

from rest_framework import serializers

from .mixins.service_exception_handler import ServiceExceptionHandlerMixin
from .models import (Account, Category, FinancialGoal, Investment,
                     InvestmentTransaction, SavingsBox, SavingsTransaction,
                     Transaction, UserSettings)
from .services.account_service import AccountService
from .services.category_service import CategoryService
from .services.goal_service import GoalService
from .services.investment_service import InvestmentService
from .services.savings_box_service import SavingsBoxService
from .services.transaction_service import TransactionService
from .utils.currency_utils import (CurrencyConversionError, from_cents,
                                   normalize_ledger_date, percentage, to_cents)

logger = logging.getLogger(__name__)

PERCENT_FIELD_KWARGS = {"max_digits": 12, "decimal_places": 2, "read_only": True}

# -------------------------------------------------------------------
# BOUNDARY FIELDS
# -------------------------------------------------------------------


class CentsField(serializers.Field):
    """
    Money field: major units on the wire, integer cents in Python.

    Input accepts numbers or numeric strings and is rounded half up to the
    cent. Output is a two-place decimal rendered as a JSON number.
    """

    default_error_messages = {
        "invalid": "A valid amount is required.",
    }

    def to_internal_value(self, data):
        if isinstance(data, bool):
            self.fail("invalid")
        try:
            return to_cents(data)
        except CurrencyConversionError:
            logger.debug(
                "Money field rejected input",
                extra={
                    "field_name": self.field_name,
                    "action": "cents_field_invalid",
                    "component": "CentsField",
                },
            )
            self.fail("invalid")

    def to_representation(self, value):
        return from_cents(value)


class LedgerDateTimeField(serializers.DateTimeField):
    """
    Transaction date field.

    Accepts a bare ``YYYY-MM-DD`` (pinned to the daily ledger cutoff in UTC)
    or a full ISO 8601 datetime.
    """

    def to_internal_value(self, value):
        if isinstance(value, (date, datetime)):
            return normalize_ledger_date(value)
        if isinstance(value, str) and len(value.strip()) == 10:
            try:
                return normalize_ledger_date(value)
            except ValueError:
                self.fail("invalid", format="YYYY-MM-DD or ISO 8601")
        return normalize_ledger_date(super().to_internal_value(value))


class OwnedPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """Primary key field that only resolves rows owned by the request user."""

    default_error_messages = {
        "does_not_exist": 'Object with id "{pk_value}" not found.',
        "incorrect_type": "Incorrect type. Expected pk value, received {data_type}.",
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return queryset.none()
        return queryset.filter(user=request.user)


# -------------------------------------------------------------------
# USER SETTINGS SERIALIZER
# -------------------------------------------------------------------


class UserSettingsSerializer(serializers.ModelSerializer):
    """Preferences of the authenticated user."""

    class Meta:
        model = UserSettings
        fields = [
            "id",
            "default_currency",
            "date_format",
            "theme",
            "language",
            "updated_at",
        ]
        read_only_fields = ["id", "updated_at"]


# -------------------------------------------------------------------
# ACCOUNT & CATEGORY SERIALIZERS
# -------------------------------------------------------------------


class AccountSerializer(ServiceExceptionHandlerMixin, serializers.ModelSerializer):
    """
    Account serializer.

    ``balance`` is a projection of the ledger and is read-only here.
    """

    balance = CentsField(read_only=True)

    class Meta:
        model = Account
        fields = [
            "id",
            "name",
            "type",
            "balance",
            "currency",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "balance", "created_at", "updated_at"]

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            AccountService.create_account, user, validated_data
        )

    def update(self, instance, validated_data):
        return self.handle_service_call(
            AccountService.update_account, instance, validated_data
        )


class BalanceAuditSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(read_only=True)
    stored = CentsField(read_only=True)
    projected = CentsField(read_only=True)
    drift = CentsField(read_only=True)


class CategorySerializer(ServiceExceptionHandlerMixin, serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "type", "icon", "color", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.category_service = CategoryService()

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            self.category_service.create_category, user, validated_data
        )

    def update(self, instance, validated_data):
        return self.handle_service_call(
            self.category_service.update_category, instance, validated_data
        )


# -------------------------------------------------------------------
# TRANSACTION SERIALIZER
# -------------------------------------------------------------------


class TransactionSerializer(ServiceExceptionHandlerMixin, serializers.ModelSerializer):
    """
    Ledger transaction serializer.

    Ownership of account and category is enforced by the related fields;
    business rules (positive amount, matching category type) are enforced by
    TransactionService, which also re-projects the touched balances.
    """

    account = OwnedPrimaryKeyRelatedField(queryset=Account.objects.all())
    category = OwnedPrimaryKeyRelatedField(
        queryset=Category.objects.all(), required=False, allow_null=True
    )
    account_name = serializers.CharField(source="account.name", read_only=True)
    category_name = serializers.CharField(
        source="category.name", read_only=True, default=None
    )
    category_color = serializers.CharField(
        source="category.color", read_only=True, default=None
    )
    amount = CentsField()
    date = LedgerDateTimeField()

    class Meta:
        model = Transaction
        fields = [
            "id",
            "account",
            "account_name",
            "category",
            "category_name",
            "category_color",
            "type",
            "amount",
            "date",
            "description",
            "is_recurring",
            "recurring_interval",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def create(self, validated_data):
        user = validated_data.pop("user")

        logger.debug(
            "Transaction creation delegated to service",
            extra={
                "user_id": user.id,
                "account_id": validated_data["account"].id,
                "action": "transaction_create_delegated",
                "component": "TransactionSerializer",
            },
        )

        return self.handle_service_call(
            TransactionService.create_transaction, user, validated_data
        )

    def update(self, instance, validated_data):
        return self.handle_service_call(
            TransactionService.update_transaction, instance, validated_data
        )


# -------------------------------------------------------------------
# GOAL SERIALIZERS
# -------------------------------------------------------------------


class FinancialGoalSerializer(
    ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """Goal serializer; ``is_completed`` is derived and never written by clients."""

    target_amount = CentsField()
    current_amount = CentsField(required=False)
    category = OwnedPrimaryKeyRelatedField(
        queryset=Category.objects.all(), required=False, allow_null=True
    )
    account = OwnedPrimaryKeyRelatedField(
        queryset=Account.objects.all(), required=False, allow_null=True
    )
    savings_box = OwnedPrimaryKeyRelatedField(
        queryset=SavingsBox.objects.all(), required=False, allow_null=True
    )
    savings_box_name = serializers.CharField(
        source="savings_box.name", read_only=True, default=None
    )
    progress_percentage = serializers.SerializerMethodField()

    class Meta:
        model = FinancialGoal
        fields = [
            "id",
            "name",
            "description",
            "target_amount",
            "current_amount",
            "progress_percentage",
            "start_date",
            "target_date",
            "category",
            "account",
            "savings_box",
            "savings_box_name",
            "is_completed",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_completed", "created_at", "updated_at"]
        extra_kwargs = {"start_date": {"required": False}}

    def get_progress_percentage(self, obj):
        return percentage(obj.current_amount, obj.target_amount)

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(GoalService.create_goal, user, validated_data)

    def update(self, instance, validated_data):
        return self.handle_service_call(
            GoalService.update_goal, instance, validated_data
        )


class GoalContributionSerializer(serializers.Serializer):
    amount = CentsField()


# -------------------------------------------------------------------
# SAVINGS BOX SERIALIZERS
# -------------------------------------------------------------------


class SavingsBoxSerializer(ServiceExceptionHandlerMixin, serializers.ModelSerializer):
    """Savings box serializer; ``status`` changes only through soft delete."""

    current_amount = CentsField(required=False)
    target_amount = CentsField(required=False, allow_null=True)
    progress_percentage = serializers.SerializerMethodField()

    class Meta:
        model = SavingsBox
        fields = [
            "id",
            "name",
            "description",
            "current_amount",
            "target_amount",
            "progress_percentage",
            "color",
            "icon",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "status", "created_at", "updated_at"]
        extra_kwargs = {
            "color": {"required": False},
            "icon": {"required": False},
        }

    def get_progress_percentage(self, obj):
        if not obj.target_amount:
            return None
        return percentage(obj.current_amount, obj.target_amount, cap=100)

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            SavingsBoxService.create_savings_box, user, validated_data
        )

    def update(self, instance, validated_data):
        return self.handle_service_call(
            SavingsBoxService.update_savings_box, instance, validated_data
        )


class SavingsBoxStatsSerializer(serializers.Serializer):
    total_boxes = serializers.IntegerField(read_only=True)
    total_amount = CentsField(read_only=True)
    total_with_goals = serializers.IntegerField(read_only=True)
    total_completed_goals = serializers.IntegerField(read_only=True)
    average_completion = serializers.DecimalField(**PERCENT_FIELD_KWARGS)


class LinkedGoalSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    target_amount = CentsField(read_only=True)


class SavingsBoxSummaryItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    color = serializers.CharField(read_only=True)
    icon = serializers.CharField(read_only=True)
    current_amount = CentsField(read_only=True)
    target_amount = CentsField(read_only=True, allow_null=True)
    progress = serializers.DecimalField(allow_null=True, **PERCENT_FIELD_KWARGS)
    goal = LinkedGoalSerializer(read_only=True, allow_null=True)


class SavingsBoxSummarySerializer(serializers.Serializer):
    boxes = SavingsBoxSummaryItemSerializer(many=True, read_only=True)
    total_amount = CentsField(read_only=True)
    total_boxes = serializers.IntegerField(read_only=True)


class SavingsBoxTotalSerializer(serializers.Serializer):
    total_amount = CentsField(read_only=True)
    box_count = serializers.IntegerField(read_only=True)


# -------------------------------------------------------------------
# SAVINGS TRANSACTION SERIALIZERS
# -------------------------------------------------------------------


class SavingsTransactionSerializer(serializers.ModelSerializer):
    """Read-only view of the savings movement log."""

    amount = CentsField(read_only=True)
    savings_box_name = serializers.CharField(source="savings_box.name", read_only=True)
    target_box_name = serializers.CharField(
        source="target_box.name", read_only=True, default=None
    )
    source_account_name = serializers.CharField(
        source="source_account.name", read_only=True, default=None
    )

    class Meta:
        model = SavingsTransaction
        fields = [
            "id",
            "savings_box",
            "savings_box_name",
            "type",
            "amount",
            "description",
            "source_account",
            "source_account_name",
            "target_box",
            "target_box_name",
            "ledger_transaction",
            "created_at",
        ]
        read_only_fields = fields


class SavingsDepositSerializer(serializers.Serializer):
    savings_box_id = serializers.IntegerField()
    amount = CentsField()
    source_account_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=500
    )


class SavingsWithdrawSerializer(serializers.Serializer):
    savings_box_id = serializers.IntegerField()
    amount = CentsField()
    target_account_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=500
    )


class SavingsTransferSerializer(serializers.Serializer):
    from_box_id = serializers.IntegerField()
    to_box_id = serializers.IntegerField()
    amount = CentsField()
    description = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=500
    )

    def validate(self, attrs):
        if attrs["from_box_id"] == attrs["to_box_id"]:
            raise serializers.ValidationError("Cannot transfer to the same savings box")
        return attrs


class SavingsTransactionStatsSerializer(serializers.Serializer):
    total_transactions = serializers.IntegerField(read_only=True)
    total_deposits = serializers.IntegerField(read_only=True)
    total_withdraws = serializers.IntegerField(read_only=True)
    total_transfers = serializers.IntegerField(read_only=True)
    total_deposited = CentsField(read_only=True)
    total_withdrawn = CentsField(read_only=True)
    total_transferred = CentsField(read_only=True)
    net_flow = CentsField(read_only=True)


# -------------------------------------------------------------------
# INVESTMENT SERIALIZERS
# -------------------------------------------------------------------


class InvestmentSerializer(ServiceExceptionHandlerMixin, serializers.ModelSerializer):
    initial_amount = CentsField()
    current_amount = CentsField(required=False)
    target_amount = CentsField(required=False, allow_null=True)
    category_label = serializers.CharField(
        source="get_category_display", read_only=True
    )
    return_amount = serializers.SerializerMethodField()
    return_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Investment
        fields = [
            "id",
            "name",
            "category",
            "category_label",
            "description",
            "initial_amount",
            "current_amount",
            "target_amount",
            "return_amount",
            "return_percentage",
            "investment_date",
            "color",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"color": {"required": False}}

    def get_return_amount(self, obj):
        return from_cents(obj.current_amount - obj.initial_amount)

    def get_return_percentage(self, obj):
        return percentage(obj.current_amount - obj.initial_amount, obj.initial_amount)

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            InvestmentService.create_investment, user, validated_data
        )

    def update(self, instance, validated_data):
        return self.handle_service_call(
            InvestmentService.update_investment, instance, validated_data
        )


class InvestmentTransactionSerializer(
    ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    amount = CentsField()

    class Meta:
        model = InvestmentTransaction
        fields = [
            "id",
            "investment",
            "type",
            "amount",
            "description",
            "transaction_date",
            "created_at",
        ]
        read_only_fields = ["id", "investment", "created_at"]

    def create(self, validated_data):
        investment = validated_data.pop("investment")
        return self.handle_service_call(
            InvestmentService.add_transaction, investment, validated_data
        )


class InvestmentSummarySerializer(serializers.Serializer):
    total_invested = CentsField(read_only=True)
    current_value = CentsField(read_only=True)
    total_return = CentsField(read_only=True)
    return_percentage = serializers.DecimalField(**PERCENT_FIELD_KWARGS)
    monthly_contributions = CentsField(read_only=True)
    active_investments = serializers.IntegerField(read_only=True)


class InvestmentCategoryStatSerializer(serializers.Serializer):
    category = serializers.CharField(read_only=True)
    label = serializers.CharField(read_only=True)
    color = serializers.CharField(read_only=True)
    count = serializers.IntegerField(read_only=True)
    total_invested = CentsField(read_only=True)
    current_value = CentsField(read_only=True)
    percentage = serializers.DecimalField(**PERCENT_FIELD_KWARGS)


# -------------------------------------------------------------------
# DASHBOARD SERIALIZERS
# -------------------------------------------------------------------


class DashboardOverviewSerializer(serializers.Serializer):
    total_balance = CentsField(read_only=True)
    monthly_income = CentsField(read_only=True)
    monthly_expenses = CentsField(read_only=True)
    monthly_savings = CentsField(read_only=True)
    income_count = serializers.IntegerField(read_only=True)
    expense_count = serializers.IntegerField(read_only=True)
    max_income = CentsField(read_only=True)
    max_expense = CentsField(read_only=True)
    future_income = CentsField(read_only=True)
    future_expenses = CentsField(read_only=True)
    next_month_income = CentsField(read_only=True)
    next_month_expenses = CentsField(read_only=True)
    savings_total = CentsField(read_only=True)


class MonthlyDataSerializer(serializers.Serializer):
    month = serializers.CharField(read_only=True)
    income = CentsField(read_only=True)
    expenses = CentsField(read_only=True)
    balance = CentsField(read_only=True)


class ExpenseCategorySliceSerializer(serializers.Serializer):
    category_id = serializers.IntegerField(read_only=True, allow_null=True)
    name = serializers.CharField(read_only=True)
    color = serializers.CharField(read_only=True)
    amount = CentsField(read_only=True)
    percentage = serializers.DecimalField(**PERCENT_FIELD_KWARGS)


class ExpenseBreakdownSerializer(serializers.Serializer):
    month = serializers.CharField(read_only=True)
    total = CentsField(read_only=True)
    categories = ExpenseCategorySliceSerializer(many=True, read_only=True)
