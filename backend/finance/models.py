"""
Database models for the personal finance ledger.

This module defines all database models for the application: user settings,
accounts, categories, the transaction ledger, financial goals, savings boxes
with their append-only movement log, and investments.

Every monetary field is an integer number of cents. Conversion to and from
major units happens only at the API boundary (see finance.serializers).
"""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .managers import OwnedQuerySet, SavingsBoxQuerySet

# Get structured logger for this module
logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# USER SETTINGS
# -------------------------------------------------------------------
# User-specific preferences and personalization options


class UserSettings(models.Model):
    """
    User-specific settings and preferences.

    Created automatically for every new user by a post_save signal.
    """

    CURRENCY_CHOICES = [
        ("BRL", "Brazilian Real"),
        ("USD", "US Dollar"),
        ("EUR", "Euro"),
    ]
    DATE_FORMAT_CHOICES = [
        ("DD/MM/YYYY", "DD/MM/YYYY"),
        ("MM/DD/YYYY", "MM/DD/YYYY"),
        ("YYYY-MM-DD", "YYYY-MM-DD"),
    ]
    THEME_CHOICES = [
        ("light", "Light"),
        ("dark", "Dark"),
        ("system", "System"),
    ]
    LANGUAGE_CHOICES = [
        ("pt-BR", "Português (Brasil)"),
        ("en", "English"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="settings"
    )
    default_currency = models.CharField(
        max_length=3, choices=CURRENCY_CHOICES, default="BRL"
    )
    date_format = models.CharField(
        max_length=10, choices=DATE_FORMAT_CHOICES, default="DD/MM/YYYY"
    )
    theme = models.CharField(max_length=10, choices=THEME_CHOICES, default="system")
    language = models.CharField(
        max_length=5, choices=LANGUAGE_CHOICES, default="pt-BR"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "User settings"

    def __str__(self):
        """String representation of UserSettings."""
        return f"{self.user.username} settings"


# -------------------------------------------------------------------
# ACCOUNTS
# -------------------------------------------------------------------
# Money containers whose balance is projected from the ledger


class Account(models.Model):
    """
    Financial account (bank, card, cash...).

    ``balance`` is a projection of the account's transactions and is written
    only by BalanceProjector.
    """

    ACCOUNT_TYPES = [
        ("BANK", "Bank account"),
        ("CREDIT_CARD", "Credit card"),
        ("CASH", "Cash"),
        ("INVESTMENT", "Investment"),
        ("OTHER", "Other"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="accounts"
    )
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=ACCOUNT_TYPES, default="BANK")
    balance = models.BigIntegerField(default=0, help_text="Projected balance in cents")
    currency = models.CharField(max_length=3, default="BRL")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["user", "name"], name="idx_account_user_name")]

    def __str__(self):
        """String representation of Account."""
        return f"{self.name} ({self.get_type_display()})"


# -------------------------------------------------------------------
# CATEGORIES
# -------------------------------------------------------------------


class Category(models.Model):
    """User-defined income or expense category."""

    CATEGORY_TYPES = [
        ("INCOME", "Income"),
        ("EXPENSE", "Expense"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="categories"
    )
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=10, choices=CATEGORY_TYPES)
    icon = models.CharField(max_length=50, blank=True, default="")
    color = models.CharField(max_length=20, blank=True, default="#6B7280")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ["type", "name"]
        indexes = [models.Index(fields=["user", "type"], name="idx_category_user_type")]

    def __str__(self):
        """String representation of Category."""
        return f"{self.name} ({self.type})"


# -------------------------------------------------------------------
# TRANSACTION LEDGER
# -------------------------------------------------------------------
# Income and expense records; the source of truth for account balances


class Transaction(models.Model):
    """
    Ledger entry.

    ``amount`` is always a positive magnitude in cents; the sign comes from
    ``type``. Every create, update and delete must be followed by a
    re-projection of the affected account balance(s).
    """

    TRANSACTION_TYPES = [
        ("INCOME", "Income"),
        ("EXPENSE", "Expense"),
    ]
    RECURRING_INTERVALS = [
        ("DAILY", "Daily"),
        ("WEEKLY", "Weekly"),
        ("MONTHLY", "Monthly"),
        ("YEARLY", "Yearly"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="transactions"
    )
    account = models.ForeignKey(
        Account, on_delete=models.CASCADE, related_name="transactions"
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    amount = models.BigIntegerField(help_text="Positive magnitude in cents")
    date = models.DateTimeField()
    description = models.CharField(max_length=500, blank=True, default="")
    is_recurring = models.BooleanField(default=False)
    recurring_interval = models.CharField(
        max_length=10, choices=RECURRING_INTERVALS, null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["user", "date"], name="idx_transaction_user_date"),
            models.Index(fields=["user", "type"], name="idx_transaction_user_type"),
            models.Index(fields=["account", "date"], name="idx_account_date"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0), name="transaction_amount_positive"
            ),
        ]

    def __str__(self):
        """String representation of Transaction."""
        return f"{self.type} {self.amount} on {self.date:%Y-%m-%d}"

    @property
    def signed_amount(self):
        return self.amount if self.type == "INCOME" else -self.amount

    def clean(self):
        """Validate transaction data and business rules."""
        super().clean()

        if self.amount is not None and self.amount <= 0:
            logger.warning(
                "Transaction validation failed - non-positive amount",
                extra={
                    "transaction_id": self.id if self.id else "new",
                    "amount": self.amount,
                    "action": "transaction_validation_failed",
                    "component": "Transaction",
                    "severity": "medium",
                },
            )
            raise ValidationError("Transaction amount must be positive")

        if self.category_id and self.category.type != self.type:
            logger.warning(
                "Transaction validation failed - category type mismatch",
                extra={
                    "transaction_id": self.id if self.id else "new",
                    "category_id": self.category_id,
                    "transaction_type": self.type,
                    "category_type": self.category.type,
                    "action": "transaction_validation_failed",
                    "component": "Transaction",
                    "severity": "medium",
                },
            )
            raise ValidationError(
                f"{self.get_type_display()} transaction cannot have "
                f"{self.category.get_type_display().lower()} category"
            )


# -------------------------------------------------------------------
# SAVINGS BOXES
# -------------------------------------------------------------------
# Named money pools kept apart from accounts


class SavingsBox(models.Model):
    """
    Savings box ("cofrinho").

    Lifecycle is one-way: ACTIVE -> INACTIVE (soft delete). Balance never
    goes below zero.
    """

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
    ]

    DEFAULT_COLOR = "#3B82F6"
    DEFAULT_ICON = "piggy-bank"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="savings_boxes"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    current_amount = models.BigIntegerField(default=0, help_text="Balance in cents")
    target_amount = models.BigIntegerField(
        null=True, blank=True, help_text="Optional target in cents"
    )
    color = models.CharField(max_length=20, default=DEFAULT_COLOR)
    icon = models.CharField(max_length=50, default=DEFAULT_ICON)
    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SavingsBoxQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "Savings boxes"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "status"], name="idx_savingsbox_user_status")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_amount__gte=0),
                name="savings_box_amount_non_negative",
            ),
        ]

    def __str__(self):
        """String representation of SavingsBox."""
        return self.name

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def has_reached_target(self):
        return bool(self.target_amount) and self.current_amount >= self.target_amount


class SavingsTransaction(models.Model):
    """
    Append-only log of savings box movements.

    Deposits may come from an account and withdrawals may go to one; in both
    cases the matching ledger Transaction is referenced in
    ``ledger_transaction``.
    """

    TRANSACTION_TYPES = [
        ("DEPOSIT", "Deposit"),
        ("WITHDRAW", "Withdraw"),
        ("TRANSFER", "Transfer"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="savings_transactions",
    )
    savings_box = models.ForeignKey(
        SavingsBox, on_delete=models.CASCADE, related_name="transactions"
    )
    type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    amount = models.BigIntegerField(help_text="Positive magnitude in cents")
    description = models.CharField(max_length=500, blank=True, default="")
    source_account = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="savings_transactions",
    )
    target_box = models.ForeignKey(
        SavingsBox,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="incoming_transfers",
    )
    ledger_transaction = models.ForeignKey(
        Transaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="savings_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "type"], name="idx_savingstx_user_type")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="savings_transaction_amount_positive",
            ),
        ]

    def __str__(self):
        """String representation of SavingsTransaction."""
        return f"{self.type} {self.amount} ({self.savings_box_id})"


# -------------------------------------------------------------------
# FINANCIAL GOALS
# -------------------------------------------------------------------


class FinancialGoal(models.Model):
    """
    Savings goal with accumulated contributions.

    ``is_completed`` mirrors ``current_amount >= target_amount`` and is
    recomputed on every write path. A linked savings box cannot be deleted
    while the link exists.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="goals"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    target_amount = models.BigIntegerField(help_text="Target in cents")
    current_amount = models.BigIntegerField(default=0, help_text="Progress in cents")
    start_date = models.DateField()
    target_date = models.DateField(null=True, blank=True)
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="goals"
    )
    account = models.ForeignKey(
        Account, on_delete=models.SET_NULL, null=True, blank=True, related_name="goals"
    )
    savings_box = models.ForeignKey(
        SavingsBox,
        on_delete=models.RESTRICT,
        null=True,
        blank=True,
        related_name="goals",
    )
    is_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["is_completed", "target_date", "-created_at"]
        indexes = [models.Index(fields=["user", "is_completed"], name="idx_goal_user_completed")]

    def __str__(self):
        """String representation of FinancialGoal."""
        return f"{self.name} ({self.current_amount}/{self.target_amount})"

    def refresh_completion(self):
        self.is_completed = self.current_amount >= self.target_amount
        return self.is_completed


# -------------------------------------------------------------------
# INVESTMENTS
# -------------------------------------------------------------------


class Investment(models.Model):
    """Tracked investment position with its running value in cents."""

    CATEGORY_CHOICES = [
        ("renda_fixa", "Renda Fixa"),
        ("acoes", "Ações"),
        ("fundos", "Fundos"),
        ("fiis", "FIIs"),
        ("criptomoedas", "Criptomoedas"),
        ("commodities", "Commodities"),
        ("internacional", "Internacional"),
        ("previdencia", "Previdência"),
        ("outros", "Outros"),
    ]
    CATEGORY_COLORS = {
        "renda_fixa": "#10B981",
        "acoes": "#3B82F6",
        "fundos": "#8B5CF6",
        "fiis": "#F59E0B",
        "criptomoedas": "#EF4444",
        "commodities": "#84CC16",
        "internacional": "#06B6D4",
        "previdencia": "#6366F1",
        "outros": "#6B7280",
    }

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="investments"
    )
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    description = models.TextField(blank=True, default="")
    initial_amount = models.BigIntegerField(help_text="Amount invested in cents")
    current_amount = models.BigIntegerField(help_text="Current value in cents")
    target_amount = models.BigIntegerField(null=True, blank=True)
    investment_date = models.DateField()
    color = models.CharField(max_length=20, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["-investment_date", "-created_at"]
        indexes = [models.Index(fields=["user", "category"], name="idx_investment_user_cat")]

    def __str__(self):
        """String representation of Investment."""
        return f"{self.name} ({self.category})"

    def save(self, *args, **kwargs):
        if not self.color:
            self.color = self.CATEGORY_COLORS.get(self.category, "#6B7280")
        super().save(*args, **kwargs)


class InvestmentTransaction(models.Model):
    """Contribution, redemption, yield or fee applied to an investment."""

    TRANSACTION_TYPES = [
        ("aporte", "Aporte"),
        ("resgate", "Resgate"),
        ("rendimento", "Rendimento"),
        ("taxa", "Taxa"),
    ]
    INCREASING_TYPES = ("aporte", "rendimento")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="investment_transactions",
    )
    investment = models.ForeignKey(
        Investment, on_delete=models.CASCADE, related_name="transactions"
    )
    type = models.CharField(max_length=12, choices=TRANSACTION_TYPES)
    amount = models.BigIntegerField(help_text="Positive magnitude in cents")
    description = models.CharField(max_length=500, blank=True, default="")
    transaction_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    objects = OwnedQuerySet.as_manager()

    class Meta:
        ordering = ["-transaction_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="investment_transaction_amount_positive",
            ),
        ]

    def __str__(self):
        """String representation of InvestmentTransaction."""
        return f"{self.type} {self.amount} ({self.investment_id})"
