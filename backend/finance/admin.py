"""
Django admin registrations for the finance app.

Balances and savings movements are shown read-only: the first is a
projection of the ledger, the second an append-only log.
"""

from django.contrib import admin

from .models import (Account, Category, FinancialGoal, Investment,
                     InvestmentTransaction, SavingsBox, SavingsTransaction,
                     Transaction, UserSettings)


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ("user", "default_currency", "language", "theme")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "type", "balance", "currency")
    list_filter = ("type",)
    search_fields = ("name", "user__username")
    readonly_fields = ("balance",)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "type")
    list_filter = ("type",)


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "user", "account", "type", "amount", "category")
    list_filter = ("type", "is_recurring")
    search_fields = ("description",)
    date_hierarchy = "date"


@admin.register(FinancialGoal)
class FinancialGoalAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "current_amount", "target_amount", "is_completed")
    list_filter = ("is_completed",)


@admin.register(SavingsBox)
class SavingsBoxAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "current_amount", "target_amount", "status")
    list_filter = ("status",)


@admin.register(SavingsTransaction)
class SavingsTransactionAdmin(admin.ModelAdmin):
    list_display = ("created_at", "user", "savings_box", "type", "amount")
    list_filter = ("type",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "category", "initial_amount", "current_amount", "is_active")
    list_filter = ("category", "is_active")


@admin.register(InvestmentTransaction)
class InvestmentTransactionAdmin(admin.ModelAdmin):
    list_display = ("transaction_date", "investment", "type", "amount")
    list_filter = ("type",)
