"""
Service for financial account operations.

Accounts are plain containers; their balance is owned by BalanceProjector and
cannot be written through this service.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction

from ..models import Account
from .balance_projector import BalanceProjector

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = [choice for choice, _ in Account.ACCOUNT_TYPES]
EDITABLE_FIELDS = ("name", "type", "currency")


class AccountService:
    """
    Account lifecycle and on-demand balance repair.
    """

    @staticmethod
    def _validate_account_data(data, is_update=False):
        if not is_update or "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Account name is required")
            data["name"] = name

        if "type" in data and data["type"] not in ACCOUNT_TYPES:
            raise ValidationError(
                f"Account type must be one of: {', '.join(ACCOUNT_TYPES)}"
            )

        if "currency" in data:
            currency = (data["currency"] or "").strip().upper()
            if len(currency) != 3:
                raise ValidationError("Currency must be a 3-letter code")
            data["currency"] = currency

    @staticmethod
    @db_transaction.atomic
    def create_account(user, data):
        """
        Create an account with a zero balance.

        Raises:
            ValidationError: If name, type or currency is invalid
        """
        data = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        AccountService._validate_account_data(data)
        account = Account.objects.create(user=user, balance=0, **data)

        logger.info(
            "Account created",
            extra={
                "user_id": user.id,
                "account_id": account.id,
                "account_type": account.type,
                "action": "account_created",
                "component": "AccountService",
            },
        )
        return account

    @staticmethod
    @db_transaction.atomic
    def update_account(account, data):
        """Update name, type or currency. Balance is not editable."""
        data = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        AccountService._validate_account_data(data, is_update=True)

        for field, value in data.items():
            setattr(account, field, value)
        account.save(update_fields=[*data.keys(), "updated_at"])

        logger.info(
            "Account updated",
            extra={
                "user_id": account.user_id,
                "account_id": account.id,
                "updated_fields": list(data.keys()),
                "action": "account_updated",
                "component": "AccountService",
            },
        )
        return account

    @staticmethod
    @db_transaction.atomic
    def delete_account(account):
        """
        Delete an account together with its transactions.

        Returns:
            int: Primary key of the deleted account
        """
        account_id = account.id
        transaction_count = account.transactions.count()
        account.delete()

        logger.warning(
            "Account deleted with its ledger",
            extra={
                "user_id": account.user_id,
                "account_id": account_id,
                "deleted_transactions": transaction_count,
                "action": "account_deleted",
                "component": "AccountService",
                "severity": "medium",
            },
        )
        return account_id

    @staticmethod
    def reproject(account):
        """
        Run the projector for one account on demand.

        Returns:
            Account: The account with its refreshed balance
        """
        BalanceProjector.reproject_account(account)
        account.refresh_from_db(fields=["balance"])
        return account

    @staticmethod
    def audit(account):
        return BalanceProjector.audit_account(account)
