"""
Service for ledger transaction operations with proper error handling and logging.

This module provides the TransactionService class. Every mutation runs inside
a database transaction and is followed by a re-projection of each account
balance it touched.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction

from ..models import Transaction
from ..utils.currency_utils import normalize_ledger_date
from .balance_projector import BalanceProjector

# Get structured logger for this module
logger = logging.getLogger(__name__)

TRANSACTION_TYPES = [choice for choice, _ in Transaction.TRANSACTION_TYPES]
RECURRING_INTERVALS = [choice for choice, _ in Transaction.RECURRING_INTERVALS]
MUTABLE_FIELDS = (
    "account",
    "category",
    "type",
    "amount",
    "date",
    "description",
    "is_recurring",
    "recurring_interval",
)


class TransactionService:
    """
    Service for handling ledger transactions.

    Keeps account balances consistent by re-projecting them after each
    create, update and delete.
    """

    @staticmethod
    @db_transaction.atomic
    def create_transaction(user, data):
        """
        Validate and insert a transaction, then re-project its account.

        Args:
            user: Owner of the transaction
            data: Dict with account, amount (cents), type, date and optional
                category, description, is_recurring, recurring_interval

        Returns:
            Transaction: The created transaction

        Raises:
            ValidationError: If data validation fails
        """
        TransactionService._validate_transaction_data(data, user)

        transaction = Transaction(user=user)
        TransactionService._apply(transaction, data)
        transaction.save()

        logger.info(
            "Transaction created",
            extra={
                "user_id": user.id,
                "transaction_id": transaction.id,
                "account_id": transaction.account_id,
                "type": transaction.type,
                "amount": transaction.amount,
                "action": "transaction_created",
                "component": "TransactionService",
            },
        )

        BalanceProjector.reproject_account(transaction.account)
        return transaction

    @staticmethod
    @db_transaction.atomic
    def update_transaction(transaction, data):
        """
        Update a transaction and re-project affected accounts.

        When the account reference changes both the previous and the new
        account are re-projected.

        Args:
            transaction: Transaction instance to update
            data: Partial dict of fields to change

        Returns:
            Transaction: The updated transaction

        Raises:
            ValidationError: If the merged state is invalid
        """
        merged = {field: getattr(transaction, field) for field in MUTABLE_FIELDS}
        merged.update({k: v for k, v in data.items() if k in MUTABLE_FIELDS})
        TransactionService._validate_transaction_data(
            merged, transaction.user, is_update=True
        )

        previous_account_id = transaction.account_id
        TransactionService._apply(transaction, merged)
        transaction.save()

        account_changed = previous_account_id != transaction.account_id

        logger.info(
            "Transaction updated",
            extra={
                "user_id": transaction.user_id,
                "transaction_id": transaction.id,
                "updated_fields": list(data.keys()),
                "account_changed": account_changed,
                "action": "transaction_updated",
                "component": "TransactionService",
            },
        )

        if account_changed:
            BalanceProjector.reproject_accounts(
                [previous_account_id, transaction.account_id]
            )
        else:
            BalanceProjector.reproject_account(transaction.account)

        return transaction

    @staticmethod
    @db_transaction.atomic
    def delete_transaction(transaction):
        """
        Delete a transaction and re-project its account.

        Returns:
            int: Primary key of the deleted transaction
        """
        transaction_id = transaction.id
        account_id = transaction.account_id
        user_id = transaction.user_id

        transaction.delete()

        logger.info(
            "Transaction deleted",
            extra={
                "user_id": user_id,
                "transaction_id": transaction_id,
                "account_id": account_id,
                "action": "transaction_deleted",
                "component": "TransactionService",
            },
        )

        BalanceProjector.reproject_account(account_id)
        return transaction_id

    @staticmethod
    def _apply(transaction, data):
        for field in MUTABLE_FIELDS:
            if field in data:
                setattr(transaction, field, data[field])
        transaction.date = normalize_ledger_date(transaction.date)
        if not transaction.is_recurring:
            transaction.recurring_interval = None

    @staticmethod
    def _validate_transaction_data(data, user, is_update=False):
        """
        Validate transaction data before creation or update.

        Args:
            data: Transaction data dictionary
            user: Owner the transaction belongs to
            is_update: Whether this is for an update operation

        Raises:
            ValidationError: If data validation fails
        """
        if not is_update:
            for field in ("account", "type", "amount", "date"):
                if field not in data or data[field] is None:
                    raise ValidationError(f"Missing required field: {field}")

        if data.get("type") not in TRANSACTION_TYPES:
            raise ValidationError("Type must be 'INCOME' or 'EXPENSE'")

        amount = data.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError("Amount must be a valid number")
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        account = data.get("account")
        if account is None or account.user_id != user.id:
            logger.warning(
                "Transaction references an account outside the owner's ledger",
                extra={
                    "user_id": user.id,
                    "account_id": getattr(account, "id", None),
                    "action": "transaction_account_not_owned",
                    "component": "TransactionService",
                    "severity": "medium",
                },
            )
            raise ValidationError("Account not found")

        category = data.get("category")
        if category is not None:
            if category.user_id != user.id:
                raise ValidationError("Category not found")
            if category.type != data["type"]:
                raise ValidationError(
                    f"{data['type'].capitalize()} transaction cannot have "
                    f"{category.type.lower()} category"
                )

        interval = data.get("recurring_interval")
        if data.get("is_recurring") and interval and interval not in RECURRING_INTERVALS:
            raise ValidationError(
                f"Recurring interval must be one of: {', '.join(RECURRING_INTERVALS)}"
            )
