# finance/services/balance_projector.py
"""
Account balance projection.

An account's balance is never incremented or decremented in place. It is
recomputed from the ledger: the signed sum of every transaction on the
account dated on or before the balance cutoff (03:00 UTC today).

``project`` is the pure fold. ``BalanceProjector`` wraps it with fetching and
persisting and is called after every ledger mutation. Persisting is
best-effort: a failure is logged and the previous balance stays in place
until the next successful projection or a run of ``reproject_balances``.
"""

import logging

from django.db import transaction as db_transaction

from ..models import Account, Transaction
from ..utils.currency_utils import balance_cutoff

logger = logging.getLogger(__name__)


def _signed(entry):
    if isinstance(entry, Transaction):
        tx_type, amount = entry.type, entry.amount
    elif isinstance(entry, dict):
        tx_type, amount = entry["type"], entry["amount"]
    else:
        tx_type, amount = entry
    return amount if tx_type == "INCOME" else -amount


def project(transactions):
    """
    Fold transactions into a balance in cents.

    Args:
        transactions: Iterable of Transaction objects, ``{"type", "amount"}``
            dicts or ``(type, amount)`` pairs

    Returns:
        int: Σ INCOME amounts − Σ EXPENSE amounts
    """
    balance = 0
    for entry in transactions:
        balance += _signed(entry)
    return balance


class BalanceProjector:
    """
    Recomputes and stores projected account balances.
    """

    @staticmethod
    def _ledger_entries(account_id, now=None):
        return Transaction.objects.filter(
            account_id=account_id, date__lte=balance_cutoff(now)
        ).values_list("type", "amount")

    @staticmethod
    def calculate_balance(account, now=None):
        """Projected balance without persisting it."""
        account_id = getattr(account, "pk", account)
        return project(BalanceProjector._ledger_entries(account_id, now))

    @staticmethod
    def reproject_account(account, now=None):
        """
        Recompute and persist the balance of one account.

        Failures are logged and swallowed; the triggering ledger write is
        never rolled back because of them.

        Args:
            account: Account instance or primary key
            now: Reference instant for the cutoff

        Returns:
            int | None: New balance in cents, or None if projection failed
        """
        account_id = getattr(account, "pk", account)
        if not account_id:
            return None

        try:
            # Savepoint so a failed write does not poison an outer transaction
            with db_transaction.atomic():
                balance = BalanceProjector.calculate_balance(account_id, now)
                Account.objects.filter(pk=account_id).update(balance=balance)
        except Exception as e:
            logger.error(
                "Balance projection failed, previous balance kept",
                extra={
                    "account_id": account_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "action": "balance_projection_failed",
                    "component": "BalanceProjector",
                    "severity": "high",
                },
                exc_info=True,
            )
            return None

        if isinstance(account, Account):
            account.balance = balance

        logger.debug(
            "Account balance re-projected",
            extra={
                "account_id": account_id,
                "balance": balance,
                "action": "balance_projected",
                "component": "BalanceProjector",
            },
        )
        return balance

    @staticmethod
    def reproject_accounts(accounts, now=None):
        """
        Re-project several accounts, each distinct account once.

        Returns:
            dict: account_id -> new balance (None for failures)
        """
        results = {}
        for account in accounts:
            account_id = getattr(account, "pk", account)
            if not account_id or account_id in results:
                continue
            results[account_id] = BalanceProjector.reproject_account(account, now)
        return results

    @staticmethod
    def audit_account(account, now=None):
        """
        Compare stored and projected balance without writing.

        Returns:
            dict: ``account_id``, ``stored``, ``projected`` and ``drift``
                (projected − stored)
        """
        projected = BalanceProjector.calculate_balance(account, now)
        return {
            "account_id": account.pk,
            "stored": account.balance,
            "projected": projected,
            "drift": projected - account.balance,
        }
