"""
Savings box movements: deposit, withdraw and transfer.

Each movement is appended to the SavingsTransaction log and changes box
balances inside one database transaction with the box rows locked. When a
deposit is funded from an account (or a withdrawal is paid into one), the
account side is recorded as a regular ledger Transaction so the account
balance stays a projection of its ledger.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Count, Q, Sum
from django.http import Http404
from django.utils import timezone

from ..models import Account, SavingsBox, SavingsTransaction
from ..utils.currency_utils import from_cents, normalize_ledger_date
from .goal_service import GoalService
from .transaction_service import TransactionService

logger = logging.getLogger(__name__)


class SavingsTransactionService:
    """
    Service for the append-only savings box movement log.
    """

    @staticmethod
    def _validate_amount(amount, label):
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError("Amount must be a valid number")
        if amount <= 0:
            raise ValidationError(f"{label} amount must be greater than zero")

    @staticmethod
    def _get_active_box(user, box_id):
        """
        Fetch and lock an owned, active savings box.

        Raises:
            Http404: Missing or foreign box
            ValidationError: Box is inactive
        """
        box = (
            SavingsBox.objects.select_for_update()
            .filter(pk=box_id, user=user)
            .first()
        )
        if box is None:
            raise Http404("Savings box not found")
        if not box.is_active:
            raise ValidationError(f'Savings box "{box.name}" is inactive')
        return box

    @staticmethod
    def _get_account(user, account_id):
        account = Account.objects.filter(pk=account_id, user=user).first()
        if account is None:
            raise Http404("Account not found")
        return account

    @staticmethod
    def _record_ledger_entry(user, account, tx_type, amount, description):
        return TransactionService.create_transaction(
            user,
            {
                "account": account,
                "type": tx_type,
                "amount": amount,
                "date": normalize_ledger_date(timezone.now().date()),
                "description": description,
            },
        )

    @staticmethod
    @db_transaction.atomic
    def deposit(user, box_id, amount, source_account_id=None, description=""):
        """
        Move money into a savings box, optionally funded from an account.

        Args:
            user: Owner of the box (and account)
            box_id: Target savings box
            amount: Amount in cents
            source_account_id: Optional funding account
            description: Free text

        Returns:
            SavingsTransaction: The recorded deposit

        Raises:
            ValidationError: Bad amount, inactive box, insufficient account funds
            Http404: Unknown box or account
        """
        SavingsTransactionService._validate_amount(amount, "Deposit")
        box = SavingsTransactionService._get_active_box(user, box_id)

        account = None
        ledger_entry = None
        if source_account_id:
            account = SavingsTransactionService._get_account(user, source_account_id)
            if account.balance < amount:
                logger.warning(
                    "Savings deposit rejected - insufficient account balance",
                    extra={
                        "user_id": user.id,
                        "account_id": account.id,
                        "account_balance": account.balance,
                        "amount": amount,
                        "action": "savings_deposit_insufficient_funds",
                        "component": "SavingsTransactionService",
                        "severity": "low",
                    },
                )
                raise ValidationError(
                    f'Insufficient balance in account "{account.name}". '
                    f"Available: {from_cents(account.balance)}"
                )
            ledger_entry = SavingsTransactionService._record_ledger_entry(
                user,
                account,
                "EXPENSE",
                amount,
                description or f"Deposit to savings box {box.name}",
            )

        box.current_amount += amount
        box.save(update_fields=["current_amount", "updated_at"])

        movement = SavingsTransaction.objects.create(
            user=user,
            savings_box=box,
            type="DEPOSIT",
            amount=amount,
            description=description,
            source_account=account,
            ledger_transaction=ledger_entry,
        )

        logger.info(
            "Savings deposit recorded",
            extra={
                "user_id": user.id,
                "savings_box_id": box.id,
                "savings_transaction_id": movement.id,
                "source_account_id": getattr(account, "id", None),
                "amount": amount,
                "box_amount": box.current_amount,
                "action": "savings_deposit",
                "component": "SavingsTransactionService",
            },
        )

        GoalService.sync_with_savings_box(box)
        return movement

    @staticmethod
    @db_transaction.atomic
    def withdraw(user, box_id, amount, target_account_id=None, description=""):
        """
        Take money out of a savings box, optionally into an account.

        Raises:
            ValidationError: Bad amount, inactive box, insufficient box balance
            Http404: Unknown box or account
        """
        SavingsTransactionService._validate_amount(amount, "Withdrawal")
        box = SavingsTransactionService._get_active_box(user, box_id)

        if box.current_amount < amount:
            logger.warning(
                "Savings withdrawal rejected - insufficient box balance",
                extra={
                    "user_id": user.id,
                    "savings_box_id": box.id,
                    "box_amount": box.current_amount,
                    "amount": amount,
                    "action": "savings_withdraw_insufficient_funds",
                    "component": "SavingsTransactionService",
                    "severity": "low",
                },
            )
            raise ValidationError(
                "Insufficient balance in savings box. "
                f"Available: {from_cents(box.current_amount)}"
            )

        account = None
        if target_account_id:
            account = SavingsTransactionService._get_account(user, target_account_id)

        box.current_amount -= amount
        box.save(update_fields=["current_amount", "updated_at"])

        ledger_entry = None
        if account is not None:
            ledger_entry = SavingsTransactionService._record_ledger_entry(
                user,
                account,
                "INCOME",
                amount,
                description or f"Withdrawal from savings box {box.name}",
            )

        movement = SavingsTransaction.objects.create(
            user=user,
            savings_box=box,
            type="WITHDRAW",
            amount=amount,
            description=description,
            source_account=account,
            ledger_transaction=ledger_entry,
        )

        logger.info(
            "Savings withdrawal recorded",
            extra={
                "user_id": user.id,
                "savings_box_id": box.id,
                "savings_transaction_id": movement.id,
                "target_account_id": getattr(account, "id", None),
                "amount": amount,
                "box_amount": box.current_amount,
                "action": "savings_withdraw",
                "component": "SavingsTransactionService",
            },
        )

        GoalService.sync_with_savings_box(box)
        return movement

    @staticmethod
    @db_transaction.atomic
    def transfer(user, from_box_id, to_box_id, amount, description=""):
        """
        Move money between two savings boxes atomically.

        Raises:
            ValidationError: Same box, bad amount, inactive box, insufficient
                source balance
            Http404: Unknown box
        """
        if not from_box_id or not to_box_id:
            raise ValidationError("Both savings boxes are required")
        if str(from_box_id) == str(to_box_id):
            raise ValidationError("Cannot transfer to the same savings box")
        SavingsTransactionService._validate_amount(amount, "Transfer")

        # Lock in primary key order
        locked = {}
        for box_id in sorted([int(from_box_id), int(to_box_id)]):
            locked[box_id] = SavingsTransactionService._get_active_box(user, box_id)
        source = locked[int(from_box_id)]
        target = locked[int(to_box_id)]

        if source.current_amount < amount:
            raise ValidationError(
                f'Insufficient balance in savings box "{source.name}". '
                f"Available: {from_cents(source.current_amount)}"
            )

        source.current_amount -= amount
        target.current_amount += amount
        source.save(update_fields=["current_amount", "updated_at"])
        target.save(update_fields=["current_amount", "updated_at"])

        movement = SavingsTransaction.objects.create(
            user=user,
            savings_box=source,
            target_box=target,
            type="TRANSFER",
            amount=amount,
            description=description,
        )

        logger.info(
            "Savings transfer recorded",
            extra={
                "user_id": user.id,
                "from_box_id": source.id,
                "to_box_id": target.id,
                "savings_transaction_id": movement.id,
                "amount": amount,
                "action": "savings_transfer",
                "component": "SavingsTransactionService",
            },
        )

        GoalService.sync_with_savings_box(source)
        GoalService.sync_with_savings_box(target)
        return movement

    @staticmethod
    def get_stats(user, box_id=None):
        """
        Totals over the movement log, optionally for one box.

        Returns:
            dict: counts per type, summed amounts per type (cents) and
                net_flow (deposits − withdrawals)
        """
        movements = SavingsTransaction.objects.for_user(user)
        if box_id:
            movements = movements.filter(Q(savings_box_id=box_id) | Q(target_box_id=box_id))

        totals = movements.aggregate(
            total_transactions=Count("id"),
            total_deposits=Count("id", filter=Q(type="DEPOSIT")),
            total_withdraws=Count("id", filter=Q(type="WITHDRAW")),
            total_transfers=Count("id", filter=Q(type="TRANSFER")),
            total_deposited=Sum("amount", filter=Q(type="DEPOSIT")),
            total_withdrawn=Sum("amount", filter=Q(type="WITHDRAW")),
            total_transferred=Sum("amount", filter=Q(type="TRANSFER")),
        )
        for key in ("total_deposited", "total_withdrawn", "total_transferred"):
            totals[key] = totals[key] or 0
        totals["net_flow"] = totals["total_deposited"] - totals["total_withdrawn"]
        return totals
