"""
Savings box ledger service.

Savings boxes are named money pools kept apart from accounts. Their balance
never drops below zero, and deletion is a one-way soft delete
(ACTIVE -> INACTIVE) that is refused while the box holds money or a goal is
linked to it.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Sum

from ..models import FinancialGoal, SavingsBox
from ..utils.currency_utils import percentage

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    "name",
    "description",
    "current_amount",
    "target_amount",
    "color",
    "icon",
)
SUMMARY_SIZE = 5


class SavingsBoxService:
    """
    Create, update, soft-delete and report on savings boxes.
    """

    @staticmethod
    def _validate_savings_box_data(data, is_update=False):
        """
        Validate the fields present in ``data``.

        Raises:
            ValidationError: Empty name, non-positive target or negative balance
        """
        if not is_update or "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Savings box name is required")
            data["name"] = name

        target = data.get("target_amount")
        if target is not None and target <= 0:
            raise ValidationError("Target amount must be greater than zero")

        current = data.get("current_amount")
        if current is not None and current < 0:
            raise ValidationError("Current amount cannot be negative")

    @staticmethod
    @db_transaction.atomic
    def create_savings_box(user, data):
        """
        Create an active savings box with default color and icon.

        Args:
            user: Owner
            data: Dict with name and optional amounts (cents), color, icon

        Returns:
            SavingsBox: The created box
        """
        data = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
        SavingsBoxService._validate_savings_box_data(data)

        if data.get("current_amount") is None:
            data["current_amount"] = 0
        data["color"] = data.get("color") or SavingsBox.DEFAULT_COLOR
        data["icon"] = data.get("icon") or SavingsBox.DEFAULT_ICON

        savings_box = SavingsBox.objects.create(
            user=user, status=SavingsBox.STATUS_ACTIVE, **data
        )

        logger.info(
            "Savings box created",
            extra={
                "user_id": user.id,
                "savings_box_id": savings_box.id,
                "current_amount": savings_box.current_amount,
                "target_amount": savings_box.target_amount,
                "action": "savings_box_created",
                "component": "SavingsBoxService",
            },
        )
        return savings_box

    @staticmethod
    @db_transaction.atomic
    def update_savings_box(savings_box, data):
        """Apply a partial update after re-running the create validations."""
        data = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
        SavingsBoxService._validate_savings_box_data(data, is_update=True)

        for field, value in data.items():
            setattr(savings_box, field, value)
        savings_box.save()

        logger.info(
            "Savings box updated",
            extra={
                "user_id": savings_box.user_id,
                "savings_box_id": savings_box.id,
                "updated_fields": list(data.keys()),
                "action": "savings_box_updated",
                "component": "SavingsBoxService",
            },
        )
        return savings_box

    @staticmethod
    @db_transaction.atomic
    def delete_savings_box(savings_box):
        """
        Soft-delete a savings box.

        Raises:
            ValidationError: If the box still holds a balance or is linked to
                at least one goal
        """
        if savings_box.current_amount > 0:
            logger.warning(
                "Savings box deletion blocked by balance",
                extra={
                    "user_id": savings_box.user_id,
                    "savings_box_id": savings_box.id,
                    "current_amount": savings_box.current_amount,
                    "action": "savings_box_delete_blocked_balance",
                    "component": "SavingsBoxService",
                    "severity": "low",
                },
            )
            raise ValidationError(
                f'Cannot delete savings box "{savings_box.name}" because it still '
                "holds a balance. Withdraw all funds before deleting."
            )

        linked_goals = list(
            FinancialGoal.objects.filter(savings_box=savings_box).values_list(
                "name", flat=True
            )
        )
        if linked_goals:
            logger.warning(
                "Savings box deletion blocked by linked goals",
                extra={
                    "user_id": savings_box.user_id,
                    "savings_box_id": savings_box.id,
                    "linked_goal_count": len(linked_goals),
                    "action": "savings_box_delete_blocked_goals",
                    "component": "SavingsBoxService",
                    "severity": "low",
                },
            )
            raise ValidationError(
                "Cannot delete savings box because it is linked to goal(s): "
                f"{', '.join(linked_goals)}. Unlink the goal(s) first."
            )

        savings_box.status = SavingsBox.STATUS_INACTIVE
        savings_box.save(update_fields=["status", "updated_at"])

        logger.info(
            "Savings box deactivated",
            extra={
                "user_id": savings_box.user_id,
                "savings_box_id": savings_box.id,
                "action": "savings_box_soft_deleted",
                "component": "SavingsBoxService",
            },
        )
        return savings_box

    # -------------------------------------------------------------------
    # REPORTING
    # -------------------------------------------------------------------

    @staticmethod
    def get_stats(user):
        """
        Aggregate rollup over the user's active savings boxes.

        Returns:
            dict: total_boxes, total_amount (cents), total_with_goals,
                total_completed_goals, average_completion (Decimal percent)
        """
        boxes = list(SavingsBox.objects.for_user(user).active())
        linked_box_ids = set(
            FinancialGoal.objects.filter(
                user=user, savings_box__in=[box.id for box in boxes]
            ).values_list("savings_box_id", flat=True)
        )

        with_target = [box for box in boxes if box.target_amount]
        completions = [
            percentage(box.current_amount, box.target_amount, cap=100)
            for box in with_target
        ]
        average = (
            (sum(completions, Decimal("0")) / len(completions)).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            if completions
            else Decimal("0.00")
        )

        return {
            "total_boxes": len(boxes),
            "total_amount": sum(box.current_amount for box in boxes),
            "total_with_goals": len(linked_box_ids),
            "total_completed_goals": sum(1 for box in boxes if box.has_reached_target),
            "average_completion": average,
        }

    @staticmethod
    def get_summary(user):
        """
        Top active boxes by balance with progress and their linked goal.

        Returns:
            dict: ``boxes`` (list of dicts), ``total_amount``, ``total_boxes``
        """
        active = SavingsBox.objects.for_user(user).active()
        top_boxes = list(
            active.order_by("-current_amount", "name").prefetch_related("goals")[
                :SUMMARY_SIZE
            ]
        )

        boxes = []
        for box in top_boxes:
            goal = next(iter(box.goals.all()), None)
            boxes.append(
                {
                    "id": box.id,
                    "name": box.name,
                    "color": box.color,
                    "icon": box.icon,
                    "current_amount": box.current_amount,
                    "target_amount": box.target_amount,
                    "progress": (
                        percentage(box.current_amount, box.target_amount, cap=100)
                        if box.target_amount
                        else None
                    ),
                    "goal": (
                        {
                            "id": goal.id,
                            "name": goal.name,
                            "target_amount": goal.target_amount,
                        }
                        if goal
                        else None
                    ),
                }
            )

        totals = SavingsBoxService.get_total(user)
        return {
            "boxes": boxes,
            "total_amount": totals["total_amount"],
            "total_boxes": totals["box_count"],
        }

    @staticmethod
    def get_total(user):
        active = SavingsBox.objects.for_user(user).active()
        return {
            "total_amount": active.aggregate(total=Sum("current_amount"))["total"] or 0,
            "box_count": active.count(),
        }
