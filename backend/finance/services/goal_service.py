"""
Goal progress tracking service.

Goals accumulate contributions towards a target. ``is_completed`` is always
recomputed as ``current_amount >= target_amount``. Overshooting the target is
allowed and there is no path that decreases progress.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.http import Http404
from django.utils import timezone

from ..models import FinancialGoal

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    "name",
    "description",
    "target_amount",
    "current_amount",
    "start_date",
    "target_date",
    "category",
    "account",
    "savings_box",
)


class GoalService:
    """
    Service for financial goals and their contributions.
    """

    @staticmethod
    def _validate_goal_data(data, user):
        """
        Validate a complete goal state.

        Raises:
            ValidationError: If any rule is violated
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Goal name is required")
        data["name"] = name

        target = data.get("target_amount")
        if target is None or target <= 0:
            raise ValidationError("Target amount must be greater than zero")

        if data.get("current_amount", 0) < 0:
            raise ValidationError("Current amount cannot be negative")

        start_date = data.get("start_date")
        target_date = data.get("target_date")
        if start_date and target_date and target_date < start_date:
            raise ValidationError("Target date cannot be before start date")

        for field in ("category", "account", "savings_box"):
            related = data.get(field)
            if related is not None and related.user_id != user.id:
                raise ValidationError(f"{field.replace('_', ' ').capitalize()} not found")

        savings_box = data.get("savings_box")
        if savings_box is not None and not savings_box.is_active:
            raise ValidationError("Cannot link a goal to an inactive savings box")

    @staticmethod
    @db_transaction.atomic
    def create_goal(user, data):
        """
        Create a goal; completion is derived from the initial amounts.

        Args:
            user: Goal owner
            data: Dict with name, target_amount (cents) and optional fields

        Returns:
            FinancialGoal: The created goal
        """
        data = {k: v for k, v in data.items() if k in MUTABLE_FIELDS}
        data.setdefault("current_amount", 0)
        data.setdefault("start_date", timezone.now().date())
        GoalService._validate_goal_data(data, user)

        goal = FinancialGoal(user=user, **data)
        goal.refresh_completion()
        goal.save()

        logger.info(
            "Goal created",
            extra={
                "user_id": user.id,
                "goal_id": goal.id,
                "target_amount": goal.target_amount,
                "current_amount": goal.current_amount,
                "is_completed": goal.is_completed,
                "action": "goal_created",
                "component": "GoalService",
            },
        )
        return goal

    @staticmethod
    @db_transaction.atomic
    def update_goal(goal, data):
        """Apply a partial update and recompute completion."""
        merged = {field: getattr(goal, field) for field in MUTABLE_FIELDS}
        merged.update({k: v for k, v in data.items() if k in MUTABLE_FIELDS})
        GoalService._validate_goal_data(merged, goal.user)

        for field, value in merged.items():
            setattr(goal, field, value)
        goal.refresh_completion()
        goal.save()

        logger.info(
            "Goal updated",
            extra={
                "user_id": goal.user_id,
                "goal_id": goal.id,
                "updated_fields": list(data.keys()),
                "is_completed": goal.is_completed,
                "action": "goal_updated",
                "component": "GoalService",
            },
        )
        return goal

    @staticmethod
    @db_transaction.atomic
    def delete_goal(goal):
        goal_id = goal.id
        goal.delete()
        logger.info(
            "Goal deleted",
            extra={
                "user_id": goal.user_id,
                "goal_id": goal_id,
                "action": "goal_deleted",
                "component": "GoalService",
            },
        )
        return goal_id

    @staticmethod
    @db_transaction.atomic
    def contribute(user, goal_id, amount_cents):
        """
        Add a contribution to a goal.

        ``current_amount`` and ``is_completed`` are written in a single
        UPDATE on a locked row.

        Args:
            user: Caller; must own the goal
            goal_id: Goal primary key
            amount_cents: Contribution in cents

        Returns:
            FinancialGoal: The updated goal

        Raises:
            Http404: If the goal does not exist or belongs to another user
            ValidationError: If the amount is not positive
        """
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise ValidationError("Amount must be a valid number")
        if amount_cents <= 0:
            raise ValidationError("Contribution amount must be greater than zero")

        goal = (
            FinancialGoal.objects.select_for_update()
            .filter(pk=goal_id, user=user)
            .first()
        )
        if goal is None:
            logger.warning(
                "Contribution to unknown or foreign goal",
                extra={
                    "user_id": user.id,
                    "goal_id": goal_id,
                    "action": "goal_contribution_not_found",
                    "component": "GoalService",
                    "severity": "medium",
                },
            )
            raise Http404("Goal not found")

        was_completed = goal.is_completed
        goal.current_amount += amount_cents
        goal.refresh_completion()
        goal.save(update_fields=["current_amount", "is_completed", "updated_at"])

        logger.info(
            "Goal contribution recorded",
            extra={
                "user_id": user.id,
                "goal_id": goal.id,
                "amount": amount_cents,
                "current_amount": goal.current_amount,
                "target_amount": goal.target_amount,
                "is_completed": goal.is_completed,
                "completed_now": goal.is_completed and not was_completed,
                "action": "goal_contribution",
                "component": "GoalService",
            },
        )
        return goal

    @staticmethod
    def sync_with_savings_box(savings_box):
        """
        Raise linked goals' progress to the savings box balance.

        Progress only moves up; a box balance below a goal's current amount
        leaves the goal unchanged.

        Returns:
            list[FinancialGoal]: Goals that were changed
        """
        updated = []
        for goal in FinancialGoal.objects.filter(savings_box=savings_box):
            if savings_box.current_amount <= goal.current_amount:
                continue
            goal.current_amount = savings_box.current_amount
            goal.refresh_completion()
            goal.save(update_fields=["current_amount", "is_completed", "updated_at"])
            updated.append(goal)

        if updated:
            logger.info(
                "Goals synced with savings box",
                extra={
                    "user_id": savings_box.user_id,
                    "savings_box_id": savings_box.id,
                    "goal_ids": [goal.id for goal in updated],
                    "box_amount": savings_box.current_amount,
                    "action": "goal_savings_box_sync",
                    "component": "GoalService",
                },
            )
        return updated
