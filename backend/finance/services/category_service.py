"""
Category service for user-owned income and expense categories.
Handles creation, updates with type-change protection, usage reporting and
deletion with structured audit logging.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import Category

logger = logging.getLogger(__name__)

CATEGORY_TYPES = [choice for choice, _ in Category.CATEGORY_TYPES]


class CategoryService:
    """
    Category management service.
    Keeps category type consistent with the transactions already using it.
    """

    def _validate_category_data(self, data: dict, is_update: bool = False) -> None:
        if not is_update or "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("Category name is required")
            data["name"] = name

        if not is_update or "type" in data:
            if data.get("type") not in CATEGORY_TYPES:
                raise ValidationError("Type must be 'INCOME' or 'EXPENSE'")

    @transaction.atomic
    def create_category(self, user, data: dict) -> Category:
        """
        Create a category for ``user``.

        Raises:
            ValidationError: If name is empty or type is invalid
        """
        self._validate_category_data(data)
        category = Category.objects.create(user=user, **data)

        logger.info(
            "Category created",
            extra={
                "user_id": user.id,
                "category_id": category.id,
                "category_type": category.type,
                "action": "category_created",
                "component": "CategoryService",
            },
        )
        return category

    @transaction.atomic
    def update_category(self, category: Category, data: dict) -> Category:
        """
        Update a category.

        Changing the type is rejected while transactions of the current type
        still reference the category.

        Raises:
            ValidationError: On invalid data or a blocked type change
        """
        self._validate_category_data(data, is_update=True)

        new_type = data.get("type")
        if new_type and new_type != category.type:
            usage = self.get_category_usage(category)
            if usage["transaction_count"]:
                logger.warning(
                    "Category type change blocked by existing transactions",
                    extra={
                        "user_id": category.user_id,
                        "category_id": category.id,
                        "transaction_count": usage["transaction_count"],
                        "action": "category_type_change_blocked",
                        "component": "CategoryService",
                        "severity": "medium",
                    },
                )
                raise ValidationError(
                    "Cannot change the type of a category used by "
                    f"{usage['transaction_count']} transaction(s)"
                )

        for field, value in data.items():
            setattr(category, field, value)
        category.save()

        logger.info(
            "Category updated",
            extra={
                "user_id": category.user_id,
                "category_id": category.id,
                "updated_fields": list(data.keys()),
                "action": "category_updated",
                "component": "CategoryService",
            },
        )
        return category

    def get_category_usage(self, category: Category) -> dict:
        """
        Count ledger rows and goals referencing a category.

        Returns:
            dict: transaction_count, goal_count and is_used
        """
        transaction_count = category.transactions.count()
        goal_count = category.goals.count()
        return {
            "category_id": category.id,
            "transaction_count": transaction_count,
            "goal_count": goal_count,
            "is_used": bool(transaction_count or goal_count),
        }

    @transaction.atomic
    def delete_category(self, category: Category) -> int:
        """
        Delete a category. Transactions and goals keep existing with no category.

        Returns:
            int: Primary key of the deleted category
        """
        category_id = category.id
        usage = self.get_category_usage(category)
        category.delete()

        logger.info(
            "Category deleted",
            extra={
                "user_id": category.user_id,
                "category_id": category_id,
                "detached_transactions": usage["transaction_count"],
                "action": "category_deleted",
                "component": "CategoryService",
            },
        )
        return category_id
