"""
Owner scoping for viewsets.

Every finance row belongs to exactly one user. Scoping the queryset means a
foreign row behaves exactly like a missing one (404), never like a
forbidden one.
"""

import logging

logger = logging.getLogger(__name__)


class OwnerScopedMixin:
    """
    Restrict a viewset's queryset to rows owned by the requesting user.

    Subclasses set ``queryset`` as usual; related rows listed in
    ``owner_select_related`` are joined in the same query.
    """

    owner_select_related = ()

    def get_queryset(self):
        queryset = super().get_queryset().filter(user=self.request.user)
        if self.owner_select_related:
            queryset = queryset.select_related(*self.owner_select_related)

        logger.debug(
            "Owner scoped queryset built",
            extra={
                "user_id": self.request.user.id,
                "model": queryset.model.__name__,
                "view_action": getattr(self, "action", None),
                "action": "owner_queryset_built",
                "component": "OwnerScopedMixin",
            },
        )
        return queryset
