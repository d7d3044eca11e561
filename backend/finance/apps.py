import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class FinanceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    # Application name (Python path)
    name = "finance"

    def ready(self):
        """Import signals to ensure they are connected when the app is ready."""
        import finance.signals  # noqa: F401

        logger.debug(
            "Finance signals connected",
            extra={"action": "finance_app_ready", "component": "FinanceConfig"},
        )
