from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Custom user model and the JWT authentication endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "Users and authentication"
