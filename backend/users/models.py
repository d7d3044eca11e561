"""
User model for the personal finance ledger.

Every account, category, transaction, goal, savings box and investment row
carries a foreign key to this model; ownership checks compare against it.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """Username login with a unique email address."""

    email = models.EmailField(unique=True, help_text="Unique contact address")

    def __str__(self):
        return self.username or self.email
