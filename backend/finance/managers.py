# finance/managers.py
from django.db import models


class OwnedQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)


class SavingsBoxQuerySet(OwnedQuerySet):
    def active(self):
        return self.filter(status="active")

    def inactive(self):
        return self.filter(status="inactive")
