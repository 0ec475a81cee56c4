from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model carrying the application role"""
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_SUBADMIN = 'subadmin'
    ROLE_CHOICES = [
        (ROLE_SUPERADMIN, 'Super Admin'),
        (ROLE_SUBADMIN, 'Sub Admin'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SUBADMIN)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_superadmin(self):
        # Django superusers created with createsuperuser keep the default role
        return self.role == self.ROLE_SUPERADMIN or self.is_superuser

    @property
    def effective_role(self):
        return self.ROLE_SUPERADMIN if self.is_superadmin else self.role

    class Meta:
        db_table = 'users'
